"""
Incremental markdown transcript log.

The logger keeps the digest of every message it saw on the previous call.  When the new
transcript extends the previous one only the new suffix is written; when it does not (a compaction
rewrote earlier history) a ``[HISTORY CLEARED]`` marker is written followed by the whole
transcript.  Digests are content hashes, so two distinct messages with colliding digests would be
treated as the same message.
"""

import logging
from typing import (
    List,
    Sequence,
    TextIO,
)

from fanout.callbacks import Callback
from fanout.core.schema import (
    AssistantMessage,
    Message,
    SystemMessage,
    ToolMessage,
    Transcript,
    UserMessage,
)

logger = logging.getLogger(__name__)

HISTORY_CLEARED = "## [HISTORY CLEARED]\n\n"


def render_message(msg: Message) -> str:
    """Render *msg* as a role-labelled markdown block."""
    if isinstance(msg, SystemMessage):
        return f"#### System\n\n{msg.text}\n\n"
    if isinstance(msg, UserMessage):
        return f"#### User\n\n{msg.text}\n\n"
    if isinstance(msg, AssistantMessage):
        out = f"#### Assistant\n\n{msg.text}\n\n"
        if msg.tool_calls:
            out += "".join(f"- {c.name} ({c.id})\n\t- `{c.args}`\n" for c in msg.tool_calls)
            out += "\n"
        return out
    if isinstance(msg, ToolMessage):
        return f"#### Tool: {msg.tool_name} ({msg.call_id})\n\n{msg.result}\n\n"
    raise TypeError(f"cannot render {type(msg).__name__}")


class MessageLogger(Callback):
    """Append each step's new messages to *sink* without rewriting what was already written."""

    def __init__(self, name: str, sink: TextIO):
        self.name = name
        self.sink = sink
        self.step = 0
        self._last_digests: List[str] = []
        self.sink.write(f"## {name}\n\n")

    def _write_step(self, messages: Sequence[Message]) -> None:
        self.sink.write(f"### Step {self.step}\n")
        for msg in messages:
            self.sink.write(render_message(msg))
        self.sink.write("---\n")

    def _is_extension(self, digests: List[str]) -> bool:
        previous = self._last_digests
        return len(digests) >= len(previous) and digests[: len(previous)] == previous

    async def call(self, transcript: Transcript) -> Transcript:
        digests = [msg.digest() for msg in transcript]

        if self._is_extension(digests):
            self._write_step(transcript[len(self._last_digests) :])
        else:
            logger.debug("[%s] history rewritten, logging full transcript", self.name)
            self.sink.write(HISTORY_CLEARED)
            self._write_step(transcript)

        self.sink.flush()
        self.step += 1
        self._last_digests = digests
        return transcript
