"""
History compaction.

:class:`SummarizeHistory` replaces everything between the task framing (the first two messages)
and the last ``keep_last`` messages with one model-written summary.  It is registered twice on an
agent: as a tool the model may call on demand, and as a callback that compacts automatically once
the transcript grows past a word-count threshold.
"""

import logging

from fanout.agent.llm_interface import BaseLLM
from fanout.callbacks import Callback
from fanout.config import settings
from fanout.core.schema import (
    AssistantMessage,
    CompletionRequest,
    ToolCall,
    ToolDefinition,
    Transcript,
    UserMessage,
)
from fanout.tools import (
    NoArgs,
    Tool,
)

logger = logging.getLogger(__name__)

# Messages at the head of the transcript that carry the task framing (system + user prompt).
_FRAMING = 2

SUMMARY_PROMPT = """\
In order to keep the conversational history from becoming too long, you must generate a summary \
of the current chat history.
Instructions:
- The summary must compress the information, try to be as succinct as possible. The final \
summary should not be more than 1000 words in length.
- Preserve key information from the conversational history. Remember that information stored \
using the memory tool can still be retrieved later, so durable facts belong there.
- Remember that you are a researcher, make sure to preserve any key findings or information that \
you will need to complete the task."""


class SummarizeHistory(Tool, Callback):
    """Compact the transcript into framing + summary + the last ``keep_last`` messages."""

    name = "summarize_history"

    def __init__(self, llm: BaseLLM, keep_last: int, token_threshold: int | None = None):
        self.llm = llm
        self.keep_last = keep_last
        self.token_threshold = (
            settings.SUMMARY_TOKEN_THRESHOLD if token_threshold is None else token_threshold
        )

    async def summarize(self, transcript: Transcript) -> Transcript:
        """
        Run one compaction.

        A transcript shorter than ``2 + keep_last`` is returned unchanged; otherwise the result
        always holds ``3 + keep_last`` messages.
        """
        if len(transcript) < _FRAMING + self.keep_last:
            return transcript

        split = len(transcript) - self.keep_last
        head, tail = list(transcript[:split]), list(transcript[split:])

        head.append(UserMessage(text=SUMMARY_PROMPT))
        result = await self.llm.complete(CompletionRequest(messages=head, tools=[]))

        logger.info(
            "Compacted %d messages into a %d-word summary (kept last %d)",
            len(transcript),
            len(result.content.split()),
            self.keep_last,
        )
        return [*head[:_FRAMING], AssistantMessage(text=result.content), *tail]

    # Tool ------------------------------------------------------------------
    def definition(self) -> ToolDefinition:
        return ToolDefinition.build(
            self.name,
            "This tool will take in the chat history, and generate a concise summary that "
            "preserves the key components. This prevents the conversational history from "
            "becoming too long, and makes it easier to find the relevant information in the "
            f"history. Note that the last {self.keep_last} messages will not be changed, only the "
            "preceding messages will be summarized. Remember that you should also use the memory "
            "tool to store key information for retrieval later. You must use this tool to "
            "prevent the history from becoming too long. It will automatically be invoked if the "
            "chat history becomes too long.",
            NoArgs,
        )

    async def invoke(self, call: ToolCall, transcript: Transcript) -> Transcript:
        return await self.summarize(transcript)

    # Callback --------------------------------------------------------------
    async def call(self, transcript: Transcript) -> Transcript:
        ntokens = sum(msg.ntokens() for msg in transcript)
        if ntokens <= self.token_threshold:
            return transcript
        logger.debug("Transcript at %d tokens exceeds %d", ntokens, self.token_threshold)
        return await self.summarize(transcript)
