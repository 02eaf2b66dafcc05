"""
Tool abstractions for fanout.

Two capability shapes sit behind one dispatch interface:

* :class:`Tool` receives the whole transcript and returns the transcript that replaces it.  It
  may append, remove or rewrite any message (compaction does) and may have side effects outside
  the transcript (spawning sub-agents does).
* :class:`FunctionalTool` only answers a call with a single message.  Its ``invoke`` adapts it to
  the :class:`Tool` interface by appending that message to the transcript it receives, so most
  tools never touch transcript-manipulation logic.
"""

from abc import (
    ABC,
    abstractmethod,
)

from pydantic import BaseModel

from fanout.core.schema import (
    Message,
    ToolCall,
    ToolDefinition,
    Transcript,
)


class NoArgs(BaseModel):
    """Argument shape of tools that take no arguments."""


class Tool(ABC):
    """A named capability the model can invoke."""

    @abstractmethod
    def definition(self) -> ToolDefinition:
        """Return the advertisement sent to the model."""

    @abstractmethod
    async def invoke(self, call: ToolCall, transcript: Transcript) -> Transcript:
        """Answer *call* and return the transcript that replaces *transcript*."""


class FunctionalTool(Tool):
    """A tool whose whole effect on the transcript is one appended result message."""

    @abstractmethod
    async def invoke_fn(self, call: ToolCall) -> Message:
        """Answer *call* with a single message."""

    async def invoke(self, call: ToolCall, transcript: Transcript) -> Transcript:
        result = await self.invoke_fn(call)
        return [*transcript, result]
