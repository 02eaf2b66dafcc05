"""Predicates deciding when an agent's loop terminates."""

from abc import (
    ABC,
    abstractmethod,
)
from typing import Callable

from fanout.core.schema import (
    AssistantMessage,
    ToolMessage,
    Transcript,
)


class StopCondition(ABC):
    """Evaluated on the transcript at the top of every loop iteration."""

    @abstractmethod
    def done(self, transcript: Transcript) -> bool:
        """Return True once the agent should stop."""


class ToolCalled(StopCondition):
    """Stop once the last message is the result of the terminal tool."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name

    def done(self, transcript: Transcript) -> bool:
        if not transcript:
            return False
        last = transcript[-1]
        return isinstance(last, ToolMessage) and last.tool_name == self.tool_name


class AssistantSaid(StopCondition):
    """Stop once the model's latest reply is exactly *text*."""

    def __init__(self, text: str):
        self.text = text.strip()

    def done(self, transcript: Transcript) -> bool:
        if not transcript:
            return False
        last = transcript[-1]
        return isinstance(last, AssistantMessage) and last.text.strip() == self.text


class Predicate(StopCondition):
    """Wrap an arbitrary caller-supplied predicate."""

    def __init__(self, fn: Callable[[Transcript], bool]):
        self.fn = fn

    def done(self, transcript: Transcript) -> bool:
        return bool(self.fn(transcript))
