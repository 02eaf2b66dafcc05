"""Shared fixtures: a scripted stand-in for the completion backend."""

from typing import (
    Iterable,
    List,
)

import pytest

from fanout.agent.llm_interface import BaseLLM
from fanout.core.schema import (
    CompletionRequest,
    CompletionResponse,
    ToolCall,
)


class ScriptedLLM(BaseLLM):
    """Returns canned responses in order and records every request it receives."""

    def __init__(self, responses: Iterable[CompletionResponse] = ()):
        self.responses: List[CompletionResponse] = list(responses)
        self.requests: List[CompletionRequest] = []

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("ScriptedLLM ran out of responses")
        return self.responses.pop(0)


def reply(text: str, *calls: ToolCall) -> CompletionResponse:
    """Build a model response with optional tool calls."""
    return CompletionResponse(content=text, tool_calls=calls)


def tool_call(name: str, args: str = "{}", call_id: str = "call_0") -> ToolCall:
    return ToolCall(id=call_id, name=name, args=args)


@pytest.fixture
def scripted_llm():
    """Factory fixture: ``scripted_llm(reply(...), ...)``."""

    def make(*responses: CompletionResponse) -> ScriptedLLM:
        return ScriptedLLM(responses)

    return make
