"""
Basic sanity tests for the tool registry.

Run with:
$ pytest -q
"""

import pytest

from fanout.agent.tool_executor import ToolRegistry
from fanout.core.errors import (
    DuplicateTool,
    ToolDoesNotExist,
)
from fanout.core.schema import (
    Message,
    ToolCall,
    ToolDefinition,
    ToolMessage,
    UserMessage,
)
from fanout.tools import (
    FunctionalTool,
    NoArgs,
)


# This is a stub tool for testing purposes.
class _Echo(FunctionalTool):
    def __init__(self, name: str = "echo"):
        self.name = name
        self.definition_calls = 0

    def definition(self) -> ToolDefinition:
        self.definition_calls += 1
        return ToolDefinition.build(self.name, "Echo the raw arguments back", NoArgs)

    async def invoke_fn(self, call: ToolCall) -> Message:
        return ToolMessage(call_id=call.id, tool_name=self.name, result=call.args)


@pytest.mark.asyncio
async def test_execute_tool_success() -> None:
    """Registry should hand the call to the tool and return its transcript."""

    registry = ToolRegistry([_Echo()])
    transcript = [UserMessage(text="hi")]

    out = await registry.execute(ToolCall(id="1", name="echo", args="ping"), transcript)

    assert out[-1] == ToolMessage(call_id="1", tool_name="echo", result="ping")


@pytest.mark.asyncio
async def test_execute_tool_missing() -> None:
    """Registry should raise *ToolDoesNotExist* for an unknown tool."""

    registry = ToolRegistry([_Echo()])

    with pytest.raises(ToolDoesNotExist) as excinfo:
        await registry.execute(ToolCall(id="1", name="not_a_tool"), [])
    assert excinfo.value.name == "not_a_tool"
    assert "not_a_tool" in str(excinfo.value)


def test_register_duplicate_name() -> None:
    """Two tools with one name are rejected instead of the last one silently winning."""

    registry = ToolRegistry([_Echo()])

    with pytest.raises(DuplicateTool):
        registry.register(_Echo())


def test_definitions_follow_registration_order() -> None:
    tools = [_Echo("b"), _Echo("a"), _Echo("c")]
    registry = ToolRegistry(tools)

    assert [d.name for d in registry.definitions] == ["b", "a", "c"]
    assert registry.names() == ["b", "a", "c"]
    assert all(t.definition_calls == 1 for t in tools)
