"""Tests for the key-value memory store and its tool views."""

import pytest

from fanout.core.errors import InvalidToolArgs
from fanout.core.schema import ToolCall
from fanout.memory.memory_store import MemoryStore
from fanout.tools import FunctionalTool


async def _call(tool: FunctionalTool, args: str = "{}") -> str:
    msg = await tool.invoke_fn(ToolCall(id="call", name=tool.name, args=args))
    assert msg.call_id == "call"
    assert msg.tool_name == tool.name
    return msg.result


@pytest.fixture
def memory_tools():
    list_tool, get_tool, set_tool = MemoryStore().tools()
    return list_tool, get_tool, set_tool


def test_tool_names() -> None:
    names = [tool.definition().name for tool in MemoryStore().tools()]
    assert names == ["memory_list_keys", "memory_get_key", "memory_set_key"]


@pytest.mark.asyncio
async def test_set_get_list(memory_tools) -> None:
    list_tool, get_tool, set_tool = memory_tools

    assert await _call(list_tool) == "Keys in memory:\n"
    assert await _call(get_tool, '{"key": "abc"}') == "key abc is not in memory"
    assert await _call(set_tool, '{"key": "abc", "value": "123"}') == "key abc inserted into memory"
    assert await _call(list_tool) == "Keys in memory:\n- abc\n"
    assert await _call(set_tool, '{"key": "xyz", "value": "456"}') == "key xyz inserted into memory"
    assert await _call(get_tool, '{"key": "abc"}') == "value of key abc:\n123"
    assert await _call(get_tool, '{"key": "xyz"}') == "value of key xyz:\n456"
    assert await _call(list_tool) == "Keys in memory:\n- abc\n- xyz\n"


@pytest.mark.asyncio
async def test_overwrite_keeps_key_position(memory_tools) -> None:
    list_tool, get_tool, set_tool = memory_tools

    await _call(set_tool, '{"key": "abc", "value": "123"}')
    await _call(set_tool, '{"key": "xyz", "value": "456"}')
    await _call(set_tool, '{"key": "abc", "value": "345"}')

    assert await _call(get_tool, '{"key": "abc"}') == "value of key abc:\n345"
    assert await _call(list_tool) == "Keys in memory:\n- abc\n- xyz\n"


@pytest.mark.asyncio
async def test_views_share_one_store() -> None:
    store = MemoryStore()
    _, _, set_tool = store.tools()
    _, get_tool, _ = store.tools()

    await _call(set_tool, '{"key": "k", "value": "v"}')

    assert store.get("k") == "v"
    assert await _call(get_tool, '{"key": "k"}') == "value of key k:\nv"


@pytest.mark.asyncio
async def test_separate_stores_are_isolated() -> None:
    _, _, set_a = MemoryStore().tools()
    _, get_b, _ = MemoryStore().tools()

    await _call(set_a, '{"key": "k", "value": "v"}')

    assert await _call(get_b, '{"key": "k"}') == "key k is not in memory"


@pytest.mark.asyncio
async def test_missing_value_is_invalid(memory_tools) -> None:
    _, _, set_tool = memory_tools

    with pytest.raises(InvalidToolArgs):
        await _call(set_tool, '{"key": "abc"}')
