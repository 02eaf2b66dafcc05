"""Tests for the incremental markdown transcript logger."""

import io

import pytest

from fanout.callbacks.message_logger import (
    HISTORY_CLEARED,
    MessageLogger,
    render_message,
)
from fanout.core.schema import (
    AssistantMessage,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
)

SYSTEM = SystemMessage(text="you are a researcher")
USER = UserMessage(text="find the answer")
ASSISTANT = AssistantMessage(
    text="looking it up",
    tool_calls=(ToolCall(id="call_7", name="memory_get_key", args='{"key": "answer"}'),),
)
TOOL = ToolMessage(call_id="call_7", tool_name="memory_get_key", result="value of key answer:\n42")
FINAL = AssistantMessage(text="the answer is 42")


@pytest.mark.asyncio
async def test_writes_each_message_once_across_extensions() -> None:
    sink = io.StringIO()
    logger = MessageLogger("orchestrator", sink)
    t1 = [SYSTEM, USER]
    t2 = t1 + [ASSISTANT]
    t3 = t2 + [TOOL, FINAL]

    for transcript in (t1, t2, t3):
        assert await logger.call(transcript) is transcript

    out = sink.getvalue()
    assert out.startswith("## orchestrator\n\n")
    for msg in t3:
        assert out.count(render_message(msg)) == 1
    assert HISTORY_CLEARED not in out
    assert [line for line in out.splitlines() if line.startswith("### Step")] == [
        "### Step 0",
        "### Step 1",
        "### Step 2",
    ]
    assert out.index("### Step 1") < out.index(render_message(ASSISTANT)) < out.index("### Step 2")


@pytest.mark.asyncio
async def test_unchanged_transcript_writes_an_empty_step() -> None:
    sink = io.StringIO()
    logger = MessageLogger("a", sink)

    await logger.call([SYSTEM, USER])
    await logger.call([SYSTEM, USER])

    assert sink.getvalue().endswith("### Step 1\n---\n")


@pytest.mark.asyncio
async def test_shorter_transcript_is_a_discontinuity() -> None:
    sink = io.StringIO()
    logger = MessageLogger("a", sink)
    summary = AssistantMessage(text="summary of earlier work")

    await logger.call([SYSTEM, USER, ASSISTANT, TOOL, FINAL])
    mark = len(sink.getvalue())
    await logger.call([SYSTEM, USER, summary, FINAL])

    tail = sink.getvalue()[mark:]
    assert tail.startswith(HISTORY_CLEARED + "### Step 1\n")
    for msg in (SYSTEM, USER, summary, FINAL):
        assert render_message(msg) in tail


@pytest.mark.asyncio
async def test_rewritten_prefix_is_a_discontinuity() -> None:
    sink = io.StringIO()
    logger = MessageLogger("a", sink)

    await logger.call([SYSTEM, USER, ASSISTANT])
    mark = len(sink.getvalue())
    # same length plus one, but an earlier message changed
    await logger.call([SYSTEM, UserMessage(text="a different task"), ASSISTANT, TOOL])

    tail = sink.getvalue()[mark:]
    assert tail.startswith(HISTORY_CLEARED)
    assert render_message(ASSISTANT) in tail
    assert render_message(TOOL) in tail


@pytest.mark.asyncio
async def test_extension_after_discontinuity_is_incremental_again() -> None:
    sink = io.StringIO()
    logger = MessageLogger("a", sink)

    await logger.call([SYSTEM, USER, ASSISTANT, TOOL])
    await logger.call([SYSTEM, USER])
    mark = len(sink.getvalue())
    await logger.call([SYSTEM, USER, FINAL])

    tail = sink.getvalue()[mark:]
    assert tail == "### Step 2\n" + render_message(FINAL) + "---\n"


def test_render_formats() -> None:
    assert render_message(USER) == "#### User\n\nfind the answer\n\n"
    assert "- memory_get_key (call_7)\n\t- `{\"key\": \"answer\"}`\n" in render_message(ASSISTANT)
    assert render_message(TOOL).startswith("#### Tool: memory_get_key (call_7)\n\n")
