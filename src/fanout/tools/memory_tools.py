"""Tools that let the model list, read and write its key-value memory."""

from pydantic import (
    BaseModel,
    Field,
)

from fanout.core.schema import (
    Message,
    ToolCall,
    ToolDefinition,
    ToolMessage,
)
from fanout.memory.memory_store import MemoryStore
from fanout.tools import (
    FunctionalTool,
    NoArgs,
)


class MemoryGetArgs(BaseModel):
    key: str = Field(..., description="Key to look up")


class MemorySetArgs(BaseModel):
    key: str = Field(..., description="Key to store the value under")
    value: str = Field(..., description="Value to store")


class _MemoryTool(FunctionalTool):
    name = ""

    def __init__(self, store: MemoryStore):
        self.store = store

    def _answer(self, call: ToolCall, result: str) -> Message:
        return ToolMessage(call_id=call.id, tool_name=self.name, result=result)


class MemoryListTool(_MemoryTool):
    name = "memory_list_keys"

    def definition(self) -> ToolDefinition:
        return ToolDefinition.build(
            self.name, "list the keys that are available in memory", NoArgs
        )

    async def invoke_fn(self, call: ToolCall) -> Message:
        lines = ["Keys in memory:\n"]
        lines.extend(f"- {key}\n" for key in self.store.keys())
        return self._answer(call, "".join(lines))


class MemoryGetTool(_MemoryTool):
    name = "memory_get_key"

    def definition(self) -> ToolDefinition:
        return ToolDefinition.build(
            self.name, "get the value associated with the given key in memory", MemoryGetArgs
        )

    async def invoke_fn(self, call: ToolCall) -> Message:
        args = call.parse_args(MemoryGetArgs)
        value = self.store.get(args.key)
        if value is None:
            return self._answer(call, f"key {args.key} is not in memory")
        return self._answer(call, f"value of key {args.key}:\n{value}")


class MemorySetTool(_MemoryTool):
    name = "memory_set_key"

    def definition(self) -> ToolDefinition:
        return ToolDefinition.build(
            self.name, "set the value associated with the given key in memory", MemorySetArgs
        )

    async def invoke_fn(self, call: ToolCall) -> Message:
        args = call.parse_args(MemorySetArgs)
        self.store.set(args.key, args.value)
        return self._answer(call, f"key {args.key} inserted into memory")
