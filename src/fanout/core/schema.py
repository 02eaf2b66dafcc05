"""
Schema definitions for model <-> agent <-> tool messages.

These data models serve as the contract between the completion backend, the agent loop, tools and
callbacks.  We keep them separate from runtime logic so they can be imported anywhere without
side-effects.  All messages are frozen: a transcript changes by replacing or appending messages,
never by editing one in place.
"""

import hashlib
from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Literal,
    Tuple,
    Union,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)

from fanout.core.errors import InvalidToolArgs


class ToolCall(BaseModel):
    """A call that the model wants the agent to execute."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque id chosen by the backend")
    name: str = Field(..., description="Registered tool name")
    args: str = Field("", description="Raw serialized JSON arguments")

    def parse_args(self, shape: Any) -> Any:
        """
        Validate the raw arguments into *shape*.

        *shape* is anything :class:`pydantic.TypeAdapter` accepts (a model class, ``int``...).

        Raises
        ------
        InvalidToolArgs
            If the payload is not valid JSON or does not match *shape*.
        """
        try:
            return TypeAdapter(shape).validate_json(self.args)
        except ValidationError as exc:
            raise InvalidToolArgs(self.name, str(exc)) from exc


class _BaseMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    def content(self) -> str:
        raise NotImplementedError

    def ntokens(self) -> int:
        """Whitespace-delimited word count, used as a cheap token estimate."""
        return len(self.content().split())

    def digest(self) -> str:
        """Stable hash of the message kind and content."""
        payload = self.model_dump_json().encode("utf-8")
        return hashlib.blake2b(payload, digest_size=16).hexdigest()


class SystemMessage(_BaseMessage):
    """Instructions framing the task."""

    role: Literal["system"] = "system"
    text: str

    def content(self) -> str:
        return self.text


class UserMessage(_BaseMessage):
    """A message written on behalf of the user."""

    role: Literal["user"] = "user"
    text: str

    def content(self) -> str:
        return self.text


class AssistantMessage(_BaseMessage):
    """A model reply, optionally requesting tool calls."""

    role: Literal["assistant"] = "assistant"
    text: str
    tool_calls: Tuple[ToolCall, ...] = ()

    def content(self) -> str:
        return self.text


class ToolMessage(_BaseMessage):
    """The answer to one tool call."""

    role: Literal["tool"] = "tool"
    call_id: str
    tool_name: str
    result: str

    def content(self) -> str:
        return self.result


Message = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]

Transcript = List[Message]
"""Ordered message history of one agent conversation."""


class ToolDefinition(BaseModel):
    """Capability advertisement sent to the model, one per registered tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def build(cls, name: str, description: str, shape: Any) -> "ToolDefinition":
        """Generate the parameter schema from the tool's argument *shape*."""
        return cls(
            name=name, description=description, parameters=TypeAdapter(shape).json_schema()
        )


class CompletionRequest(BaseModel):
    """What the agent sends to the completion backend."""

    messages: List[Message]
    tools: List[ToolDefinition] = Field(default_factory=list)
    web_search: bool = False


class CompletionResponse(BaseModel):
    """Assistant text plus the ordered tool calls the model requested."""

    content: str
    tool_calls: Tuple[ToolCall, ...] = ()
