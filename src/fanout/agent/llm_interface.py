"""
LLM interface for fanout.

This module is the only place that *directly* calls an LLM.  Everything else (agent loop, tools,
callbacks, orchestration) stays model-agnostic and talks to :class:`BaseLLM`.

We support two back-ends out of the box:

1. **OpenAI** chat completions (``OPENAI_API_KEY``).
2. **Anthropic** messages (``ANTHROPIC_API_KEY``).

Additional providers can be added by subclassing :class:`BaseLLM` and registering via
:func:`register_llm`.  Backends never retry and never default a malformed response: a response
without choices, with an unexpected role or without content raises :class:`LLMResponseError`.
"""

import json
import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    List,
    Tuple,
    Type,
)

from fanout.config import settings
from fanout.core.errors import LLMResponseError
from fanout.core.schema import (
    AssistantMessage,
    CompletionRequest,
    CompletionResponse,
    SystemMessage,
    ToolCall,
    ToolDefinition,
    ToolMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_LLM_REGISTRY: dict[str, Type["BaseLLM"]] = {}


def register_llm(name: str) -> Callable:
    """Decorator to register a backend class under *name*."""

    def wrapper(cls: Type["BaseLLM"]) -> Type["BaseLLM"]:
        _LLM_REGISTRY[name] = cls
        return cls

    return wrapper


def load_llm(name: str | None = None, model: str | None = None) -> "BaseLLM":
    """
    Factory that returns an instantiated backend.

    Fallback order for the backend:
    1. *name* arg
    2. ``settings.LLM_BACKEND`` env option
    3. default: ``"openai"``

    The model falls back to ``settings.MODEL`` and then to the backend's own default.
    """

    target = name or getattr(settings, "LLM_BACKEND", "openai")
    cls = _LLM_REGISTRY.get(target.lower())
    if cls is None:
        raise ValueError(f"LLM backend '{target}' is not registered.")
    return cls(model=model or settings.MODEL or cls.DEFAULT_MODEL)


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class BaseLLM(ABC):
    """Completion capability consumed by agents; safe to share between concurrent agents."""

    DEFAULT_MODEL: ClassVar[str] = ""

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Return the assistant text and tool calls for *request*."""


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------
def _to_openai_message(msg: Any) -> Dict[str, Any]:
    if isinstance(msg, SystemMessage):
        return {"role": "system", "content": msg.text}
    if isinstance(msg, UserMessage):
        return {"role": "user", "content": msg.text}
    if isinstance(msg, ToolMessage):
        return {"role": "tool", "tool_call_id": msg.call_id, "content": msg.result}

    out: Dict[str, Any] = {"role": "assistant", "content": msg.text}
    if msg.tool_calls:
        out["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": call.args},
            }
            for call in msg.tool_calls
        ]
    return out


def _to_openai_tool(tool: ToolDefinition) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters,
        },
    }


def parse_openai_response(resp: Any) -> CompletionResponse:
    """Validate a chat completion and convert it into a :class:`CompletionResponse`."""
    if not resp.choices:
        raise LLMResponseError("choices is empty")

    message = resp.choices[0].message
    if message.role != "assistant":
        raise LLMResponseError(f"expected role to be assistant, got '{message.role}'")
    if message.content is None:
        raise LLMResponseError("content is empty")

    tool_calls = tuple(
        ToolCall(id=call.id, name=call.function.name, args=call.function.arguments)
        for call in message.tool_calls or []
        if call.type == "function"
    )
    return CompletionResponse(content=message.content, tool_calls=tool_calls)


@register_llm("openai")
class OpenAILLM(BaseLLM):
    """OpenAI chat-completions backend."""

    DEFAULT_MODEL: ClassVar[str] = "gpt-4o"

    def __init__(self, model: str = DEFAULT_MODEL, api_key: str | None = None):
        import openai  # pylint: disable=import-outside-toplevel

        self.model = model
        self._client = openai.AsyncOpenAI(
            api_key=api_key or settings.OPENAI_API_KEY, max_retries=0
        )

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [_to_openai_message(m) for m in request.messages],
        }
        if request.tools:
            kwargs["tools"] = [_to_openai_tool(t) for t in request.tools]
        if request.web_search:
            kwargs["web_search_options"] = {}

        logger.debug(
            "OpenAI completion: model=%s messages=%d tools=%d web_search=%s",
            self.model,
            len(request.messages),
            len(request.tools),
            request.web_search,
        )
        resp = await self._client.chat.completions.create(**kwargs)
        return parse_openai_response(resp)


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------
_ANTHROPIC_WEB_SEARCH_TOOL = {"type": "web_search_20250305", "name": "web_search"}


def _to_anthropic_messages(messages: List[Any]) -> Tuple[str, List[Dict[str, Any]]]:
    """Split out the system prompt and convert the rest to Anthropic message dicts."""
    system: List[str] = []
    out: List[Dict[str, Any]] = []

    for msg in messages:
        if isinstance(msg, SystemMessage):
            system.append(msg.text)
        elif isinstance(msg, UserMessage):
            out.append({"role": "user", "content": msg.text})
        elif isinstance(msg, AssistantMessage):
            blocks: List[Dict[str, Any]] = []
            if msg.text:
                blocks.append({"type": "text", "text": msg.text})
            for call in msg.tool_calls:
                blocks.append(
                    {
                        "type": "tool_use",
                        "id": call.id,
                        "name": call.name,
                        "input": json.loads(call.args or "{}"),
                    }
                )
            out.append({"role": "assistant", "content": blocks})
        else:
            block = {"type": "tool_result", "tool_use_id": msg.call_id, "content": msg.result}
            # Results answering one assistant turn travel together in a single user turn
            prev = out[-1] if out else None
            if prev and prev["role"] == "user" and isinstance(prev["content"], list):
                prev["content"].append(block)
            else:
                out.append({"role": "user", "content": [block]})

    return "\n\n".join(system), out


def parse_anthropic_response(response: Any) -> CompletionResponse:
    """Validate an Anthropic message and convert it into a :class:`CompletionResponse`."""
    if response.role != "assistant":
        raise LLMResponseError(f"expected role to be assistant, got '{response.role}'")
    if not response.content:
        raise LLMResponseError("content is empty")

    text = "".join(block.text for block in response.content if block.type == "text")
    tool_calls = tuple(
        ToolCall(id=block.id, name=block.name, args=json.dumps(block.input))
        for block in response.content
        if block.type == "tool_use"
    )
    return CompletionResponse(content=text, tool_calls=tool_calls)


@register_llm("anthropic")
class AnthropicLLM(BaseLLM):
    """Anthropic messages backend."""

    DEFAULT_MODEL: ClassVar[str] = "claude-sonnet-4-5"

    def __init__(self, model: str = DEFAULT_MODEL, api_key: str | None = None):
        import anthropic  # pylint: disable=import-outside-toplevel

        self.model = model
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key or settings.ANTHROPIC_API_KEY, max_retries=0
        )

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        system, messages = _to_anthropic_messages(request.messages)
        tools: List[Dict[str, Any]] = [
            {"name": t.name, "description": t.description, "input_schema": t.parameters}
            for t in request.tools
        ]
        if request.web_search:
            tools.append(_ANTHROPIC_WEB_SEARCH_TOOL)

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": settings.MAX_TOKENS,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = tools

        logger.debug(
            "Anthropic completion: model=%s messages=%d tools=%d",
            self.model,
            len(messages),
            len(tools),
        )
        response = await self._client.messages.create(**kwargs)
        return parse_anthropic_response(response)
