"""Main orchestration loop for fanout agents."""

from __future__ import annotations

import logging
from typing import (
    Callable,
    Iterable,
    List,
    Optional,
    Union,
)

from fanout.agent.llm_interface import BaseLLM
from fanout.agent.stop_conditions import (
    Predicate,
    StopCondition,
)
from fanout.agent.tool_executor import ToolRegistry
from fanout.callbacks import Callback
from fanout.core.errors import MissingArg
from fanout.core.schema import (
    AssistantMessage,
    CompletionRequest,
    Message,
    SystemMessage,
    Transcript,
    UserMessage,
)
from fanout.tools import Tool

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Agent Loop
# ---------------------------------------------------------------------------
class Agent:
    """
    Drives one conversation to completion.

    One iteration is: one model turn, its tool calls in the order the model returned them, then
    the callback chain.  The stop condition is checked before every iteration and never in the
    middle of one.
    """

    def __init__(
        self,
        llm: BaseLLM,
        messages: List[Message],
        registry: ToolRegistry,
        callbacks: List[Callback],
        stop_condition: StopCondition,
        llm_websearch: bool = False,
        name: str = "agent",
    ):
        self.llm = llm
        self.messages = messages
        self.registry = registry
        self.callbacks = callbacks
        self.stop_condition = stop_condition
        self.llm_websearch = llm_websearch
        self.name = name

    async def run(self, transcript: Optional[Transcript] = None) -> Transcript:
        """
        Run the loop until the stop condition holds and return the final transcript.

        Parameters
        ----------
        transcript:
            Initial transcript.  Defaults to the system/user prompts the agent was built with.

        Raises
        ------
        AgentError
            Any error from the backend, a tool or a callback aborts the run unchanged.
        """
        transcript = list(self.messages if transcript is None else transcript)
        definitions = self.registry.definitions
        step = 0

        while not self.stop_condition.done(transcript):
            logger.debug("[%s] step %d: %d messages", self.name, step, len(transcript))
            response = await self.llm.complete(
                CompletionRequest(
                    messages=transcript, tools=definitions, web_search=self.llm_websearch
                )
            )
            transcript.append(
                AssistantMessage(text=response.content, tool_calls=response.tool_calls)
            )

            if response.tool_calls:
                logger.info(
                    "[%s] model requested %d tool calls: %s",
                    self.name,
                    len(response.tool_calls),
                    [call.name for call in response.tool_calls],
                )
            for call in response.tool_calls:
                transcript = await self.registry.execute(call, transcript)

            for callback in self.callbacks:
                transcript = await callback.call(transcript)

            step += 1

        logger.info("[%s] finished after %d steps", self.name, step)
        return transcript


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------
class AgentBuilder:
    """Fluent construction of an :class:`Agent`; :meth:`build` validates the result."""

    def __init__(self) -> None:
        self._llm: Optional[BaseLLM] = None
        self._system_prompt: Optional[str] = None
        self._user_prompt: Optional[str] = None
        self._tools: List[Tool] = []
        self._callbacks: List[Callback] = []
        self._stop_condition: Optional[StopCondition] = None
        self._llm_websearch = False
        self._name = "agent"

    def llm(self, llm: BaseLLM) -> AgentBuilder:
        self._llm = llm
        return self

    def name(self, name: str) -> AgentBuilder:
        """Label used in process logs."""
        self._name = name
        return self

    def system_prompt(self, prompt: str) -> AgentBuilder:
        self._system_prompt = prompt
        return self

    def user_prompt(self, prompt: str) -> AgentBuilder:
        self._user_prompt = prompt
        return self

    def tool(self, tool: Tool) -> AgentBuilder:
        self._tools.append(tool)
        return self

    def tools(self, tools: Iterable[Tool]) -> AgentBuilder:
        self._tools.extend(tools)
        return self

    def callback(self, callback: Callback) -> AgentBuilder:
        self._callbacks.append(callback)
        return self

    def stop_condition(
        self, cond: Union[StopCondition, Callable[[Transcript], bool]]
    ) -> AgentBuilder:
        self._stop_condition = cond if isinstance(cond, StopCondition) else Predicate(cond)
        return self

    def llm_websearch(self) -> AgentBuilder:
        self._llm_websearch = True
        return self

    def build(self) -> Agent:
        """
        Register the tools and assemble the agent.

        Raises
        ------
        MissingArg
            If the llm, the stop condition or both prompts are missing.
        DuplicateTool
            If two tools share a name.
        """
        messages: List[Message] = []
        if self._system_prompt is not None:
            messages.append(SystemMessage(text=self._system_prompt))
        if self._user_prompt is not None:
            messages.append(UserMessage(text=self._user_prompt))

        if not messages:
            raise MissingArg("system and/or user prompt is required for agent")
        if self._llm is None:
            raise MissingArg("llm is required for agent")
        if self._stop_condition is None:
            raise MissingArg("stop_condition is required for agent")

        return Agent(
            llm=self._llm,
            messages=messages,
            registry=ToolRegistry(self._tools),
            callbacks=list(self._callbacks),
            stop_condition=self._stop_condition,
            llm_websearch=self._llm_websearch,
            name=self._name,
        )
