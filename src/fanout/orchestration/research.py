"""
Research orchestrator: a lead agent that fans its task out to concurrent sub-agents.

The lead agent gets three tools on top of the usual completion/memory/compaction set:

* ``start_subagent`` spawns an independent agent as an :mod:`asyncio` task and returns at once;
* ``wait_for_subagent`` blocks until any running sub-agent finishes and returns its report;
* shutdown (end of :meth:`Orchestrator.run`) cancels whatever is still running.

Sub-agents share nothing with the lead agent except the LLM client and the pool of handles.
"""

import logging
from pathlib import Path
from typing import (
    List,
    Optional,
    TextIO,
)

from pydantic import (
    BaseModel,
    Field,
)

from fanout.agent.agent_loop import (
    Agent,
    AgentBuilder,
)
from fanout.agent.llm_interface import BaseLLM
from fanout.agent.stop_conditions import ToolCalled
from fanout.callbacks.message_logger import MessageLogger
from fanout.config import settings
from fanout.core.errors import AgentWorkflowError
from fanout.core.schema import (
    Message,
    ToolCall,
    ToolDefinition,
    ToolMessage,
    Transcript,
)
from fanout.memory.memory_store import MemoryStore
from fanout.orchestration.subagent_pool import SubAgentPool
from fanout.tools import (
    FunctionalTool,
    NoArgs,
    Tool,
)
from fanout.tools.summarize_history import SummarizeHistory

logger = logging.getLogger(__name__)

COMPLETE_TASK = "complete_task"
START_SUBAGENT = "start_subagent"
WAIT_FOR_SUBAGENT = "wait_for_subagent"

_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt(name: str) -> str:
    """Read the prompt resource ``prompts/<name>.md``."""
    return (_PROMPT_DIR / f"{name}.md").read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------
class CompleteTaskArgs(BaseModel):
    result: str = Field(..., description="The final result of your task")


class CompleteTask(FunctionalTool):
    """Terminal tool: its result message is what ends an agent's run."""

    def __init__(self, description: str = "finish your task and return the result"):
        self.description = description

    def definition(self) -> ToolDefinition:
        return ToolDefinition.build(COMPLETE_TASK, self.description, CompleteTaskArgs)

    async def invoke_fn(self, call: ToolCall) -> Message:
        args = call.parse_args(CompleteTaskArgs)
        return ToolMessage(call_id=call.id, tool_name=COMPLETE_TASK, result=args.result)


class StartSubAgentArgs(BaseModel):
    task: str = Field(..., description="The research task the sub-agent should investigate")


class StartSubAgent(Tool):
    """Spawn a research sub-agent without waiting for it."""

    def __init__(
        self,
        pool: SubAgentPool,
        llm: BaseLLM,
        log_dir: Path,
        system_prompt: str,
        keep_last: int,
        web_search: bool = True,
    ):
        self.pool = pool
        self.llm = llm
        self.log_dir = Path(log_dir)
        self.system_prompt = system_prompt
        self.keep_last = keep_last
        self.web_search = web_search

    def definition(self) -> ToolDefinition:
        return ToolDefinition.build(
            START_SUBAGENT,
            "create a research sub-agent to investigate a specific research task",
            StartSubAgentArgs,
        )

    def build_subagent(self, name: str, task: str, sink: TextIO) -> Agent:
        """Assemble a sub-agent with its own memory, compaction and transcript log."""
        builder = (
            AgentBuilder()
            .name(name)
            .system_prompt(self.system_prompt)
            .user_prompt(task)
            .llm(self.llm)
            .tool(CompleteTask("finish your task and return the result to the lead researcher"))
            .tool(SummarizeHistory(self.llm, self.keep_last))
            .tools(MemoryStore().tools())
            .callback(SummarizeHistory(self.llm, self.keep_last))
            .callback(MessageLogger(name, sink))
            .stop_condition(ToolCalled(COMPLETE_TASK))
        )
        if self.web_search:
            builder = builder.llm_websearch()
        return builder.build()

    async def _run_subagent(self, name: str, task: str) -> Transcript:
        with (self.log_dir / f"{name}.md").open("w", encoding="utf-8") as sink:
            agent = self.build_subagent(name, task, sink)
            return await agent.run()

    async def invoke(self, call: ToolCall, transcript: Transcript) -> Transcript:
        args = call.parse_args(StartSubAgentArgs)
        name = await self.pool.spawn(lambda name: self._run_subagent(name, args.task))
        result = ToolMessage(
            call_id=call.id,
            tool_name=START_SUBAGENT,
            result=f"Research sub-agent {name} started for task: {args.task}",
        )
        return [*transcript, result]


class WaitForSubAgent(FunctionalTool):
    """Collect the report of whichever sub-agent finishes first."""

    NO_SUBAGENTS = "no sub-agents are currently active, create a new sub-agent to wait for a task"

    def __init__(self, pool: SubAgentPool):
        self.pool = pool

    def definition(self) -> ToolDefinition:
        return ToolDefinition.build(
            WAIT_FOR_SUBAGENT,
            "wait for a research sub-agent to complete its task and obtain the result",
            NoArgs,
        )

    async def invoke_fn(self, call: ToolCall) -> Message:
        transcript = await self.pool.wait_next()
        if transcript is None:
            return ToolMessage(
                call_id=call.id, tool_name=WAIT_FOR_SUBAGENT, result=self.NO_SUBAGENTS
            )

        last = transcript[-1] if transcript else None
        if not isinstance(last, ToolMessage) or last.tool_name != COMPLETE_TASK:
            raise AgentWorkflowError("sub agent terminated without calling complete_task")

        return ToolMessage(call_id=call.id, tool_name=WAIT_FOR_SUBAGENT, result=last.result)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------
class Orchestrator:
    """
    Lead research agent plus the sub-agent pool it controls.

    Parameters
    ----------
    llm:
        Completion backend, shared with every sub-agent.
    task:
        The research task, sent as the lead agent's user prompt.
    log_dir:
        Directory receiving ``orchestrator.md`` and one ``subagent_<n>.md`` per sub-agent.
    keep_last, web_search:
        Compaction tail size and native web search; default from settings.
    """

    def __init__(
        self,
        llm: BaseLLM,
        task: str,
        log_dir: Path,
        keep_last: Optional[int] = None,
        web_search: Optional[bool] = None,
    ):
        self.llm = llm
        self.task = task
        self.log_dir = Path(log_dir)
        self.keep_last = settings.SUMMARY_KEEP_LAST if keep_last is None else keep_last
        self.web_search = settings.WEB_SEARCH if web_search is None else web_search
        self.pool = SubAgentPool()
        self.system_prompt = load_prompt("orchestrator")
        self.subagent_prompt = load_prompt("subagent")

    def tools(self) -> List[Tool]:
        return [
            CompleteTask("finish the research task and return the final answer"),
            SummarizeHistory(self.llm, self.keep_last),
            StartSubAgent(
                self.pool,
                self.llm,
                self.log_dir,
                self.subagent_prompt,
                self.keep_last,
                web_search=self.web_search,
            ),
            WaitForSubAgent(self.pool),
            *MemoryStore().tools(),
        ]

    def build_agent(self, sink: TextIO) -> Agent:
        builder = (
            AgentBuilder()
            .name("orchestrator")
            .system_prompt(self.system_prompt)
            .user_prompt(self.task)
            .llm(self.llm)
            .tools(self.tools())
            .callback(SummarizeHistory(self.llm, self.keep_last))
            .callback(MessageLogger("orchestrator", sink))
            .stop_condition(ToolCalled(COMPLETE_TASK))
        )
        if self.web_search:
            builder = builder.llm_websearch()
        return builder.build()

    async def run(self) -> Transcript:
        """Run the lead agent to completion, then cancel any sub-agent still running."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        try:
            with (self.log_dir / "orchestrator.md").open("w", encoding="utf-8") as sink:
                agent = self.build_agent(sink)
                return await agent.run()
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        if self.pool.pending:
            logger.info("Cancelling %d outstanding sub-agents", self.pool.pending)
        await self.pool.shutdown()

    async def __aenter__(self) -> "Orchestrator":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()
