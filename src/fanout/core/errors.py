"""
Error taxonomy for the agent core.

Every error raised by the loop, a tool or a callback aborts the current run and propagates to the
caller unchanged.  Nothing in the core retries.
"""


class AgentError(RuntimeError):
    """Base class for all errors raised by the agent core."""


class ToolDoesNotExist(AgentError):
    """The model requested a tool that is not registered with the agent."""

    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' does not exist")
        self.name = name


class DuplicateTool(AgentError):
    """Two tools registered with the same agent share a name."""

    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' is already registered")
        self.name = name


class MissingArg(AgentError):
    """An agent was built without one of its required parts."""

    def __init__(self, field: str):
        super().__init__(f"Missing arg: {field}")
        self.field = field


class LLMResponseError(AgentError):
    """The completion backend violated its response contract."""

    def __init__(self, reason: str):
        super().__init__(f"No usable response from llm: {reason}")
        self.reason = reason


class AgentWorkflowError(AgentError):
    """A structural expectation about message sequencing was violated."""

    def __init__(self, reason: str):
        super().__init__(f"Agent workflow error: {reason}")
        self.reason = reason


class InvalidToolArgs(AgentError):
    """The raw arguments of a tool call do not match the tool's argument shape."""

    def __init__(self, name: str, detail: str):
        super().__init__(f"Invalid arguments for tool '{name}': {detail}")
        self.name = name
        self.detail = detail
