"""Dispatches tool calls to the tools registered with one agent."""

import logging
from typing import (
    Dict,
    Iterable,
    List,
)

from fanout.core.errors import (
    DuplicateTool,
    ToolDoesNotExist,
)
from fanout.core.schema import (
    ToolCall,
    ToolDefinition,
    Transcript,
)
from fanout.tools import Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Name -> tool lookup plus the ordered advertisement list sent to the model.

    Each tool's ``definition()`` is called exactly once, at registration.
    """

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: Dict[str, Tool] = {}
        self._definitions: List[ToolDefinition] = []
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        """
        Register *tool* under the name from its definition.

        Raises
        ------
        DuplicateTool
            If a tool with the same name is already registered.
        """
        definition = tool.definition()
        if definition.name in self._tools:
            raise DuplicateTool(definition.name)
        logger.debug("Registering tool '%s'", definition.name)
        self._tools[definition.name] = tool
        self._definitions.append(definition)

    @property
    def definitions(self) -> List[ToolDefinition]:
        """Advertisements in registration order."""
        return list(self._definitions)

    def names(self) -> List[str]:
        return list(self._tools)

    async def execute(self, call: ToolCall, transcript: Transcript) -> Transcript:
        """
        Look up ``call.name`` and invoke the tool with *call* and *transcript*.

        Parameters
        ----------
        call:
            The tool call requested by the model.
        transcript:
            The transcript so far; ownership passes to the tool.

        Returns
        -------
        Transcript
            Whatever the tool returns.

        Raises
        ------
        ToolDoesNotExist
            If no tool is registered under ``call.name``.
        """
        tool = self._tools.get(call.name)
        if tool is None:
            raise ToolDoesNotExist(call.name)

        logger.debug("Executing tool '%s' (%s) with args=%s", call.name, call.id, call.args)
        return await tool.invoke(call, transcript)
