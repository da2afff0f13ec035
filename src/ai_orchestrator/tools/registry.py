"""Per-agent tool registry."""

from typing import Iterable

from ai_orchestrator.tools.base import Tool
from ai_orchestrator.utils.logging import get_logger


logger = get_logger(__name__)


class ToolRegistry:
    """
    Name-keyed collection of tools owned by one Agent.

    Unlike a module-level registry, each instance is private to its owner.
    It is not synchronized: mutate it only between agent runs.
    Iteration order is registration order.
    """

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.add(tool)

    def add(self, tool: Tool) -> None:
        """Register a tool, replacing any tool with the same name."""
        if tool.name in self._tools:
            logger.warning("Overwriting existing tool", tool=tool.name)
        self._tools[tool.name] = tool
        logger.debug("Registered tool", tool=tool.name)

    def remove(self, name: str) -> bool:
        """Remove a tool by name. Returns whether it was registered."""
        removed = self._tools.pop(name, None) is not None
        if removed:
            logger.debug("Removed tool", tool=name)
        return removed

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def list_names(self) -> list[str]:
        return list(self._tools.keys())

    def describe(self) -> str:
        """Tool list for the agent's system prompt, one line per tool."""
        return "\n".join(tool.describe() for tool in self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
