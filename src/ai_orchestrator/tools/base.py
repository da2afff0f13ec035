"""Base class for agent tools.

Tools are named, schema-described async functions an Agent can invoke
between model calls. They take a dict of parameters and return text; the
agent feeds that text back to the model as an observation.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable


ToolFunction = Callable[[dict[str, Any]], Awaitable[str]]


class Tool(ABC):
    """
    Base class for tools.

    Example:
        class EchoTool(Tool):
            name = "echo"
            description = "Repeat the given text"
            parameters = {
                "type": "object",
                "properties": {"text": {"type": "string"}},
                "required": ["text"],
            }

            async def execute(self, params: dict[str, Any]) -> str:
                return params.get("text", "")
    """

    # Metadata - must be set by subclasses
    name: str
    description: str

    # Parameter schema (JSON Schema format)
    parameters: dict[str, Any] = {}

    @abstractmethod
    async def execute(self, params: dict[str, Any]) -> str:
        """
        Run the tool.

        Args:
            params: Tool input decoded from the model's action block

        Returns:
            Text output shown to the model as the observation
        """
        pass

    def describe(self) -> str:
        """One-line description used in the agent's system prompt."""
        return f"- {self.name}: {self.description}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FunctionTool(Tool):
    """Tool backed by a plain async function."""

    def __init__(
        self,
        name: str,
        description: str,
        func: ToolFunction,
        parameters: dict[str, Any] | None = None,
    ):
        self.name = name
        self.description = description
        self.parameters = parameters or {"type": "object", "properties": {}}
        self._func = func

    async def execute(self, params: dict[str, Any]) -> str:
        return await self._func(params)


def create_tool(
    name: str,
    description: str,
    func: ToolFunction,
    parameters: dict[str, Any] | None = None,
) -> Tool:
    """Create a custom tool from an async function."""
    return FunctionTool(name, description, func, parameters)
