"""Built-in tools available to agents."""

from ai_orchestrator.tools.base import Tool
from ai_orchestrator.tools.builtin.calculator import CalculatorTool
from ai_orchestrator.tools.builtin.utilities import DateTimeTool, JsonFormatterTool
from ai_orchestrator.tools.builtin.web_search import WebSearchTool

__all__ = [
    "CalculatorTool",
    "DateTimeTool",
    "JsonFormatterTool",
    "WebSearchTool",
    "builtin_tools",
]


def builtin_tools() -> list[Tool]:
    """Fresh instances of every built-in tool."""
    return [
        WebSearchTool(),
        CalculatorTool(),
        DateTimeTool(),
        JsonFormatterTool(),
    ]
