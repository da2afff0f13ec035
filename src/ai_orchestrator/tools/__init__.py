"""Agent tools: base class, registry and built-ins."""

from ai_orchestrator.tools.base import FunctionTool, Tool, create_tool
from ai_orchestrator.tools.builtin import builtin_tools
from ai_orchestrator.tools.registry import ToolRegistry

__all__ = [
    "FunctionTool",
    "Tool",
    "ToolRegistry",
    "builtin_tools",
    "create_tool",
]
