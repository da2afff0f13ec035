"""Tool-using agents."""

from ai_orchestrator.agents.agent import (
    Agent,
    AgentConfig,
    AgentResult,
    AgentStep,
    ToolCall,
    create_agent,
)
from ai_orchestrator.agents.parser import (
    FinalAnswer,
    ParsedResponse,
    PlainText,
    ToolAction,
    parse_agent_response,
)

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentResult",
    "AgentStep",
    "FinalAnswer",
    "ParsedResponse",
    "PlainText",
    "ToolAction",
    "ToolCall",
    "create_agent",
    "parse_agent_response",
]
