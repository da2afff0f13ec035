"""Parser for the agent's structured model output.

The model is asked to answer with a fenced ```json block holding either
an `answer` or an `action: {tool, input}`. Parsing yields exactly one of
three variants so the agent loop can dispatch on type:

- FinalAnswer: the block carried an answer
- ToolAction: the block asked for a tool call
- PlainText: no usable block (missing, malformed, or neither key); the
  raw text is kept so callers can tell it apart from a real answer
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Union


JSON_BLOCK_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")


@dataclass(frozen=True)
class FinalAnswer:
    answer: str
    thought: str = ""


@dataclass(frozen=True)
class ToolAction:
    tool: str
    input: dict[str, Any] = field(default_factory=dict)
    thought: str = ""


@dataclass(frozen=True)
class PlainText:
    content: str


ParsedResponse = Union[FinalAnswer, ToolAction, PlainText]


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def parse_agent_response(content: str) -> ParsedResponse:
    """Classify one model response. Never raises."""
    match = JSON_BLOCK_PATTERN.search(content)
    if not match:
        return PlainText(content)

    try:
        parsed = json.loads(match.group(1))
    except json.JSONDecodeError:
        return PlainText(content)

    if not isinstance(parsed, dict):
        return PlainText(content)

    thought = _as_text(parsed.get("thought") or "")

    answer = parsed.get("answer")
    if answer not in (None, ""):
        return FinalAnswer(answer=_as_text(answer), thought=thought)

    action = parsed.get("action")
    if isinstance(action, dict) and action.get("tool"):
        tool_input = action.get("input")
        if tool_input is None:
            tool_input = {}
        elif not isinstance(tool_input, dict):
            tool_input = {"input": tool_input}
        return ToolAction(tool=str(action["tool"]), input=tool_input, thought=thought)

    return PlainText(content)
