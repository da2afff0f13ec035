"""Tool-using agent loop.

Each iteration asks the router for the next step, parses the reply and
either finishes or runs the requested tool and feeds its output back as
an observation. Tool failures never abort a run; they become observation
text the model can react to. Only router errors propagate.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable

from ai_orchestrator.agents.parser import (
    FinalAnswer,
    PlainText,
    ToolAction,
    parse_agent_response,
)
from ai_orchestrator.config.prompts import (
    AGENT_EXHAUSTED_ANSWER,
    AGENT_OBSERVATION_TEMPLATE,
    AGENT_SYSTEM_PROMPT,
    TOOLS_PLACEHOLDER,
)
from ai_orchestrator.tools.base import Tool
from ai_orchestrator.tools.registry import ToolRegistry
from ai_orchestrator.utils.logging import get_logger
from ai_orchestrator.utils.providers.base import ChatMessage, CompletionOptions

if TYPE_CHECKING:
    from ai_orchestrator.config.settings import Settings
    from ai_orchestrator.core.router import Router


logger = get_logger(__name__)


@dataclass(frozen=True)
class AgentStep:
    """
    One loop iteration.

    `is_plain_text` marks a final step whose reply had no usable JSON
    block, so the raw text was taken as the answer.
    """

    thought: str
    action: ToolAction | None = None
    observation: str | None = None
    is_final: bool = False
    is_plain_text: bool = False


@dataclass(frozen=True)
class ToolCall:
    """A successful tool execution."""

    tool: str
    input: dict[str, Any]
    output: str


@dataclass(frozen=True)
class AgentResult:
    answer: str
    steps: list[AgentStep] = field(default_factory=list)
    tool_calls: list[ToolCall] = field(default_factory=list)
    exhausted: bool = False


@dataclass(frozen=True)
class AgentConfig:
    """Agent behaviour. A custom system prompt must contain `{tools}`."""

    system_prompt: str | None = None
    max_iterations: int = 10
    temperature: float = 0.7
    model: str | None = None
    provider: str | None = None
    tools: tuple[Tool, ...] = ()

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides: Any) -> "AgentConfig":
        values: dict[str, Any] = {
            "max_iterations": settings.agent_max_iterations,
            "temperature": settings.agent_temperature,
        }
        values.update(overrides)
        return cls(**values)


class Agent:
    """
    Iterative reasoning agent.

    The tool registry belongs to this instance. Run one task at a time per
    instance and only add or remove tools between runs.

    Example:
        agent = Agent(router, AgentConfig(tools=tuple(builtin_tools())))
        result = await agent.run("What is 12 * 7?")
        print(result.answer)
    """

    def __init__(self, router: "Router", config: AgentConfig | None = None):
        self.router = router
        self.config = config or AgentConfig()
        self.tools = ToolRegistry(self.config.tools)

    def add_tool(self, tool: Tool) -> None:
        self.tools.add(tool)

    def remove_tool(self, name: str) -> bool:
        return self.tools.remove(name)

    def get_tools(self) -> list[Tool]:
        return self.tools.list_tools()

    def build_system_prompt(self) -> str:
        template = self.config.system_prompt or AGENT_SYSTEM_PROMPT
        return template.replace(TOOLS_PLACEHOLDER, self.tools.describe())

    async def run(self, task: str) -> AgentResult:
        """
        Run the loop until the model answers or the iteration cap is hit.

        Args:
            task: The user's task in natural language

        Returns:
            AgentResult with the answer, the step trace and successful
            tool calls. Hitting the cap returns a fixed apology with
            `exhausted=True` instead of raising.
        """
        steps: list[AgentStep] = []
        tool_calls: list[ToolCall] = []
        messages = [
            ChatMessage(role="system", content=self.build_system_prompt()),
            ChatMessage(role="user", content=task),
        ]
        options = CompletionOptions(
            temperature=self.config.temperature,
            model=self.config.model,
            provider=self.config.provider,
        )

        logger.info(
            "Agent run started",
            tools=self.tools.list_names(),
            max_iterations=self.config.max_iterations,
        )

        for iteration in range(1, self.config.max_iterations + 1):
            result = await self.router.complete(messages, options)
            parsed = parse_agent_response(result.content)

            if isinstance(parsed, FinalAnswer):
                steps.append(AgentStep(thought=parsed.thought or parsed.answer, is_final=True))
                logger.info("Agent finished", iterations=iteration, tool_calls=len(tool_calls))
                return AgentResult(answer=parsed.answer, steps=steps, tool_calls=tool_calls)

            if isinstance(parsed, PlainText):
                steps.append(
                    AgentStep(thought=parsed.content, is_final=True, is_plain_text=True)
                )
                logger.info(
                    "Agent finished with unstructured reply",
                    iterations=iteration,
                    tool_calls=len(tool_calls),
                )
                return AgentResult(answer=parsed.content, steps=steps, tool_calls=tool_calls)

            observation = await self._execute_action(parsed, tool_calls)
            steps.append(AgentStep(thought=parsed.thought, action=parsed, observation=observation))

            messages.append(ChatMessage(role="assistant", content=result.content))
            messages.append(
                ChatMessage(
                    role="user",
                    content=AGENT_OBSERVATION_TEMPLATE.format(observation=observation),
                )
            )

        logger.warning(
            "Agent reached iteration limit",
            max_iterations=self.config.max_iterations,
            tool_calls=len(tool_calls),
        )
        return AgentResult(
            answer=AGENT_EXHAUSTED_ANSWER,
            steps=steps,
            tool_calls=tool_calls,
            exhausted=True,
        )

    async def _execute_action(self, action: ToolAction, tool_calls: list[ToolCall]) -> str:
        """Run one tool call. Always returns observation text."""
        tool = self.tools.get(action.tool)
        if tool is None:
            logger.warning("Agent requested unknown tool", tool=action.tool)
            return f"Error: Tool '{action.tool}' not found"

        try:
            output = await tool.execute(action.input)
        except Exception as e:
            logger.warning("Tool execution failed", tool=action.tool, error=str(e))
            return f"Error executing tool: {e}"

        logger.debug("Tool executed", tool=action.tool, output_length=len(output))
        tool_calls.append(ToolCall(tool=action.tool, input=action.input, output=output))
        return output


def create_agent(router: "Router", config: AgentConfig | None = None) -> Agent:
    """Create an agent instance."""
    return Agent(router, config)
