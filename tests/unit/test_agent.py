"""Tests for the agent loop."""

import json

import pytest

from ai_orchestrator.agents import Agent, AgentConfig, create_agent
from ai_orchestrator.config.prompts import AGENT_EXHAUSTED_ANSWER
from ai_orchestrator.core.exceptions import ProvidersExhaustedError
from ai_orchestrator.core.resilience import TransientError
from ai_orchestrator.tools import create_tool
from ai_orchestrator.tools.builtin.calculator import CalculatorTool

from conftest import ScriptedProvider


def action(tool: str, tool_input: dict, thought: str = "using a tool") -> str:
    body = {"thought": thought, "action": {"tool": tool, "input": tool_input}}
    return f"```json\n{json.dumps(body)}\n```"


def answer(text: str, thought: str = "I now have enough information to answer") -> str:
    return f"```json\n{json.dumps({'thought': thought, 'answer': text})}\n```"


async def explode(params):
    raise RuntimeError("backend unavailable")


class TestAgentRun:
    """Tests for Agent.run."""

    @pytest.mark.asyncio
    async def test_calculator_scenario(self, make_router):
        provider = ScriptedProvider(
            "primary",
            [action("calculator", {"expression": "12*7"}), answer("84")],
        )
        agent = Agent(make_router(provider), AgentConfig(tools=(CalculatorTool(),)))

        result = await agent.run("What is 12 * 7?")

        assert result.answer == "84"
        assert len(result.tool_calls) == 1
        assert result.tool_calls[0].tool == "calculator"
        assert result.tool_calls[0].input == {"expression": "12*7"}
        assert result.tool_calls[0].output == "Result: 84"
        assert [step.is_final for step in result.steps] == [False, True]
        assert result.steps[0].observation == "Result: 84"
        assert not result.exhausted

    @pytest.mark.asyncio
    async def test_history_carries_observation(self, make_router):
        provider = ScriptedProvider(
            "primary",
            [action("calculator", {"expression": "1+1"}), answer("2")],
        )
        agent = Agent(make_router(provider), AgentConfig(tools=(CalculatorTool(),)))

        await agent.run("1+1?")

        second_call_messages, options = provider.calls[1]
        assert [m.role for m in second_call_messages] == ["system", "user", "assistant", "user"]
        assert second_call_messages[2].content == action("calculator", {"expression": "1+1"})
        assert second_call_messages[3].content == "Observation: Result: 2"
        assert options.temperature == 0.7

    @pytest.mark.asyncio
    async def test_system_prompt_lists_tools(self, make_router):
        provider = ScriptedProvider("primary", [answer("hi")])
        agent = Agent(make_router(provider), AgentConfig(tools=(CalculatorTool(),)))

        await agent.run("hello")

        system_prompt = provider.calls[0][0][0].content
        assert "- calculator: Perform mathematical calculations." in system_prompt
        assert "{tools}" not in system_prompt

    @pytest.mark.asyncio
    async def test_custom_system_prompt(self, make_router):
        provider = ScriptedProvider("primary", [answer("hi")])
        agent = Agent(
            make_router(provider),
            AgentConfig(system_prompt="Tools:\n{tools}", tools=(CalculatorTool(),)),
        )

        await agent.run("hello")

        assert provider.calls[0][0][0].content.startswith("Tools:\n- calculator")

    @pytest.mark.asyncio
    async def test_unknown_tool_becomes_observation(self, make_router):
        provider = ScriptedProvider(
            "primary", [action("teleport", {"to": "mars"}), answer("cannot")]
        )
        agent = Agent(make_router(provider))

        result = await agent.run("Go to Mars")

        assert result.answer == "cannot"
        assert result.steps[0].observation == "Error: Tool 'teleport' not found"
        assert result.tool_calls == []

    @pytest.mark.asyncio
    async def test_tool_error_becomes_observation(self, make_router):
        provider = ScriptedProvider("primary", [action("flaky", {}), answer("gave up")])
        agent = Agent(
            make_router(provider),
            AgentConfig(tools=(create_tool("flaky", "Always fails", explode),)),
        )

        result = await agent.run("try it")

        assert result.answer == "gave up"
        assert result.steps[0].observation == "Error executing tool: backend unavailable"
        assert result.tool_calls == []

    @pytest.mark.asyncio
    async def test_plain_text_is_final_but_marked(self, make_router):
        provider = ScriptedProvider("primary", ["Just 4."])
        agent = Agent(make_router(provider))

        result = await agent.run("2+2?")

        assert result.answer == "Just 4."
        assert len(result.steps) == 1
        assert result.steps[0].is_final
        assert result.steps[0].is_plain_text

    @pytest.mark.asyncio
    async def test_iteration_limit(self, make_router):
        provider = ScriptedProvider("primary", [action("calculator", {"expression": "1"})])
        agent = Agent(
            make_router(provider),
            AgentConfig(max_iterations=3, tools=(CalculatorTool(),)),
        )

        result = await agent.run("loop forever")

        assert result.answer == AGENT_EXHAUSTED_ANSWER
        assert result.exhausted
        assert len(result.steps) == 3
        assert len(result.tool_calls) == 3
        assert len(provider.calls) == 3

    @pytest.mark.asyncio
    async def test_router_exhaustion_propagates(self, make_router):
        provider = ScriptedProvider("primary", [TransientError("down")])
        agent = Agent(make_router(provider, max_retries=0))

        with pytest.raises(ProvidersExhaustedError):
            await agent.run("anything")


class TestToolManagement:
    """Tests for adding and removing tools."""

    def test_add_then_remove_restores_tools(self, make_router):
        agent = create_agent(make_router(ScriptedProvider("primary")), AgentConfig(tools=(CalculatorTool(),)))
        before = agent.get_tools()

        agent.add_tool(create_tool("echo", "Repeat", explode))
        assert [t.name for t in agent.get_tools()] == ["calculator", "echo"]

        assert agent.remove_tool("echo") is True
        assert agent.get_tools() == before

    def test_remove_unknown_tool(self, make_router):
        agent = Agent(make_router(ScriptedProvider("primary")))

        assert agent.remove_tool("missing") is False
