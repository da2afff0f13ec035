"""Web search tool.

Returns placeholder text until a search API (Serper, Tavily, ...) is wired in.
"""

from typing import Any

from ai_orchestrator.tools.base import Tool


class WebSearchTool(Tool):
    """Searches the web for current information."""

    name = "web_search"
    description = (
        "Search the web for current information. Use this when you need "
        "up-to-date information that might not be in your knowledge."
    )

    parameters = {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "The search query",
            },
        },
        "required": ["query"],
    }

    async def execute(self, params: dict[str, Any]) -> str:
        query = params.get("query", "")
        return (
            f'[Web search results for "{query}" would appear here. '
            "Integrate with a search API.]"
        )
