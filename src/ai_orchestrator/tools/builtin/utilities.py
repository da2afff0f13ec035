"""Date/time and JSON formatting tools."""

import json
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ai_orchestrator.tools.base import Tool


class DateTimeTool(Tool):
    """
    Returns the current date and time.

    Unknown or invalid timezones fall back to UTC in ISO format.
    """

    name = "get_datetime"
    description = (
        "Get the current date and time. Use this when asked about today's "
        "date or current time."
    )

    parameters = {
        "type": "object",
        "properties": {
            "timezone": {
                "type": "string",
                "description": "The timezone to use (e.g., 'America/New_York', 'UTC')",
            },
        },
    }

    async def execute(self, params: dict[str, Any]) -> str:
        tz_name = params.get("timezone") or "UTC"
        try:
            now = datetime.now(ZoneInfo(str(tz_name)))
        except (ZoneInfoNotFoundError, ValueError):
            return f"Current date and time (UTC): {datetime.now(timezone.utc).isoformat()}"
        return f"Current date and time ({tz_name}): {now.strftime('%m/%d/%Y, %I:%M:%S %p')}"


class JsonFormatterTool(Tool):
    """Pretty-prints JSON, or reports why it is invalid."""

    name = "format_json"
    description = "Format and validate JSON data. Use this to pretty-print or validate JSON."

    parameters = {
        "type": "object",
        "properties": {
            "json": {
                "type": "string",
                "description": "The JSON string to format",
            },
        },
        "required": ["json"],
    }

    async def execute(self, params: dict[str, Any]) -> str:
        raw = params.get("json", "")
        if not isinstance(raw, str):
            # Models sometimes send the object itself instead of a string
            return json.dumps(raw, indent=2)
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            return f"Invalid JSON: {e}"
        return json.dumps(parsed, indent=2)
