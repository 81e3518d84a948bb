"""JSON schemas for LLM structured output."""

from typing import Any

# Each insight must carry a title, a short description and the article URL.
MARKET_INSIGHTS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "insights": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "link": {"type": "string"},
                },
                "required": ["title", "description", "link"],
            },
        }
    },
    "required": ["insights"],
}

MARKET_INSIGHTS_SCHEMA_NAME = "market_insights"
