"""Parse the narrative insight payload out of a completion envelope.

The upstream model is asked for ``{"insights": [...]}`` but only usually
complies. Handles:
- Markdown code fences around the JSON (```json or bare ```)
- A bare top-level array instead of the keyed object
- The array under some other key (first list-valued field wins)

Anything that cannot be decoded yields an empty list.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from market_digest.models.insight import RawInsight

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def extract_content(envelope: Mapping[str, Any]) -> str | None:
    """Return the first choice's message content, if it is a string."""
    choices = envelope.get("choices") if isinstance(envelope, Mapping) else None
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, Mapping):
        return None
    message = first.get("message")
    if not isinstance(message, Mapping):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
        cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _find_insight_array(data: Any) -> list[Any]:
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []

    insights = data.get("insights")
    if isinstance(insights, list):
        return insights

    for key, value in data.items():
        if isinstance(value, list):
            logger.debug("Found insights array under key: %s", key)
            return value
    return []


def parse_raw_insights(content: str | None) -> list[RawInsight]:
    """Decode the completion content into raw insights.

    Args:
        content: Narrative content string, possibly fenced.

    Returns:
        Raw insights in original order. Elements that are not objects with a
        non-empty title and description are skipped.
    """
    if not isinstance(content, str) or not content.strip():
        logger.warning("No content in completion response")
        return []

    cleaned = strip_code_fence(content)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning(
            "Failed to parse insight JSON: %s",
            e,
            extra={"content_preview": cleaned[:200]},
        )
        return []

    items = _find_insight_array(data)
    if not items:
        logger.warning("No insights array found in completion content")
        return []

    raw_insights: list[RawInsight] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping non-object insight at position %d", index)
            continue
        try:
            raw_insights.append(RawInsight.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Insight at position %d missing required fields: %s",
                index,
                e.errors(include_url=False),
            )

    logger.info("Found %d insights in response", len(raw_insights))
    return raw_insights
