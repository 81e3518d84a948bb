"""Citation extraction from completion envelopes.

Search-backed completions return their sources in one of several places
depending on API version: ``search_results`` objects, a root ``citations``
string list, or citations nested under the first choice or its message.
Each location is a named strategy; strategies run in order and the first
one that finds a non-empty list wins. Lists are never merged across
locations.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

# Object fields that may carry the citation URL, in preference order
URL_FIELDS: tuple[str, ...] = ("url", "link", "href", "source_url", "article_url")


@dataclass(frozen=True)
class CitationStrategy:
    """A named way of locating the raw citation list in an envelope."""

    name: str
    locate: Callable[[Mapping[str, Any]], list[Any] | None]


def _as_list(value: Any) -> list[Any] | None:
    return value if isinstance(value, list) else None


def _first_choice(envelope: Mapping[str, Any]) -> Mapping[str, Any] | None:
    choices = envelope.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], Mapping):
        return choices[0]
    return None


def from_search_results(envelope: Mapping[str, Any]) -> list[Any] | None:
    return _as_list(envelope.get("search_results"))


def from_root_citations(envelope: Mapping[str, Any]) -> list[Any] | None:
    return _as_list(envelope.get("citations"))


def from_choice_citations(envelope: Mapping[str, Any]) -> list[Any] | None:
    choice = _first_choice(envelope)
    if choice is None:
        return None
    return _as_list(choice.get("citations"))


def from_message_citations(envelope: Mapping[str, Any]) -> list[Any] | None:
    choice = _first_choice(envelope)
    if choice is None:
        return None
    message = choice.get("message")
    if not isinstance(message, Mapping):
        return None
    return _as_list(message.get("citations"))


def from_field_scan(envelope: Mapping[str, Any]) -> list[Any] | None:
    """Take the first root list whose key mentions citations or search results."""
    for key, value in envelope.items():
        lowered = str(key).lower()
        if ("citation" in lowered or "search_result" in lowered) and isinstance(value, list):
            return value
    return None


CITATION_STRATEGIES: tuple[CitationStrategy, ...] = (
    CitationStrategy("search_results", from_search_results),
    CitationStrategy("citations", from_root_citations),
    CitationStrategy("choice_citations", from_choice_citations),
    CitationStrategy("message_citations", from_message_citations),
    CitationStrategy("field_scan", from_field_scan),
)


def is_http_url(value: str) -> bool:
    """True if value parses as an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(value)
        hostname = parts.hostname
    except ValueError:
        return False
    return parts.scheme.lower() in ("http", "https") and bool(hostname)


def normalize_citation(entry: Any) -> str | None:
    """Reduce a citation entry (string or object) to a bare URL string."""
    url: Any = None
    if isinstance(entry, str):
        url = entry
    elif isinstance(entry, Mapping):
        for field in URL_FIELDS:
            candidate = entry.get(field)
            if isinstance(candidate, str) and candidate.strip():
                url = candidate
                break

    if not isinstance(url, str):
        return None
    url = url.strip()
    if not url or not is_http_url(url):
        return None
    return url


def extract_citations(
    envelope: Mapping[str, Any],
    strategies: tuple[CitationStrategy, ...] = CITATION_STRATEGIES,
) -> list[str]:
    """Locate and normalize the citation URLs of a completion envelope.

    Args:
        envelope: Raw provider response.
        strategies: Lookup strategies, tried in order.

    Returns:
        Citation URLs in provider order. Duplicates are kept.
    """
    if not isinstance(envelope, Mapping):
        return []

    for strategy in strategies:
        raw_citations = strategy.locate(envelope)
        if not raw_citations:
            continue

        citations = [url for url in map(normalize_citation, raw_citations) if url is not None]
        logger.info(
            "Found %d citations in %s",
            len(raw_citations),
            strategy.name,
            extra={"strategy": strategy.name, "usable": len(citations)},
        )
        return citations

    logger.info("No citations found in completion envelope")
    return []
