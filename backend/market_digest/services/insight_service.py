"""Market insight extraction and source validation.

Turns one search-backed completion into at most five insights, each backed by
a whitelisted article URL.

PAIRING RULES:
--------------
1. LADDER (strict pass): each raw insight gets exactly one candidate URL, from
   the first ladder step that applies:
   - marker: first ``[n]`` in the description, if ``n`` is a valid citation
     number (trusted)
   - positional: ``citations[accepted % len(citations)]`` (trusted)
   - direct: the insight's own ``link`` (untrusted)
   The candidate must pass the source and structural checks or the insight
   is dropped. Lower steps are not retried.

2. FALLBACK: if the strict pass accepts nothing but insights and citations
   both exist, the first insights are re-paired with citations by position
   (the last citation repeats once insights outnumber citations) under the
   relaxed structural rules.

3. CAP: the result is truncated to ``policy.max_insights`` in order.

Citation URLs may repeat across insights; the positional step reuses them
when citations are scarce.
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from market_digest.llm import LLMClient, LLMError
from market_digest.models.insight import (
    MAX_INSIGHTS,
    InsightPolicy,
    LadderStep,
    RawInsight,
    ValidatedInsight,
)
from market_digest.services.citation_service import extract_citations
from market_digest.services.insight_parser import extract_content, parse_raw_insights
from market_digest.services.prompts import build_insights_request
from market_digest.services.source_validator import (
    is_reputable_source,
    looks_like_article,
    looks_like_article_relaxed,
)

logger = logging.getLogger(__name__)

CITATION_MARKER_PATTERN = re.compile(r"\[(\d+)\]")
# Marker plus the whitespace before it, so "rose [1]." becomes "rose."
_MARKER_STRIP_PATTERN = re.compile(r"\s*\[\d+\]")
_WHITESPACE_PATTERN = re.compile(r"\s+")

DEFAULT_POLICY = InsightPolicy()


@dataclass(frozen=True)
class Candidate:
    """URL chosen for an insight and where it came from."""

    url: str
    trusted: bool
    step: LadderStep


def clean_description(text: str) -> str:
    """Strip ``[n]`` citation markers and collapse whitespace.

    Repeats until no marker is left, since removing a nested marker such as
    the ``[2]`` in ``[1[2]]`` can expose another one.
    """
    cleaned = text
    while CITATION_MARKER_PATTERN.search(cleaned):
        cleaned = _MARKER_STRIP_PATTERN.sub("", cleaned)
    return _WHITESPACE_PATTERN.sub(" ", cleaned).strip()


def _marker_candidate(raw: RawInsight, citations: Sequence[str]) -> Candidate | None:
    match = CITATION_MARKER_PATTERN.search(raw.description)
    if match is None:
        return None
    index = int(match.group(1)) - 1
    if 0 <= index < len(citations):
        return Candidate(citations[index], trusted=True, step="marker")
    return None


def _positional_candidate(citations: Sequence[str], accepted: int) -> Candidate | None:
    if not citations:
        return None
    return Candidate(citations[accepted % len(citations)], trusted=True, step="positional")


def _direct_candidate(raw: RawInsight) -> Candidate | None:
    if raw.link and raw.link.strip():
        return Candidate(raw.link.strip(), trusted=False, step="direct")
    return None


def resolve_candidate(
    raw: RawInsight,
    citations: Sequence[str],
    accepted: int,
    ladder: Sequence[LadderStep],
) -> Candidate | None:
    """Walk the ladder and return the first applicable candidate URL.

    Args:
        raw: The raw insight being paired.
        citations: Normalized citation URLs.
        accepted: Number of insights accepted so far.
        ladder: Step order.

    Returns:
        The candidate, or None if no step applies.
    """
    for step in ladder:
        if step == "marker":
            candidate = _marker_candidate(raw, citations)
        elif step == "positional":
            candidate = _positional_candidate(citations, accepted)
        else:
            candidate = _direct_candidate(raw)
        if candidate is not None:
            return candidate
    return None


def _validated(raw: RawInsight, link: str) -> ValidatedInsight:
    return ValidatedInsight(
        title=raw.title.strip(),
        description=clean_description(raw.description),
        link=link,
    )


def assemble_insights(
    raw_insights: Sequence[RawInsight],
    citations: Sequence[str],
    policy: InsightPolicy = DEFAULT_POLICY,
) -> list[ValidatedInsight]:
    """Pair raw insights with validated URLs (strict pass).

    Args:
        raw_insights: Insights decoded from the completion, in order.
        citations: Normalized citation URLs, in order.
        policy: Whitelist and ladder configuration.

    Returns:
        Accepted insights in original order (uncapped).
    """
    accepted: list[ValidatedInsight] = []

    for raw in raw_insights:
        candidate = resolve_candidate(raw, citations, len(accepted), policy.ladder)
        if candidate is None:
            logger.warning("Insight has no usable URL: %s", raw.title)
            continue

        if not is_reputable_source(candidate.url, policy.domains):
            logger.warning(
                "Insight URL is not from a reputable source: %s",
                candidate.url,
                extra={"title": raw.title, "step": candidate.step},
            )
            continue

        if not looks_like_article(candidate.url, candidate.trusted, policy.generic_paths):
            logger.warning(
                "Insight URL does not look like an article: %s",
                candidate.url,
                extra={"title": raw.title, "step": candidate.step, "trusted": candidate.trusted},
            )
            continue

        accepted.append(_validated(raw, candidate.url))

    return accepted


def reconstruct_from_citations(
    raw_insights: Sequence[RawInsight],
    citations: Sequence[str],
    policy: InsightPolicy = DEFAULT_POLICY,
) -> list[ValidatedInsight]:
    """Re-pair insights with citations by position under relaxed rules.

    Only meaningful when the strict pass produced nothing. The citation index
    saturates at the last citation instead of wrapping.
    """
    if not raw_insights or not citations:
        return []

    logger.info("Attempting to rebuild insights from citations")
    rebuilt: list[ValidatedInsight] = []

    for position, raw in enumerate(raw_insights[: policy.max_insights]):
        url = citations[min(position, len(citations) - 1)]

        if not is_reputable_source(url, policy.domains):
            logger.warning("Fallback URL is not from a reputable source: %s", url)
            continue
        if not looks_like_article_relaxed(url, policy.generic_paths):
            logger.warning("Fallback URL appears to be a non-article page: %s", url)
            continue

        rebuilt.append(_validated(raw, url))

    return rebuilt


def cap_insights(
    insights: Sequence[ValidatedInsight],
    limit: int = MAX_INSIGHTS,
) -> list[ValidatedInsight]:
    """Keep the first ``limit`` insights, order preserved."""
    return list(insights[:limit])


def extract_insights(
    envelope: Mapping[str, Any] | None,
    policy: InsightPolicy | None = None,
) -> list[ValidatedInsight]:
    """Run the full insight pipeline over one completion envelope.

    Never raises: malformed envelopes, undecodable content and exhausted
    validation all produce an empty list.

    Args:
        envelope: Raw provider response (``LLMResponse.raw``).
        policy: Whitelist and ladder configuration.

    Returns:
        Zero to ``policy.max_insights`` validated insights.
    """
    policy = policy or DEFAULT_POLICY
    if not isinstance(envelope, Mapping):
        logger.warning("Completion envelope missing or not an object")
        return []

    try:
        citations = extract_citations(envelope)
        raw_insights = parse_raw_insights(extract_content(envelope))

        insights = assemble_insights(raw_insights, citations, policy)
        if not insights and raw_insights and citations:
            logger.warning(
                "No insights passed validation; falling back to citation pairing",
                extra={"raw_count": len(raw_insights), "citation_count": len(citations)},
            )
            insights = reconstruct_from_citations(raw_insights, citations, policy)

        if 0 < len(insights) < policy.max_insights:
            logger.warning(
                "Only %d valid insights found, expected %d",
                len(insights),
                policy.max_insights,
            )
        return cap_insights(insights, policy.max_insights)

    except Exception:
        logger.exception("Unexpected failure while extracting insights")
        return []


async def fetch_market_insights(
    client: LLMClient | None = None,
    policy: InsightPolicy | None = None,
    today: date | None = None,
) -> list[ValidatedInsight]:
    """Request today's insights from the upstream model and validate them.

    Missing credentials, transport errors and non-success statuses are
    logged and produce an empty list.

    Args:
        client: LLM client. Defaults to a client built from the environment.
        policy: Whitelist and ladder configuration.
        today: Date to write the overview for.

    Returns:
        Zero to five validated insights.
    """
    policy = policy or DEFAULT_POLICY
    correlation_id = str(uuid.uuid4())

    try:
        client = client or LLMClient()
        request = build_insights_request(today=today, domains=policy.domains)
        response = await client.generate(request, correlation_id=correlation_id)
    except LLMError as e:
        logger.error(
            "Market insight request failed: %s",
            str(e),
            extra={"correlation_id": correlation_id, "error_type": type(e).__name__},
        )
        return []
    except Exception:
        logger.exception(
            "Unexpected failure requesting market insights",
            extra={"correlation_id": correlation_id},
        )
        return []

    envelope = response.raw
    if envelope is None:
        envelope = {"choices": [{"message": {"content": response.text}}]}

    insights = extract_insights(envelope, policy)
    logger.info(
        "Extracted %d market insights",
        len(insights),
        extra={"correlation_id": correlation_id, "request_id": response.request_id},
    )
    return insights
