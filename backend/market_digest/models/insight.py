"""Market insight models.

RawInsight is what the upstream completion claims; ValidatedInsight is what
the digest renders. InsightPolicy carries the whitelist and pairing order so
the same pipeline serves every configured variant.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Reputable financial news domains. Subdomains match by dot-suffix.
REPUTABLE_NEWS_DOMAINS: tuple[str, ...] = (
    "bloomberg.com",
    "reuters.com",
    "wsj.com",
    "ft.com",
    "financialtimes.com",
    "cnbc.com",
    "marketwatch.com",
    "yahoo.com",
    "finance.yahoo.com",
    "economist.com",
    "forbes.com",
    "businessinsider.com",
    "nasdaq.com",
)

# Market-overview data pages that are never a specific article.
GENERIC_MARKET_PATHS: tuple[str, ...] = (
    "/stock-market",
    "/united-states/stock-market",
)

MAX_INSIGHTS = 5

LadderStep = Literal["marker", "positional", "direct"]

DEFAULT_LADDER: tuple[LadderStep, ...] = ("marker", "positional", "direct")
# Earlier pairing order: trust the completion's own link before citations.
DIRECT_FIRST_LADDER: tuple[LadderStep, ...] = ("direct", "marker", "positional")


class RawInsight(BaseModel):
    """One insight as decoded from the completion content."""

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str
    link: Optional[str] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _require_text(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @field_validator("link", mode="before")
    @classmethod
    def _lenient_link(cls, value: Any) -> Optional[str]:
        if isinstance(value, str):
            return value
        return None


class ValidatedInsight(BaseModel):
    """An insight backed by a whitelisted, article-shaped URL."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    title: str
    description: str
    link: str


class InsightPolicy(BaseModel):
    """Whitelist and pairing configuration for the insight pipeline."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    domains: tuple[str, ...] = REPUTABLE_NEWS_DOMAINS
    ladder: tuple[LadderStep, ...] = DEFAULT_LADDER
    generic_paths: tuple[str, ...] = GENERIC_MARKET_PATHS
    max_insights: int = Field(default=MAX_INSIGHTS, ge=1, le=MAX_INSIGHTS)

    @field_validator("domains")
    @classmethod
    def _normalize_domains(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(domain.strip().lower() for domain in value if domain.strip())

    @field_validator("ladder")
    @classmethod
    def _unique_steps(cls, value: tuple[LadderStep, ...]) -> tuple[LadderStep, ...]:
        if len(set(value)) != len(value):
            raise ValueError("ladder steps must not repeat")
        return value
