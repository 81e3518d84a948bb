"""Market digest models package."""

from .insight import (
    DEFAULT_LADDER,
    DIRECT_FIRST_LADDER,
    GENERIC_MARKET_PATHS,
    MAX_INSIGHTS,
    REPUTABLE_NEWS_DOMAINS,
    InsightPolicy,
    LadderStep,
    RawInsight,
    ValidatedInsight,
)

__all__ = [
    "RawInsight",
    "ValidatedInsight",
    "InsightPolicy",
    "LadderStep",
    "DEFAULT_LADDER",
    "DIRECT_FIRST_LADDER",
    "REPUTABLE_NEWS_DOMAINS",
    "GENERIC_MARKET_PATHS",
    "MAX_INSIGHTS",
]
