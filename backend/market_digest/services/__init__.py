"""Services package for the market insight pipeline."""

from .citation_service import CITATION_STRATEGIES, extract_citations, normalize_citation
from .insight_parser import extract_content, parse_raw_insights, strip_code_fence
from .insight_service import (
    assemble_insights,
    cap_insights,
    clean_description,
    extract_insights,
    fetch_market_insights,
    reconstruct_from_citations,
)
from .source_validator import is_reputable_source, looks_like_article, looks_like_article_relaxed

__all__ = [
    # Envelope parsing
    "extract_content",
    "strip_code_fence",
    "parse_raw_insights",
    "CITATION_STRATEGIES",
    "extract_citations",
    "normalize_citation",
    # URL validation
    "is_reputable_source",
    "looks_like_article",
    "looks_like_article_relaxed",
    # Pipeline
    "assemble_insights",
    "reconstruct_from_citations",
    "cap_insights",
    "clean_description",
    "extract_insights",
    "fetch_market_insights",
]
