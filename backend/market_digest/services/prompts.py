"""Prompt templates for the daily market insight request.

Contains the system and user prompts sent to the search-backed model and the
request builder that attaches the structured-output schema.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from market_digest.llm import (
    MARKET_INSIGHTS_SCHEMA,
    MARKET_INSIGHTS_SCHEMA_NAME,
    ChatMessage,
    LLMRequest,
    ResponseFormat,
)
from market_digest.models.insight import REPUTABLE_NEWS_DOMAINS

# Ask for more than we render so filtering still leaves a full section
REQUESTED_INSIGHTS = "5-7"

SOURCE_NAMES: dict[str, str] = {
    "bloomberg.com": "Bloomberg",
    "reuters.com": "Reuters",
    "wsj.com": "The Wall Street Journal",
    "ft.com": "Financial Times",
    "financialtimes.com": "Financial Times",
    "cnbc.com": "CNBC",
    "marketwatch.com": "MarketWatch",
    "yahoo.com": "Yahoo Finance",
    "finance.yahoo.com": "Yahoo Finance",
    "economist.com": "The Economist",
    "forbes.com": "Forbes",
    "businessinsider.com": "Business Insider",
    "nasdaq.com": "Nasdaq",
}

INSIGHTS_SYSTEM_PROMPT = """You are a financial market analyst writing concise, actionable market insights for a daily email newsletter.

Rules:
- Always answer with valid JSON only
- Only search for and cite articles from these sources: {sources}
- Every link must be a direct link to a specific article, never a homepage, category page or data page"""

INSIGHTS_USER_PROMPT = """Write a concise market overview for {today}. Provide {count} key insights investors need to know today, covering:
- Major market movements and trends
- Key economic indicators or news
- Sector performance highlights
- Important policy or regulatory changes
- Market sentiment and outlook

Source requirements:
1. Use ONLY these whitelisted domains: {domains}. Do not use any other source.
2. For each insight give the exact URL of the original article. The URL must:
   - Be a complete HTTPS URL on a whitelisted domain
   - Point to a specific article (not a homepage, category page, search results or market data page)
   - Have a meaningful article path such as /news/article-name or /story/article-id
3. Return ONLY the JSON object, with no text, comments or markdown around it:
{{
  "insights": [
    {{
      "title": "Brief, descriptive title of the insight",
      "description": "2-3 sentence description explaining the market insight",
      "link": "exact url to news article"
    }}
  ]
}}"""


def describe_sources(domains: Iterable[str]) -> str:
    """Human-readable source list, e.g. 'Reuters (reuters.com), ...'."""
    parts = []
    for domain in domains:
        name = SOURCE_NAMES.get(domain)
        parts.append(f"{name} ({domain})" if name else domain)
    return ", ".join(parts)


def build_insights_request(
    today: Optional[date] = None,
    domains: Iterable[str] = REPUTABLE_NEWS_DOMAINS,
    model: str = "",
) -> LLMRequest:
    """Build the structured-output request for today's insights.

    Args:
        today: Date the overview is written for. Defaults to today.
        domains: Whitelisted source domains to name in the prompt.
        model: Model override; empty uses the provider default.

    Returns:
        LLMRequest with the market insights JSON schema attached.
    """
    today = today or date.today()
    domains = tuple(domains)
    sources = describe_sources(domains)

    return LLMRequest(
        messages=[
            ChatMessage(role="system", content=INSIGHTS_SYSTEM_PROMPT.format(sources=sources)),
            ChatMessage(
                role="user",
                content=INSIGHTS_USER_PROMPT.format(
                    today=today.strftime("%A, %B %d, %Y"),
                    count=REQUESTED_INSIGHTS,
                    domains=sources,
                ),
            ),
        ],
        model=model,
        temperature=0.7,
        max_tokens=2500,
        response_format=ResponseFormat(
            type="json_schema",
            name=MARKET_INSIGHTS_SCHEMA_NAME,
            json_schema=MARKET_INSIGHTS_SCHEMA,
        ),
    )
