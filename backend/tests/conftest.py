"""Pytest fixtures for testing."""

import json
from collections.abc import Callable
from typing import Any

import pytest

from market_digest.llm import LLMResponse, Usage


def build_envelope(content: Any = None, **extra: Any) -> dict[str, Any]:
    """Build a Perplexity-shaped completion envelope.

    ``content`` may be a string (used verbatim) or any JSON-serializable
    value (dumped). Extra keyword arguments become root fields.
    """
    if content is not None and not isinstance(content, str):
        content = json.dumps(content)
    envelope: dict[str, Any] = {
        "id": "pplx-test",
        "model": "sonar-pro",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }
    envelope.update(extra)
    return envelope


@pytest.fixture
def make_envelope() -> Callable[..., dict[str, Any]]:
    """Factory fixture for completion envelopes."""
    return build_envelope


@pytest.fixture
def article_citations() -> list[str]:
    """Five whitelisted, article-shaped citation URLs."""
    return [
        "https://www.reuters.com/markets/us/fed-holds-rates-steady-2025-10-13/",
        "https://www.bloomberg.com/news/articles/2025-10-13/oil-slides-to-four-year-low",
        "https://www.cnbc.com/2025/10/13/stock-market-today-live-updates.html",
        "https://www.wsj.com/finance/banking/regional-banks-earnings-beat-3f2a1c",
        "https://finance.yahoo.com/news/treasury-yields-climb-after-jobs-data-120000123.html",
    ]


@pytest.fixture
def sample_raw_insights() -> list[dict[str, str]]:
    """Five raw insights without citation markers or usable links."""
    return [
        {
            "title": f"Insight {i}",
            "description": f"Market development number {i}.",
            "link": f"https://www.zacks.com/stock/news/{i}/article",
        }
        for i in range(1, 6)
    ]


@pytest.fixture
def make_llm_response() -> Callable[..., LLMResponse]:
    """Factory for LLMResponse objects carrying a raw envelope."""

    def _make(raw: dict[str, Any] | None, text: str | None = None) -> LLMResponse:
        return LLMResponse(
            text=text,
            finish_reason="stop",
            usage=Usage(prompt_tokens=100, completion_tokens=400, total_tokens=500),
            model="sonar-pro",
            provider="perplexity",
            latency_ms=2500,
            request_id="pplx-test",
            raw=raw,
        )

    return _make
