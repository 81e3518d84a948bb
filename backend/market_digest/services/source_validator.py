"""Source and structural validation for insight URLs.

Two independent checks gate every insight link:

1. SOURCE: the hostname (lowercased, ``www.`` stripped) must equal, or be a
   dot-suffix of, a whitelisted domain.
2. STRUCTURE: the path must look like a specific article, not a homepage,
   category/tag/author/archive listing, search results or data dashboard.
   Citation URLs (``trusted``) came from the provider's own retrieval step
   and only get the homepage and generic-page checks; links asserted inside
   the completion text get the full rule set.

All functions here return booleans and never raise.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, NamedTuple
from urllib.parse import urlsplit

from market_digest.models.insight import GENERIC_MARKET_PATHS, REPUTABLE_NEWS_DOMAINS

logger = logging.getLogger(__name__)

# Path fragments that mark listing or navigation pages
NON_ARTICLE_FRAGMENTS: tuple[str, ...] = (
    "/category/",
    "/tag/",
    "/author/",
    "/archive/",
    "/dashboard/",
)

SEARCH_FRAGMENT = "/search?"


class _UrlParts(NamedTuple):
    hostname: str
    path: str
    query: str

    @property
    def segments(self) -> list[str]:
        return [segment for segment in self.path.split("/") if segment]

    @property
    def path_with_query(self) -> str:
        return f"{self.path}?{self.query}" if self.query else self.path


def normalize_hostname(url: Any) -> str | None:
    """Return the comparable hostname of a URL, or None if unparsable.

    A missing scheme is treated as ``https://``.
    """
    if not isinstance(url, str) or not url.strip():
        return None

    candidate = url.strip()
    if not candidate.lower().startswith(("http://", "https://")):
        candidate = f"https://{candidate}"

    try:
        hostname = urlsplit(candidate).hostname
    except ValueError:
        return None

    if not hostname:
        return None

    hostname = hostname.lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname


def is_reputable_source(url: Any, domains: Iterable[str] = REPUTABLE_NEWS_DOMAINS) -> bool:
    """Check whether a URL's hostname belongs to the domain whitelist."""
    hostname = normalize_hostname(url)
    if hostname is None:
        logger.debug("Unparsable URL rejected by source check", extra={"url": url})
        return False

    for domain in domains:
        if hostname == domain or hostname.endswith(f".{domain}"):
            return True

    logger.debug(
        "URL %s (hostname: %s) did not match any reputable domain",
        url,
        hostname,
    )
    return False


def _split_article_url(url: Any) -> _UrlParts | None:
    """Parse an absolute http(s) URL into lowercase path parts."""
    if not isinstance(url, str) or not url.strip():
        return None
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not hostname:
        return None
    return _UrlParts(hostname=hostname.lower(), path=parts.path.lower(), query=parts.query.lower())


def _is_root(parts: _UrlParts) -> bool:
    return parts.path.rstrip("/") == ""


def _is_generic_page(parts: _UrlParts, generic_paths: Iterable[str]) -> bool:
    path = parts.path.rstrip("/")
    return any(path == generic.rstrip("/").lower() for generic in generic_paths)


def looks_like_article(
    url: Any,
    trusted: bool,
    generic_paths: Iterable[str] = GENERIC_MARKET_PATHS,
) -> bool:
    """Check whether a URL points at a specific article page.

    Args:
        url: Absolute http(s) URL.
        trusted: True when the URL came from the citation list.
        generic_paths: Known market-overview pages to reject.

    Returns:
        True if the path looks like an article.
    """
    parts = _split_article_url(url)
    if parts is None:
        logger.debug("Invalid URL format: %s", url)
        return False

    if _is_root(parts) or _is_generic_page(parts, generic_paths):
        return False

    if trusted:
        return True

    if any(fragment in parts.path for fragment in NON_ARTICLE_FRAGMENTS):
        return False
    if SEARCH_FRAGMENT in parts.path_with_query:
        return False

    return len(parts.segments) >= 1


def looks_like_article_relaxed(
    url: Any,
    generic_paths: Iterable[str] = GENERIC_MARKET_PATHS,
) -> bool:
    """Structural check used when re-pairing insights with citations.

    Rejects listing pages like the strict check does, plus provider data
    pages (shallow ``/markets/``, ``/market/`` and ``/data/`` paths and the
    Trading Economics country overview), but has no trust distinction.
    """
    parts = _split_article_url(url)
    if parts is None:
        return False

    if _is_root(parts) or _is_generic_page(parts, generic_paths):
        return False
    if any(fragment in parts.path for fragment in NON_ARTICLE_FRAGMENTS):
        return False
    if SEARCH_FRAGMENT in parts.path_with_query:
        return False

    segments = parts.segments
    if ("/markets/" in parts.path or "/market/" in parts.path) and len(segments) < 2:
        return False
    if "/data/" in parts.path and len(segments) < 3:
        return False
    if "tradingeconomics.com" in parts.hostname and len(segments) < 2 and segments[0] == "united-states":
        return False

    return True
