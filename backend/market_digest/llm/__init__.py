"""LLM provider abstraction layer.

This module provides a vendor-neutral interface for the upstream completion
service (Perplexity) used to draft the daily market insights.
"""

from .client import LLMClient
from .errors import (
    AuthenticationError,
    ConfigurationError,
    ContentFilterError,
    InvalidRequestError,
    LLMError,
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from .models import ChatMessage, LLMRequest, LLMResponse, ResponseFormat, Usage
from .schemas import MARKET_INSIGHTS_SCHEMA, MARKET_INSIGHTS_SCHEMA_NAME

__all__ = [
    "LLMClient",
    "LLMRequest",
    "LLMResponse",
    "ChatMessage",
    "ResponseFormat",
    "Usage",
    "LLMError",
    "ConfigurationError",
    "AuthenticationError",
    "RateLimitError",
    "TimeoutError",
    "InvalidRequestError",
    "ContentFilterError",
    "ModelNotFoundError",
    "ProviderError",
    "MARKET_INSIGHTS_SCHEMA",
    "MARKET_INSIGHTS_SCHEMA_NAME",
]
