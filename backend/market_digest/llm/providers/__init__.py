"""LLM provider implementations.

This package contains provider-specific implementations of the LLMProvider interface.
"""

from .base import LLMProvider
from .perplexity import PerplexityProvider

__all__ = [
    "LLMProvider",
    "PerplexityProvider",
]
