"""Abstract base class for LLM providers.

Defines the interface the upstream completion provider implements.
"""

from abc import ABC, abstractmethod

from ..models import LLMRequest, LLMResponse


class LLMProvider(ABC):
    """Base interface for LLM providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier, e.g. 'perplexity'."""
        ...

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when the provider has the credential it needs."""
        ...

    @abstractmethod
    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Send a completion request and return the response.

        Args:
            request: Vendor-neutral LLM request.

        Returns:
            Vendor-neutral LLM response with the raw envelope attached.

        Raises:
            ConfigurationError: Missing API key.
            AuthenticationError: Invalid API key.
            RateLimitError: Rate limit exceeded (retryable).
            TimeoutError: Request timed out (retryable).
            InvalidRequestError: Malformed request (non-retryable).
            ProviderError: Provider-side or connection failure (retryable).
        """
        ...

    @abstractmethod
    def supports(self, feature: str) -> bool:
        """Check if provider supports a capability such as 'json_schema'."""
        ...
