"""High-level LLM client with optional retry.

Wraps the Perplexity provider with correlation ID tracking and, when
configured, retry with exponential backoff. The default is a single attempt:
the daily digest makes exactly one upstream request per run.
"""

import asyncio
import logging
import os
import random
import uuid

from .errors import RETRYABLE_ERRORS, ConfigurationError, LLMError
from .models import LLMRequest, LLMResponse
from .providers.base import LLMProvider
from .providers.perplexity import PerplexityProvider

logger = logging.getLogger(__name__)


class LLMClient:
    """High-level LLM client.

    Configuration (env vars):
    - LLM_TIMEOUT_SECONDS: Request timeout (default: the SDK transport default)
    - LLM_MAX_RETRIES: Retries after the first attempt (default: 0)
    - INSIGHTS_MODEL: Default model (default: "sonar-pro")
    """

    DEFAULT_MAX_RETRIES = 0
    DEFAULT_MODEL = "sonar-pro"
    DEFAULT_BASE_DELAY = 1.0  # Base delay for exponential backoff
    DEFAULT_MAX_DELAY = 30.0  # Maximum delay between retries

    def __init__(
        self,
        provider: LLMProvider | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        api_key: str | None = None,
    ):
        """Initialize LLM client.

        Args:
            provider: Provider instance. Defaults to a PerplexityProvider.
            timeout: Request timeout in seconds. Defaults to LLM_TIMEOUT_SECONDS env var,
                or the SDK transport default when that is unset.
            max_retries: Retries after the first attempt. Defaults to LLM_MAX_RETRIES env var.
            api_key: Perplexity API key. Defaults to PERPLEXITY_API_KEY env var.
        """
        if timeout is None and os.environ.get("LLM_TIMEOUT_SECONDS"):
            timeout = float(os.environ["LLM_TIMEOUT_SECONDS"])
        self._timeout = timeout
        self._max_retries = (
            max_retries
            if max_retries is not None
            else int(os.environ.get("LLM_MAX_RETRIES", self.DEFAULT_MAX_RETRIES))
        )
        self._provider = provider or PerplexityProvider(
            api_key=api_key,
            timeout=self._timeout,
            default_model=os.environ.get("INSIGHTS_MODEL", self.DEFAULT_MODEL),
        )

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    def is_available(self) -> bool:
        """Check if the provider has a credential configured."""
        return self._provider.is_configured

    @property
    def attempts(self) -> int:
        """Total upstream attempts per generate call."""
        return self._max_retries + 1

    async def generate(
        self,
        request: LLMRequest,
        correlation_id: str | None = None,
    ) -> LLMResponse:
        """Send one request, retrying transient failures if retries are enabled.

        Args:
            request: Completion request.
            correlation_id: Tags every log line and the raised error.

        Returns:
            The provider response.

        Raises:
            ConfigurationError: No API key; nothing is sent.
            LLMError: The last failure once attempts are used up, or the
                first non-retryable one.
        """
        correlation_id = correlation_id or str(uuid.uuid4())
        provider_name = self._provider.name
        log_context = {"correlation_id": correlation_id, "provider": provider_name}

        if not self.is_available():
            raise ConfigurationError(
                f"Provider {provider_name} is not configured",
                provider=provider_name,
                correlation_id=correlation_id,
            )

        if request.response_format and not self._provider.supports(request.response_format.type):
            logger.warning(
                "%s does not support %s output, sending without response_format",
                provider_name,
                request.response_format.type,
                extra=log_context,
            )
            request = request.model_copy(update={"response_format": None})

        attempt = 0
        while True:
            attempt += 1
            try:
                response = await self._provider.generate(request)
            except LLMError as e:
                e.correlation_id = correlation_id
                if not isinstance(e, RETRYABLE_ERRORS) or attempt >= self.attempts:
                    raise
                delay = self._calculate_backoff(attempt - 1, e)
                logger.warning(
                    "%s on attempt %d/%d, retrying in %.2fs",
                    type(e).__name__,
                    attempt,
                    self.attempts,
                    delay,
                    extra={**log_context, "attempt": attempt, "error": str(e)},
                )
                await asyncio.sleep(delay)
                continue

            logger.info(
                "Completion received from %s",
                provider_name,
                extra={
                    **log_context,
                    "attempt": attempt,
                    "model": response.model,
                    "latency_ms": response.latency_ms,
                    "total_tokens": response.usage.total_tokens,
                    "finish_reason": response.finish_reason,
                },
            )
            return response

    def _calculate_backoff(self, attempt: int, error: LLMError) -> float:
        """Seconds to wait before retry ``attempt`` (0-indexed).

        A rate limit's retry_after wins; otherwise the base delay doubles per
        attempt with +/-25% jitter. Both are capped at DEFAULT_MAX_DELAY.
        """
        retry_after = getattr(error, "retry_after", None)
        if retry_after:
            return min(retry_after, self.DEFAULT_MAX_DELAY)

        delay = self.DEFAULT_BASE_DELAY * 2 ** attempt
        delay *= random.uniform(0.75, 1.25)
        return min(delay, self.DEFAULT_MAX_DELAY)
