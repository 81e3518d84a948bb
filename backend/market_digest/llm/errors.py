"""Errors raised by the upstream completion layer.

Each error carries the provider name, the provider's request id and the
caller's correlation id so a failed digest run can be traced in the logs.
``retryable`` decides whether LLMClient may try again.
"""


class LLMError(Exception):
    """Base exception for upstream completion failures."""

    retryable = False

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        request_id: str | None = None,
        correlation_id: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.request_id = request_id
        self.correlation_id = correlation_id
        self.status_code = status_code

    def __str__(self) -> str:
        context = [
            f"{key}={value}"
            for key, value in (("provider", self.provider), ("request_id", self.request_id))
            if value
        ]
        return " ".join([super().__str__(), *context])


class ConfigurationError(LLMError):
    """No API key (or endpoint) configured. Raised before any request."""


class AuthenticationError(LLMError):
    """401/403: the API key was rejected."""


class RateLimitError(LLMError):
    """429: too many requests. ``retry_after`` is in seconds when sent."""

    retryable = True

    def __init__(self, message: str, retry_after: float | None = None, **context):
        super().__init__(message, **context)
        self.retry_after = retry_after


class TimeoutError(LLMError):
    """No response within LLM_TIMEOUT_SECONDS."""

    retryable = True


class InvalidRequestError(LLMError):
    """400: payload rejected, e.g. an unsupported response_format."""


class ContentFilterError(LLMError):
    """400 from the provider's safety filter."""


class ProviderError(LLMError):
    """5xx or connection failure on the provider side."""

    retryable = True


class ModelNotFoundError(LLMError):
    """404: unknown model; check INSIGHTS_MODEL."""


_ALL_ERRORS = (
    ConfigurationError,
    AuthenticationError,
    RateLimitError,
    TimeoutError,
    InvalidRequestError,
    ContentFilterError,
    ProviderError,
    ModelNotFoundError,
)

# Errors LLMClient may retry
RETRYABLE_ERRORS = tuple(cls for cls in _ALL_ERRORS if cls.retryable)
