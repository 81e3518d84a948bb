"""Perplexity provider implementation.

Perplexity exposes an OpenAI-compatible Chat Completions endpoint, so the
official ``openai`` SDK is pointed at its base URL. Search-backed models
attach ``citations`` / ``search_results`` to the response body; these are
not part of the SDK's schema but survive in ``model_dump()``, which is kept
as ``LLMResponse.raw``.
"""

import os
import time
from typing import Any

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from ..errors import (
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
from ..models import LLMRequest, LLMResponse, Usage
from .base import LLMProvider

DEFAULT_BASE_URL = "https://api.perplexity.ai"


class PerplexityProvider(LLMProvider):
    """Perplexity Chat Completions API provider.

    Supports:
    - Structured outputs via response_format.json_schema
    - Web-search citations returned alongside the completion
    """

    SUPPORTED_FEATURES = {
        "json_schema",
        "citations",
        "system_message",
    }

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        default_model: str = "sonar-pro",
    ):
        """Initialize Perplexity provider.

        Args:
            api_key: Perplexity API key. Defaults to PERPLEXITY_API_KEY env var.
            base_url: API base URL. Defaults to PERPLEXITY_BASE_URL env var.
            timeout: Request timeout in seconds. None keeps the SDK default.
            default_model: Model used when the request leaves it blank.
        """
        self._api_key = api_key or os.environ.get("PERPLEXITY_API_KEY")
        self._base_url = base_url or os.environ.get("PERPLEXITY_BASE_URL", DEFAULT_BASE_URL)
        self._timeout = timeout
        self._default_model = default_model
        self._client: AsyncOpenAI | None = None

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "perplexity"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-initialized SDK client."""
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError(
                    "Perplexity API key not configured. Set PERPLEXITY_API_KEY environment variable.",
                    provider=self.name,
                )
            options: dict[str, Any] = {"api_key": self._api_key, "base_url": self._base_url}
            if self._timeout is not None:
                options["timeout"] = self._timeout
            self._client = AsyncOpenAI(**options)
        return self._client

    def supports(self, feature: str) -> bool:
        """Check if feature is supported."""
        return feature in self.SUPPORTED_FEATURES

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Send a completion request to Perplexity.

        Raises:
            Various LLMError subclasses based on the error type.
        """
        start_time = time.perf_counter()
        payload = self._build_request(request)

        try:
            response = await self.client.chat.completions.create(**payload)
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            return self._parse_response(response, latency_ms)

        except APITimeoutError as e:
            raise TimeoutError(
                f"Perplexity request timed out after {self._timeout}s"
                if self._timeout is not None
                else "Perplexity request timed out",
                provider=self.name,
            ) from e

        except APIConnectionError as e:
            raise ProviderError(
                f"Failed to connect to Perplexity: {e}",
                provider=self.name,
            ) from e

        except APIStatusError as e:
            self._handle_api_error(e)

    def _build_request(self, request: LLMRequest) -> dict[str, Any]:
        """Convert LLMRequest to the chat completions payload."""
        payload: dict[str, Any] = {
            "model": request.model or self._default_model,
            "messages": [
                {"role": msg.role, "content": msg.content} for msg in request.messages
            ],
            "temperature": request.temperature,
        }

        if request.max_tokens:
            payload["max_tokens"] = request.max_tokens

        if request.response_format and request.response_format.type == "json_schema":
            payload["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": request.response_format.name,
                    "schema": request.response_format.json_schema,
                },
            }

        return payload

    def _parse_response(self, response: Any, latency_ms: int) -> LLMResponse:
        """Convert the SDK response to LLMResponse."""
        raw = response.model_dump() if hasattr(response, "model_dump") else None

        text = None
        finish_reason = "stop"
        if response.choices:
            choice = response.choices[0]
            text = choice.message.content
            finish_reason = choice.finish_reason or "stop"

        usage = Usage()
        if response.usage is not None:
            usage = Usage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )

        return LLMResponse(
            text=text,
            finish_reason=finish_reason,
            usage=usage,
            model=response.model,
            provider=self.name,
            latency_ms=latency_ms,
            request_id=response.id,
            raw=raw,
        )

    def _handle_api_error(self, error: APIStatusError) -> None:
        """Convert SDK status errors to LLMError types."""
        status_code = error.status_code
        message = str(error.message) if hasattr(error, "message") else str(error)
        request_id = getattr(error, "request_id", None)

        if status_code in (401, 403):
            raise AuthenticationError(
                f"Perplexity rejected the API key: {message}",
                provider=self.name,
                request_id=request_id,
                status_code=status_code,
            ) from error

        if status_code == 404:
            raise ModelNotFoundError(
                f"Model not found: {message}",
                provider=self.name,
                request_id=request_id,
                status_code=status_code,
            ) from error

        if status_code == 429:
            retry_after = None
            if getattr(error, "response", None) is not None:
                retry_after_str = error.response.headers.get("retry-after")
                if retry_after_str:
                    try:
                        retry_after = float(retry_after_str)
                    except ValueError:
                        pass

            raise RateLimitError(
                f"Perplexity rate limit exceeded: {message}",
                retry_after=retry_after,
                provider=self.name,
                request_id=request_id,
                status_code=status_code,
            ) from error

        if status_code == 400:
            if "content_filter" in message.lower() or "safety" in message.lower():
                raise ContentFilterError(
                    f"Content blocked by Perplexity safety filters: {message}",
                    provider=self.name,
                    request_id=request_id,
                    status_code=status_code,
                ) from error

            raise InvalidRequestError(
                f"Invalid request to Perplexity: {message}",
                provider=self.name,
                request_id=request_id,
                status_code=status_code,
            ) from error

        if status_code >= 500:
            raise ProviderError(
                f"Perplexity server error ({status_code}): {message}",
                provider=self.name,
                request_id=request_id,
                status_code=status_code,
            ) from error

        raise LLMError(
            f"Perplexity error ({status_code}): {message}",
            provider=self.name,
            request_id=request_id,
            status_code=status_code,
        ) from error
