"""Unit tests for the LLM client.

Tests cover:
- Configuration from environment variables
- Single-attempt default and optional retry with backoff
- Error propagation for non-retryable errors
- Correlation ID tracking
"""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from market_digest.llm.client import LLMClient
from market_digest.llm.errors import (
    AuthenticationError,
    ConfigurationError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from market_digest.llm.models import ChatMessage, LLMRequest, LLMResponse, ResponseFormat, Usage


def create_mock_response(text: str = "Test response") -> LLMResponse:
    """Create a mock LLMResponse for testing."""
    return LLMResponse(
        text=text,
        finish_reason="stop",
        usage=Usage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        model="sonar-pro",
        provider="perplexity",
        latency_ms=100,
    )


def create_mock_provider(**generate_kwargs) -> MagicMock:
    """Create a configured provider double with an async generate."""
    provider = MagicMock()
    provider.name = "perplexity"
    provider.is_configured = True
    provider.generate = AsyncMock(**generate_kwargs)
    return provider


def make_request() -> LLMRequest:
    return LLMRequest(messages=[ChatMessage(role="user", content="Hi")], model="sonar-pro")


class TestLLMClientInit:
    """Tests for LLM client initialization."""

    def test_default_configuration(self):
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            client = LLMClient()
        assert client._timeout is None
        assert client._max_retries == 0
        assert client.provider.name == "perplexity"

    def test_custom_configuration(self):
        """Test custom configuration values."""
        client = LLMClient(timeout=120.0, max_retries=3)
        assert client._timeout == 120.0
        assert client._max_retries == 3

    def test_environment_configuration(self):
        """Test configuration from environment variables."""
        with patch.dict(os.environ, {
            "LLM_TIMEOUT_SECONDS": "90",
            "LLM_MAX_RETRIES": "2",
            "INSIGHTS_MODEL": "sonar",
        }):
            client = LLMClient()
            assert client._timeout == 90.0
            assert client._max_retries == 2
            assert client.provider._default_model == "sonar"

    def test_is_available_with_key(self):
        """Test availability follows the API key."""
        client = LLMClient(api_key="test-key")
        assert client.is_available() is True

    def test_is_unavailable_without_key(self):
        """Test missing key makes the client unavailable."""
        with patch.dict(os.environ, {}, clear=True):
            client = LLMClient()
            assert client.is_available() is False


class TestLLMClientGenerate:
    """Tests for generate and retry logic."""

    @pytest.mark.asyncio
    async def test_successful_first_attempt(self):
        """Test successful request on first attempt."""
        provider = create_mock_provider(return_value=create_mock_response())
        client = LLMClient(provider=provider)

        response = await client.generate(make_request())

        assert response.text == "Test response"
        assert provider.generate.call_count == 1

    @pytest.mark.asyncio
    async def test_missing_credential_raises_configuration_error(self):
        """Test no request is made when the provider is not configured."""
        provider = create_mock_provider(return_value=create_mock_response())
        provider.is_configured = False
        client = LLMClient(provider=provider)

        with pytest.raises(ConfigurationError) as exc_info:
            await client.generate(make_request(), correlation_id="corr-1")

        assert exc_info.value.correlation_id == "corr-1"
        provider.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsupported_response_format_dropped(self):
        """Test structured output is removed for providers without it."""
        provider = create_mock_provider(return_value=create_mock_response())
        provider.supports = MagicMock(return_value=False)
        client = LLMClient(provider=provider)
        request = make_request()
        request.response_format = ResponseFormat(type="json_schema", json_schema={"type": "object"})

        await client.generate(request)

        sent = provider.generate.call_args.args[0]
        assert sent.response_format is None
        provider.supports.assert_called_once_with("json_schema")

    @pytest.mark.asyncio
    async def test_no_retry_by_default(self):
        """Test a retryable error is raised after one attempt by default."""
        provider = create_mock_provider(side_effect=ProviderError("Server error"))
        client = LLMClient(provider=provider, max_retries=0)

        with pytest.raises(ProviderError):
            await client.generate(make_request())

        assert provider.generate.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_on_rate_limit(self):
        """Test retry on rate limit error when retries are enabled."""
        provider = create_mock_provider(
            side_effect=[RateLimitError("Rate limited", retry_after=0.1), create_mock_response()]
        )
        client = LLMClient(provider=provider, max_retries=2)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            response = await client.generate(make_request())

        assert response.text == "Test response"
        assert provider.generate.call_count == 2

    @pytest.mark.asyncio
    async def test_retry_on_timeout(self):
        """Test retry on timeout error."""
        provider = create_mock_provider(
            side_effect=[TimeoutError("Request timed out"), create_mock_response()]
        )
        client = LLMClient(provider=provider, max_retries=1)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            response = await client.generate(make_request())

        assert response.text == "Test response"

    @pytest.mark.asyncio
    async def test_max_retries_exhausted(self):
        """Test that error is raised after max retries exhausted."""
        provider = create_mock_provider(side_effect=RateLimitError("Rate limited"))
        client = LLMClient(provider=provider, max_retries=2)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(RateLimitError) as exc_info:
                await client.generate(make_request(), correlation_id="corr-2")

        assert provider.generate.call_count == 3
        assert exc_info.value.correlation_id == "corr-2"

    @pytest.mark.asyncio
    async def test_non_retryable_error_not_retried(self):
        """Test authentication errors propagate immediately."""
        provider = create_mock_provider(side_effect=AuthenticationError("Bad key"))
        client = LLMClient(provider=provider, max_retries=3)

        with pytest.raises(AuthenticationError):
            await client.generate(make_request())

        assert provider.generate.call_count == 1


class TestBackoffCalculation:
    """Tests for backoff delay calculation."""

    def test_respects_retry_after(self):
        """Test retry_after from rate limit is used when present."""
        client = LLMClient(api_key="test-key")
        delay = client._calculate_backoff(0, RateLimitError("limited", retry_after=5.0))
        assert delay == 5.0

    def test_retry_after_is_capped(self):
        """Test retry_after never exceeds the maximum delay."""
        client = LLMClient(api_key="test-key")
        delay = client._calculate_backoff(0, RateLimitError("limited", retry_after=500.0))
        assert delay == LLMClient.DEFAULT_MAX_DELAY

    def test_exponential_growth_with_jitter(self):
        """Test delay grows exponentially within the jitter band."""
        client = LLMClient(api_key="test-key")
        delay = client._calculate_backoff(2, ProviderError("boom"))
        assert 3.0 <= delay <= 5.0
