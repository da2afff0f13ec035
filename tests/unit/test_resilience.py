"""Tests for resilience helpers."""

import asyncio

import httpx
import pytest

from ai_orchestrator.core.exceptions import ProviderError
from ai_orchestrator.core.resilience import (
    MaxTimeoutExceeded,
    RateLimitError,
    TransientError,
    classify_http_error,
    classify_httpx_error,
    create_retrying,
    is_transient,
    with_timeout,
    wrap_provider_errors,
)


class TestClassification:
    """Tests for error classification."""

    @pytest.mark.parametrize(
        "status, expected",
        [
            (429, RateLimitError),
            (500, TransientError),
            (503, TransientError),
            (408, TransientError),
            (400, ProviderError),
            (401, ProviderError),
            (404, ProviderError),
        ],
    )
    def test_classify_http_error(self, status, expected):
        assert isinstance(classify_http_error(status, "openai"), expected)

    def test_transient_taxonomy(self):
        assert is_transient(TransientError("x"))
        assert is_transient(RateLimitError("x"))
        assert is_transient(MaxTimeoutExceeded("x"))
        assert is_transient(ConnectionError("x"))
        assert not is_transient(ProviderError("bad request"))
        assert not is_transient(ValueError("x"))

    def test_classify_httpx_status_error(self):
        request = httpx.Request("POST", "http://localhost/api/chat")
        response = httpx.Response(502, request=request)
        error = httpx.HTTPStatusError("bad gateway", request=request, response=response)

        assert isinstance(classify_httpx_error(error, "ollama"), TransientError)

    def test_classify_httpx_connect_error(self):
        error = httpx.ConnectError("refused")

        assert isinstance(classify_httpx_error(error), TransientError)
        assert classify_httpx_error(ValueError("other")) is None


class TestWithTimeout:
    """Tests for timeouts."""

    @pytest.mark.asyncio
    async def test_returns_result_in_time(self):
        async def quick():
            return 42

        assert await with_timeout(quick(), 1.0) == 42

    @pytest.mark.asyncio
    async def test_raises_max_timeout_exceeded(self):
        with pytest.raises(MaxTimeoutExceeded):
            await with_timeout(asyncio.sleep(1.0), 0.01)

    @pytest.mark.asyncio
    async def test_non_positive_timeout_disables_limit(self):
        async def quick():
            return "done"

        assert await with_timeout(quick(), 0) == "done"
        assert await with_timeout(quick(), None) == "done"


class TestRetrying:
    """Tests for the retry controller."""

    @pytest.mark.asyncio
    async def test_retries_transient_until_success(self):
        attempts = []

        async for attempt in create_retrying(max_retries=2, backoff_base=0):
            with attempt:
                attempts.append(1)
                if len(attempts) < 3:
                    raise TransientError("try again")

        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_reraises_last_error_when_exhausted(self):
        attempts = []

        with pytest.raises(TransientError, match="still down"):
            async for attempt in create_retrying(max_retries=1, backoff_base=0):
                with attempt:
                    attempts.append(1)
                    raise TransientError("still down")

        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_permanent_error_not_retried(self):
        attempts = []

        with pytest.raises(ProviderError):
            async for attempt in create_retrying(max_retries=3, backoff_base=0):
                with attempt:
                    attempts.append(1)
                    raise ProviderError("forbidden")

        assert len(attempts) == 1


class TestWrapProviderErrors:
    """Tests for SDK error translation."""

    @staticmethod
    def classify(error: Exception) -> Exception | None:
        if isinstance(error, KeyError):
            return TransientError("translated")
        return None

    @pytest.mark.asyncio
    async def test_translates_coroutine_errors(self):
        @wrap_provider_errors(self.classify)
        async def call():
            raise KeyError("sdk")

        with pytest.raises(TransientError) as exc_info:
            await call()
        assert isinstance(exc_info.value.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_passes_through_unknown_errors(self):
        @wrap_provider_errors(self.classify)
        async def call():
            raise ValueError("untouched")

        with pytest.raises(ValueError, match="untouched"):
            await call()

    @pytest.mark.asyncio
    async def test_translates_async_generator_errors(self):
        @wrap_provider_errors(self.classify)
        async def stream():
            yield "a"
            raise KeyError("sdk")

        received = []
        with pytest.raises(TransientError):
            async for item in stream():
                received.append(item)
        assert received == ["a"]
