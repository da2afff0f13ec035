"""Centralized resilience patterns for provider calls.

This module provides the building blocks the router composes around every
provider call:
- Transient vs. permanent error classification
- Timeouts that surface as a transient failure
- Retry with exponential backoff (tenacity)
- Provider error translation for coroutines and async generators

Usage:
    from ai_orchestrator.core.resilience import create_retrying, with_timeout

    async for attempt in create_retrying(max_retries=2, backoff_base=0.5):
        with attempt:
            result = await with_timeout(provider.complete(messages, options), 30.0)
"""

import asyncio
import inspect
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ai_orchestrator.core.exceptions import ProviderError

__all__ = [
    # Exceptions
    "MaxTimeoutExceeded",
    "TransientError",
    "RateLimitError",
    # Classification
    "TRANSIENT_ERRORS",
    "is_transient",
    "classify_http_error",
    "classify_httpx_error",
    # Patterns
    "create_retrying",
    "with_timeout",
    "wrap_provider_errors",
    "wrap_httpx_errors",
]

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class TransientError(Exception):
    """Error that is likely to succeed on retry (network issues, 5xx)."""
    pass


class RateLimitError(TransientError):
    """Error indicating rate limiting (HTTP 429, throttling)."""
    pass


class MaxTimeoutExceeded(TransientError):
    """A provider call ran past its time budget."""
    pass


# =============================================================================
# CLASSIFICATION
# =============================================================================


TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    TransientError,
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
)


def is_transient(error: BaseException) -> bool:
    """Whether a failure should trigger retry or fallback."""
    return isinstance(error, TRANSIENT_ERRORS)


def classify_http_error(status_code: int, provider: str | None = None) -> Exception:
    """
    Classify HTTP status codes into appropriate exceptions.

    Args:
        status_code: HTTP status code
        provider: Provider name for error context

    Returns:
        RateLimitError for 429, TransientError for 5xx (and 408),
        ProviderError for everything else
    """
    label = f"{provider} " if provider else ""
    if status_code == 429:
        return RateLimitError(f"{label}rate limited (HTTP {status_code})")
    if status_code >= 500 or status_code == 408:
        return TransientError(f"{label}server error (HTTP {status_code})")
    return ProviderError(f"{label}client error (HTTP {status_code})", provider=provider)


def classify_httpx_error(error: Exception, provider: str | None = None) -> Exception | None:
    """Translate httpx exceptions."""
    if isinstance(error, httpx.TimeoutException):
        return TransientError(f"Request timeout: {error}")
    if isinstance(error, httpx.TransportError):
        return TransientError(f"Connection error: {error}")
    if isinstance(error, httpx.HTTPStatusError):
        return classify_http_error(error.response.status_code, provider)
    return None


# =============================================================================
# PATTERNS
# =============================================================================


async def with_timeout(awaitable: Awaitable[T], seconds: float | None) -> T:
    """
    Bound an awaitable by a timeout.

    Expiry cancels the in-flight call and raises MaxTimeoutExceeded so the
    router counts it as a transient failure.
    """
    if seconds is None or seconds <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        raise MaxTimeoutExceeded(f"Operation timed out after {seconds}s")


def create_retrying(
    max_retries: int,
    backoff_base: float = 0.5,
    backoff_max: float = 8.0,
) -> AsyncRetrying:
    """
    Build a retry controller: the first attempt plus up to `max_retries`
    retries, waiting base * 2^n seconds (capped) between attempts.

    The last error is re-raised unchanged once attempts are exhausted.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(max_retries, 0) + 1),
        wait=wait_exponential(multiplier=backoff_base, max=backoff_max),
        retry=retry_if_exception(is_transient),
        reraise=True,
    )


def wrap_provider_errors(
    classify: Callable[[Exception], Exception | None],
) -> Callable[[F], F]:
    """
    Decorator factory converting SDK exceptions to resilience-aware ones.

    Works for both coroutine functions and async generator functions.
    `classify` returns the translated exception, or None to re-raise the
    original unchanged.
    """

    def decorator(func: F) -> F:
        if inspect.isasyncgenfunction(func):

            @wraps(func)
            async def gen_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    async for item in func(*args, **kwargs):
                        yield item
                except Exception as e:
                    translated = classify(e)
                    if translated is None or translated is e:
                        raise
                    raise translated from e

            return gen_wrapper  # type: ignore

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                translated = classify(e)
                if translated is None or translated is e:
                    raise
                raise translated from e

        return wrapper  # type: ignore

    return decorator


def wrap_httpx_errors(provider: str | None = None) -> Callable[[F], F]:
    """Decorator converting httpx exceptions for an HTTP-based provider."""
    return wrap_provider_errors(lambda e: classify_httpx_error(e, provider))
