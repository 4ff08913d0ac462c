"""
Retry transport wrapper for httpx
"""
import dataclasses
import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

import httpx

from backoff_retry import (
    AttemptEvent,
    ResolvedRetryConfig,
    RetryConfig,
    RetryEvent,
    resolve_config,
    retry,
)

from .presets import DEFAULT_PRESET, RETRY_PRESETS


logger = logging.getLogger(__name__)


# Idempotent HTTP methods that are safe to retry
IDEMPOTENT_METHODS = ("GET", "HEAD", "OPTIONS", "PUT", "DELETE", "TRACE")

# HTTP status codes that trigger a retry by default
RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


class RetryableStatusError(Exception):
    """Raised inside the retry loop when a response carries a retryable status."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


def is_retryable_transport_error(error: Exception) -> bool:
    """
    Default predicate for HTTP requests.

    Transport-level failures (connect errors, timeouts, protocol errors) and
    retryable status codes are retried; anything else fails immediately.
    """
    return isinstance(error, (httpx.TransportError, RetryableStatusError))


def _sets_predicate(config: Union[RetryConfig, ResolvedRetryConfig, Mapping[str, Any]]) -> bool:
    if isinstance(config, Mapping):
        return config.get("is_retryable_error") is not None
    return getattr(config, "is_retryable_error", None) is not None


class RetryTransport(httpx.AsyncBaseTransport):
    """
    Retry transport wrapper for httpx.

    Wraps another transport and sends every idempotent request through
    :func:`backoff_retry.retry`. When retries run out on a retryable status,
    the last response is returned instead of raising.

    Example:
        base = httpx.AsyncHTTPTransport()
        transport = RetryTransport(base, config=RetryConfig(retries=3, factor=2))
        client = httpx.AsyncClient(transport=transport)
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        *,
        config: Union[RetryConfig, ResolvedRetryConfig, Mapping[str, Any], None] = None,
        retry_on_status: Iterable[int] = RETRYABLE_STATUS_CODES,
        retry_methods: Iterable[str] = IDEMPOTENT_METHODS,
        on_attempt: Optional[Callable[[httpx.Request, AttemptEvent], None]] = None,
        on_retry: Optional[Callable[[httpx.Request, RetryEvent], None]] = None,
    ) -> None:
        """
        Create a new RetryTransport.

        Args:
            inner: The wrapped transport to delegate requests to
            config: Retry configuration. Default: RETRY_PRESETS["default"].
                Without a predicate, transport errors and retryable
                statuses are retried
            retry_on_status: Status codes that trigger a retry
            retry_methods: HTTP methods that are safe to retry
            on_attempt: Callback before each attempt
            on_retry: Callback before each backoff wait
        """
        self._inner = inner
        self._retry_on_status = frozenset(retry_on_status)
        self._retry_methods = frozenset(method.upper() for method in retry_methods)
        self._on_attempt = on_attempt
        self._on_retry = on_retry

        if config is None:
            config = RETRY_PRESETS[DEFAULT_PRESET]

        resolved = resolve_config(config)
        if not _sets_predicate(config):
            resolved = dataclasses.replace(
                resolved, is_retryable_error=is_retryable_transport_error
            )
        self._config = resolved

    @property
    def config(self) -> ResolvedRetryConfig:
        return self._config

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Handle an async HTTP request with retry logic"""

        # Check if this method should be retried
        if request.method.upper() not in self._retry_methods:
            return await self._inner.handle_async_request(request)

        # The response from the previous attempt; released before resending
        discarded: List[httpx.Response] = []

        async def send() -> httpx.Response:
            while discarded:
                await discarded.pop().aclose()

            response = await self._inner.handle_async_request(request)
            if response.status_code in self._retry_on_status:
                discarded.append(response)
                logger.debug(
                    f"RetryTransport.handle_async_request: {request.method} {request.url} "
                    f"returned {response.status_code}"
                )
                raise RetryableStatusError(response)
            return response

        handle = retry(send, self._config)
        if self._on_attempt is not None:
            on_attempt = self._on_attempt
            handle.on("attempt", lambda event: on_attempt(request, event))
        if self._on_retry is not None:
            on_retry = self._on_retry
            handle.on("retry", lambda event: on_retry(request, event))

        try:
            return await handle
        except RetryableStatusError as error:
            return error.response

    async def aclose(self) -> None:
        """Close the transport"""
        await self._inner.aclose()
