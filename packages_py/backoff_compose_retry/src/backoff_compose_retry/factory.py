"""
Factory functions for creating retry-enabled clients
"""
from typing import Any, Mapping, Optional, Union

import httpx

from backoff_retry import RetryConfig, ResolvedRetryConfig
from .presets import DEFAULT_PRESET, RETRY_PRESETS
from .transport import RetryTransport


def create_retry_client(
    *,
    preset: str = DEFAULT_PRESET,
    config: Union[RetryConfig, ResolvedRetryConfig, Mapping[str, Any], None] = None,
    base_url: Optional[str] = None,
    proxy: Optional[str] = None,
    timeout: float = 5.0,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """
    Create a retry-enabled async HTTP client.

    Args:
        preset: Name of a RETRY_PRESETS entry. Default: "default"
        config: Retry configuration; replaces the preset when given
        base_url: Base URL for requests
        proxy: Proxy URL to use
        timeout: Request timeout in seconds. Default: 5.0
        **client_kwargs: Additional arguments for httpx.AsyncClient

    Returns:
        Retry-enabled async HTTP client

    Raises:
        ValueError: If the preset name is unknown

    Example:
        client = create_retry_client(preset="quick", base_url="https://api.example.com")
    """
    if config is None:
        if preset not in RETRY_PRESETS:
            raise ValueError(
                f"Unknown retry preset {preset!r}; expected one of {sorted(RETRY_PRESETS)}"
            )
        config = RETRY_PRESETS[preset]

    transport = RetryTransport(httpx.AsyncHTTPTransport(proxy=proxy), config=config)

    return httpx.AsyncClient(
        transport=transport,
        base_url=base_url or "",
        timeout=timeout,
        **client_kwargs,
    )
