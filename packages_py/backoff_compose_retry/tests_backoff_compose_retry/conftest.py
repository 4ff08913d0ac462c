"""
Shared fixtures for backoff_compose_retry tests.
"""
from unittest.mock import AsyncMock, patch

import httpx
import pytest


@pytest.fixture
def sleep_mock():
    """Replace the backoff sleep so retries happen instantly."""
    with patch("backoff_retry.executor.async_sleep", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def inner_transport():
    """Mock inner transport."""
    return AsyncMock(spec=httpx.AsyncHTTPTransport)
