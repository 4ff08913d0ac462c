"""
Shared fixtures for backoff_retry tests.
"""
import logging
from unittest.mock import AsyncMock, patch

import pytest


# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@pytest.fixture
def sleep_mock():
    """Replace the backoff sleep so tests run instantly; records waits in ms."""
    with patch("backoff_retry.executor.async_sleep", new_callable=AsyncMock) as mock:
        yield mock
