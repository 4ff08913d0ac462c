"""
Retry transport and client factory for httpx.
"""
from backoff_retry import (
    RetryConfig,
    AttemptEvent,
    RetryEvent,
)
from .transport import (
    RetryTransport,
    RetryableStatusError,
    is_retryable_transport_error,
    IDEMPOTENT_METHODS,
    RETRYABLE_STATUS_CODES,
)
from .presets import (
    DEFAULT_PRESET,
    RETRY_PRESETS,
)
from .factory import create_retry_client


__all__ = [
    # Re-exported types from base package
    "RetryConfig",
    "AttemptEvent",
    "RetryEvent",
    # Transport wrapper
    "RetryTransport",
    "RetryableStatusError",
    "is_retryable_transport_error",
    "IDEMPOTENT_METHODS",
    "RETRYABLE_STATUS_CODES",
    # Factory functions
    "create_retry_client",
    # Presets
    "DEFAULT_PRESET",
    "RETRY_PRESETS",
]

__version__ = "1.0.0"
