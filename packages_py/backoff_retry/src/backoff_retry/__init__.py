"""
Retry wrapper for async operations with exponential backoff and attempt/retry events.
"""
from .types import (
    RetryConfig,
    ResolvedRetryConfig,
    RetryPredicate,
    RetryFunction,
    AttemptEvent,
    RetryEvent,
    RetryEventListener,
    RetryOutcome,
    OutcomeStatus,
    EVENT_NAMES,
)
from .errors import InvalidConfigurationError
from .config import (
    DEFAULT_RETRY_CONFIG,
    always_retry,
    compute_wait,
    resolve_config,
    validate_config,
    snapshot_config,
    async_sleep,
)
from .notifier import EventHub
from .executor import (
    RetryExecutor,
    Retry,
    retry,
    create_retry_wrapper,
)


__all__ = [
    # Types
    "RetryConfig",
    "ResolvedRetryConfig",
    "RetryPredicate",
    "RetryFunction",
    "AttemptEvent",
    "RetryEvent",
    "RetryEventListener",
    "RetryOutcome",
    "OutcomeStatus",
    "EVENT_NAMES",
    # Errors
    "InvalidConfigurationError",
    # Config
    "DEFAULT_RETRY_CONFIG",
    "always_retry",
    "compute_wait",
    "resolve_config",
    "validate_config",
    "snapshot_config",
    "async_sleep",
    # Notification
    "EventHub",
    # Executor
    "RetryExecutor",
    "Retry",
    "retry",
    "create_retry_wrapper",
]


__version__ = "1.0.0"
