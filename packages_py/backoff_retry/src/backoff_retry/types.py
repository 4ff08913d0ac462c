"""
Type definitions for backoff_retry
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union


T = TypeVar("T")


# Predicate deciding whether a failed attempt may be retried
RetryPredicate = Callable[[Exception], bool]

# Operation wrapped by the executor. It may return a value or an awaitable.
RetryFunction = Callable[[], Union[Awaitable[T], T]]


@dataclass
class RetryConfig:
    """
    Partial retry configuration.

    Every field is optional. ``None`` means "use the default", whether the
    field was omitted or passed explicitly.
    """

    retries: Optional[int] = None
    """Number of retries after the first attempt. Default: 60"""

    factor: Optional[float] = None
    """Exponential backoff factor. Default: 1 (constant wait)"""

    min_interval_ms: Optional[float] = None
    """Wait before the first retry (milliseconds). Default: 1000"""

    max_interval_ms: Optional[float] = None
    """Upper bound on any wait (milliseconds). Default: infinity"""

    is_retryable_error: Optional[RetryPredicate] = None
    """Predicate deciding if an error warrants a retry. Default: always True"""


@dataclass(frozen=True)
class ResolvedRetryConfig:
    """Retry configuration with every field resolved against the defaults."""

    retries: int
    factor: float
    min_interval_ms: float
    max_interval_ms: float
    is_retryable_error: RetryPredicate


# Event names accepted by the notification hub
EVENT_NAMES: tuple[str, ...] = ("attempt", "retry")


@dataclass(frozen=True)
class AttemptEvent:
    """Emitted before every invocation of the operation, including the first."""

    attempt: int
    """1-based attempt number"""

    config: ResolvedRetryConfig
    """Copy of the configuration the execution runs with"""


@dataclass(frozen=True)
class RetryEvent:
    """Emitted after a retryable failure, before the backoff wait."""

    retry: int
    """1-based retry number (the number of failures so far)"""

    config: ResolvedRetryConfig
    """Copy of the configuration the execution runs with"""


# Event listener type
RetryEventListener = Callable[[Any], Any]


class OutcomeStatus(str, Enum):
    """Terminal state of an execution"""
    SUCCEEDED = "succeeded"
    FAILED_EXHAUSTED = "failed_exhausted"
    FAILED_NON_RETRYABLE = "failed_non_retryable"


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Terminal result of a retried operation"""

    status: OutcomeStatus
    """How the execution ended"""

    attempts: int
    """Number of times the operation was invoked"""

    value: Optional[T] = None
    """The value produced on success"""

    error: Optional[Exception] = None
    """The last error observed on failure, unchanged"""

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    @property
    def retries(self) -> int:
        """Number of retries performed (attempts beyond the first)."""
        return max(self.attempts - 1, 0)
