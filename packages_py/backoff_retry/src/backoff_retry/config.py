"""
Configuration utilities for backoff_retry
"""
import asyncio
import dataclasses
import math
from numbers import Real
from typing import Any, Mapping, Optional, Union

from .errors import InvalidConfigurationError
from .types import ResolvedRetryConfig, RetryConfig


def always_retry(error: Exception) -> bool:
    """Default predicate: every error is retryable."""
    return True


# Default retry configuration.
#
# Retries every second for a minute. The first attempt is not a retry, so the
# operation is invoked 61 times in the worst case.
DEFAULT_RETRY_CONFIG = ResolvedRetryConfig(
    retries=60,
    factor=1,
    min_interval_ms=1000,
    max_interval_ms=math.inf,
    is_retryable_error=always_retry,
)

_CONFIG_FIELDS = frozenset(f.name for f in dataclasses.fields(RetryConfig))


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _coalesce(value: Any, default: Any) -> Any:
    return default if value is None else value


def _to_partial(
    config: Union[RetryConfig, ResolvedRetryConfig, Mapping[str, Any], None],
) -> RetryConfig:
    if config is None:
        return RetryConfig()
    if isinstance(config, RetryConfig):
        return config
    if isinstance(config, ResolvedRetryConfig):
        return RetryConfig(
            retries=config.retries,
            factor=config.factor,
            min_interval_ms=config.min_interval_ms,
            max_interval_ms=config.max_interval_ms,
            is_retryable_error=config.is_retryable_error,
        )
    if isinstance(config, Mapping):
        unknown = set(config) - _CONFIG_FIELDS
        if unknown:
            raise InvalidConfigurationError(
                f"Unknown retry config field(s): {', '.join(sorted(unknown))}"
            )
        return RetryConfig(**config)
    raise InvalidConfigurationError(
        f"Retry config must be a RetryConfig or a mapping, got {type(config).__name__}"
    )


def _check_interval(name: str, value: Any, allow_infinity: bool) -> None:
    if not _is_number(value) or math.isnan(value):
        raise InvalidConfigurationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise InvalidConfigurationError(f"{name} must not be negative, got {value!r}")
    if not allow_infinity and math.isinf(value):
        raise InvalidConfigurationError(f"{name} must be finite, got {value!r}")


def _check_factor(value: Any) -> None:
    if not _is_number(value) or not math.isfinite(value) or value < 0:
        raise InvalidConfigurationError(
            f"factor must be a finite non-negative number, got {value!r}"
        )


def validate_config(config: ResolvedRetryConfig) -> ResolvedRetryConfig:
    """
    Check a resolved configuration.

    Args:
        config: Configuration to check

    Returns:
        The same configuration

    Raises:
        InvalidConfigurationError: If any field is out of range
    """
    retries = config.retries
    if not isinstance(retries, int) or isinstance(retries, bool) or retries < 0:
        raise InvalidConfigurationError(
            f"retries must be a non-negative integer, got {retries!r}"
        )
    _check_factor(config.factor)
    _check_interval("min_interval_ms", config.min_interval_ms, allow_infinity=False)
    _check_interval("max_interval_ms", config.max_interval_ms, allow_infinity=True)
    if config.max_interval_ms < config.min_interval_ms:
        raise InvalidConfigurationError(
            f"max_interval_ms ({config.max_interval_ms!r}) must not be lower than "
            f"min_interval_ms ({config.min_interval_ms!r})"
        )
    if not callable(config.is_retryable_error):
        raise InvalidConfigurationError("is_retryable_error must be callable")
    return config


def resolve_config(
    config: Union[RetryConfig, ResolvedRetryConfig, Mapping[str, Any], None] = None,
) -> ResolvedRetryConfig:
    """
    Merge a partial configuration with the defaults, field by field.

    A field set to ``None`` is treated exactly like an omitted field.

    Args:
        config: User-provided configuration, as a RetryConfig, a resolved
            configuration or a mapping

    Returns:
        Complete, validated configuration

    Raises:
        InvalidConfigurationError: If the merged configuration is invalid
    """
    partial = _to_partial(config)
    defaults = DEFAULT_RETRY_CONFIG
    resolved = ResolvedRetryConfig(
        retries=_coalesce(partial.retries, defaults.retries),
        factor=_coalesce(partial.factor, defaults.factor),
        min_interval_ms=_coalesce(partial.min_interval_ms, defaults.min_interval_ms),
        max_interval_ms=_coalesce(partial.max_interval_ms, defaults.max_interval_ms),
        is_retryable_error=_coalesce(partial.is_retryable_error, defaults.is_retryable_error),
    )
    return validate_config(resolved)


def snapshot_config(config: ResolvedRetryConfig) -> ResolvedRetryConfig:
    """Return a copy of ``config`` to hand out with an event."""
    return dataclasses.replace(config)


def compute_wait(
    retry_number: int,
    factor: float,
    min_interval_ms: float,
    max_interval_ms: float,
) -> float:
    """
    Calculate the wait before a retry.

    wait = min(factor ^ (retry_number - 1) * min_interval_ms, max_interval_ms)

    ``retry_number`` is 1 for the wait preceding the second attempt. With
    ``factor=0`` the first retry waits ``min_interval_ms`` (0^0 is 1) and every
    later retry waits 0.

    Args:
        retry_number: 1-based retry number
        factor: Exponential backoff factor
        min_interval_ms: Wait before the first retry (milliseconds)
        max_interval_ms: Upper bound on the wait (milliseconds)

    Returns:
        Wait in milliseconds

    Raises:
        InvalidConfigurationError: If any argument is out of range
    """
    if not isinstance(retry_number, int) or isinstance(retry_number, bool) or retry_number < 1:
        raise InvalidConfigurationError(
            f"retry_number must be a positive integer, got {retry_number!r}"
        )
    _check_factor(factor)
    _check_interval("min_interval_ms", min_interval_ms, allow_infinity=False)
    _check_interval("max_interval_ms", max_interval_ms, allow_infinity=True)

    if min_interval_ms == 0:
        return 0.0

    try:
        wait = float(factor ** (retry_number - 1) * min_interval_ms)
    except OverflowError:
        wait = math.inf

    return min(wait, float(max_interval_ms))


async def async_sleep(milliseconds: float) -> None:
    """
    Sleep for a specified duration.

    Args:
        milliseconds: Duration in milliseconds
    """
    await asyncio.sleep(milliseconds / 1000)


def describe_config(config: Optional[ResolvedRetryConfig]) -> str:
    """Short human-readable summary used in log messages."""
    if config is None:
        return "<unresolved>"
    return (
        f"retries={config.retries} factor={config.factor} "
        f"min_interval_ms={config.min_interval_ms} max_interval_ms={config.max_interval_ms}"
    )
