"""
Preset retry configurations for HTTP clients
"""
from backoff_retry import RetryConfig


# The library default (60 retries, 1s apart) is too patient for a request,
# so the HTTP layer starts from "default" when no config is given.
RETRY_PRESETS = {
    "default": RetryConfig(retries=3, factor=2, min_interval_ms=1000, max_interval_ms=30_000),
    "aggressive": RetryConfig(retries=5, factor=2, min_interval_ms=500, max_interval_ms=60_000),
    "quick": RetryConfig(retries=2, factor=2, min_interval_ms=200, max_interval_ms=2_000),
    "gentle": RetryConfig(retries=5, factor=3, min_interval_ms=2000, max_interval_ms=120_000),
}

DEFAULT_PRESET = "default"
