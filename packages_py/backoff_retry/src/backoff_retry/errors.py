"""
Exceptions raised by backoff_retry
"""


class InvalidConfigurationError(ValueError):
    """Raised when retry or backoff parameters are malformed."""
