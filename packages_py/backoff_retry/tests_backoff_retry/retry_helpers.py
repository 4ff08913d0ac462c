"""
Operation doubles shared by backoff_retry tests.
"""


class Flaky:
    """Async operation that raises the queued errors, then returns ``value``."""

    def __init__(self, errors, value=None):
        self._errors = list(errors)
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self._errors:
            raise self._errors.pop(0)
        return self.value


class AlwaysFails:
    """Async operation that raises ``error`` on every call."""

    def __init__(self, error=None):
        self.error = error or ConnectionError("always failing")
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        raise self.error


def recorded_waits(sleep_mock):
    """Waits (ms) passed to the patched sleep, in call order."""
    return [call.args[0] for call in sleep_mock.call_args_list]


def record_events(handle):
    """Subscribe to both events and return the list they are appended to."""
    events = []
    handle.on("attempt", lambda e: events.append(("attempt", e.attempt)))
    handle.on("retry", lambda e: events.append(("retry", e.retry)))
    return events
