"""
Notification hub delivering attempt/retry events to listeners
"""
import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .types import EVENT_NAMES, RetryEventListener


logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _Registration:
    listener: RetryEventListener
    once: bool


class EventHub:
    """
    Ordered listener registry for one retry execution.

    Listeners run synchronously, in registration order, when an event is
    emitted. A listener that raises is logged and skipped; it never affects
    the execution that emitted the event.
    """

    def __init__(self) -> None:
        self._registrations: dict[str, list[_Registration]] = {
            name: [] for name in EVENT_NAMES
        }
        self._pending: set[asyncio.Future[Any]] = set()

    def _bucket(self, event_name: str) -> list[_Registration]:
        try:
            return self._registrations[event_name]
        except KeyError:
            raise ValueError(
                f"Unknown event {event_name!r}, expected one of {', '.join(EVENT_NAMES)}"
            ) from None

    def on(self, event_name: str, listener: RetryEventListener) -> None:
        """Register a listener called on every ``event_name`` event."""
        self._bucket(event_name).append(_Registration(listener, once=False))

    def once(self, event_name: str, listener: RetryEventListener) -> None:
        """Register a listener called on the next ``event_name`` event only."""
        self._bucket(event_name).append(_Registration(listener, once=True))

    def off(self, event_name: str, listener: RetryEventListener) -> bool:
        """
        Remove the first registration of ``listener`` for ``event_name``.

        Returns:
            Whether a registration was removed
        """
        bucket = self._bucket(event_name)
        for index, registration in enumerate(bucket):
            if registration.listener == listener:
                del bucket[index]
                return True
        return False

    def listener_count(self, event_name: str) -> int:
        return len(self._bucket(event_name))

    def emit(self, event_name: str, event: Any) -> None:
        """
        Dispatch ``event`` to the listeners of ``event_name``.

        Args:
            event_name: "attempt" or "retry"
            event: The event object handed to each listener
        """
        bucket = self._bucket(event_name)
        for registration in list(bucket):
            if registration.once:
                # Already removed by an earlier listener in this dispatch
                if registration not in bucket:
                    continue
                bucket.remove(registration)
            self._invoke(event_name, registration.listener, event)

    def _invoke(self, event_name: str, listener: RetryEventListener, event: Any) -> None:
        try:
            result = listener(event)
        except Exception:
            logger.warning(
                f"EventHub.emit: listener {listener!r} failed on {event_name!r} event",
                exc_info=True,
            )
            return

        if inspect.isawaitable(result):
            self._schedule(event_name, listener, result)

    def _schedule(self, event_name: str, listener: RetryEventListener, awaitable: Any) -> None:
        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)

        def _done(fut: "asyncio.Future[Any]") -> None:
            self._pending.discard(fut)
            if fut.cancelled():
                return
            error: Optional[BaseException] = fut.exception()
            if error is not None:
                logger.warning(
                    f"EventHub.emit: async listener {listener!r} failed on {event_name!r} event",
                    exc_info=(type(error), error, error.__traceback__),
                )

        future.add_done_callback(_done)

    @property
    def pending(self) -> int:
        """Number of async listener tasks still running."""
        return len(self._pending)
