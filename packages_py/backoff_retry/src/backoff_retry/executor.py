"""
Main retry executor implementation
"""
import asyncio
import inspect
import logging
import weakref
from types import TracebackType
from typing import Any, Callable, Generator, Generic, Mapping, Optional, TypeVar, Union

from .config import (
    async_sleep,
    compute_wait,
    describe_config,
    resolve_config,
    snapshot_config,
)
from .notifier import EventHub
from .types import (
    AttemptEvent,
    OutcomeStatus,
    ResolvedRetryConfig,
    RetryConfig,
    RetryEvent,
    RetryEventListener,
    RetryFunction,
    RetryOutcome,
)


T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryExecutor(Generic[T]):
    """
    Retry Executor

    Drives the attempt loop for one execution:
    - Emits an "attempt" event before every invocation
    - Stops on success, exhausted budget, or a non-retryable error
    - Emits a "retry" event and waits with exponential backoff otherwise
    """

    def __init__(
        self,
        fn: RetryFunction[T],
        config: ResolvedRetryConfig,
        hub: Optional[EventHub] = None,
    ) -> None:
        """
        Create a new RetryExecutor.

        Args:
            fn: Operation to invoke; may return a value or an awaitable
            config: Resolved retry configuration
            hub: Notification hub events are published to
        """
        self._fn = fn
        self._config = config
        self._hub = hub or EventHub()
        self._outcome: Optional[RetryOutcome[T]] = None

    async def _invoke(self) -> T:
        result = self._fn()
        if inspect.isawaitable(result):
            result = await result
        return result

    def _finish(self, outcome: RetryOutcome[T]) -> RetryOutcome[T]:
        self._outcome = outcome
        logger.debug(
            f"RetryExecutor.run: {outcome.status.value} after {outcome.attempts} attempt(s)"
        )
        return outcome

    async def run(self) -> RetryOutcome[T]:
        """
        Run the attempt loop to completion.

        Operation failures do not raise; they are reported in the returned
        outcome with the original exception. Exceptions raised by the
        is_retryable_error predicate propagate unchanged.

        Returns:
            Terminal outcome of the execution
        """
        config = self._config
        attempt = 1
        logger.debug(f"RetryExecutor.run: starting with {describe_config(config)}")

        while True:
            self._hub.emit(
                "attempt", AttemptEvent(attempt=attempt, config=snapshot_config(config))
            )

            try:
                value = await self._invoke()
            except Exception as error:
                if attempt - 1 >= config.retries:
                    return self._finish(RetryOutcome(
                        status=OutcomeStatus.FAILED_EXHAUSTED,
                        attempts=attempt,
                        error=error,
                    ))

                if not config.is_retryable_error(error):
                    return self._finish(RetryOutcome(
                        status=OutcomeStatus.FAILED_NON_RETRYABLE,
                        attempts=attempt,
                        error=error,
                    ))

                retry_number = attempt
                self._hub.emit(
                    "retry", RetryEvent(retry=retry_number, config=snapshot_config(config))
                )

                wait_ms = compute_wait(
                    retry_number,
                    config.factor,
                    config.min_interval_ms,
                    config.max_interval_ms,
                )
                logger.debug(
                    f"RetryExecutor.run: attempt {attempt} failed with "
                    f"{type(error).__name__}, retry {retry_number} in {wait_ms}ms"
                )
                await async_sleep(wait_ms)
                attempt += 1
                continue

            return self._finish(RetryOutcome(
                status=OutcomeStatus.SUCCEEDED,
                attempts=attempt,
                value=value,
            ))

    @property
    def outcome(self) -> Optional[RetryOutcome[T]]:
        """Terminal outcome, or None while the execution is running."""
        return self._outcome

    @property
    def config(self) -> ResolvedRetryConfig:
        return self._config


def _abandon(task: "asyncio.Task[Any]") -> None:
    """Cancel an execution whose handle was garbage-collected."""
    if task.done():
        return
    loop = task.get_loop()
    if loop.is_closed():
        return
    logger.debug("Retry: handle dropped before completion, cancelling execution")
    loop.call_soon_threadsafe(task.cancel)


class Retry(Generic[T]):
    """
    Handle returned by :func:`retry`.

    Awaiting the handle yields the operation's value, or raises the last
    error the operation raised. Listeners for "attempt" and "retry" events
    are registered with :meth:`on` and :meth:`once`.

    The execution is scheduled as soon as the handle is created inside a
    running event loop, otherwise on first await. Dropping every reference
    to a pending handle cancels the execution.

    Example:
        handle = retry(fetch_data, RetryConfig(retries=5, factor=2))
        handle.on("retry", lambda event: print("retry", event.retry))
        data = await handle
    """

    def __init__(
        self,
        fn: RetryFunction[T],
        config: Union[RetryConfig, ResolvedRetryConfig, Mapping[str, Any], None] = None,
    ) -> None:
        self._hub = EventHub()
        self._executor: RetryExecutor[T] = RetryExecutor(fn, resolve_config(config), self._hub)
        self._task: Optional["asyncio.Task[RetryOutcome[T]]"] = None
        self._error_traceback: Optional[TracebackType] = None

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            self._start()

    def _start(self) -> "asyncio.Task[RetryOutcome[T]]":
        if self._task is None:
            loop = asyncio.get_running_loop()
            task = loop.create_task(self._executor.run())
            finalizer = weakref.finalize(self, _abandon, task)
            finalizer.atexit = False
            self._task = task
        return self._task

    def __await__(self) -> Generator[Any, None, T]:
        outcome = yield from self._start().__await__()
        if outcome.status is OutcomeStatus.SUCCEEDED:
            return outcome.value
        error = outcome.error
        # Repeated awaits re-raise the same object from the operation's traceback
        if self._error_traceback is None:
            self._error_traceback = error.__traceback__
        raise error.with_traceback(self._error_traceback)

    async def settle(self) -> RetryOutcome[T]:
        """
        Wait for the execution and return its outcome.

        Unlike awaiting the handle, operation failures are returned rather
        than raised.
        """
        return await self._start()

    def on(self, event_name: str, listener: RetryEventListener) -> "Retry[T]":
        """Register a persistent listener. Returns the handle for chaining."""
        self._hub.on(event_name, listener)
        return self

    def once(self, event_name: str, listener: RetryEventListener) -> "Retry[T]":
        """Register a listener fired on the next event only."""
        self._hub.once(event_name, listener)
        return self

    def off(self, event_name: str, listener: RetryEventListener) -> "Retry[T]":
        """Remove a listener registered with on() or once()."""
        self._hub.off(event_name, listener)
        return self

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    @property
    def outcome(self) -> Optional[RetryOutcome[T]]:
        """Terminal outcome, or None while the execution is pending."""
        return self._executor.outcome

    @property
    def config(self) -> ResolvedRetryConfig:
        """Copy of the resolved configuration for this execution."""
        return snapshot_config(self._executor.config)

    def __repr__(self) -> str:
        outcome = self.outcome
        state = outcome.status.value if outcome else ("running" if self._task else "pending")
        return f"<Retry {state}>"


def retry(
    fn: RetryFunction[T],
    config: Union[RetryConfig, ResolvedRetryConfig, Mapping[str, Any], None] = None,
) -> Retry[T]:
    """
    Retry ``fn`` with exponential backoff.

    Args:
        fn: Operation to retry (no arguments); may be sync or async
        config: Partial retry configuration; missing or None fields use defaults

    Returns:
        Awaitable handle that also accepts event listeners

    Raises:
        InvalidConfigurationError: If the configuration is malformed

    Example:
        result = await retry(fetch_data, {"retries": 3, "factor": 2})
    """
    return Retry(fn, config)


def create_retry_wrapper(
    config: Union[RetryConfig, ResolvedRetryConfig, Mapping[str, Any], None] = None,
) -> Callable[[RetryFunction[T]], Retry[T]]:
    """
    Create a reusable retry wrapper bound to one configuration.

    The configuration is validated once, up front. Each call starts an
    independent execution with its own listeners.

    Args:
        config: Retry configuration

    Returns:
        Function that wraps operations with retry logic

    Example:
        with_retry = create_retry_wrapper(RetryConfig(retries=3))
        result = await with_retry(fetch_data)
    """
    resolve_config(config)

    def wrapper(fn: RetryFunction[T]) -> Retry[T]:
        return Retry(fn, config)

    return wrapper
