import asyncio
import threading
from typing import Any, Callable, Generic, TypeVar

from deferio.config.logging_config import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class CompletionRejected(Exception):
    """Wraps a non-exception ``err`` value passed to a completion callback."""

    def __init__(self, reason: Any):
        super().__init__(f"Completion callback reported an error: {reason!r}")
        self.reason = reason


class CompletedAction(Generic[T]):
    """
    A ``(err, result=None)`` completion callback bound to an asyncio future.

    The first call settles the future: a truthy ``err`` rejects it, anything
    else resolves it with ``result``. Later calls are ignored. The callback
    may be invoked from any thread; settling always happens on the future's
    event loop.
    """

    def __init__(self, future: "asyncio.Future[T]"):
        self._future = future
        self._loop = future.get_loop()
        self._lock = threading.Lock()
        self._called = False

    @property
    def called(self) -> bool:
        return self._called

    def __call__(self, err: Any = None, result: T | None = None) -> None:
        with self._lock:
            if self._called:
                log.debug("Ignoring repeated completion callback call")
                return
            self._called = True

        if self._loop.is_closed():
            log.debug("Completion callback called after its event loop closed")
            return
        self._loop.call_soon_threadsafe(self._settle, err, result)

    def _settle(self, err: Any, result: T | None) -> None:
        if self._future.done():
            return
        if err:
            exc = err if isinstance(err, BaseException) else CompletionRejected(err)
            self._future.set_exception(exc)
        else:
            self._future.set_result(result)  # type: ignore[arg-type]


def create_completed_action(future: "asyncio.Future[T]") -> Callable[..., None]:
    """
    Create a simple completion callback for a future.

    Example:
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        legacy_read(path, create_completed_action(future))
        data = await future
    """
    return CompletedAction(future)
