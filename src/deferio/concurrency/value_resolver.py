"""
Resolve a possibly-deferred value into concrete bytes.

A value of unknown shape is classified into one :class:`ResolvableKind` at a
time. Terminal kinds (``None``, bytes, text, streams) are materialized
directly. Deferred kinds (thunks, callback-style callables, awaitables) are
unwrapped once, and whatever they produce is resolved again, under a depth
budget that bounds chains such as a function returning a function returning
a function.

Example:
    data = await as_buffer(lambda: fetch_text_async(), encoding="utf-8")
"""

import asyncio
import enum
import inspect
from dataclasses import dataclass
from typing import Any

from deferio.concurrency.completion import create_completed_action
from deferio.config.environment import Environment
from deferio.config.logging_config import get_logger
from deferio.io.stream_drain import is_stream, read_all

log = get_logger(__name__)


class ResolvableKind(enum.Enum):
    """The closed set of value shapes the resolver understands."""

    NIL = "nil"
    RAW_BYTES = "raw_bytes"
    TEXT = "text"
    STREAM = "stream"
    SYNC_THUNK = "sync_thunk"
    ASYNC_THUNK = "async_thunk"
    CALLBACK = "callback"
    AWAITABLE = "awaitable"
    UNSUPPORTED = "unsupported"


TERMINAL_KINDS = frozenset(
    {ResolvableKind.NIL, ResolvableKind.RAW_BYTES, ResolvableKind.TEXT, ResolvableKind.STREAM}
)


class ResolutionErrorKind(enum.Enum):
    UNSUPPORTED = "unsupported"
    MAX_DEPTH_EXCEEDED = "max_depth_exceeded"
    INVOCATION_FAILURE = "invocation_failure"
    REJECTION_PROPAGATED = "rejection_propagated"


class ResolutionError(Exception):
    """Raised when a value cannot be resolved into bytes."""

    def __init__(
        self,
        kind: ResolutionErrorKind,
        message: str,
        cause: BaseException | None = None,
    ):
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(message)


@dataclass(frozen=True)
class ResolutionContext:
    """
    Per-call resolution state.

    Attributes:
        encoding: Encoding applied to text values and text stream chunks.
        remaining: Remaining depth budget for deferred values.
    """

    encoding: str
    remaining: int

    def descend(self) -> "ResolutionContext":
        """Spend one unit of budget, or raise if none is left."""
        remaining = self.remaining - 1
        if remaining < 1:
            raise ResolutionError(
                ResolutionErrorKind.MAX_DEPTH_EXCEEDED,
                "Maximum depth of deferred values exceeded",
            )
        return ResolutionContext(encoding=self.encoding, remaining=remaining)


def _required_positional_count(func: Any) -> int | None:
    """
    Count the positional parameters a callable needs.

    Returns None when the callable cannot be called with positional
    arguments only, or its signature cannot be inspected.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    count = 0
    for param in signature.parameters.values():
        if param.default is not inspect.Parameter.empty:
            continue
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
        elif param.kind is inspect.Parameter.KEYWORD_ONLY:
            return None
    return count


def classify(value: Any) -> ResolvableKind:
    """Return the :class:`ResolvableKind` of ``value``."""
    if value is None:
        return ResolvableKind.NIL
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ResolvableKind.RAW_BYTES
    if isinstance(value, str):
        return ResolvableKind.TEXT
    if inspect.isawaitable(value):
        return ResolvableKind.AWAITABLE
    if is_stream(value):
        return ResolvableKind.STREAM
    if callable(value):
        required = _required_positional_count(value)
        if required == 0:
            if inspect.iscoroutinefunction(value):
                return ResolvableKind.ASYNC_THUNK
            return ResolvableKind.SYNC_THUNK
        if required == 1:
            return ResolvableKind.CALLBACK
    return ResolvableKind.UNSUPPORTED


async def _materialize(kind: ResolvableKind, value: Any, ctx: ResolutionContext) -> bytes:
    if kind is ResolvableKind.NIL:
        return b""
    if kind is ResolvableKind.RAW_BYTES:
        return bytes(value)
    if kind is ResolvableKind.TEXT:
        return value.encode(ctx.encoding)
    return await read_all(value, ctx.encoding)


def _invocation_failure(value: Any, e: Exception) -> ResolutionError:
    name = getattr(value, "__qualname__", type(value).__name__)
    return ResolutionError(
        ResolutionErrorKind.INVOCATION_FAILURE,
        f"Invoking {name} failed: {e}",
        cause=e,
    )


async def _invoke_callback(value: Any) -> Any:
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()
    try:
        returned = value(create_completed_action(future))
        if inspect.isawaitable(returned):
            await returned
    except Exception as e:
        future.cancel()
        raise _invocation_failure(value, e) from e

    try:
        return await future
    except asyncio.CancelledError:
        raise
    except Exception as e:
        raise ResolutionError(
            ResolutionErrorKind.REJECTION_PROPAGATED,
            f"Completion callback reported an error: {e}",
            cause=e,
        ) from e


async def _await_value(value: Any) -> Any:
    try:
        return await value
    except Exception as e:
        raise ResolutionError(
            ResolutionErrorKind.REJECTION_PROPAGATED,
            f"Awaited value was rejected: {e}",
            cause=e,
        ) from e


def _discard(value: Any) -> None:
    """Release an awaitable that will never be awaited."""
    if inspect.iscoroutine(value):
        value.close()
    elif isinstance(value, asyncio.Future):
        if not value.done():
            value.cancel()
        elif not value.cancelled():
            # Mark a stored exception as retrieved
            value.exception()


async def _unwrap(kind: ResolvableKind, value: Any) -> Any:
    """Run exactly one deferred step and return what it produced."""
    if kind is ResolvableKind.SYNC_THUNK:
        try:
            return value()
        except Exception as e:
            raise _invocation_failure(value, e) from e

    if kind is ResolvableKind.ASYNC_THUNK:
        try:
            pending = value()
        except Exception as e:
            raise _invocation_failure(value, e) from e
        return await _await_value(pending)

    if kind is ResolvableKind.CALLBACK:
        return await _invoke_callback(value)

    return await _await_value(value)


async def as_buffer(value: Any, encoding: str | None = None, max_depth: int | None = None) -> bytes:
    """
    Return a value as bytes.

    Args:
        value: ``None``, bytes-like, text, a stream, a zero-argument function
            (sync or async), a function taking a ``(err, result)`` completion
            callback, an awaitable, or any nesting of these.
        encoding: Encoding for text. Defaults to the configured default
            encoding (utf-8).
        max_depth: Maximum number of deferred steps, default 63. A chain of
            ``max_depth`` or more deferred steps fails.

    Returns:
        The materialized bytes.

    Raises:
        ResolutionError: If the value is unsupported, the depth budget is
            exhausted, a function raises, or an awaitable/callback rejects.
        StreamError: If a stream fails while being drained.
        ValueError: If max_depth is negative.
    """
    if max_depth is None:
        max_depth = Environment.get_max_depth()
    if max_depth < 0:
        raise ValueError("max_depth must be a non-negative integer")

    ctx = ResolutionContext(
        encoding=encoding or Environment.get_default_encoding(),
        remaining=max_depth,
    )

    while True:
        kind = classify(value)
        if kind in TERMINAL_KINDS:
            return await _materialize(kind, value, ctx)
        if kind is ResolvableKind.UNSUPPORTED:
            raise ResolutionError(
                ResolutionErrorKind.UNSUPPORTED,
                f"Cannot resolve a value of type {type(value).__name__} into bytes",
            )

        try:
            ctx = ctx.descend()
        except ResolutionError:
            _discard(value)
            raise
        log.debug(f"Resolving {kind.value} value ({ctx.remaining} steps left)")
        value = await _unwrap(kind, value)


class ValueResolver:
    """
    A reusable resolver with fixed encoding and depth settings.

    Example:
        resolver = ValueResolver(encoding="latin-1", max_depth=8)
        data = await resolver.resolve(lambda: "caf\\xe9")
    """

    def __init__(self, encoding: str | None = None, max_depth: int | None = None):
        if max_depth is not None and max_depth < 0:
            raise ValueError("max_depth must be a non-negative integer")
        self.encoding = encoding
        self.max_depth = max_depth

    async def resolve(self, value: Any) -> bytes:
        return await as_buffer(value, encoding=self.encoding, max_depth=self.max_depth)

    async def __call__(self, value: Any) -> bytes:
        return await self.resolve(value)


resolve = as_buffer

__all__ = [
    "ResolutionContext",
    "ResolutionError",
    "ResolutionErrorKind",
    "ResolvableKind",
    "ValueResolver",
    "as_buffer",
    "classify",
    "resolve",
]
