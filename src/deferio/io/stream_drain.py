"""
Drain a byte stream fully into one in-memory buffer.

Three stream shapes are accepted:

- async iterables of chunks (async generators, ``AsyncByteStream``,
  ``asyncio.StreamReader``)
- readable file-like objects with a ``read(size)`` method, sync or async
  (``io.BytesIO``, open files, ``aiofiles`` handles)
- sync iterators of chunks (generators)

Chunks may be ``bytes``-like or ``str``; text chunks are encoded with the
requested encoding. A stream that never ends stalls the drain; there is no
timeout.
"""

import inspect
from collections.abc import AsyncIterator, Iterator
from typing import Any

from deferio.config.environment import Environment
from deferio.config.logging_config import get_logger

log = get_logger(__name__)


class StreamError(Exception):
    """Raised when a stream signals an error while being drained."""

    def __init__(self, cause: BaseException | None = None, message: str | None = None):
        self.cause = cause
        self.message = message or f"Stream failed while draining: {cause!r}"
        super().__init__(self.message)


def is_stream(value: Any) -> bool:
    """Return True if ``value`` can be drained by :func:`read_all`."""
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return False
    if hasattr(value, "__aiter__"):
        return True
    if callable(getattr(value, "read", None)):
        return True
    return isinstance(value, Iterator)


def _to_bytes(chunk: Any, encoding: str) -> bytes | None:
    if chunk is None:
        return None
    if isinstance(chunk, str):
        return chunk.encode(encoding)
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    raise StreamError(message=f"Unsupported chunk type {type(chunk).__name__}")


async def _drain_async_iterable(stream: Any, encoding: str) -> list[bytes]:
    chunks: list[bytes] = []
    iterator = stream.__aiter__()
    try:
        async for chunk in iterator:
            data = _to_bytes(chunk, encoding)
            if data:
                chunks.append(data)
    except BaseException:
        # Finalize a half-consumed async generator so it does not linger
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None and inspect.isasyncgen(iterator):
            try:
                await aclose()
            except Exception as close_error:
                log.debug(f"Ignoring error while closing failed stream: {close_error}")
        raise
    return chunks


async def _drain_readable(stream: Any, encoding: str, chunk_size: int) -> list[bytes]:
    chunks: list[bytes] = []
    read = stream.read
    while True:
        chunk = read(chunk_size)
        if inspect.isawaitable(chunk):
            chunk = await chunk
        if not chunk:
            break
        data = _to_bytes(chunk, encoding)
        if data:
            chunks.append(data)
    return chunks


def _drain_readable_sync(stream: Any, encoding: str, chunk_size: int) -> list[bytes]:
    chunks: list[bytes] = []
    while True:
        chunk = stream.read(chunk_size)
        if inspect.isawaitable(chunk):
            # Never awaited here, so close it to avoid a "never awaited" warning
            close = getattr(chunk, "close", None)
            if close is not None:
                close()
            raise StreamError(message="Async readable streams need read_all(), not read_all_sync()")
        if not chunk:
            break
        data = _to_bytes(chunk, encoding)
        if data:
            chunks.append(data)
    return chunks


def _drain_iterator(stream: Iterator[Any], encoding: str) -> list[bytes]:
    chunks: list[bytes] = []
    for chunk in stream:
        data = _to_bytes(chunk, encoding)
        if data:
            chunks.append(data)
    return chunks


async def read_all(stream: Any, encoding: str | None = None) -> bytes:
    """
    Read the whole content of a stream.

    Args:
        stream: The stream to drain (see module docstring for accepted shapes).
        encoding: Encoding for text chunks. Defaults to the configured
            default encoding (utf-8).

    Returns:
        The concatenation of all chunks, in emission order.

    Raises:
        StreamError: If the stream raises while being read, or emits a chunk
            that is neither text nor bytes.
    """
    encoding = encoding or Environment.get_default_encoding()
    chunk_size = Environment.get_stream_chunk_size()

    try:
        if hasattr(stream, "__aiter__"):
            chunks = await _drain_async_iterable(stream, encoding)
        elif callable(getattr(stream, "read", None)):
            chunks = await _drain_readable(stream, encoding, chunk_size)
        elif isinstance(stream, Iterator):
            chunks = _drain_iterator(stream, encoding)
        else:
            raise StreamError(message=f"Object of type {type(stream).__name__} is not a readable stream")
    except StreamError:
        raise
    except Exception as e:
        raise StreamError(e) from e

    data = b"".join(chunks)
    log.debug(f"Drained {len(data)} bytes in {len(chunks)} chunks")
    return data


def read_all_sync(stream: Any, encoding: str | None = None) -> bytes:
    """
    Synchronous form of :func:`read_all` for sync readables and iterators.

    Raises:
        StreamError: If the stream fails, or only supports async reading.
    """
    encoding = encoding or Environment.get_default_encoding()
    chunk_size = Environment.get_stream_chunk_size()

    try:
        if callable(getattr(stream, "read", None)):
            chunks = _drain_readable_sync(stream, encoding, chunk_size)
        elif isinstance(stream, Iterator):
            chunks = _drain_iterator(stream, encoding)
        elif hasattr(stream, "__aiter__"):
            raise StreamError(message="Async iterables need read_all(), not read_all_sync()")
        else:
            raise StreamError(message=f"Object of type {type(stream).__name__} is not a readable stream")
    except StreamError:
        raise
    except Exception as e:
        raise StreamError(e) from e

    return b"".join(chunks)


drain = read_all
drain_sync = read_all_sync

__all__ = ["StreamError", "drain", "drain_sync", "is_stream", "read_all", "read_all_sync"]
