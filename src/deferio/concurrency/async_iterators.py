from collections.abc import AsyncIterator, Iterable


class AsyncByteStream:
    """
    An asynchronous iterator that iterates over a byte sequence in chunks.

    Useful for handing in-memory data to APIs that expect a stream, such as
    :func:`deferio.io.stream_drain.read_all` or
    :func:`deferio.concurrency.value_resolver.as_buffer`.

    Args:
        data (bytes | str): The data to iterate over. Text is encoded first.
        chunk_size (int, optional): The size of each chunk. Defaults to 1024.
        encoding (str, optional): Encoding used when ``data`` is text.

    Yields:
        bytes: The next chunk of bytes from the byte sequence.
    """

    def __init__(self, data: bytes | str, chunk_size: int = 1024, encoding: str = "utf-8"):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.data = data.encode(encoding) if isinstance(data, str) else bytes(data)
        self.chunk_size = chunk_size
        self.index = 0

    def __aiter__(self) -> "AsyncByteStream":
        return self

    async def __anext__(self) -> bytes:
        if self.index >= len(self.data):
            raise StopAsyncIteration
        chunk = self.data[self.index : self.index + self.chunk_size]
        self.index += self.chunk_size
        return chunk


async def async_chunks_of(chunks: Iterable[bytes | str]) -> AsyncIterator[bytes | str]:
    """
    Yield the given chunks one by one as an async generator.

    Example:
        >>> await read_all(async_chunks_of([b"c1", b"c2", b"c3"]))
        b'c1c2c3'
    """
    for chunk in chunks:
        yield chunk
