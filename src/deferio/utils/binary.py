import asyncio
import os

# Same window git uses to sniff binary content
_SNIFF_LENGTH = 8000


def is_binary_content_sync(data: bytes | bytearray | memoryview) -> bool:
    """
    Check if data is binary or text content.

    Data counts as binary when its first 8000 bytes contain a NUL byte or
    cannot be decoded as UTF-8. A multi-byte sequence cut off at the end of
    the window is not held against the data.
    """
    head = bytes(data[:_SNIFF_LENGTH])
    if b"\x00" in head:
        return True
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as e:
        truncated = (
            len(data) > _SNIFF_LENGTH
            and e.reason == "unexpected end of data"
            and e.start >= len(head) - 3
        )
        return not truncated
    return False


async def is_binary_content(data: bytes | bytearray | memoryview) -> bool:
    """Async form of :func:`is_binary_content_sync`."""
    return await asyncio.to_thread(is_binary_content_sync, data)


async def random_bytes(size: int) -> bytes:
    """
    Return ``size`` cryptographically secure random bytes.

    Raises:
        ValueError: If size is negative.
    """
    if size < 0:
        raise ValueError("size must be a non-negative integer")
    return await asyncio.to_thread(os.urandom, size)
