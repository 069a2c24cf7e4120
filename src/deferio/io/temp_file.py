"""
Scoped temporary files.

A temp file path is allocated in a (created-if-needed) directory, handed to
caller logic and removed again on every exit path. The file itself is never
pre-created: the parent directory is guaranteed to exist, the file is left
to the action.

Example:
    async def convert(path: str) -> bytes:
        await run_converter(output=path)
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    data = await temp_file(convert, TempFileOptions(suffix=".png"))
"""

import asyncio
import enum
import inspect
import os
import shutil
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

import aiofiles.os
from pydantic import BaseModel

from deferio.config.environment import Environment
from deferio.config.logging_config import get_logger
from deferio.io.fs import (
    create_directory_if_needed,
    create_directory_if_needed_sync,
    is_directory,
    is_directory_sync,
)

log = get_logger(__name__)

T = TypeVar("T")

MAX_NAME_ATTEMPTS = 10


class TempFileOptions(BaseModel):
    """
    Options for a temp file.

    Attributes:
        dir: Custom parent directory. Defaults to the configured temp dir.
        keep: Leave the path in place after the action settles.
        prefix: Optional prefix for the file name.
        suffix: Optional suffix (e.g. an extension) for the file name.
    """

    dir: str | None = None
    keep: bool = False
    prefix: str = ""
    suffix: str = ""


@dataclass
class TempFileDescriptor:
    """A temp path owned by one scoped call."""

    path: str
    directory: str
    keep: bool = False


class TempResourceErrorKind(enum.Enum):
    DIRECTORY_CREATE_FAILED = "directory_create_failed"
    NAME_GENERATION_FAILED = "name_generation_failed"


class TempResourceError(Exception):
    """Raised when a temp path cannot be allocated. The action never ran."""

    def __init__(
        self,
        kind: TempResourceErrorKind,
        directory: str,
        cause: BaseException | None = None,
    ):
        self.kind = kind
        self.directory = directory
        self.cause = cause
        if kind is TempResourceErrorKind.DIRECTORY_CREATE_FAILED:
            message = f"Could not create temp directory {directory}: {cause}"
        else:
            message = f"Could not find a free temp file name in {directory}"
        super().__init__(message)


def _options(opts: TempFileOptions | dict[str, Any] | None) -> TempFileOptions:
    if opts is None:
        return TempFileOptions()
    if isinstance(opts, TempFileOptions):
        return opts
    return TempFileOptions.model_validate(opts)


def _target_directory(opts: TempFileOptions) -> str:
    return os.path.abspath(opts.dir or Environment.get_temp_dir())


def _generate_path(directory: str, opts: TempFileOptions) -> str:
    for _ in range(MAX_NAME_ATTEMPTS):
        path = os.path.join(directory, f"{opts.prefix}{uuid.uuid4().hex}{opts.suffix}")
        if not os.path.lexists(path):
            return path
    raise TempResourceError(TempResourceErrorKind.NAME_GENERATION_FAILED, directory)


def _remove_path(path: str) -> None:
    """Best-effort removal of whatever the action left at ``path``."""
    try:
        if is_directory_sync(path, use_lstat=True):
            shutil.rmtree(path)
        elif os.path.lexists(path):
            os.unlink(path)
        else:
            return
        log.debug(f"Removed temp path {path}")
    except OSError as e:
        log.warning(f"Failed to remove temp path {path}: {e}")


async def _remove_path_async(path: str) -> None:
    try:
        if await is_directory(path, use_lstat=True):
            await asyncio.to_thread(shutil.rmtree, path)
        elif await aiofiles.os.path.exists(path) or await aiofiles.os.path.islink(path):
            await aiofiles.os.unlink(path)
        else:
            return
        log.debug(f"Removed temp path {path}")
    except OSError as e:
        log.warning(f"Failed to remove temp path {path}: {e}")


def _allocate_sync(opts: TempFileOptions) -> TempFileDescriptor:
    directory = _target_directory(opts)
    try:
        create_directory_if_needed_sync(directory)
    except OSError as e:
        raise TempResourceError(TempResourceErrorKind.DIRECTORY_CREATE_FAILED, directory, e) from e
    return TempFileDescriptor(path=_generate_path(directory, opts), directory=directory, keep=opts.keep)


async def _allocate(opts: TempFileOptions) -> TempFileDescriptor:
    directory = _target_directory(opts)
    try:
        await create_directory_if_needed(directory)
    except OSError as e:
        raise TempResourceError(TempResourceErrorKind.DIRECTORY_CREATE_FAILED, directory, e) from e
    path = await asyncio.to_thread(_generate_path, directory, opts)
    return TempFileDescriptor(path=path, directory=directory, keep=opts.keep)


@contextmanager
def temp_file_path(
    opts: TempFileOptions | dict[str, Any] | None = None,
) -> Iterator[TempFileDescriptor]:
    """
    Context manager yielding a fresh temp path that is removed on exit.

    Example:
        with temp_file_path({"suffix": ".json"}) as tmp:
            write_report(tmp.path)
            upload(tmp.path)
    """
    descriptor = _allocate_sync(_options(opts))
    try:
        yield descriptor
    finally:
        if descriptor.keep:
            log.debug(f"Keeping temp path {descriptor.path}")
        else:
            _remove_path(descriptor.path)


@asynccontextmanager
async def async_temp_file_path(
    opts: TempFileOptions | dict[str, Any] | None = None,
) -> AsyncIterator[TempFileDescriptor]:
    """Async version of :func:`temp_file_path`."""
    descriptor = await _allocate(_options(opts))
    try:
        yield descriptor
    finally:
        if descriptor.keep:
            log.debug(f"Keeping temp path {descriptor.path}")
        else:
            await _remove_path_async(descriptor.path)


def temp_file_sync(
    action: Callable[[str], T],
    opts: TempFileOptions | dict[str, Any] | None = None,
) -> T:
    """
    Invoke an action for a temp file (sync).

    Args:
        action: Called with the temp path. The file does not exist yet.
        opts: Custom options.

    Returns:
        The result of the action.

    Raises:
        TempResourceError: If the directory cannot be created.
        Exception: Whatever the action raised, unchanged, after cleanup.
    """
    with temp_file_path(opts) as descriptor:
        return action(descriptor.path)


async def temp_file(
    action: Callable[[str], T | Awaitable[T]],
    opts: TempFileOptions | dict[str, Any] | None = None,
) -> T:
    """
    Invoke an action for a temp file.

    The action may be sync or async. A returned awaitable is awaited before
    the path is cleaned up.

    Args:
        action: Called with the temp path. The file does not exist yet.
        opts: Custom options.

    Returns:
        The result of the action.

    Raises:
        TempResourceError: If the directory cannot be created.
        Exception: Whatever the action raised, unchanged, after cleanup.
    """
    async with async_temp_file_path(opts) as descriptor:
        result = action(descriptor.path)
        if inspect.isawaitable(result):
            result = await result
        return result  # type: ignore[return-value]


with_temp_file = temp_file
with_temp_file_sync = temp_file_sync

__all__ = [
    "TempFileDescriptor",
    "TempFileOptions",
    "TempResourceError",
    "TempResourceErrorKind",
    "async_temp_file_path",
    "temp_file",
    "temp_file_path",
    "temp_file_sync",
    "with_temp_file",
    "with_temp_file_sync",
]
