"""
Filesystem helpers: stat predicates, sizes, directory creation and globbing.

Predicates answer "is this true of the path" and treat any failure to stat
the path as "no". ``size`` and ``size_sync`` propagate stat errors instead,
since a missing size for a requested path is a caller error.
"""

import asyncio
import glob as _glob
import os
import stat as _stat
from collections.abc import Callable, Iterable
from fnmatch import fnmatch

import aiofiles.os

from deferio.config.logging_config import get_logger
from deferio.utils.values import as_array

log = get_logger(__name__)

PathArg = str | bytes | os.PathLike


def _stat_sync(path: PathArg, use_lstat: bool) -> os.stat_result:
    return os.lstat(path) if use_lstat else os.stat(path)


async def _stat_async(path: PathArg, use_lstat: bool) -> os.stat_result:
    return await aiofiles.os.stat(path, follow_symlinks=not use_lstat)


def _check_sync(path: PathArg, use_lstat: bool, test: Callable[[int], bool]) -> bool:
    try:
        return test(_stat_sync(path, use_lstat).st_mode)
    except (OSError, ValueError, TypeError) as e:
        log.debug(f"stat failed for {path!r}, treating as no match: {e}")
        return False


async def _check_async(path: PathArg, use_lstat: bool, test: Callable[[int], bool]) -> bool:
    try:
        return test((await _stat_async(path, use_lstat)).st_mode)
    except (OSError, ValueError, TypeError) as e:
        log.debug(f"stat failed for {path!r}, treating as no match: {e}")
        return False


async def is_file(path: PathArg, use_lstat: bool = False) -> bool:
    """Check if a path exists and is a regular file."""
    return await _check_async(path, use_lstat, _stat.S_ISREG)


def is_file_sync(path: PathArg, use_lstat: bool = False) -> bool:
    return _check_sync(path, use_lstat, _stat.S_ISREG)


async def is_directory(path: PathArg, use_lstat: bool = False) -> bool:
    """Check if a path exists and is a directory."""
    return await _check_async(path, use_lstat, _stat.S_ISDIR)


def is_directory_sync(path: PathArg, use_lstat: bool = False) -> bool:
    return _check_sync(path, use_lstat, _stat.S_ISDIR)


async def is_symbolic_link(path: PathArg, use_lstat: bool = False) -> bool:
    """
    Check if a path exists and is a symbolic link.

    Only meaningful with ``use_lstat=True``; ``stat`` follows the link.
    """
    return await _check_async(path, use_lstat, _stat.S_ISLNK)


def is_symbolic_link_sync(path: PathArg, use_lstat: bool = False) -> bool:
    return _check_sync(path, use_lstat, _stat.S_ISLNK)


async def is_fifo(path: PathArg, use_lstat: bool = False) -> bool:
    """Check if a path exists and is a FIFO (named pipe)."""
    return await _check_async(path, use_lstat, _stat.S_ISFIFO)


def is_fifo_sync(path: PathArg, use_lstat: bool = False) -> bool:
    return _check_sync(path, use_lstat, _stat.S_ISFIFO)


async def is_socket(path: PathArg, use_lstat: bool = False) -> bool:
    """Check if a path exists and is a socket."""
    return await _check_async(path, use_lstat, _stat.S_ISSOCK)


def is_socket_sync(path: PathArg, use_lstat: bool = False) -> bool:
    return _check_sync(path, use_lstat, _stat.S_ISSOCK)


async def is_block_device(path: PathArg, use_lstat: bool = False) -> bool:
    """Check if a path exists and is a block device."""
    return await _check_async(path, use_lstat, _stat.S_ISBLK)


def is_block_device_sync(path: PathArg, use_lstat: bool = False) -> bool:
    return _check_sync(path, use_lstat, _stat.S_ISBLK)


async def is_character_device(path: PathArg, use_lstat: bool = False) -> bool:
    """Check if a path exists and is a character device."""
    return await _check_async(path, use_lstat, _stat.S_ISCHR)


def is_character_device_sync(path: PathArg, use_lstat: bool = False) -> bool:
    return _check_sync(path, use_lstat, _stat.S_ISCHR)


async def size(path: PathArg, use_lstat: bool = False) -> int:
    """
    Return the size of a filesystem entry in bytes.

    Raises:
        OSError: The underlying stat error, e.g. FileNotFoundError.
    """
    return (await _stat_async(path, use_lstat)).st_size


def size_sync(path: PathArg, use_lstat: bool = False) -> int:
    return _stat_sync(path, use_lstat).st_size


async def exists(path: PathArg) -> bool:
    """Check if a path exists. Never raises."""
    try:
        return await aiofiles.os.path.exists(path)
    except (OSError, ValueError, TypeError):
        return False


def exists_sync(path: PathArg) -> bool:
    try:
        return os.path.exists(path)
    except (OSError, ValueError, TypeError):
        return False


async def create_directory_if_needed(directory: PathArg) -> bool:
    """
    Create a directory if it does not exist yet.

    Only the directory itself is created, not missing ancestors.

    Returns:
        True if the directory was created, False if it already existed.

    Raises:
        NotADirectoryError: If the path exists but is not a directory.
        OSError: If the directory cannot be created.
    """
    if await is_directory(directory):
        return False
    try:
        await aiofiles.os.mkdir(directory)
    except FileExistsError:
        # Lost a race against another creator, or the path is something else
        if await is_directory(directory):
            return False
        raise NotADirectoryError(f"{os.fsdecode(directory)} exists and is not a directory") from None
    log.debug(f"Created directory {os.fsdecode(directory)}")
    return True


def create_directory_if_needed_sync(directory: PathArg) -> bool:
    if is_directory_sync(directory):
        return False
    try:
        os.mkdir(directory)
    except FileExistsError:
        if is_directory_sync(directory):
            return False
        raise NotADirectoryError(f"{os.fsdecode(directory)} exists and is not a directory") from None
    log.debug(f"Created directory {os.fsdecode(directory)}")
    return True


def _match_segments(parts: list[str], pattern: list[str]) -> bool:
    if not pattern:
        return not parts
    head = pattern[0]
    if head == "**":
        return any(_match_segments(parts[i:], pattern[1:]) for i in range(len(parts) + 1))
    return bool(parts) and fnmatch(parts[0], head) and _match_segments(parts[1:], pattern[1:])


def path_matches(path: str, pattern: str) -> bool:
    """
    Match a relative path against a glob pattern one path segment at a time.

    ``*`` and ``?`` never cross a separator; a ``**`` segment matches any
    number of directories.
    """
    parts = [p for p in path.replace(os.sep, "/").split("/") if p]
    pattern_parts = [p for p in pattern.replace(os.sep, "/").split("/") if p]
    return _match_segments(parts, pattern_parts)


def glob_sync(
    patterns: str | Iterable[str],
    cwd: str | None = None,
    recursive: bool = True,
    include_hidden: bool = False,
    nodir: bool = False,
    absolute: bool = False,
    ignore: str | Iterable[str] | None = None,
) -> list[str]:
    """
    Multi pattern version of ``glob.glob``.

    Matches of all patterns are unioned in first-seen order without
    duplicates.

    Args:
        patterns: One or more glob patterns. ``**`` matches across directories
            when ``recursive`` is set.
        cwd: Directory relative patterns are resolved against. Defaults to
            the current working directory.
        recursive: Enable ``**``.
        include_hidden: Let wildcards match names starting with a dot.
        nodir: Leave directories out of the result.
        absolute: Return absolute paths.
        ignore: Glob patterns, matched per path segment; matching results
            are dropped.

    Returns:
        The matching paths.
    """
    ignore_patterns = as_array(ignore) if ignore is not None else []
    base = cwd or os.getcwd()

    seen: set[str] = set()
    matches: list[str] = []
    for pattern in as_array(patterns):
        for match in _glob.glob(pattern, root_dir=cwd, recursive=recursive, include_hidden=include_hidden):
            full_path = os.path.join(base, match)
            if nodir and os.path.isdir(full_path):
                continue
            if any(path_matches(match, p) for p in ignore_patterns):
                continue
            result = os.path.abspath(full_path) if absolute else match
            if result in seen:
                continue
            seen.add(result)
            matches.append(result)
    return matches


async def glob(
    patterns: str | Iterable[str],
    cwd: str | None = None,
    recursive: bool = True,
    include_hidden: bool = False,
    nodir: bool = False,
    absolute: bool = False,
    ignore: str | Iterable[str] | None = None,
) -> list[str]:
    """Async version of :func:`glob_sync`, run in a worker thread."""
    return await asyncio.to_thread(
        glob_sync,
        patterns,
        cwd=cwd,
        recursive=recursive,
        include_hidden=include_hidden,
        nodir=nodir,
        absolute=absolute,
        ignore=ignore,
    )
