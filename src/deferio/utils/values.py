"""
Small value helpers used to normalize caller input.
"""

import copy
import inspect
import types
from collections.abc import Callable, Iterable
from fnmatch import fnmatch
from typing import Any, TypeVar

T = TypeVar("T")


def as_array(value: T | Iterable[T] | None, remove_empty: bool = True) -> list[T]:
    """
    Return a value as a new list.

    Strings and bytes count as single values. Any other iterable is copied
    into a list. With ``remove_empty`` (the default) ``None`` items are dropped.

    Example:
        >>> as_array("*.txt")
        ['*.txt']
        >>> as_array(["a", None, "b"])
        ['a', 'b']
    """
    if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, Iterable):
        items = [value]
    else:
        items = list(value)

    if remove_empty:
        items = [item for item in items if item is not None]
    return items  # type: ignore[return-value]


def to_string_safe(value: Any, default: str = "") -> str:
    """Return ``str(value)``, or ``default`` when value is None."""
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def to_boolean_safe(value: Any, default: bool = False) -> bool:
    """Return ``bool(value)``, or ``default`` when value is None."""
    if value is None:
        return default
    return bool(value)


def is_empty_string(value: Any) -> bool:
    """Check if the string form of a value is empty or whitespace only."""
    return to_string_safe(value).strip() == ""


def normalize_string(value: Any, normalizer: Callable[[str], str] | None = None) -> str:
    """
    Normalize a value as string so that it is comparable.

    Without a custom ``normalizer`` the value is lower-cased and stripped.
    """
    if normalizer is None:
        return to_string_safe(value).lower().strip()
    return normalizer(to_string_safe(value))


def does_match(value: Any, patterns: str | Iterable[str]) -> bool:
    """
    Check if the string form of a value matches at least one shell-style pattern.

    Patterns are Unix shell-style wildcards (fnmatch).
    """
    text = to_string_safe(value)
    return any(fnmatch(text, pattern) for pattern in as_array(patterns))


def to_array(seq: Iterable[T] | None, normalize: bool = True) -> list[T] | None:
    """
    Return a sequence as a new list.

    Unlike :func:`as_array`, every iterable is expanded, strings included.

    Args:
        seq: The sequence to copy.
        normalize: Return an empty list, instead of None, for a None input.
    """
    if seq is None:
        return [] if normalize else None
    return list(seq)


def compare_values(x: Any, y: Any) -> int:
    """
    Compare two values for a sort operation.

    Returns -1, 0 or 1. Values that cannot be ordered against each other
    compare as equal.

    Example:
        sorted(items, key=functools.cmp_to_key(compare_values))
    """
    try:
        if x == y:
            return 0
        if x > y:
            return 1
        if x < y:
            return -1
    except TypeError:
        pass
    return 0


def compare_values_by(x: T, y: T, selector: Callable[[T], Any]) -> int:
    """Compare two values by the keys ``selector`` picks from them."""
    return compare_values(selector(x), selector(y))


def clone_object(value: T) -> T:
    """Deep copy a value."""
    return copy.deepcopy(value)


def clone_object_flat(value: T, rebind_methods: bool = True) -> T:
    """
    Shallow copy a value.

    Nested values are shared with the source. For objects with an
    instance ``__dict__``, methods bound to the source instance that were
    stored as attributes are re-bound to the clone when ``rebind_methods``
    is set; otherwise they keep pointing at the source.
    """
    if value is None:
        return value
    clone = copy.copy(value)
    if rebind_methods and hasattr(clone, "__dict__"):
        for name, attr in list(vars(clone).items()):
            if inspect.ismethod(attr) and attr.__self__ is value:
                setattr(clone, name, types.MethodType(attr.__func__, clone))
    return clone
