"""
Positional string formatting with ``{index}`` placeholders.

Placeholders take an optional list of modifiers after a colon, applied left
to right: ``{0:trim,upper}``. Supported modifiers are ``lower``, ``upper``,
``trim``, ``leading_space``, ``ending_space`` and ``surround`` (wrap in
single quotes). ``None`` arguments render as an empty string, and
placeholders without a matching argument are left as they are.

Example:
    >>> format("{0} and {1:upper}", "tom", "jerry")
    'tom and JERRY'
"""

import re
from collections.abc import Callable, Iterable
from typing import Any

from deferio.utils.values import to_array, to_string_safe

_PLACEHOLDER = re.compile(r"\{(\d+)(?::([^}]*))?\}")

_MODIFIERS: dict[str, Callable[[str], str]] = {
    "lower": str.lower,
    "upper": str.upper,
    "trim": str.strip,
    "leading_space": lambda s: f" {s}" if s else s,
    "ending_space": lambda s: f"{s} " if s else s,
    "surround": lambda s: f"'{s}'",
}


def format_array(format_str: Any, args: Iterable[Any] | None) -> str:
    """
    Format a string with arguments taken from a sequence.

    Raises:
        ValueError: If a placeholder uses an unknown modifier.
    """
    values = to_array(args) or []
    template = to_string_safe(format_str)

    def replace(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index >= len(values):
            return match.group(0)

        text = to_string_safe(values[index])
        for modifier in (match.group(2) or "").split(","):
            modifier = modifier.strip().lower()
            if not modifier:
                continue
            try:
                text = _MODIFIERS[modifier](text)
            except KeyError:
                raise ValueError(f"Unknown format modifier '{modifier}'") from None
        return text

    return _PLACEHOLDER.sub(replace, template)


def format(format_str: Any, *args: Any) -> str:  # noqa: A001
    """Format a string with positional arguments, see :func:`format_array`."""
    return format_array(format_str, args)
