from .binary import is_binary_content, is_binary_content_sync, random_bytes
from .formatting import format, format_array  # noqa: A004
from .iteration import for_each_async
from .values import (
    as_array,
    clone_object,
    clone_object_flat,
    compare_values,
    compare_values_by,
    does_match,
    is_empty_string,
    normalize_string,
    to_array,
    to_boolean_safe,
    to_string_safe,
)

__all__ = [
    "as_array",
    "clone_object",
    "clone_object_flat",
    "compare_values",
    "compare_values_by",
    "does_match",
    "for_each_async",
    "format",
    "format_array",
    "is_binary_content",
    "is_binary_content_sync",
    "is_empty_string",
    "normalize_string",
    "random_bytes",
    "to_array",
    "to_boolean_safe",
    "to_string_safe",
]
