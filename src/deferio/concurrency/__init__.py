from .async_iterators import AsyncByteStream, async_chunks_of
from .completion import CompletedAction, CompletionRejected, create_completed_action
from .value_resolver import (
    ResolutionContext,
    ResolutionError,
    ResolutionErrorKind,
    ResolvableKind,
    ValueResolver,
    as_buffer,
    classify,
    resolve,
)

__all__ = [
    "AsyncByteStream",
    "CompletedAction",
    "CompletionRejected",
    "ResolutionContext",
    "ResolutionError",
    "ResolutionErrorKind",
    "ResolvableKind",
    "ValueResolver",
    "as_buffer",
    "async_chunks_of",
    "classify",
    "create_completed_action",
    "resolve",
]
