import inspect
from collections.abc import AsyncIterable, Awaitable, Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def for_each_async(
    items: Iterable[T] | AsyncIterable[T] | None,
    action: Callable[[T, int, list[T]], R | Awaitable[R]],
) -> R | None:
    """
    Run an action for each item, one after another.

    The action is called as ``action(item, index, items)`` where ``items`` is
    the list of all items. It may be a plain function or a coroutine
    function; awaitable results are awaited before the next item starts.
    Errors raised by the action stop the iteration and propagate.

    Args:
        items: The items to iterate. Async iterables are collected first.
        action: The action to run per item.

    Returns:
        The result of the last action call, or None if there were no items.
    """
    if items is None:
        return None
    if isinstance(items, AsyncIterable):
        all_items = [item async for item in items]
    else:
        all_items = list(items)

    result: Any = None
    for index, item in enumerate(all_items):
        result = action(item, index, all_items)
        if inspect.isawaitable(result):
            result = await result
    return result
