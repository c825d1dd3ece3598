"""
Helpers for values that may or may not be awaitable.

Collection adapters can be backed by an in-memory list or by a remote store,
so their ``add``/``remove`` results are either plain values or awaitables.
``when`` gives both cases a single continuation point.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, TypeVar, Union

T = TypeVar('T')
R = TypeVar('R')

MaybeAwaitable = Union[T, Awaitable[T]]


async def resolve(value: MaybeAwaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def when(value: MaybeAwaitable[T], on_value: Callable[[T], MaybeAwaitable[R]]) -> Any:
    """
    Continue with ``on_value`` once ``value`` is available.

    A plain value is handed to ``on_value`` immediately and its result is
    returned, so exceptions propagate synchronously. An awaitable value is
    chained into an ``asyncio.Task`` that resolves to ``on_value``'s result;
    failures are carried on that task.
    """
    if not inspect.isawaitable(value):
        return on_value(value)

    async def _chain():
        result = await value
        return await resolve(on_value(result))

    return asyncio.ensure_future(_chain())


__all__ = ['MaybeAwaitable', 'resolve', 'when']
