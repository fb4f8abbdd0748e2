# -*- coding: utf-8 -*-
# Copyright (c) 2025-present tandemdude
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
from __future__ import annotations

__all__ = ["MaybeAwaitable", "Shared", "gather", "maybe_await"]

import asyncio
import inspect
import typing as t

if t.TYPE_CHECKING:
    from collections.abc import Awaitable
    from collections.abc import Generator
    from collections.abc import Iterable

T = t.TypeVar("T")

MaybeAwaitable: t.TypeAlias = t.Union[T, t.Awaitable[T]]
"""TypeAlias for an item that might be able to be awaited."""


async def maybe_await(item: MaybeAwaitable[T]) -> T:
    """
    Await the given item if it is awaitable, otherwise just return the given item.

    Args:
        item: The item to maybe await.

    Returns:
        The item, or the return once the item was awaited.
    """
    if inspect.isawaitable(item):
        return await item
    return t.cast("T", item)


async def gather(items: Iterable[MaybeAwaitable[t.Any]]) -> list[t.Any]:
    """
    Settle every item concurrently, preserving the order of the given items in the result.

    If any of the items fails, the exception from the first failure is raised. The remaining items are not
    cancelled - they may be shared with other resolutions - and keep running to completion. Exceptions they raise
    afterwards are left to asyncio's default handling, which reports them as never retrieved.

    Args:
        items: The items to settle. Items that are not awaitable are returned unchanged.

    Returns:
        The settled values, in the same order as the items.
    """
    items = list(items)
    if not any(inspect.isawaitable(item) for item in items):
        return items
    return list(await asyncio.gather(*(maybe_await(item) for item in items)))


class Shared(t.Generic[T]):
    """
    Wrapper allowing an awaitable to be awaited any number of times, by any number of awaiters.

    The wrapped awaitable is scheduled as a task the first time this object is awaited, and all
    awaiters observe the same result (or the same exception).

    Args:
        awaitable: The awaitable to share.

    Example:

        .. code-block:: python

            >>> async def compute() -> int:
            ...     return 42
            >>> shared = Shared(compute())
            >>> await shared, await shared
            (42, 42)
    """

    __slots__ = ("_awaitable", "_future")

    def __init__(self, awaitable: Awaitable[T]) -> None:
        self._awaitable = awaitable
        self._future: asyncio.Future[T] | None = None

    def __await__(self) -> Generator[t.Any, None, T]:
        if self._future is None:
            self._future = asyncio.ensure_future(self._awaitable)
        return self._future.__await__()

    def __repr__(self) -> str:
        state = "pending" if self._future is None or not self._future.done() else "done"
        return f"<namedi.{self.__class__.__name__} ({state}): {self._awaitable!r}>"
