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
"""Storage for the dependency names of injectable functions."""

from __future__ import annotations

__all__ = ["InjectionTable", "inject", "injects", "injection_table"]

import logging
import typing as t
import weakref

from namedi import params as params_

if t.TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Sequence

FnT = t.TypeVar("FnT", bound=t.Callable[..., t.Any])

LOGGER = logging.getLogger(__name__)


def _is_bound(fn: t.Any) -> bool:
    return getattr(fn, "__self__", None) is not None and hasattr(fn, "__func__")


def _key_for(fn: t.Any) -> t.Any:
    # Bound methods are recreated on every attribute access, store their names against the function
    return fn.__func__ if _is_bound(fn) else fn


class _Entry:
    __slots__ = ("bound", "explicit", "names")

    def __init__(self) -> None:
        self.names: list[str] | None = None
        self.bound: list[str] | None = None
        self.explicit: bool = False


class InjectionTable:
    """
    Side table mapping functions to the ordered names of the dependencies they require.

    Functions are held weakly, so an entry lives for exactly as long as the function it describes. Callables
    that cannot be weakly referenced (for example some builtins) are held in a regular dictionary instead.

    Names set explicitly for a function apply to the function and to every method bound from it. Names computed
    from a signature are stored separately for the function and for methods bound from it, as binding removes the
    receiver parameter.
    """

    __slots__ = ("_strong", "_weak")

    def __init__(self) -> None:
        self._weak: weakref.WeakKeyDictionary[t.Any, _Entry] = weakref.WeakKeyDictionary()
        self._strong: dict[t.Any, _Entry] = {}

    def _entry(self, fn: t.Any, create: bool) -> _Entry | None:
        key = _key_for(fn)
        table: t.MutableMapping[t.Any, _Entry]
        try:
            entry, table = self._weak.get(key), self._weak
        except TypeError:
            entry, table = self._strong.get(key), self._strong

        if entry is None and create:
            entry = table[key] = _Entry()
        return entry

    def get(self, fn: t.Any) -> list[str] | None:
        if (entry := self._entry(fn, False)) is None:
            return None
        if entry.explicit or not _is_bound(fn):
            return entry.names
        return entry.bound

    def set(self, fn: t.Any, names: list[str], *, explicit: bool = True) -> None:
        entry = self._entry(fn, True)
        assert entry is not None

        if explicit:
            entry.names, entry.bound, entry.explicit = names, None, True
        elif _is_bound(fn):
            entry.bound = names
        else:
            entry.names = names


injection_table: InjectionTable = InjectionTable()
"""The global table of function dependency names."""


@t.overload
def inject(fn: Callable[..., t.Any], names: None = None, /) -> list[str]: ...
@t.overload
def inject(fn: FnT, names: Sequence[str], /) -> FnT: ...
def inject(fn: t.Any, names: Sequence[str] | None = None, /) -> t.Any:
    """
    Get or set the dependency names of the given function.

    When ``names`` is given, they replace any names previously stored for the function - including names
    that were computed automatically - and the function is returned. Otherwise, the stored names are returned,
    computing them from the function's parameters (and storing them) the first time.

    Args:
        fn: The function to get or set the dependency names of.
        names: The dependency names to set. Defaults to :obj:`None`.

    Returns:
        The dependency names of the function, or the function itself if ``names`` were given.

    Note:
        Names set explicitly for a function apply to every method bound from it. Names computed from a bound
        method describe the bound signature - without the receiver - and are stored apart from the names computed
        for the function itself, so repeated calls give the same list for both.
    """
    if names is not None:
        names = list(names)
        injection_table.set(fn, names)
        LOGGER.debug("set dependencies of %r to %r", fn, names)
        return fn

    if (existing := injection_table.get(fn)) is not None:
        return existing

    computed = params_.params(fn)
    injection_table.set(fn, computed, explicit=False)
    return computed


def injects(*names: str) -> Callable[[FnT], FnT]:
    """
    Decorator that explicitly sets the dependency names of the decorated function, instead of them being
    computed from its parameters.

    Args:
        *names: The names of the dependencies, in the order they should be passed to the function.

    Returns:
        The decorator.

    Example:

        .. code-block:: python

            @namedi.injects("database", "settings")
            def make_repository(db, cfg):
                ...
    """

    def inner(fn: FnT) -> FnT:
        return inject(fn, names)

    return inner
