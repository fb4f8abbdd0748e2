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

__all__ = ["params"]

import inspect
import typing as t

from namedi import exceptions

if t.TYPE_CHECKING:
    from collections.abc import Callable

_POSITIONAL_KINDS: t.Final[tuple[inspect._ParameterKind, ...]] = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def params(fn: Callable[..., t.Any]) -> list[str]:
    """
    Get the names of the parameters of the given callable that dependencies can be passed to.

    Only parameters that can be passed positionally are included, in the order they are declared.
    Variadic parameters (``*args`` and ``**kwargs``) and keyword-only parameters are skipped. The receiver
    parameter of a bound method is never included.

    The result is computed from the signature each time this is called, it is never cached.

    Args:
        fn: The callable to get the parameter names of.

    Returns:
        The parameter names of the callable.

    Raises:
        :obj:`~namedi.exceptions.ParameterExtractionException`: If the signature of the callable cannot
            be inspected.

    Example:

        .. code-block:: python

            >>> def handler(db, cache, *args, verbose=False): ...
            >>> params(handler)
            ['db', 'cache']
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError) as e:
        raise exceptions.ParameterExtractionException(f"could not inspect the signature of {fn!r}") from e

    return [parameter.name for parameter in signature.parameters.values() if parameter.kind in _POSITIONAL_KINDS]
