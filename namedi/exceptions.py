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

__all__ = [
    "DependencyInjectionException",
    "DependencyNotSatisfiableException",
    "InvalidArgumentsException",
    "ParameterExtractionException",
]


class DependencyInjectionException(Exception):
    """Base class for all exceptions raised from the dependency injection functionality."""


class InvalidArgumentsException(DependencyInjectionException, TypeError):
    """Exception raised when a preset arguments value is not a sequence of arguments."""


class ParameterExtractionException(DependencyInjectionException):
    """Exception raised when the parameter names of a callable cannot be determined."""


class DependencyNotSatisfiableException(DependencyInjectionException):
    """
    Exception raised when a dependency is requested but no injector in the chain can provide it.

    This is only raised when strict resolution is enabled - by default an unsatisfiable dependency
    resolves to :obj:`None`.

    Args:
        name: The name of the dependency that could not be satisfied.
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        super().__init__(f"no value or factory is available for dependency {name!r}")
        self.name: str = name
