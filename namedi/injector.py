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

__all__ = ["STRICT", "Injector"]

import collections.abc
import functools
import inspect
import logging
import os
import types
import typing as t

from namedi import exceptions
from namedi import metadata
from namedi import params as params_
from namedi import utils

if t.TYPE_CHECKING:
    from collections.abc import Awaitable
    from collections.abc import Callable
    from collections.abc import Coroutine
    from collections.abc import Iterable
    from collections.abc import Mapping
    from collections.abc import MutableMapping
    from collections.abc import Sequence

    from typing_extensions import Self

    _ResolvedFunction: t.TypeAlias = Awaitable[tuple[Callable[..., t.Any], list[t.Any]]]

STRICT: t.Final[bool] = os.environ.get("NAMEDI_STRICT", "false").lower() == "true"
"""
Whether dependencies that cannot be satisfied by any injector cause resolution to fail. When this is :obj:`False`
(the default) such dependencies resolve to :obj:`None`. Set the ``NAMEDI_STRICT`` environment variable
to ``true`` to enable.
"""
LOGGER = logging.getLogger(__name__)


def _bind(fn: Callable[..., t.Any], context: t.Any) -> Callable[..., t.Any]:
    if not context:
        return fn
    return types.MethodType(fn, context)


def _shared(value: t.Any) -> t.Any:
    if inspect.iscoroutine(value):
        return utils.Shared(value)
    return value


def _share_coroutines(mapping: t.Any) -> None:
    # Copies of a mapping must hold the same wrapper, a coroutine can only be awaited once
    if not isinstance(mapping, collections.abc.MutableMapping):
        return
    for name, value in list(mapping.items()):
        if inspect.iscoroutine(value):
            mapping[name] = utils.Shared(value)


def _check_args(args: t.Any) -> tuple[t.Any, ...]:
    if args is None:
        return ()
    if not isinstance(args, collections.abc.Sequence) or isinstance(args, (str, bytes)):
        raise exceptions.InvalidArgumentsException("the 'args' parameter must be a sequence of arguments")
    return tuple(args)


async def _with_target(
    target: Callable[..., t.Any], deps: Awaitable[list[t.Any]]
) -> tuple[Callable[..., t.Any], list[t.Any]]:
    return target, await deps


async def _invoke(resolving: _ResolvedFunction, args: Sequence[t.Any]) -> t.Any:
    target, deps = await resolving
    LOGGER.debug("calling function %r with resolved dependencies", target)
    return await utils.maybe_await(target(*deps, *args))


async def _unsatisfiable(name: str) -> t.NoReturn:
    raise exceptions.DependencyNotSatisfiableException(name)


class Injector:
    """
    Dependency injector resolving named dependencies from a registry of values, a table of factories,
    and an optional parent injector.

    A name is resolved by looking in the injector's own registry, then in its own factories, and then by
    asking the parent. Factories are themselves dependency-injected - their dependencies are resolved
    starting from the injector that the resolution was originally requested from, so values registered to a
    child injector take precedence over those of the parent that owns the factory.

    Args:
        registry: Name/value pairs of dependencies, or an injector to inherit from. Defaults to :obj:`None`.
        factories: Name/factory pairs, or the parent injector if no third argument is given.
            Defaults to :obj:`None`.
        parent: The injector used when this injector cannot resolve a dependency. Defaults to :obj:`None`.

    If ``registry`` is an injector and a parent is given, the registry and factories of that injector are
    copied into the new injector. If ``registry`` is an injector and no parent is given, it becomes the parent of
    the new injector. Otherwise, the given mappings are used directly as the registry and factories of the new
    injector - they are not copied.

    Example:

        .. code-block:: python

            injector = namedi.Injector({"greeting": "hello"})

            def greet(greeting, name):
                return f"{greeting} {name}"

            await injector.call(greet, None, "world")  # "hello world"
    """

    __slots__ = ("factories", "parent", "registry")

    def __init__(
        self,
        registry: MutableMapping[str, t.Any] | Injector | None = None,
        factories: MutableMapping[str, t.Any] | Injector | None = None,
        parent: Injector | None = None,
    ) -> None:
        self.registry: MutableMapping[str, t.Any] | None = None
        self.factories: MutableMapping[str, t.Any] | None = None
        self.parent: Injector | None = None

        if isinstance(factories, Injector) and parent is None:
            parent, factories = factories, None

        if isinstance(registry, Injector):
            if parent is not None:
                if registry.registry is not None:
                    self.register(registry)
                if registry.factories is not None:
                    self.register_factory(registry)
                self.parent = parent
            else:
                self.parent = registry
        else:
            _share_coroutines(registry)
            _share_coroutines(factories)
            self.registry = registry
            self.factories = factories
            self.parent = parent

    def create(
        self, registry: MutableMapping[str, t.Any] | None = None, factories: MutableMapping[str, t.Any] | None = None
    ) -> Injector:
        """
        Create a child injector of this injector.

        Args:
            registry: Name/value pairs of dependencies for the child. Defaults to :obj:`None`.
            factories: Name/factory pairs for the child. Defaults to :obj:`None`.

        Returns:
            The new child injector.

        Example:

            .. code-block:: python

                parent = namedi.Injector({"foo": "bar"})
                child = parent.create({"baz": "qux"})
                # Equivalent to
                child = namedi.Injector({"baz": "qux"}, parent)
        """
        LOGGER.debug("creating child injector of %r", self)
        return Injector(registry, factories, self)

    def register(self, name: str | Mapping[str, t.Any] | Injector, value: t.Any = None) -> Self:
        """
        Register a dependency value to this injector, replacing any value already registered with the same name.

        Args:
            name: The name of the dependency. Alternatively a mapping of name/value pairs, or another injector,
                in which case every value from the mapping or from the injector's registry is registered.
            value: The value of the dependency. This may be awaitable, in which case it is awaited before being
                passed to the target function. Defaults to :obj:`None`.

        Returns:
            The injector, for chaining.

        Note:
            Coroutines are wrapped in a :obj:`~namedi.utils.Shared` when registered, including coroutines held by
            a registered mapping or injector, so that every injector holding the value observes the same result.
        """
        if self.registry is None:
            self.registry = {}

        if isinstance(name, str):
            self.registry[name] = _shared(value)
            LOGGER.debug("registered value for %r", name)
        elif isinstance(name, Injector):
            _share_coroutines(name.registry)
            self.registry.update(name.registry or {})
        else:
            _share_coroutines(name)
            self.registry.update({key: _shared(item) for key, item in name.items()})
        return self

    def unregister(self, name: str) -> Self:
        """
        Remove a dependency value from this injector. Does nothing if no value was registered with the name.

        Args:
            name: The name of the dependency to remove.

        Returns:
            The injector, for chaining.
        """
        if self.registry is not None:
            self.registry.pop(name, None)
            LOGGER.debug("unregistered value for %r", name)
        return self

    def register_factory(self, name: str | Mapping[str, t.Any] | Injector, fn: t.Any = None) -> Self:
        """
        Register a factory to this injector. When the dependency is requested, the factory will be called with its
        own dependencies injected, and the value it returns (awaited if necessary) is used as the dependency.

        The factory is called each time the dependency is resolved.

        Args:
            name: The name of the dependency. Alternatively a mapping of name/factory pairs, or another injector,
                in which case every factory from the mapping or from the injector's factories is registered.
            fn: The factory. This may also be an awaitable that gives the factory. Defaults to :obj:`None`.

        Returns:
            The injector, for chaining.

        Warning:
            Take care that factories do not depend on themselves, either directly or through other factories.
            Dependency cycles are not detected and will recurse until the interpreter's recursion limit is reached.
        """
        if self.factories is None:
            self.factories = {}

        if isinstance(name, str):
            self.factories[name] = _shared(fn)
            LOGGER.debug("registered factory for %r", name)
        elif isinstance(name, Injector):
            _share_coroutines(name.factories)
            self.factories.update(name.factories or {})
        else:
            _share_coroutines(name)
            self.factories.update({key: _shared(item) for key, item in name.items()})
        return self

    factory = register_factory

    def unregister_factory(self, name: str) -> Self:
        """
        Remove a factory from this injector. Does nothing if no factory was registered with the name.

        Args:
            name: The name of the dependency to remove the factory for.

        Returns:
            The injector, for chaining.
        """
        if self.factories is not None:
            self.factories.pop(name, None)
            LOGGER.debug("unregistered factory for %r", name)
        return self

    def _lookup(self, name: str, root: Injector) -> t.Any:
        if self.registry is not None and (value := self.registry.get(name)) is not None:
            LOGGER.debug("dependency %r found in registry", name)
            if inspect.iscoroutine(value):
                self.registry[name] = value = utils.Shared(value)
            return value

        if self.factories is not None and (factory := self.factories.get(name)) is not None:
            LOGGER.debug("invoking factory for dependency %r", name)
            if inspect.iscoroutine(factory):
                self.factories[name] = factory = utils.Shared(factory)
            return root.apply(factory)

        if self.parent is not None:
            LOGGER.debug("delegating dependency %r to parent injector", name)
            return self.parent._lookup(name, root)

        if STRICT:
            return _unsatisfiable(name)

        LOGGER.debug("no value available for dependency %r", name)
        return None

    def resolve(self, deps: str | Iterable[str], root: Injector | None = None) -> Coroutine[t.Any, t.Any, list[t.Any]]:
        """
        Resolve the given dependencies to their values.

        The values are looked up when this method is called, so later changes to the registry or factories are not
        reflected in the result. Awaitable values are awaited concurrently, and the result is in the same order as
        the requested names. Names that cannot be resolved give :obj:`None`, unless :obj:`STRICT` is enabled.

        Args:
            deps: The name, or names, of the dependencies to resolve.
            root: The injector to resolve the dependencies of any factories from. Defaults to this injector.

        Returns:
            Awaitable giving the resolved values.

        Raises:
            :obj:`Exception`: Any exception raised while awaiting a value or calling a factory is raised when the
                result is awaited.

        Warning:
            Factory calls are prepared as coroutines when this method is called. If the returned awaitable is never
            awaited, neither are they, and Python warns about each of them when they are garbage collected. The same
            applies to functions created by :meth:`aresolved` that are never called.
        """
        names = [deps] if isinstance(deps, str) else list(deps)
        root = root if root is not None else self

        if not STRICT and self.registry is None and self.factories is None and self.parent is None:
            return utils.gather([None] * len(names))

        return utils.gather([self._lookup(name, root) for name in names])

    def inject(self, fn: Callable[..., t.Any], names: Sequence[str] | None = None) -> t.Any:
        """
        Get or set the dependency names of the given function.

        Args:
            fn: The function to get or set the dependency names of.
            names: The dependency names to set. Defaults to :obj:`None`.

        Returns:
            The dependency names of the function, or the injector (for chaining) if ``names`` were given.

        See Also:
            :meth:`namedi.metadata.inject`
        """
        if names is not None:
            metadata.inject(fn, names)
            return self
        return metadata.inject(fn)

    params = staticmethod(params_.params)

    def _resolve_function(self, fn: t.Any, context: t.Any) -> _ResolvedFunction:
        if inspect.isawaitable(fn):

            async def later() -> tuple[Callable[..., t.Any], list[t.Any]]:
                return await self._resolve_function(await fn, context)

            return later()

        target = _bind(fn, context)
        return _with_target(target, self.resolve(metadata.inject(target)))

    def apply(self, fn: t.Any, context: t.Any = None, args: Sequence[t.Any] = ()) -> Coroutine[t.Any, t.Any, t.Any]:
        """
        Call a function with its dependencies injected, followed by the given arguments.

        Args:
            fn: The function to call. This may also be an awaitable that gives the function.
            context: The object to bind the function to, passed as its first argument if it is truthy.
                Defaults to :obj:`None`.
            args: Arguments to pass after the dependencies. Defaults to an empty tuple.

        Returns:
            Awaitable giving the return value of the function, awaited if necessary.
        """
        return _invoke(self._resolve_function(fn, context), tuple(args))

    def call(self, fn: t.Any, context: t.Any = None, /, *args: t.Any) -> Coroutine[t.Any, t.Any, t.Any]:
        """
        Call a function with its dependencies injected, followed by the given arguments.

        Args:
            fn: The function to call. This may also be an awaitable that gives the function.
            context: The object to bind the function to, passed as its first argument if it is truthy.
                Defaults to :obj:`None`.
            *args: Arguments to pass after the dependencies.

        Returns:
            Awaitable giving the return value of the function, awaited if necessary.

        Example:

            .. code-block:: python

                injector = namedi.Injector({"foo": "bar"})
                injector.inject(fn := lambda x, y: [x, y], ["foo"])

                await injector.call(fn, None, "baz")  # ["bar", "baz"]
        """
        return self.apply(fn, context, args)

    def abind(
        self, fn: t.Any, context: t.Any = None, args: Sequence[t.Any] | None = None
    ) -> Callable[..., Coroutine[t.Any, t.Any, t.Any]]:
        """
        Create a function that calls ``fn`` with its dependencies injected. The dependencies are resolved again
        each time the created function is called.

        Args:
            fn: The function to call. This may also be an awaitable that gives the function.
            context: The object to bind the function to, passed as its first argument if it is truthy.
                Defaults to :obj:`None`.
            args: Arguments to pass after the dependencies. Arguments given to the created function are passed
                before these. Defaults to :obj:`None`.

        Returns:
            The created function. It returns an awaitable giving the return value of ``fn``.
        """
        preset = tuple(args or ())

        def bound(*runtime_args: t.Any) -> Coroutine[t.Any, t.Any, t.Any]:
            return self.apply(fn, context, (*runtime_args, *preset))

        return bound

    apply_bind = abind

    def bind(self, fn: t.Any, context: t.Any = None, /, *args: t.Any) -> Callable[..., Coroutine[t.Any, t.Any, t.Any]]:
        """
        Create a function that calls ``fn`` with its dependencies injected. The dependencies are resolved again
        each time the created function is called.

        See Also:
            :meth:`abind`
        """
        return self.abind(fn, context, args)

    def aresolved(
        self, fn: t.Any, context: t.Any = None, args: Sequence[t.Any] | None = None
    ) -> Callable[..., Coroutine[t.Any, t.Any, t.Any]]:
        """
        Create a function that calls ``fn`` with its dependencies injected. The dependencies are resolved once,
        when this method is called, and the same values are passed on every call to the created function.

        Args:
            fn: The function to call. This may also be an awaitable that gives the function.
            context: The object to bind the function to, passed as its first argument if it is truthy.
                Defaults to :obj:`None`.
            args: Arguments to pass after the dependencies. Arguments given to the created function are passed
                after these. Defaults to :obj:`None`.

        Returns:
            The created function. It returns an awaitable giving the return value of ``fn``.

        Raises:
            :obj:`~namedi.exceptions.InvalidArgumentsException`: If ``args`` is not a sequence.
        """
        preset = _check_args(args)
        resolved = utils.Shared(self._resolve_function(fn, context))

        def resolved_function(*runtime_args: t.Any) -> Coroutine[t.Any, t.Any, t.Any]:
            return _invoke(resolved, (*preset, *runtime_args))

        return resolved_function

    apply_resolved = aresolved

    def resolved(
        self, fn: t.Any, context: t.Any = None, /, *args: t.Any
    ) -> Callable[..., Coroutine[t.Any, t.Any, t.Any]]:
        """
        Create a function that calls ``fn`` with its dependencies injected. The dependencies are resolved once,
        when this method is called, and the same values are passed on every call to the created function.

        See Also:
            :meth:`aresolved`
        """
        return self.aresolved(fn, context, args)

    def aresolver(
        self, fn: t.Any, context: t.Any = None, args: Sequence[t.Any] | None = None
    ) -> Coroutine[t.Any, t.Any, Callable[..., t.Any]]:
        """
        Resolve the dependencies of ``fn`` once, giving a plain function with the dependency values
        (followed by ``args``) already applied. Calling the given function returns the return value of ``fn``
        directly - it is not awaitable unless ``fn`` itself returns an awaitable.

        Args:
            fn: The function to resolve. This may also be an awaitable that gives the function.
            context: The object to bind the function to, passed as its first argument if it is truthy.
                Defaults to :obj:`None`.
            args: Arguments to apply after the dependencies. Defaults to :obj:`None`.

        Returns:
            Awaitable giving the function with its dependencies applied.

        Raises:
            :obj:`~namedi.exceptions.InvalidArgumentsException`: If ``args`` is not a sequence.
        """
        preset = _check_args(args)
        resolving = self._resolve_function(fn, context)

        async def resolver() -> Callable[..., t.Any]:
            target, deps = await resolving
            return functools.partial(target, *deps, *preset)

        return resolver()

    apply_resolver = aresolver

    def resolver(
        self, fn: t.Any, context: t.Any = None, /, *args: t.Any
    ) -> Coroutine[t.Any, t.Any, Callable[..., t.Any]]:
        """
        Resolve the dependencies of ``fn`` once, giving a plain function with the dependency values
        (followed by ``args``) already applied.

        See Also:
            :meth:`aresolver`
        """
        return self.aresolver(fn, context, args)

    # Method variants. These call the named method of the given object, looked up when dependencies are resolved.

    def mapply(self, obj: t.Any, method: str, args: Sequence[t.Any] = ()) -> Coroutine[t.Any, t.Any, t.Any]:
        """
        Call the named method of ``obj`` with its dependencies injected, followed by the given arguments.

        See Also:
            :meth:`apply`
        """
        return self.apply(getattr(obj, method), None, args)

    def mcall(self, obj: t.Any, method: str, /, *args: t.Any) -> Coroutine[t.Any, t.Any, t.Any]:
        """
        Call the named method of ``obj`` with its dependencies injected, followed by the given arguments.

        See Also:
            :meth:`call`
        """
        return self.mapply(obj, method, args)

    def ambind(
        self, obj: t.Any, method: str, args: Sequence[t.Any] | None = None
    ) -> Callable[..., Coroutine[t.Any, t.Any, t.Any]]:
        """
        Create a function that calls the named method of ``obj`` with its dependencies injected. The method and its
        dependencies are looked up again each time the created function is called.

        See Also:
            :meth:`abind`
        """
        preset = tuple(args or ())

        def bound(*runtime_args: t.Any) -> Coroutine[t.Any, t.Any, t.Any]:
            return self.mapply(obj, method, (*runtime_args, *preset))

        return bound

    def mbind(self, obj: t.Any, method: str, /, *args: t.Any) -> Callable[..., Coroutine[t.Any, t.Any, t.Any]]:
        """See :meth:`ambind`."""
        return self.ambind(obj, method, args)

    def amresolved(
        self, obj: t.Any, method: str, args: Sequence[t.Any] | None = None
    ) -> Callable[..., Coroutine[t.Any, t.Any, t.Any]]:
        """
        Create a function that calls the named method of ``obj`` with its dependencies injected. The method and its
        dependencies are looked up once, when this method is called.

        See Also:
            :meth:`aresolved`
        """
        return self.aresolved(getattr(obj, method), None, args)

    def mresolved(self, obj: t.Any, method: str, /, *args: t.Any) -> Callable[..., Coroutine[t.Any, t.Any, t.Any]]:
        """See :meth:`amresolved`."""
        return self.amresolved(obj, method, args)

    def amresolver(
        self, obj: t.Any, method: str, args: Sequence[t.Any] | None = None
    ) -> Coroutine[t.Any, t.Any, Callable[..., t.Any]]:
        """
        Resolve the dependencies of the named method of ``obj`` once, giving a plain function with the dependency
        values already applied.

        See Also:
            :meth:`aresolver`
        """
        return self.aresolver(getattr(obj, method), None, args)

    def mresolver(self, obj: t.Any, method: str, /, *args: t.Any) -> Coroutine[t.Any, t.Any, Callable[..., t.Any]]:
        """See :meth:`amresolver`."""
        return self.amresolver(obj, method, args)
