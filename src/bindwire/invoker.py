from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar, cast

from bindwire._internal.arguments import RawArgumentsInput, ResolvedArguments, raw_arguments
from bindwire._internal.autoregistration import AutowirePolicy
from bindwire._internal.binding import EntityLookup, ImplicitEntityBinder, RouteBindings
from bindwire._internal.injection import ContainerInjectionResolver, ServiceRegistry
from bindwire._internal.method_reference import MethodReference, MethodReferenceParser
from bindwire._internal.normalizer import ArgumentNormalizer
from bindwire._internal.policies import VariadicNamedValuePolicy
from bindwire._internal.resolution import ArgumentResolver
from bindwire._internal.signature import SignatureDescriptor

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


class Invoker:
    """Resolve and invoke methods from loosely structured caller input.

    Each parameter of the invoked method is filled from an explicit caller
    value, from an entity looked up by a caller-supplied key when the
    parameter type is routable, or by injection from the registered providers.
    Implicit binding takes precedence over injection for the same parameter.

    Callers pass raw arguments as a mapping whose keys are positional indexes
    or parameter names. Unknown names are ignored. Constructors, factories and
    ``(Class, "method")`` owners are built through the same pipeline, so their
    own arguments are injected too.

    Examples:
        .. code-block:: python

            invoker = Invoker()
            invoker.add_route_binding(Post, lambda cls, key, field: posts.get(key))


            def show(post: Post, renderer: Renderer) -> str:
                return renderer.render(post)


            invoker.call(show, {"post": 42})

    """

    def __init__(
        self,
        *,
        autoregister: bool = True,
        variadic_named_value_policy: VariadicNamedValuePolicy = VariadicNamedValuePolicy.REPLACE,
    ) -> None:
        """Initialize the invoker and its default collaborators.

        Args:
            autoregister: Construct eligible concrete classes on demand when no
                provider is registered for a parameter type.
            variadic_named_value_policy: How a named raw value for the
                variadic parameter combines with leftover positional values.

        """
        self._registry = ServiceRegistry()
        self._route_bindings = RouteBindings()
        self._signatures = SignatureDescriptor()
        self._injector = ContainerInjectionResolver(
            registry=self._registry,
            call=self.call,
            autoregister=autoregister,
            autowire_policy=AutowirePolicy(is_routable=self._route_bindings.is_routable),
        )
        self._resolver = ArgumentResolver(
            signatures=self._signatures,
            normalizer=ArgumentNormalizer(variadic_named_value_policy=variadic_named_value_policy),
            binder=ImplicitEntityBinder(self._route_bindings),
            injector=self._injector,
            references=MethodReferenceParser(instantiate=self.make),
        )

    def resolve(
        self,
        method_ref: MethodReference,
        raw_arguments: RawArgumentsInput = None,
    ) -> ResolvedArguments:
        """Resolve the argument list of ``method_ref`` without invoking it.

        Args:
            method_ref: Callable, ``(target, "method")`` pair, or import string.
            raw_arguments: Values keyed by positional index or parameter name.

        Raises:
            BindwireSignatureUnavailableError: If the target cannot be introspected.
            BindwireEntityNotFoundError: If an implicitly bound key matches nothing.
            BindwireUnresolvableParameterError: If a parameter cannot be filled.

        """
        return self._resolver.resolve(method_ref, raw_arguments)

    def call(self, method_ref: MethodReference, raw_arguments: RawArgumentsInput = None) -> Any:
        """Resolve the argument list of ``method_ref`` and invoke it."""
        return self._resolver.call(method_ref, raw_arguments)

    def make(self, service_type: type[T]) -> T:
        """Return an instance of ``service_type`` with its constructor arguments injected."""
        return cast("T", self._injector.make(service_type))

    def wrap(self, func: F) -> F:
        """Decorate ``func`` so missing arguments are bound or injected on each call.

        Arguments passed to the wrapper become raw arguments: positional
        arguments by index and keyword arguments by name.
        """

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return self._resolver.call(func, raw_arguments(*args, **kwargs))

        return cast("F", wrapper)

    def add_instance(self, provides: type[T], instance: T) -> None:
        """Inject ``instance`` into every parameter declared as ``provides``."""
        self._registry.add_instance(provides, instance)

    def add_factory(
        self,
        provides: type[T],
        factory: Callable[..., T],
        *,
        cached: bool = False,
    ) -> None:
        """Inject values produced by ``factory`` for parameters declared as ``provides``.

        Args:
            provides: Declared parameter type served by the factory.
            factory: Callable whose own arguments are resolved on each call.
            cached: Reuse the first produced value for later injections.

        """
        self._registry.add_factory(provides, factory, cached=cached)

    def add_concrete(
        self,
        provides: type[T],
        concrete_type: type[T] | None = None,
        *,
        cached: bool = False,
    ) -> None:
        """Inject instances of ``concrete_type`` (default ``provides``) for ``provides``."""
        self._registry.add_concrete(provides, concrete_type, cached=cached)

    def add_route_binding(self, entity_type: type[Any], lookup: EntityLookup) -> None:
        """Make ``entity_type`` routable through ``lookup``.

        Args:
            entity_type: Declared parameter type resolved by key.
            lookup: Callable receiving ``(entity_type, key, field)`` and returning
                the matching entity or ``None``.

        """
        self._route_bindings.add(entity_type, lookup)


__all__ = ["Invoker"]
