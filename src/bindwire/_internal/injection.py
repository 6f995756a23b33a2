from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from bindwire._internal.autoregistration import AutowirePolicy
from bindwire._internal.integrations.pydantic_settings import (
    build_settings,
    is_pydantic_settings_subclass,
)
from bindwire._internal.resolution_stack import constructing
from bindwire._internal.signature import ParameterSpec
from bindwire._internal.type_checks import is_runtime_class
from bindwire.exceptions import (
    BindwireInvalidRegistrationError,
    BindwireUnresolvableParameterError,
)

logger = logging.getLogger(__name__)

_NOT_CACHED = object()


class InjectionResolver(Protocol):
    """Container capability that fills parameters left without a value."""

    def inject(self, parameter: ParameterSpec, bound: Mapping[str, Any]) -> Any:
        """Return a value for ``parameter`` or raise ``BindwireUnresolvableParameterError``."""
        ...


@dataclass(slots=True)
class ProviderSpec:
    """Describe how the container produces values of one type."""

    provides: type[Any]
    factory: Callable[..., Any] | None = None
    """Callable whose own arguments are resolved before it is called."""
    instance: Any = _NOT_CACHED
    """Prebuilt or cached value, ``_NOT_CACHED`` until one exists."""
    cached: bool = False
    """Keep the first produced value for later injections."""


class ServiceRegistry:
    """Store providers keyed by the exact type they provide.

    Registering a type again replaces the previous provider. Registration,
    lookup and the write of a cached instance happen under one lock.
    """

    def __init__(self) -> None:
        self._providers: dict[type[Any], ProviderSpec] = {}
        self._lock = threading.Lock()

    def add_instance(self, provides: type[Any], instance: Any) -> None:
        spec = ProviderSpec(provides=self._validated_key(provides), instance=instance, cached=True)
        self._add(spec)

    def add_factory(
        self,
        provides: type[Any],
        factory: Callable[..., Any],
        *,
        cached: bool = False,
    ) -> None:
        if not callable(factory):
            msg = f"Factory for '{provides!r}' must be callable, got {factory!r}."
            raise BindwireInvalidRegistrationError(msg)
        spec = ProviderSpec(provides=self._validated_key(provides), factory=factory, cached=cached)
        self._add(spec)

    def add_concrete(
        self,
        provides: type[Any],
        concrete_type: type[Any] | None = None,
        *,
        cached: bool = False,
    ) -> None:
        concrete = provides if concrete_type is None else concrete_type
        if not is_runtime_class(concrete):
            msg = f"Concrete provider must be a class, got {concrete!r}."
            raise BindwireInvalidRegistrationError(msg)
        self.add_factory(provides, concrete, cached=cached)

    def find(self, provides: type[Any]) -> ProviderSpec | None:
        with self._lock:
            return self._providers.get(provides)

    def remember(self, spec: ProviderSpec, value: Any) -> Any:
        """Store ``value`` as the cached instance of ``spec`` unless one already exists.

        Returns the instance every later injection will receive.
        """
        with self._lock:
            if spec.instance is _NOT_CACHED:
                spec.instance = value
            return spec.instance

    def __contains__(self, provides: object) -> bool:
        return provides in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def _add(self, spec: ProviderSpec) -> None:
        with self._lock:
            self._providers[spec.provides] = spec

    def _validated_key(self, provides: object) -> type[Any]:
        if not is_runtime_class(provides):
            msg = f"Provider key must be a class, got {provides!r}."
            raise BindwireInvalidRegistrationError(msg)
        return provides


class ContainerInjectionResolver:
    """Default injection collaborator backed by a ``ServiceRegistry``.

    A parameter is filled, in order, from a registered provider for its
    declared type, from its default value, by autowiring an eligible concrete
    class, or with ``None`` when its annotation is optional. Settings models
    are built from the environment once and reused.

    ``call`` resolves and invokes factories and constructors, so their own
    parameters go through the full resolution pipeline.
    """

    def __init__(
        self,
        *,
        registry: ServiceRegistry,
        call: Callable[[Callable[..., Any]], Any],
        autoregister: bool = True,
        autowire_policy: AutowirePolicy | None = None,
    ) -> None:
        self._registry = registry
        self._call = call
        self._autoregister = autoregister
        self._autowire_policy = autowire_policy or AutowirePolicy()

    def inject(self, parameter: ParameterSpec, bound: Mapping[str, Any]) -> Any:
        """Return the injected value for ``parameter``.

        Args:
            parameter: Parameter left without a caller or implicitly bound value.
            bound: Values settled so far; read only.

        Raises:
            BindwireUnresolvableParameterError: If no rule yields a value.

        """
        if parameter.is_variadic:
            return ()

        declared_type = parameter.declared_type
        if declared_type is not None:
            spec = self._registry.find(declared_type)
            if spec is not None:
                logger.debug(
                    "Injecting registered %s into '%s'",
                    declared_type.__qualname__,
                    parameter.name,
                )
                return self.provide(spec)

        if parameter.has_default:
            return parameter.default

        if declared_type is not None and self._autoregister:
            if is_pydantic_settings_subclass(declared_type):
                settings = build_settings(declared_type)
                self._registry.add_instance(declared_type, settings)
                return settings
            if self._autowire_policy.allows(declared_type):
                logger.debug("Autowiring %s into '%s'", declared_type.__qualname__, parameter.name)
                return self.make(declared_type)

        if parameter.nullable:
            return None

        raise BindwireUnresolvableParameterError(
            self._unresolvable_message(parameter),
            parameter_name=parameter.name,
        )

    def make(self, service_type: type[Any]) -> Any:
        """Return an instance of ``service_type`` from its provider or by autowiring."""
        spec = self._registry.find(service_type)
        if spec is not None:
            return self.provide(spec)
        with constructing(service_type):
            return self._call(service_type)

    def provide(self, spec: ProviderSpec) -> Any:
        if spec.instance is not _NOT_CACHED:
            return spec.instance
        if spec.factory is None:
            msg = f"Provider for '{spec.provides.__qualname__}' has neither instance nor factory."
            raise BindwireInvalidRegistrationError(msg)

        with constructing(spec.provides):
            value = self._call(spec.factory)
        if spec.cached:
            return self._registry.remember(spec, value)
        return value

    def _unresolvable_message(self, parameter: ParameterSpec) -> str:
        if parameter.declared_type is None:
            return (
                f"Missing value for required parameter '{parameter.name}': no argument was "
                "supplied and it has no type to inject."
            )
        type_name = parameter.declared_type.__qualname__
        if not self._autoregister:
            return (
                f"Missing value for required parameter '{parameter.name}': no argument was "
                f"supplied and no provider is registered for '{type_name}'."
            )
        return (
            f"Missing value for required parameter '{parameter.name}': no argument was "
            f"supplied and '{type_name}' cannot be constructed automatically."
        )


__all__ = [
    "ContainerInjectionResolver",
    "InjectionResolver",
    "ProviderSpec",
    "ServiceRegistry",
]
