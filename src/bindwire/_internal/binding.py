from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias

from bindwire._internal.arguments import BoundArguments
from bindwire._internal.signature import MethodSignature, ParameterSpec
from bindwire._internal.type_checks import is_runtime_class
from bindwire.exceptions import BindwireEntityNotFoundError, BindwireInvalidRegistrationError

logger = logging.getLogger(__name__)

EntityLookup: TypeAlias = Callable[[type[Any], Any, str | None], Any]
"""Lookup callable ``(entity_type, key, field) -> entity | None``."""

_ROUTE_BINDING_METHOD = "resolve_route_binding"


class RouteBindings:
    """Answer whether a type supports lookup by key and perform the lookup.

    A type is routable when a lookup is registered for it or one of its base
    classes, when it defines a callable ``resolve_route_binding`` classmethod,
    or when it is an ``enum.Enum`` subclass. Routability is computed once per
    type and cached until the next registration.
    """

    def __init__(self) -> None:
        self._lookups: dict[type[Any], EntityLookup] = {}
        self._routable_cache: dict[type[Any], bool] = {}

    def add(self, entity_type: type[Any], lookup: EntityLookup) -> None:
        """Register a lookup for ``entity_type`` and its subclasses.

        Args:
            entity_type: Class resolved by the lookup.
            lookup: Callable receiving ``(entity_type, key, field)`` and returning
                the entity or ``None``.

        """
        if not is_runtime_class(entity_type):
            msg = f"Route binding key must be a class, got {entity_type!r}."
            raise BindwireInvalidRegistrationError(msg)
        if not callable(lookup):
            msg = f"Route binding lookup for '{entity_type.__qualname__}' must be callable."
            raise BindwireInvalidRegistrationError(msg)
        self._lookups[entity_type] = lookup
        self._routable_cache.clear()

    def is_routable(self, entity_type: type[Any]) -> bool:
        cached = self._routable_cache.get(entity_type)
        if cached is not None:
            return cached
        routable = (
            self._registered_lookup(entity_type) is not None
            or callable(getattr(entity_type, _ROUTE_BINDING_METHOD, None))
            or issubclass(entity_type, enum.Enum)
        )
        self._routable_cache[entity_type] = routable
        return routable

    def lookup(self, entity_type: type[Any], key: Any, field: str | None = None) -> Any:
        """Return the entity matching ``key`` or ``None`` when nothing matches."""
        registered = self._registered_lookup(entity_type)
        if registered is not None:
            return registered(entity_type, key, field)
        method = getattr(entity_type, _ROUTE_BINDING_METHOD, None)
        if callable(method):
            return method(key, field)
        if issubclass(entity_type, enum.Enum):
            return self._lookup_enum_member(entity_type, key)
        return None

    def _registered_lookup(self, entity_type: type[Any]) -> EntityLookup | None:
        for base in entity_type.__mro__:
            lookup = self._lookups.get(base)
            if lookup is not None:
                return lookup
        return None

    def _lookup_enum_member(self, enum_type: type[enum.Enum], key: Any) -> Any:
        try:
            return enum_type(key)
        except ValueError:
            pass
        for member in enum_type:
            if str(member.value) == str(key):
                return member
        return None


@dataclass(frozen=True, slots=True)
class ImplicitBinding:
    """Entity substituted for a raw key during implicit binding."""

    parameter_name: str
    key: Any
    entity: Any


class ImplicitBinder(Protocol):
    """Strategy deciding whether a parameter is filled by entity lookup."""

    def bind_parameter(
        self,
        parameter: ParameterSpec,
        bound: Mapping[str, Any],
    ) -> ImplicitBinding | None: ...


class ImplicitEntityBinder:
    """Replace raw keys with looked-up entities for routable parameters.

    For each parameter with a routable declared type and a present value that
    is not already an instance of that type, the value is used as lookup key.
    A ``None`` value counts as absent only for a parameter that accepts
    ``None``; for any other parameter it is looked up like any other key. Every other case leaves
    the parameter untouched for the injection step.
    """

    def __init__(self, route_bindings: RouteBindings) -> None:
        self._route_bindings = route_bindings

    def bind_parameter(
        self,
        parameter: ParameterSpec,
        bound: Mapping[str, Any],
    ) -> ImplicitBinding | None:
        """Return the substitution for ``parameter`` or ``None`` to leave it untouched.

        Raises:
            BindwireEntityNotFoundError: If the parameter qualifies for implicit
                binding and the lookup yields no entity.

        """
        entity_type = parameter.declared_type
        if parameter.is_variadic or entity_type is None:
            return None
        if not self._route_bindings.is_routable(entity_type):
            return None

        if parameter.name not in bound:
            return None
        key = bound[parameter.name]
        if key is None and _accepts_none(parameter):
            return None
        if isinstance(key, entity_type):
            return None

        entity = self._route_bindings.lookup(entity_type, key, parameter.route_field)
        if entity is None:
            raise BindwireEntityNotFoundError(
                entity_type=entity_type,
                key=key,
                parameter_name=parameter.name,
                field=parameter.route_field,
            )
        logger.debug(
            "Implicitly bound parameter '%s' to %s for key %r",
            parameter.name,
            entity_type.__qualname__,
            key,
        )
        return ImplicitBinding(parameter_name=parameter.name, key=key, entity=entity)

    def bind(self, signature: MethodSignature, bound: BoundArguments) -> BoundArguments:
        """Apply implicit binding to every parameter and return an updated copy."""
        working = bound.copy()
        for parameter in signature:
            binding = self.bind_parameter(parameter, working)
            if binding is not None:
                working.set(binding.parameter_name, binding.entity)
        return working


def _accepts_none(parameter: ParameterSpec) -> bool:
    return parameter.nullable or (parameter.has_default and parameter.default is None)


__all__ = [
    "EntityLookup",
    "ImplicitBinder",
    "ImplicitBinding",
    "ImplicitEntityBinder",
    "RouteBindings",
]
