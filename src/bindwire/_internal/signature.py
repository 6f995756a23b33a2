from __future__ import annotations

import inspect
import logging
import weakref
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from inspect import Parameter
from typing import Any, Final, get_type_hints

from bindwire._internal.type_checks import is_runtime_class, split_annotated, split_optional
from bindwire.exceptions import BindwireSignatureUnavailableError
from bindwire.markers import RouteKey

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final[Any] = _Missing()
"""Sentinel stored in ``ParameterSpec.default`` for parameters without a default."""

_POSITIONAL_KINDS = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True, slots=True, kw_only=True)
class ParameterSpec:
    """Describe one declared parameter of an invocable method."""

    name: str
    position: int
    kind: Any
    """The ``inspect.Parameter`` kind of the parameter."""
    annotation: Any = None
    """Resolved type hint, ``None`` for untyped parameters."""
    declared_type: type[Any] | None = None
    """Runtime class behind ``annotation`` after unwrapping ``Annotated`` and ``Optional``."""
    is_variadic: bool = False
    has_default: bool = False
    default: Any = MISSING
    nullable: bool = False
    """True when the annotation admits ``None``."""
    route_field: str | None = None
    """Lookup field selected with a ``RouteKey`` marker."""

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is Parameter.KEYWORD_ONLY


@dataclass(frozen=True, slots=True)
class MethodSignature:
    """Ordered, immutable parameter description of a single method.

    Positions are contiguous from zero and names are unique. At most one
    variadic parameter exists and no positional parameter follows it; only
    keyword-only parameters may come after the variadic tail.
    """

    name: str
    parameters: tuple[ParameterSpec, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        names = [parameter.name for parameter in self.parameters]
        if len(set(names)) != len(names):
            msg = f"Signature of '{self.name}' has duplicate parameter names: {names}."
            raise ValueError(msg)

        seen_variadic = False
        for index, parameter in enumerate(self.parameters):
            if parameter.position != index:
                msg = (
                    f"Parameter '{parameter.name}' of '{self.name}' has position "
                    f"{parameter.position}, expected {index}."
                )
                raise ValueError(msg)
            if parameter.is_variadic:
                if seen_variadic:
                    msg = f"Signature of '{self.name}' declares more than one variadic parameter."
                    raise ValueError(msg)
                seen_variadic = True
            elif seen_variadic and not parameter.is_keyword_only:
                msg = (
                    f"Positional parameter '{parameter.name}' of '{self.name}' follows the "
                    "variadic parameter."
                )
                raise ValueError(msg)

    def __iter__(self) -> Iterator[ParameterSpec]:
        return iter(self.parameters)

    def __len__(self) -> int:
        return len(self.parameters)

    @property
    def variadic(self) -> ParameterSpec | None:
        for parameter in self.parameters:
            if parameter.is_variadic:
                return parameter
        return None

    def get(self, name: str) -> ParameterSpec | None:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None


class SignatureDescriptor:
    """Build method signatures once and reuse them across invocations.

    Bound methods are cached under the function behind them, so every instance
    of a class shares one entry. Classes and other callables are cached under
    themselves. Keys are held weakly: an entry disappears together with its
    callable, so per-request closures do not accumulate. Callables that cannot
    be weakly referenced are described on every call.
    """

    def __init__(self) -> None:
        self._by_function: weakref.WeakKeyDictionary[Any, MethodSignature] = (
            weakref.WeakKeyDictionary()
        )
        self._by_callable: weakref.WeakKeyDictionary[Any, MethodSignature] = (
            weakref.WeakKeyDictionary()
        )

    def describe(self, target: Callable[..., Any]) -> MethodSignature:
        """Return the cached ``MethodSignature`` for ``target``.

        Args:
            target: Callable whose parameters are described.

        Raises:
            BindwireSignatureUnavailableError: If the callable cannot be introspected.

        """
        cache, key = self._cache_slot(target)
        try:
            cached = cache.get(key)
        except TypeError:
            # not weakly referenceable or not hashable
            return self._build(target)
        if cached is not None:
            return cached

        signature = self._build(target)
        cache[key] = signature
        return signature

    def _cache_slot(
        self,
        target: Callable[..., Any],
    ) -> tuple[weakref.WeakKeyDictionary[Any, MethodSignature], Any]:
        function = getattr(target, "__func__", None)
        if function is not None:
            return self._by_function, function
        return self._by_callable, target

    def _build(self, target: Callable[..., Any]) -> MethodSignature:
        name = getattr(target, "__qualname__", repr(target))
        try:
            signature = inspect.signature(target)
        except (TypeError, ValueError) as error:
            msg = f"Unable to introspect the parameters of {name!r}: {error}"
            raise BindwireSignatureUnavailableError(msg) from error

        hints = self._resolved_type_hints(target)
        parameters: list[ParameterSpec] = []
        for parameter in signature.parameters.values():
            if parameter.kind is Parameter.VAR_KEYWORD:
                continue
            parameters.append(
                self._describe_parameter(
                    parameter=parameter,
                    position=len(parameters),
                    annotation=hints.get(parameter.name, parameter.annotation),
                ),
            )

        logger.debug("Described signature of %s with %d parameters", name, len(parameters))
        return MethodSignature(name=name, parameters=tuple(parameters))

    def _describe_parameter(
        self,
        *,
        parameter: Parameter,
        position: int,
        annotation: Any,
    ) -> ParameterSpec:
        if annotation is Parameter.empty or isinstance(annotation, str):
            annotation = None

        declared_type: type[Any] | None = None
        nullable = False
        route_field: str | None = None
        if annotation is not None:
            inner, metadata = split_annotated(annotation)
            inner, nullable = split_optional(inner)
            inner, inner_metadata = split_annotated(inner)
            for item in (*metadata, *inner_metadata):
                if isinstance(item, RouteKey):
                    route_field = item.field
            if is_runtime_class(inner) and inner is not type(None):
                declared_type = inner

        has_default = parameter.default is not Parameter.empty
        return ParameterSpec(
            name=parameter.name,
            position=position,
            kind=parameter.kind,
            annotation=annotation,
            declared_type=declared_type,
            is_variadic=parameter.kind is Parameter.VAR_POSITIONAL,
            has_default=has_default,
            default=parameter.default if has_default else MISSING,
            nullable=nullable,
            route_field=route_field,
        )

    def _resolved_type_hints(self, target: Callable[..., Any]) -> dict[str, Any]:
        hint_sources: list[Any] = [target]
        if inspect.isclass(target):
            hint_sources = [target.__init__, target]
        elif not (inspect.isfunction(target) or inspect.ismethod(target)):
            hint_sources = [getattr(target, "__call__", target)]

        hints: dict[str, Any] = {}
        for hint_source in hint_sources:
            try:
                source_hints = get_type_hints(hint_source, include_extras=True)
            except (AttributeError, NameError, TypeError) as error:
                logger.debug("Falling back to raw annotations for %r: %s", hint_source, error)
                continue
            for name, hint in source_hints.items():
                hints.setdefault(name, hint)
        return hints


def is_positional(parameter: ParameterSpec) -> bool:
    """Return true when the parameter is passed positionally on invocation."""
    return parameter.kind in _POSITIONAL_KINDS


__all__ = [
    "MISSING",
    "MethodSignature",
    "ParameterSpec",
    "SignatureDescriptor",
    "is_positional",
]
