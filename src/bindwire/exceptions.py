from __future__ import annotations

from typing import Any


class BindwireError(Exception):
    """Represent a base class for all Bindwire-specific failures.

    Catch this type when you want to handle any Bindwire error path without
    matching each concrete exception class individually.
    """


class BindwireSignatureUnavailableError(BindwireError):
    """Signal that a callable cannot be introspected.

    Raised by ``SignatureDescriptor.describe`` (and therefore by
    ``Invoker.resolve``/``Invoker.call``) when ``inspect.signature`` refuses
    the target, for example for some builtins implemented in C.
    """


class BindwireEntityNotFoundError(BindwireError):
    """Signal that an implicitly bound parameter has no matching entity.

    Raised while resolving a parameter whose declared type is routable and
    whose caller-supplied value is a key that the lookup capability could not
    match. Application boundaries usually translate it to a "not found"
    response.
    """

    def __init__(
        self,
        *,
        entity_type: Any,
        key: Any,
        parameter_name: str,
        field: str | None = None,
    ) -> None:
        self.entity_type = entity_type
        self.key = key
        self.parameter_name = parameter_name
        self.field = field
        type_name = getattr(entity_type, "__qualname__", repr(entity_type))
        lookup = f"{field}={key!r}" if field is not None else repr(key)
        super().__init__(
            f"No '{type_name}' entity found for {lookup} (parameter '{parameter_name}').",
        )


class BindwireUnresolvableParameterError(BindwireError):
    """Signal that a parameter has no value and cannot be injected.

    Raised by the injection resolver when a parameter received no caller
    value, has no default, and the container cannot construct a value for its
    declared type.

    Typical fixes include passing the value explicitly, registering a provider
    for the parameter type, or giving the parameter a default.
    """

    def __init__(self, message: str, *, parameter_name: str) -> None:
        self.parameter_name = parameter_name
        super().__init__(message)


class BindwireCircularDependencyError(BindwireUnresolvableParameterError):
    """Signal that constructing a dependency requires itself.

    Raised by ``Invoker.make`` when autowiring re-enters a type that is
    already being constructed further up the resolution chain.
    """


class BindwireInvalidArgumentsError(BindwireError):
    """Signal malformed caller-supplied raw arguments.

    Raw argument keys must be parameter names (``str``) or non-negative
    positional indexes (``int``).
    """


class BindwireInvalidMethodReferenceError(BindwireError):
    """Signal a method reference that cannot be turned into a callable.

    Supported shapes are callables, ``(instance, "method")`` and
    ``(Class, "method")`` pairs, and ``"module:qualname"`` or
    ``"module:Class@method"`` strings.
    """


class BindwireInvalidRegistrationError(BindwireError):
    """Signal invalid provider or route binding registration.

    Raised by ``Invoker.add_*`` methods when the registration key is not a
    runtime class or the provider is not callable.
    """
