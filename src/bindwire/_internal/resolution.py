from __future__ import annotations

import logging
from typing import Any

from bindwire._internal.arguments import (
    RawArgumentsInput,
    ResolvedArguments,
    coerce_raw_arguments,
)
from bindwire._internal.binding import ImplicitBinder
from bindwire._internal.injection import InjectionResolver
from bindwire._internal.method_reference import MethodReference, MethodReferenceParser
from bindwire._internal.normalizer import Normalizer
from bindwire._internal.signature import SignatureDescriptor

logger = logging.getLogger(__name__)


class ArgumentResolver:
    """Assemble the final argument list for one method invocation.

    Resolution rekeys the raw arguments by parameter name, then settles each
    parameter in declaration order: implicit entity binding first, and
    injection only for a slot still without a value. Implicit binding always
    wins over injection for the same parameter.

    Every stage is supplied at construction. Errors raised by any stage abort
    resolution and propagate unchanged; nothing is invoked after a failure.
    """

    def __init__(
        self,
        *,
        signatures: SignatureDescriptor,
        normalizer: Normalizer,
        binder: ImplicitBinder,
        injector: InjectionResolver,
        references: MethodReferenceParser | None = None,
    ) -> None:
        self._signatures = signatures
        self._normalizer = normalizer
        self._binder = binder
        self._injector = injector
        self._references = references or MethodReferenceParser()

    def resolve(
        self,
        method_ref: MethodReference,
        raw_arguments: RawArgumentsInput = None,
    ) -> ResolvedArguments:
        """Resolve the arguments of ``method_ref`` from ``raw_arguments``.

        Args:
            method_ref: Callable, ``(target, "method")`` pair, or import string.
            raw_arguments: Values keyed by positional index or parameter name,
                or a sequence of positional values.

        Returns:
            Ordered values, one per declared parameter.

        """
        target = self._references.to_callable(method_ref)
        return self.resolve_callable(target, raw_arguments)

    def resolve_callable(
        self,
        target: Any,
        raw_arguments: RawArgumentsInput = None,
    ) -> ResolvedArguments:
        raw = coerce_raw_arguments(raw_arguments)
        signature = self._signatures.describe(target)
        bound = self._normalizer.normalize(signature, raw)

        for parameter in signature:
            binding = self._binder.bind_parameter(parameter, bound)
            if binding is not None:
                bound.set(parameter.name, binding.entity)
            elif parameter.name not in bound:
                bound.set(parameter.name, self._injector.inject(parameter, bound))

        logger.debug("Resolved %d argument(s) for %s", len(signature), signature.name)
        return ResolvedArguments.from_bound(signature, bound)

    def call(self, method_ref: MethodReference, raw_arguments: RawArgumentsInput = None) -> Any:
        """Resolve the arguments of ``method_ref`` and invoke it."""
        target = self._references.to_callable(method_ref)
        return self.resolve_callable(target, raw_arguments).invoke(target)


__all__ = ["ArgumentResolver"]
