from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import Any, Protocol

from bindwire._internal.arguments import BoundArguments, RawArguments
from bindwire._internal.policies import VariadicNamedValuePolicy
from bindwire._internal.signature import MethodSignature

logger = logging.getLogger(__name__)


class Normalizer(Protocol):
    """Strategy that rekeys raw arguments by parameter name."""

    def normalize(self, signature: MethodSignature, raw: RawArguments) -> BoundArguments: ...


class ArgumentNormalizer:
    """Rekey positional and named raw values onto declared parameter names.

    Parameters are visited in declaration order. A parameter named in the raw
    arguments takes that value and consumes no positional value. Otherwise it
    takes the lowest remaining positional index, except keyword-only
    parameters which are addressable by name only. The variadic parameter
    collects every remaining positional value as a tuple indexed from zero.

    Named values that match no parameter and positional values left over
    after the last parameter are ignored.
    """

    def __init__(
        self,
        *,
        variadic_named_value_policy: VariadicNamedValuePolicy = VariadicNamedValuePolicy.REPLACE,
    ) -> None:
        self._variadic_named_value_policy = variadic_named_value_policy

    def normalize(self, signature: MethodSignature, raw: RawArguments) -> BoundArguments:
        """Build fresh ``BoundArguments`` for ``signature`` from ``raw``.

        Args:
            signature: Declared parameters of the invoked method.
            raw: Validated raw arguments; ``raw`` itself is never modified.

        """
        positional = deque(
            raw[index]
            for index in sorted(key for key in raw if isinstance(key, int))
        )
        named = {key: value for key, value in raw.items() if isinstance(key, str)}
        bound = BoundArguments()

        for parameter in signature:
            if parameter.is_variadic:
                tail = tuple(positional)
                positional.clear()
                if parameter.name in named:
                    tail = self._variadic_from_named(named[parameter.name], tail)
                bound.set(parameter.name, tail)
            elif parameter.name in named:
                bound.set(parameter.name, named[parameter.name])
            elif positional and not parameter.is_keyword_only:
                bound.set(parameter.name, positional.popleft())

        if positional:
            logger.debug(
                "Ignoring %d surplus positional value(s) for %s",
                len(positional),
                signature.name,
            )
        unknown = [name for name in named if signature.get(name) is None]
        if unknown:
            logger.debug("Ignoring unknown named value(s) %s for %s", unknown, signature.name)
        return bound

    def _variadic_from_named(self, value: Any, tail: tuple[Any, ...]) -> tuple[Any, ...]:
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            items = tuple(value)
        else:
            items = (value,)
        if self._variadic_named_value_policy is VariadicNamedValuePolicy.EXTEND:
            return (*items, *tail)
        if tail:
            logger.debug("Discarding %d positional value(s) replaced by a named tail", len(tail))
        return items


__all__ = ["ArgumentNormalizer", "Normalizer"]
