from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

from typing_extensions import Self

from bindwire._internal.signature import MethodSignature, is_positional
from bindwire.exceptions import BindwireInvalidArgumentsError

RawArguments: TypeAlias = Mapping[int | str, Any]
"""Caller-supplied values keyed by positional index (``int``) or parameter name (``str``)."""

RawArgumentsInput: TypeAlias = RawArguments | Sequence[Any] | None
"""Anything accepted where raw arguments are expected; sequences are all-positional."""


def raw_arguments(*args: Any, **kwargs: Any) -> dict[int | str, Any]:
    """Build raw arguments from a regular Python call shape."""
    raw: dict[int | str, Any] = dict(enumerate(args))
    raw.update(kwargs)
    return raw


def coerce_raw_arguments(raw: RawArgumentsInput) -> RawArguments:
    """Turn accepted raw argument inputs into a validated mapping.

    Raises:
        BindwireInvalidArgumentsError: If a key is neither a name nor a non-negative index.

    """
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        for key in raw:
            if isinstance(key, str):
                continue
            if isinstance(key, int) and not isinstance(key, bool) and key >= 0:
                continue
            msg = (
                f"Raw argument key {key!r} must be a parameter name or a non-negative "
                "positional index."
            )
            raise BindwireInvalidArgumentsError(msg)
        return raw
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        msg = f"Raw arguments must be a mapping or a sequence, got {type(raw).__name__}."
        raise BindwireInvalidArgumentsError(msg)
    return dict(enumerate(raw))


class BoundArguments(Mapping[str, Any]):
    """Name-keyed working arguments for a single resolution.

    Collaborators receive it as a read-only mapping. Only the stage that owns
    an instance calls ``set``; stages that must not touch their input work on
    a ``copy()``.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"BoundArguments({self._values!r})"

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value

    def copy(self) -> Self:
        return type(self)(self._values)


@dataclass(frozen=True, slots=True)
class ResolvedArguments:
    """Final ordered argument values, one per declared parameter.

    The variadic slot holds the collapsed tail as a tuple indexed from zero.
    ``invoke`` spreads it back into positional arguments.
    """

    signature: MethodSignature
    values: tuple[Any, ...]

    @classmethod
    def from_bound(cls, signature: MethodSignature, bound: Mapping[str, Any]) -> ResolvedArguments:
        values: list[Any] = []
        for parameter in signature:
            value = bound[parameter.name]
            if parameter.is_variadic:
                value = tuple(value)
            values.append(value)
        return cls(signature=signature, values=tuple(values))

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> Any:
        return self.values[index]

    @property
    def args(self) -> tuple[Any, ...]:
        args: list[Any] = []
        for parameter, value in zip(self.signature, self.values, strict=True):
            if parameter.is_variadic:
                args.extend(value)
            elif is_positional(parameter):
                args.append(value)
        return tuple(args)

    @property
    def kwargs(self) -> dict[str, Any]:
        return {
            parameter.name: value
            for parameter, value in zip(self.signature, self.values, strict=True)
            if parameter.is_keyword_only
        }

    def invoke(self, target: Callable[..., Any]) -> Any:
        return target(*self.args, **self.kwargs)


__all__ = [
    "BoundArguments",
    "RawArguments",
    "RawArgumentsInput",
    "ResolvedArguments",
    "coerce_raw_arguments",
    "raw_arguments",
]
