from __future__ import annotations

import types
from typing import Annotated, Any, TypeGuard, Union, get_args, get_origin

_NONE_TYPE = type(None)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *metadata]`` into ``T`` and its metadata tuple."""
    if get_origin(annotation) is not Annotated:
        return annotation, ()
    args = get_args(annotation)
    return args[0], tuple(args[1:])


def split_optional(annotation: Any) -> tuple[Any, bool]:
    """Strip ``None`` from a union annotation.

    Returns the remaining annotation and whether ``None`` was a member. A union
    with more than one non-``None`` member is returned without ``None`` but
    still as a union.
    """
    if annotation is None or annotation is _NONE_TYPE:
        return _NONE_TYPE, True

    origin = get_origin(annotation)
    if origin is not Union and origin is not types.UnionType:
        return annotation, False

    members = get_args(annotation)
    remaining = tuple(member for member in members if member is not _NONE_TYPE)
    nullable = len(remaining) != len(members)
    if len(remaining) == 1:
        return remaining[0], nullable
    return Union[remaining], nullable  # noqa: UP007


__all__ = ["is_runtime_class", "split_annotated", "split_optional"]
