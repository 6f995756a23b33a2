from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from bindwire.exceptions import BindwireCircularDependencyError

# Types currently being constructed in this execution context, outermost first.
_construction_stack: ContextVar[tuple[type[Any], ...]] = ContextVar(
    "bindwire_construction_stack",
    default=(),
)


@contextmanager
def constructing(service_type: type[Any]) -> Iterator[None]:
    """Track ``service_type`` as under construction for the enclosed block.

    Raises:
        BindwireCircularDependencyError: If ``service_type`` is already being
            constructed further up the chain.

    """
    stack = _construction_stack.get()
    if service_type in stack:
        chain = " -> ".join(item.__qualname__ for item in (*stack, service_type))
        msg = f"Circular dependency detected while constructing: {chain}."
        raise BindwireCircularDependencyError(msg, parameter_name=service_type.__qualname__)

    token = _construction_stack.set((*stack, service_type))
    try:
        yield
    finally:
        _construction_stack.reset(token)


__all__ = ["constructing"]
