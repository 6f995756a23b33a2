from __future__ import annotations

import importlib
import inspect
from collections.abc import Callable
from typing import Any, TypeAlias

from bindwire.exceptions import BindwireInvalidMethodReferenceError

MethodReference: TypeAlias = Callable[..., Any] | tuple[Any, str] | str
"""Callable, ``(target, "method")`` pair, or ``"module:qualname"``/``"module:Class@method"``."""

_MODULE_SEPARATOR = ":"
_METHOD_SEPARATOR = "@"
_PAIR_LENGTH = 2


def _refuse_instantiation(owner: type[Any]) -> Any:
    msg = f"Cannot instantiate '{owner.__qualname__}' to call an instance method on it."
    raise BindwireInvalidMethodReferenceError(msg)


class MethodReferenceParser:
    """Turn every supported method reference shape into a plain callable.

    ``(Class, "method")`` pairs naming an instance method need an instance of
    ``Class``; it is produced with ``instantiate`` so its constructor arguments
    are injected like any other call.
    """

    def __init__(self, *, instantiate: Callable[[type[Any]], Any] | None = None) -> None:
        self._instantiate = instantiate or _refuse_instantiation

    def to_callable(self, method_ref: MethodReference) -> Callable[..., Any]:
        """Return the callable that ``method_ref`` designates.

        Raises:
            BindwireInvalidMethodReferenceError: If the reference shape is not
                supported or does not designate a callable.

        """
        if isinstance(method_ref, str):
            return self._from_string(method_ref)
        if (
            isinstance(method_ref, tuple)
            and len(method_ref) == _PAIR_LENGTH
            and isinstance(method_ref[1], str)
        ):
            return self._from_pair(method_ref[0], method_ref[1])
        if callable(method_ref):
            return method_ref
        msg = f"Unsupported method reference {method_ref!r}."
        raise BindwireInvalidMethodReferenceError(msg)

    def _from_string(self, reference: str) -> Callable[..., Any]:
        module_name, separator, qualname = reference.partition(_MODULE_SEPARATOR)
        if not separator or not module_name or not qualname:
            msg = (
                f"Method reference {reference!r} must look like 'module:qualname' or "
                "'module:Class@method'."
            )
            raise BindwireInvalidMethodReferenceError(msg)

        owner_path, at, method_name = qualname.partition(_METHOD_SEPARATOR)
        try:
            target: Any = importlib.import_module(module_name)
            for part in owner_path.split("."):
                target = getattr(target, part)
        except (ImportError, AttributeError) as error:
            msg = f"Cannot import method reference {reference!r}: {error}"
            raise BindwireInvalidMethodReferenceError(msg) from error

        if at:
            return self._from_pair(target, method_name)
        return self._ensure_callable(target, reference)

    def _from_pair(self, owner: Any, method_name: str) -> Callable[..., Any]:
        if inspect.isclass(owner):
            try:
                raw_attribute = inspect.getattr_static(owner, method_name)
            except AttributeError as error:
                msg = f"'{owner.__qualname__}' has no method '{method_name}'."
                raise BindwireInvalidMethodReferenceError(msg) from error
            if not isinstance(raw_attribute, (staticmethod, classmethod)):
                owner = self._instantiate(owner)

        method = getattr(owner, method_name, None)
        return self._ensure_callable(method, f"{owner!r}.{method_name}")

    def _ensure_callable(self, target: Any, description: str) -> Callable[..., Any]:
        if not callable(target):
            msg = f"Method reference {description} does not designate a callable."
            raise BindwireInvalidMethodReferenceError(msg)
        return target


__all__ = ["MethodReference", "MethodReferenceParser"]
