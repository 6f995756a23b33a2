from __future__ import annotations

import datetime
import decimal
import enum
import inspect
import logging
import numbers
import pathlib
import uuid
from collections.abc import Callable
from typing import Any, TypeGuard

from bindwire._internal.type_checks import is_runtime_class

logger = logging.getLogger(__name__)

# Types whose instances are data supplied by the caller, never services.
VALUE_TYPES: tuple[type[Any], ...] = (
    enum.Enum,
    numbers.Number,
    decimal.Decimal,
    uuid.UUID,
    pathlib.PurePath,
    datetime.date,
    datetime.time,
    datetime.timedelta,
)


class AutowirePolicy:
    """Decide whether a missing parameter may be filled by constructing its type.

    Only service-like classes qualify. Builtins, value types, abstract classes
    and metaclasses are rejected, and so is every routable entity type: an
    entity arrives through a key lookup, so building an empty one would hide a
    missing key.
    """

    def __init__(
        self,
        *,
        is_routable: Callable[[type[Any]], bool] | None = None,
        value_types: tuple[type[Any], ...] = VALUE_TYPES,
    ) -> None:
        self._is_routable = is_routable
        self._value_types = value_types

    def allows(self, declared_type: object) -> TypeGuard[type[Any]]:
        """Return true when ``declared_type`` can be autowired."""
        if not is_runtime_class(declared_type):
            return False
        reason = self._rejection(declared_type)
        if reason is not None:
            logger.debug("Not autowiring %r: %s", declared_type, reason)
            return False
        return True

    def _rejection(self, declared_type: type[Any]) -> str | None:
        if declared_type.__module__ == "builtins" or issubclass(declared_type, type):
            return "builtin type"
        if issubclass(declared_type, self._value_types):
            return "value type"
        if inspect.isabstract(declared_type):
            return "abstract class"
        if self._is_routable is not None and self._is_routable(declared_type):
            return "routable entity"
        return None


__all__ = ["VALUE_TYPES", "AutowirePolicy"]
