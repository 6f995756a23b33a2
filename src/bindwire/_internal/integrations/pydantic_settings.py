from __future__ import annotations

from typing import Any

from pydantic_settings import BaseSettings

from bindwire._internal.type_checks import is_runtime_class


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a class is a ``pydantic_settings.BaseSettings`` model.

    Settings models read their values from the environment, so the container
    builds them with no arguments instead of autowiring their fields, and
    caches the instance for the lifetime of the invoker.

    Args:
        candidate: Object to test.

    """
    if not is_runtime_class(candidate):
        return False
    try:
        return issubclass(candidate, BaseSettings) and candidate is not BaseSettings
    except TypeError:
        return False


def build_settings(settings_type: type[Any]) -> Any:
    """Instantiate a settings model from its environment sources."""
    return settings_type()


__all__ = ["build_settings", "is_pydantic_settings_subclass"]
