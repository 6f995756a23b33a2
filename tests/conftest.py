"""Shared pytest fixtures for bindwire tests."""

import pytest

from bindwire._internal.binding import RouteBindings
from bindwire._internal.normalizer import ArgumentNormalizer
from bindwire._internal.signature import SignatureDescriptor
from bindwire.invoker import Invoker


@pytest.fixture()
def invoker() -> Invoker:
    """Default invoker with autoregistration enabled."""
    return Invoker()


@pytest.fixture()
def invoker_no_autoregister() -> Invoker:
    """Invoker that only injects registered providers and defaults."""
    return Invoker(autoregister=False)


@pytest.fixture()
def signatures() -> SignatureDescriptor:
    """SignatureDescriptor instance."""
    return SignatureDescriptor()


@pytest.fixture()
def normalizer() -> ArgumentNormalizer:
    """ArgumentNormalizer with the default variadic policy."""
    return ArgumentNormalizer()


@pytest.fixture()
def route_bindings() -> RouteBindings:
    """Empty RouteBindings registry."""
    return RouteBindings()
