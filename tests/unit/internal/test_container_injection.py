from __future__ import annotations

import datetime
import decimal
import enum
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import pytest
from pydantic_settings import BaseSettings

from bindwire._internal.autoregistration import AutowirePolicy
from bindwire._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from bindwire._internal.injection import ContainerInjectionResolver, ServiceRegistry
from bindwire._internal.signature import SignatureDescriptor
from bindwire.exceptions import (
    BindwireCircularDependencyError,
    BindwireInvalidRegistrationError,
    BindwireUnresolvableParameterError,
)


class Clock:
    pass


class Mailer(ABC):
    @abstractmethod
    def send(self) -> None: ...


class SmtpMailer(Mailer):
    def send(self) -> None:
        pass


class AppSettings(BaseSettings):
    app_name: str = "bindwire"


def needs_clock(clock: Clock) -> None:
    pass


def needs_mailer(mailer: Mailer) -> None:
    pass


def needs_optional_mailer(mailer: Mailer | None) -> None:
    pass


def needs_limit(limit: int = 25) -> None:
    pass


def needs_clock_with_default(clock: Clock = None) -> None:  # type: ignore[assignment]
    pass


def needs_settings(settings: AppSettings) -> None:
    pass


def needs_untyped(value) -> None:  # noqa: ANN001
    pass


def needs_int(count: int) -> None:
    pass


def needs_moment(moment: datetime.datetime) -> None:
    pass


class Shade(enum.Enum):
    LIGHT = "light"
    DARK = "dark"


def needs_shade(shade: Shade) -> None:
    pass


class _CallRecorder:
    def __init__(self) -> None:
        self.calls: list[Any] = []

    def __call__(self, target: Any) -> Any:
        self.calls.append(target)
        return target()


@pytest.fixture()
def registry() -> ServiceRegistry:
    return ServiceRegistry()


@pytest.fixture()
def recorder() -> _CallRecorder:
    return _CallRecorder()


@pytest.fixture()
def injector(registry: ServiceRegistry, recorder: _CallRecorder) -> ContainerInjectionResolver:
    return ContainerInjectionResolver(registry=registry, call=recorder)


def _parameter(signatures: SignatureDescriptor, target: Any) -> Any:
    return signatures.describe(target).parameters[0]


def test_registered_instance_is_injected(
    injector: ContainerInjectionResolver,
    registry: ServiceRegistry,
    signatures: SignatureDescriptor,
) -> None:
    clock = Clock()
    registry.add_instance(Clock, clock)

    assert injector.inject(_parameter(signatures, needs_clock), {}) is clock


def test_registered_factory_is_called_through_call(
    injector: ContainerInjectionResolver,
    registry: ServiceRegistry,
    recorder: _CallRecorder,
    signatures: SignatureDescriptor,
) -> None:
    registry.add_factory(Mailer, SmtpMailer)

    first = injector.inject(_parameter(signatures, needs_mailer), {})
    second = injector.inject(_parameter(signatures, needs_mailer), {})

    assert isinstance(first, SmtpMailer)
    assert first is not second
    assert recorder.calls == [SmtpMailer, SmtpMailer]


def test_cached_factory_is_called_once(
    injector: ContainerInjectionResolver,
    registry: ServiceRegistry,
    recorder: _CallRecorder,
    signatures: SignatureDescriptor,
) -> None:
    registry.add_concrete(Mailer, SmtpMailer, cached=True)

    first = injector.inject(_parameter(signatures, needs_mailer), {})
    second = injector.inject(_parameter(signatures, needs_mailer), {})

    assert first is second
    assert recorder.calls == [SmtpMailer]


def test_concurrent_cached_factory_calls_share_one_instance(registry: ServiceRegistry) -> None:
    barrier = threading.Barrier(2)

    def build(target: Any) -> Any:
        barrier.wait(timeout=5)
        return target()

    injector = ContainerInjectionResolver(registry=registry, call=build)
    registry.add_concrete(Mailer, SmtpMailer, cached=True)
    spec = registry.find(Mailer)
    assert spec is not None

    with ThreadPoolExecutor(max_workers=2) as executor:
        results = list(executor.map(lambda _: injector.provide(spec), range(2)))

    assert results[0] is results[1]


def test_registered_provider_wins_over_default(
    injector: ContainerInjectionResolver,
    registry: ServiceRegistry,
    signatures: SignatureDescriptor,
) -> None:
    clock = Clock()
    registry.add_instance(Clock, clock)

    assert injector.inject(_parameter(signatures, needs_clock_with_default), {}) is clock


def test_default_wins_over_autowiring(
    injector: ContainerInjectionResolver,
    recorder: _CallRecorder,
    signatures: SignatureDescriptor,
) -> None:
    assert injector.inject(_parameter(signatures, needs_clock_with_default), {}) is None
    assert recorder.calls == []


def test_default_value_is_used_for_plain_types(
    injector: ContainerInjectionResolver,
    signatures: SignatureDescriptor,
) -> None:
    assert injector.inject(_parameter(signatures, needs_limit), {}) == 25


def test_concrete_class_is_autowired(
    injector: ContainerInjectionResolver,
    recorder: _CallRecorder,
    signatures: SignatureDescriptor,
) -> None:
    value = injector.inject(_parameter(signatures, needs_clock), {})

    assert isinstance(value, Clock)
    assert recorder.calls == [Clock]


def test_abstract_class_is_not_autowired(
    injector: ContainerInjectionResolver,
    signatures: SignatureDescriptor,
) -> None:
    with pytest.raises(BindwireUnresolvableParameterError) as exc_info:
        injector.inject(_parameter(signatures, needs_mailer), {})

    assert exc_info.value.parameter_name == "mailer"
    assert "'Mailer' cannot be constructed automatically" in str(exc_info.value)


def test_nullable_parameter_falls_back_to_none(
    injector: ContainerInjectionResolver,
    signatures: SignatureDescriptor,
) -> None:
    assert injector.inject(_parameter(signatures, needs_optional_mailer), {}) is None


@pytest.mark.parametrize("target", [needs_int, needs_moment])
def test_value_types_are_never_autowired(
    injector: ContainerInjectionResolver,
    signatures: SignatureDescriptor,
    target: Any,
) -> None:
    with pytest.raises(BindwireUnresolvableParameterError):
        injector.inject(_parameter(signatures, target), {})


def test_untyped_parameter_without_default_is_unresolvable(
    injector: ContainerInjectionResolver,
    signatures: SignatureDescriptor,
) -> None:
    with pytest.raises(BindwireUnresolvableParameterError, match="no type to inject"):
        injector.inject(_parameter(signatures, needs_untyped), {})


def test_autoregister_disabled_skips_autowiring(
    registry: ServiceRegistry,
    recorder: _CallRecorder,
    signatures: SignatureDescriptor,
) -> None:
    injector = ContainerInjectionResolver(registry=registry, call=recorder, autoregister=False)

    with pytest.raises(BindwireUnresolvableParameterError, match="no provider is registered"):
        injector.inject(_parameter(signatures, needs_clock), {})
    assert recorder.calls == []


def test_settings_are_built_once_from_environment(
    injector: ContainerInjectionResolver,
    registry: ServiceRegistry,
    recorder: _CallRecorder,
    signatures: SignatureDescriptor,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_NAME", "from-env")

    first = injector.inject(_parameter(signatures, needs_settings), {})
    second = injector.inject(_parameter(signatures, needs_settings), {})

    assert isinstance(first, AppSettings)
    assert first.app_name == "from-env"
    assert first is second
    assert AppSettings in registry
    assert recorder.calls == []


def test_is_pydantic_settings_subclass() -> None:
    assert is_pydantic_settings_subclass(AppSettings) is True
    assert is_pydantic_settings_subclass(BaseSettings) is False
    assert is_pydantic_settings_subclass(Clock) is False
    assert is_pydantic_settings_subclass(AppSettings()) is False


def test_make_detects_circular_construction(registry: ServiceRegistry) -> None:
    injector: ContainerInjectionResolver

    def call(target: Any) -> Any:
        return injector.make(Clock)

    injector = ContainerInjectionResolver(registry=registry, call=call)

    with pytest.raises(BindwireCircularDependencyError, match="Clock -> Clock"):
        injector.make(Clock)


@pytest.mark.parametrize(
    ("candidate", "expected"),
    [
        (Clock, True),
        (SmtpMailer, True),
        (Mailer, False),
        (int, False),
        (datetime.date, False),
        (list[int], False),
        (type, False),
        (Shade, False),
        (decimal.Decimal, False),
    ],
)
def test_autowire_policy_eligibility(candidate: Any, *, expected: bool) -> None:
    assert AutowirePolicy().allows(candidate) is expected


def test_autowire_policy_rejects_routable_entities() -> None:
    policy = AutowirePolicy(is_routable=lambda declared_type: declared_type is Clock)

    assert policy.allows(Clock) is False
    assert policy.allows(SmtpMailer) is True


def test_enum_parameter_is_never_autowired(
    injector: ContainerInjectionResolver,
    recorder: _CallRecorder,
    signatures: SignatureDescriptor,
) -> None:
    with pytest.raises(BindwireUnresolvableParameterError) as exc_info:
        injector.inject(_parameter(signatures, needs_shade), {})

    assert exc_info.value.parameter_name == "shade"
    assert recorder.calls == []


def test_registry_rejects_non_class_keys(registry: ServiceRegistry) -> None:
    with pytest.raises(BindwireInvalidRegistrationError, match="must be a class"):
        registry.add_instance("clock", Clock())  # type: ignore[arg-type]


def test_registry_rejects_non_callable_factory(registry: ServiceRegistry) -> None:
    with pytest.raises(BindwireInvalidRegistrationError, match="must be callable"):
        registry.add_factory(Clock, "factory")  # type: ignore[arg-type]


def test_registry_rejects_non_class_concrete(registry: ServiceRegistry) -> None:
    with pytest.raises(BindwireInvalidRegistrationError, match="Concrete provider must be a class"):
        registry.add_concrete(Mailer, lambda: SmtpMailer())  # type: ignore[arg-type]


def test_registry_replaces_previous_registration(registry: ServiceRegistry) -> None:
    first, second = Clock(), Clock()
    registry.add_instance(Clock, first)
    registry.add_instance(Clock, second)

    spec = registry.find(Clock)

    assert spec is not None
    assert spec.instance is second
    assert len(registry) == 1
