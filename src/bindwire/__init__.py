from bindwire._internal.arguments import (
    BoundArguments,
    RawArguments,
    ResolvedArguments,
    raw_arguments,
)
from bindwire._internal.binding import ImplicitEntityBinder, RouteBindings
from bindwire._internal.injection import ContainerInjectionResolver, ServiceRegistry
from bindwire._internal.normalizer import ArgumentNormalizer
from bindwire._internal.policies import VariadicNamedValuePolicy
from bindwire._internal.resolution import ArgumentResolver
from bindwire._internal.signature import MethodSignature, ParameterSpec, SignatureDescriptor
from bindwire.exceptions import (
    BindwireCircularDependencyError,
    BindwireEntityNotFoundError,
    BindwireError,
    BindwireInvalidArgumentsError,
    BindwireInvalidMethodReferenceError,
    BindwireInvalidRegistrationError,
    BindwireSignatureUnavailableError,
    BindwireUnresolvableParameterError,
)
from bindwire.invoker import Invoker
from bindwire.markers import Routable, RouteKey

__all__ = [
    "ArgumentNormalizer",
    "ArgumentResolver",
    "BindwireCircularDependencyError",
    "BindwireEntityNotFoundError",
    "BindwireError",
    "BindwireInvalidArgumentsError",
    "BindwireInvalidMethodReferenceError",
    "BindwireInvalidRegistrationError",
    "BindwireSignatureUnavailableError",
    "BindwireUnresolvableParameterError",
    "BoundArguments",
    "ContainerInjectionResolver",
    "ImplicitEntityBinder",
    "Invoker",
    "MethodSignature",
    "ParameterSpec",
    "RawArguments",
    "ResolvedArguments",
    "Routable",
    "RouteBindings",
    "RouteKey",
    "ServiceRegistry",
    "SignatureDescriptor",
    "VariadicNamedValuePolicy",
    "raw_arguments",
]
