from __future__ import annotations

from typing import Any, NamedTuple, Protocol, runtime_checkable


class RouteKey(NamedTuple):
    """Select the field used to look up an implicitly bound entity.

    Attach ``RouteKey`` metadata to ``typing.Annotated`` so the lookup
    capability receives ``field`` alongside the caller-supplied key.

    Examples:
        .. code-block:: python

            from typing import Annotated


            def show(post: Annotated[Post, RouteKey("slug")]) -> str:
                return post.title


            invoker.call(show, {"post": "hello-world"})

    """

    field: str


@runtime_checkable
class Routable(Protocol):
    """Protocol for types that resolve an instance from a scalar key.

    ``resolve_route_binding`` is looked up on the class and must return the
    matching instance or ``None`` when nothing matches.
    """

    @classmethod
    def resolve_route_binding(cls, key: Any, field: str | None = None) -> Any: ...
