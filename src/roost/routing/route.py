"""Route, LiveSession and RouteMatch frozen dataclasses."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from roost._internal.types import Handler, Hook

ALL_METHODS: frozenset[str] = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
)


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class LiveSession:
    """Mount configuration shared by the live routes of one declaration.

    ``session`` is handed verbatim to the view at mount time; ``on_mount``
    is the composed hook list.
    """

    name: str
    session: Mapping[str, Any]
    on_mount: tuple[Hook, ...]
    layout: Any = None

    def session_for(self, **request_values: Any) -> dict[str, Any]:
        """Return the session map for one request (see ``generate_session``)."""
        from roost.session import generate_session

        return generate_session(self.session, **request_values)


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``path`` is absolute: scope prefixes are applied before the route is
    built. ``forward`` routes match their path and everything below it.
    """

    path: str
    handler: Handler | Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
    action: Any = None
    private: Mapping[str, Any] = field(default_factory=dict)
    scope_opts: Mapping[str, Any] = field(default_factory=dict)
    live_session: LiveSession | None = None
    forward: bool = False


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
