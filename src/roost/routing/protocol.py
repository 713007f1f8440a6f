"""Host router protocol.

Roost never dispatches requests itself. It only needs three things from
the router it registers on, so any object with this shape works::

    class MyRouter:
        def scoped_path(self, path: str) -> str: ...

        @property
        def scope_options(self) -> Mapping[str, Any]: ...

        def add(self, route: Route) -> None: ...

No base class required. The bundled ``Router`` satisfies it.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from roost.routing.route import Route


@runtime_checkable
class HostRouter(Protocol):
    """What ``AuthRouter`` needs from the router it registers routes on."""

    def scoped_path(self, path: str) -> str: ...

    @property
    def scope_options(self) -> Mapping[str, Any]: ...

    def add(self, route: Route) -> None: ...


class StrategyRouter(Protocol):
    """Dispatcher behind the catch-all auth forward.

    Given the resource, strategy name and phase of a request, returns the
    handler that serves it. Roost passes it through untouched.
    """

    def match(self, resource: Any, strategy: str, phase: str) -> Any: ...
