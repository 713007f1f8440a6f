"""Roost exception hierarchy.

Shared across the option resolver, the strategy enumerator, the registrar
and the bundled router so every module raises and catches the same types.

Build-time mistakes are ``ConfigurationError`` subclasses and abort router
construction. Matching failures on the bundled router are ``HTTPError``
subclasses. Redirect sanitizing never raises.
"""

from dataclasses import dataclass


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when a route declaration or router setup is invalid.

    Always raised at build time, before the router serves traffic.
    """


class MissingRequiredOption(ConfigurationError):  # noqa: N818
    """A route declaration is missing an option it cannot be built without.

    Example: ``auth_routes_for(User)`` without ``to=`` (the controller).
    """

    def __init__(self, option: str, declaration: str) -> None:
        self.option = option
        self.declaration = declaration
        super().__init__(f"{declaration} requires the {option!r} option.")


class UnknownStrategyPhase(ConfigurationError):  # noqa: N818
    """A strategy advertised a phase it has no HTTP method for."""

    def __init__(self, strategy: str, phase: str) -> None:
        self.strategy = strategy
        self.phase = phase
        super().__init__(
            f"Strategy {strategy!r} has no HTTP method for phase {phase!r}."
        )


class DuplicateRouteName(ConfigurationError):  # noqa: N818
    """Two declarations on one router produced the same live-session name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Live session {name!r} is already defined on this router. "
            "Pass a distinct as_name= to one of the declarations."
        )


@dataclass(frozen=True, slots=True)
class HTTPError(RoostError):
    """An error that maps directly to an HTTP status code.

    Raised by the bundled router when a request cannot be matched.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
