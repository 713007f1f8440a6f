"""Authentication strategies and per-resource route enumeration.

A *resource* is any object (usually a user model class) carrying an
``AuthInfo``: its subject name plus the strategies attached to it.
Each strategy advertises ordered *phases*; every phase has a path template
and the HTTP method the strategy wants for it.

``enumerate_routes()`` expands a resource into one ``RouteTuple`` per
(strategy, phase), add-on strategies first, then primary strategies, each
in declaration order::

    from roost.strategies import authenticated, oauth2, password

    @authenticated("user", strategies=[password(), oauth2("github")])
    class User: ...

    for route in enumerate_routes(User, AuthController):
        print(route.method, route.path, route.action)
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, NamedTuple, Protocol, runtime_checkable

from roost.errors import ConfigurationError, MissingRequiredOption, UnknownStrategyPhase

AUTH_INFO_ATTR = "__auth_info__"


# ---------------------------------------------------------------------------
# Strategy model
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Phase:
    """One step of a strategy flow.

    ``path`` is the template relative to the auth scope. When ``None`` the
    strategy derives ``/{subject}/{strategy}/{phase}``.
    """

    name: str
    method: str
    path: str | None = None


@runtime_checkable
class StrategyLike(Protocol):
    """What the enumerator needs from a strategy.

    Strategy kinds own their phase-to-method policy; the enumerator only asks.
    """

    @property
    def name(self) -> str: ...

    def routes(self) -> Sequence[tuple[str, str]]: ...

    def method_for_phase(self, phase: str) -> str: ...


@dataclass(frozen=True, slots=True)
class Strategy:
    """A configured authentication mechanism attached to a resource."""

    name: str
    phases: tuple[Phase, ...]
    kind: str = "custom"
    subject_name: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def routes(self) -> tuple[tuple[str, str], ...]:
        """Return ``(path_template, phase_name)`` pairs in declared order."""
        return tuple((self._path_for(phase), phase.name) for phase in self.phases)

    def method_for_phase(self, phase: str) -> str:
        """Return the HTTP method for *phase*.

        Raises ``UnknownStrategyPhase`` when the phase is not declared.
        """
        for candidate in self.phases:
            if candidate.name == phase:
                return candidate.method.upper()
        raise UnknownStrategyPhase(self.name, phase)

    def _path_for(self, phase: Phase) -> str:
        if phase.path is not None:
            return phase.path
        subject = self.subject_name or "subject"
        return f"/{subject}/{self.name}/{phase.name}"


def password(
    name: str = "password",
    *,
    registration: bool = True,
    resettable: bool = True,
) -> Strategy:
    """Password strategy: sign-in, and optionally registration and reset.

    All phases post form data.
    """
    phases = [Phase("sign_in", "POST")]
    if registration:
        phases.insert(0, Phase("register", "POST"))
    if resettable:
        phases.extend((Phase("reset_request", "POST"), Phase("reset", "POST")))
    return Strategy(name=name, phases=tuple(phases), kind="password")


def oauth2(name: str) -> Strategy:
    """OAuth2 provider strategy: browser redirect out, provider redirect back."""
    return Strategy(
        name=name,
        phases=(Phase("request", "GET"), Phase("callback", "GET")),
        kind="oauth2",
    )


def magic_link(name: str = "magic_link") -> Strategy:
    """Magic-link strategy: request a link by POST, follow it by GET."""
    return Strategy(
        name=name,
        phases=(Phase("request", "POST"), Phase("sign_in", "GET")),
        kind="magic_link",
    )


def confirmation(name: str = "confirm_new_user", *, require_interaction: bool = False) -> Strategy:
    """Confirmation add-on: follow the emailed link (and optionally submit it)."""
    phases: tuple[Phase, ...] = (Phase("confirm", "GET"),)
    if require_interaction:
        phases = (Phase("confirm", "POST"),)
    return Strategy(name=name, phases=phases, kind="confirmation")


# ---------------------------------------------------------------------------
# Resource introspection
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuthInfo:
    """Authentication declaration carried by a resource."""

    subject_name: str
    strategies: tuple[StrategyLike, ...] = ()
    add_ons: tuple[StrategyLike, ...] = ()


def _bind_subject(strategies: Iterable[StrategyLike], subject_name: str) -> tuple[StrategyLike, ...]:
    bound: list[StrategyLike] = []
    for strategy in strategies:
        if isinstance(strategy, Strategy) and strategy.subject_name is None:
            strategy = replace(strategy, subject_name=subject_name)
        bound.append(strategy)
    return tuple(bound)


def authenticated(
    subject_name: str,
    *,
    strategies: Iterable[StrategyLike] = (),
    add_ons: Iterable[StrategyLike] = (),
) -> Any:
    """Class decorator attaching an ``AuthInfo`` to a resource.

    Strategies without a subject are bound to *subject_name*.
    """

    def decorator(resource: Any) -> Any:
        info = AuthInfo(
            subject_name=subject_name,
            strategies=_bind_subject(strategies, subject_name),
            add_ons=_bind_subject(add_ons, subject_name),
        )
        setattr(resource, AUTH_INFO_ATTR, info)
        return resource

    return decorator


class Introspection(Protocol):
    """Looks up the authentication configuration of a resource."""

    def subject_name(self, resource: Any) -> str: ...

    def add_ons(self, resource: Any) -> Sequence[StrategyLike]: ...

    def strategies(self, resource: Any) -> Sequence[StrategyLike]: ...


class AttributeIntrospection:
    """Default introspection: reads the ``__auth_info__`` attribute."""

    __slots__ = ()

    def info(self, resource: Any) -> AuthInfo:
        info = getattr(resource, AUTH_INFO_ATTR, None)
        if not isinstance(info, AuthInfo):
            name = getattr(resource, "__name__", repr(resource))
            msg = (
                f"{name} is not an authenticated resource. "
                "Decorate it with @authenticated(...)."
            )
            raise ConfigurationError(msg)
        return info

    def subject_name(self, resource: Any) -> str:
        return self.info(resource).subject_name

    def add_ons(self, resource: Any) -> Sequence[StrategyLike]:
        return self.info(resource).add_ons

    def strategies(self, resource: Any) -> Sequence[StrategyLike]:
        return self.info(resource).strategies


DEFAULT_INTROSPECTION: Introspection = AttributeIntrospection()


# ---------------------------------------------------------------------------
# Enumeration
# ---------------------------------------------------------------------------


class StrategyAction(NamedTuple):
    """Controller action descriptor for a strategy route."""

    subject_name: str
    strategy_name: str
    phase: str


@dataclass(frozen=True, slots=True)
class RouteTuple:
    """One concrete strategy endpoint, relative to the auth scope."""

    method: str
    path: str
    controller: Any
    action: StrategyAction
    metadata: Mapping[str, Any]


def enumerate_routes(
    resource: Any,
    controller: Any,
    *,
    introspection: Introspection = DEFAULT_INTROSPECTION,
) -> tuple[RouteTuple, ...]:
    """Expand *resource* into one ``RouteTuple`` per strategy phase.

    Raises ``MissingRequiredOption`` if *controller* is ``None`` and
    ``UnknownStrategyPhase`` if a strategy cannot name a method for one of
    its phases. Both are raised before any tuple is returned.
    """
    if controller is None:
        raise MissingRequiredOption("to", "auth_routes_for")

    subject_name = introspection.subject_name(resource)
    strategies = [*introspection.add_ons(resource), *introspection.strategies(resource)]

    result: list[RouteTuple] = []
    for strategy in strategies:
        metadata = MappingProxyType({"strategy": strategy})
        for path, phase in strategy.routes():
            method = strategy.method_for_phase(phase)
            if not method:
                raise UnknownStrategyPhase(strategy.name, phase)
            result.append(
                RouteTuple(
                    method=method,
                    path=path,
                    controller=controller,
                    action=StrategyAction(subject_name, strategy.name, phase),
                    metadata=metadata,
                )
            )
    return tuple(result)
