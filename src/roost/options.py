"""Option resolution for auth route declarations.

Every route declaration hands over a set of keyword directives. ``resolve``
turns them into one ``ResolvedRouteConfig``. For each recognized key the
value is taken from, in order:

1. the directive, even when it is ``None`` or ``False``
2. the matching ``RouterDefaults`` field
3. a hard default (``as_name="auth"``, ``overrides=(DefaultOverrides,)``,
   ``token_as_route_param=True``, otherwise ``None``)

Keys that are not recognized are passed through as scope options for the
host router, with ``alias`` defaulting to ``False``.

Path directives may be plain strings (scoped to the enclosing router
scope) or wrapped with ``unscoped()`` to be used literally::

    resolve(
        RouteKind.SIGN_IN,
        {"register_path": unscoped("/register"), "reset_path": "/reset"},
        RouterDefaults(default_sign_in_view=SignInView),
        scope=router,
    )

``resolve`` is pure: it reads the directives, the defaults and the scope
prefix, and builds a new record. Nothing is registered here.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, TypeAlias

from roost._internal.types import Hook
from roost.config import RouterDefaults
from roost.errors import MissingRequiredOption
from roost.hooks import compose_hooks
from roost.overrides import DEFAULT_OVERRIDES
from roost.routing.protocol import HostRouter
from roost.session import build_session_params


class RouteKind(StrEnum):
    """The category of a route declaration."""

    SIGN_IN = "sign_in"
    SIGN_OUT = "sign_out"
    RESET = "reset"
    CONFIRM = "confirm"
    MAGIC_SIGN_IN = "magic_sign_in"
    AUTH = "auth"
    AUTH_FOR = "auth_for"


# Kinds rendered by a view inside their own live session
LIVE_KINDS: frozenset[RouteKind] = frozenset(
    {RouteKind.SIGN_IN, RouteKind.RESET, RouteKind.CONFIRM, RouteKind.MAGIC_SIGN_IN}
)

# Registrar method names, used in error messages
DECLARATIONS: dict[RouteKind, str] = {
    RouteKind.SIGN_IN: "sign_in_route",
    RouteKind.SIGN_OUT: "sign_out_route",
    RouteKind.RESET: "reset_route",
    RouteKind.CONFIRM: "confirm_route",
    RouteKind.MAGIC_SIGN_IN: "magic_sign_in_route",
    RouteKind.AUTH: "auth_routes",
    RouteKind.AUTH_FOR: "auth_routes_for",
}


# ---------------------------------------------------------------------------
# Path values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Scoped:
    """A path under the enclosing router scope."""

    value: str


@dataclass(frozen=True, slots=True)
class Unscoped:
    """A literal path that ignores the enclosing router scope."""

    value: str


# A bare string is Scoped; None is absent
PathValue: TypeAlias = Scoped | Unscoped | str | None


def unscoped(value: str) -> Unscoped:
    """Mark *value* as a literal path::

    auth.sign_in_route(register_path=unscoped("/register"))
    """
    return Unscoped(value)


def ensure_path_prefix(path: str) -> str:
    """Return *path* with a leading ``/``."""
    return path if path.startswith("/") else f"/{path}"


def resolve_path(value: PathValue, scope: HostRouter) -> str | None:
    """Resolve a path directive against *scope*.

    ``None`` stays ``None`` (never ``""``), ``Unscoped`` values are returned
    as given, and scoped values are prefixed by ``scope.scoped_path()``.
    """
    if value is None:
        return None
    if isinstance(value, Unscoped):
        return value.value
    if isinstance(value, Scoped):
        value = value.value
    return scope.scoped_path(ensure_path_prefix(value))


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<unset>"


_UNSET: Any = _Unset()


def pick(directive: Any, router_default: Any = None, hard_default: Any = None) -> Any:
    """Choose one option value: directive > router default > hard default.

    *directive* wins whenever it was given, including ``None`` and
    ``False``; only the ``_UNSET`` marker means "not given". A router
    default of ``None`` means the router did not configure the option.
    """
    if directive is not _UNSET:
        return directive
    if router_default is not None:
        return router_default
    return hard_default


def _take(remaining: dict[str, Any], key: str) -> Any:
    return remaining.pop(key, _UNSET)


# ---------------------------------------------------------------------------
# Common options
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CommonOptions:
    """Options shared by every live route declaration."""

    as_name: Any
    otp_app: Any
    layout: Any
    on_mount: Any
    on_mount_prepend: Any
    auth_routes_prefix: PathValue
    gettext_fn: Any
    gettext_backend: Any
    overrides: tuple[Any, ...]


def _take_as_name(remaining: dict[str, Any]) -> Any:
    as_name = _take(remaining, "as_name")
    alias = _take(remaining, "as_")
    return as_name if as_name is not _UNSET else alias


def resolve_common(
    directives: Mapping[str, Any],
    defaults: RouterDefaults,
) -> tuple[CommonOptions, dict[str, Any]]:
    """Extract the common live route options.

    Returns the options and the directives left over. ``as_`` is accepted
    as an alias of ``as_name``.
    """
    remaining = dict(directives)
    overrides = pick(_take(remaining, "overrides"), None, DEFAULT_OVERRIDES)
    common = CommonOptions(
        as_name=pick(_take_as_name(remaining), None, "auth"),
        otp_app=pick(_take(remaining, "otp_app")),
        layout=pick(_take(remaining, "layout"), defaults.default_layout),
        on_mount=pick(_take(remaining, "on_mount")),
        on_mount_prepend=pick(_take(remaining, "on_mount_prepend")),
        auth_routes_prefix=pick(_take(remaining, "auth_routes_prefix")),
        gettext_fn=pick(_take(remaining, "gettext_fn")),
        gettext_backend=pick(_take(remaining, "gettext_backend"), defaults.gettext_backend),
        overrides=tuple(overrides) if overrides is not None else (),
    )
    return common, remaining


def build_scope_opts(remaining: Mapping[str, Any]) -> Mapping[str, Any]:
    """Turn unrecognized directives into host scope options (``alias=False`` unless given)."""
    opts: dict[str, Any] = {"alias": False}
    opts.update(remaining)
    return MappingProxyType(opts)


# ---------------------------------------------------------------------------
# Resolved configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResolvedRouteConfig:
    """Everything needed to register one route declaration.

    ``path`` is absolute. ``live_session`` is the live-session name for
    view-rendered kinds and ``None`` otherwise. ``extras`` holds the
    kind-specific values (sub-paths, resources, controller, ...).
    """

    kind: RouteKind
    as_name: str
    path: str | None
    handler: Any
    action: Any = None
    scope_opts: Mapping[str, Any] = field(default_factory=dict)
    hooks: tuple[Hook, ...] = ()
    layout: Any = None
    gettext_fn: Any = None
    gettext_backend: Any = None
    session: Mapping[str, Any] = field(default_factory=dict)
    live_session: str | None = None
    extras: Mapping[str, Any] = field(default_factory=dict)


def _required(value: Any, option: str, kind: RouteKind) -> Any:
    if value is _UNSET or value is None:
        raise MissingRequiredOption(option, DECLARATIONS[kind])
    return value


def _resolve_live(
    kind: RouteKind,
    directives: Mapping[str, Any],
    defaults: RouterDefaults,
    scope: HostRouter,
) -> ResolvedRouteConfig:
    remaining = dict(directives)
    extras: dict[str, Any] = {}
    session: dict[str, Any] = {}

    path_directive = _take(remaining, "path")
    live_view = _required(
        pick(_take(remaining, "live_view"), defaults.view_for(kind)), "live_view", kind
    )

    match kind:
        case RouteKind.SIGN_IN:
            path = _required(pick(path_directive, defaults.sign_in_path), "path", kind)
            resources = pick(_take(remaining, "resources"))
            reset_path = resolve_path(pick(_take(remaining, "reset_path")), scope)
            register_path = resolve_path(pick(_take(remaining, "register_path")), scope)
            extras.update(resources=resources, reset_path=reset_path, register_path=register_path)
            action = "sign_in"
        case RouteKind.RESET:
            path = _required(pick(path_directive, defaults.reset_path), "path", kind)
            action = "reset"
        case RouteKind.CONFIRM | RouteKind.MAGIC_SIGN_IN:
            resource = _required(_take(remaining, "resource"), "resource", kind)
            strategy = _required(_take(remaining, "strategy"), "strategy", kind)
            prefix = (
                defaults.confirm_path_prefix
                if kind is RouteKind.CONFIRM
                else defaults.magic_sign_in_path_prefix
            )
            strategy_name = getattr(strategy, "name", strategy)
            path = _required(pick(path_directive, f"{prefix}{strategy_name}"), "path", kind)
            token = pick(_take(remaining, "token_as_route_param"), None, True)
            extras.update(resource=resource, strategy=strategy, token_as_route_param=bool(token))
            session.update(resource=resource, strategy=strategy)
            action = "confirm" if kind is RouteKind.CONFIRM else "sign_in"
        case _:
            msg = f"{kind} is not a live route kind"
            raise ValueError(msg)

    common, remaining = resolve_common(remaining, defaults)
    as_name = str(_required(common.as_name, "as_name", kind))
    resolved_path = resolve_path(path, scope)
    gettext_fn = defaults.translation_generator(
        common.gettext_fn, common.gettext_backend, resolved_path or "/"
    )

    if kind is RouteKind.SIGN_IN:
        session.update(
            path=resolved_path,
            resources=extras["resources"],
            reset_path=extras["reset_path"],
            register_path=extras["register_path"],
        )

    return ResolvedRouteConfig(
        kind=kind,
        as_name=as_name,
        path=resolved_path,
        handler=live_view,
        action=action,
        scope_opts=build_scope_opts(remaining),
        hooks=compose_hooks(common.on_mount_prepend, common.on_mount),
        layout=common.layout,
        gettext_fn=gettext_fn,
        gettext_backend=common.gettext_backend,
        session=build_session_params(
            auth_routes_prefix=resolve_path(common.auth_routes_prefix, scope),
            overrides=common.overrides,
            gettext_fn=gettext_fn,
            otp_app=common.otp_app,
            redirect_param_name=defaults.redirect_param_name,
            **session,
        ),
        live_session=f"{as_name}_{kind}",
        extras=MappingProxyType(extras),
    )


def _resolve_sign_out(
    directives: Mapping[str, Any],
    defaults: RouterDefaults,
    scope: HostRouter,
) -> ResolvedRouteConfig:
    remaining = dict(directives)
    controller = _required(_take(remaining, "controller"), "controller", RouteKind.SIGN_OUT)
    path = _required(
        pick(_take(remaining, "path"), defaults.sign_out_path), "path", RouteKind.SIGN_OUT
    )
    as_name = str(
        _required(pick(_take_as_name(remaining), None, "auth"), "as_name", RouteKind.SIGN_OUT)
    )
    return ResolvedRouteConfig(
        kind=RouteKind.SIGN_OUT,
        as_name=as_name,
        path=resolve_path(path, scope),
        handler=controller,
        action="sign_out",
        scope_opts=build_scope_opts(remaining),
        extras=MappingProxyType({"controller": controller}),
    )


def _resolve_auth(
    directives: Mapping[str, Any],
    defaults: RouterDefaults,
    scope: HostRouter,
) -> ResolvedRouteConfig:
    remaining = dict(directives)
    controller = _required(_take(remaining, "controller"), "controller", RouteKind.AUTH)
    resources = pick(_take(remaining, "resources"), None, ())
    as_name = str(
        _required(pick(_take_as_name(remaining), None, "auth"), "as_name", RouteKind.AUTH)
    )
    path = _required(
        pick(_take(remaining, "path"), defaults.default_auth_scope), "path", RouteKind.AUTH
    )
    not_found = pick(_take(remaining, "not_found"))
    strategy_router = _required(
        pick(_take(remaining, "strategy_router"), defaults.default_strategy_router),
        "strategy_router",
        RouteKind.AUTH,
    )
    resolved_path = resolve_path(path, scope)
    return ResolvedRouteConfig(
        kind=RouteKind.AUTH,
        as_name=as_name,
        path=resolved_path,
        handler=strategy_router,
        scope_opts=build_scope_opts(remaining),
        extras=MappingProxyType(
            {
                "path": resolved_path,
                "controller": controller,
                "resources": tuple(resources) if resources is not None else (),
                "not_found": not_found,
            }
        ),
    )


def _resolve_auth_for(
    directives: Mapping[str, Any],
    defaults: RouterDefaults,
    scope: HostRouter,
) -> ResolvedRouteConfig:
    remaining = dict(directives)
    controller = _required(_take(remaining, "to"), "to", RouteKind.AUTH_FOR)
    resource = _required(_take(remaining, "resource"), "resource", RouteKind.AUTH_FOR)
    path = _required(
        pick(_take(remaining, "path"), defaults.default_auth_scope, "/auth"),
        "path",
        RouteKind.AUTH_FOR,
    )
    if isinstance(path, Unscoped):
        resolved_path = ensure_path_prefix(path.value)
    else:
        resolved_path = resolve_path(path, scope)
    scope_opts = pick(_take(remaining, "scope_opts"), None, {})
    # anything else is folded into the scope options as well
    return ResolvedRouteConfig(
        kind=RouteKind.AUTH_FOR,
        as_name="auth",
        path=resolved_path,
        handler=controller,
        scope_opts=build_scope_opts({**remaining, **dict(scope_opts or {})}),
        extras=MappingProxyType({"resource": resource, "controller": controller}),
    )


def resolve(
    kind: RouteKind | str,
    directives: Mapping[str, Any],
    defaults: RouterDefaults,
    *,
    scope: HostRouter,
) -> ResolvedRouteConfig:
    """Resolve the *directives* of one route declaration of *kind*.

    *scope* supplies the enclosing path prefix (the host router). Raises
    ``MissingRequiredOption`` when a required value is missing from both
    the directives and the defaults.
    """
    kind = RouteKind(kind)
    if kind in LIVE_KINDS:
        return _resolve_live(kind, directives, defaults, scope)
    if kind is RouteKind.SIGN_OUT:
        return _resolve_sign_out(directives, defaults, scope)
    if kind is RouteKind.AUTH:
        return _resolve_auth(directives, defaults, scope)
    return _resolve_auth_for(directives, defaults, scope)
