"""AuthRouter: declares the authentication routes of an application.

Each ``*_route`` method resolves its directives against the router-wide
``RouterDefaults`` and registers the resulting routes on the host router,
inside whatever scope is currently open::

    router = Router()
    auth = AuthRouter(router, RouterDefaults(default_sign_in_view=SignIn))

    auth.sign_in_route(register_path="/register", reset_path="/reset")
    auth.sign_out_route(AuthController)
    with router.scope("/admin"):
        auth.reset_route(as_name="admin")
    auth.auth_routes_for(User, to=AuthController)

Options and paths are validated before anything is registered, so a
declaration with a missing or invalid option, or a malformed path, leaves
the host router and the live-session names untouched.
"""

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from roost.config import RouterDefaults
from roost.errors import DuplicateRouteName
from roost.options import ResolvedRouteConfig, RouteKind, resolve
from roost.routing.protocol import HostRouter
from roost.routing.route import ALL_METHODS, LiveSession, Route
from roost.routing.router import Router, join_path, parse_path
from roost.strategies import RouteTuple, enumerate_routes

_log = logging.getLogger("roost.router")

_GET = frozenset({"GET"})


class AuthRouter:
    """Registers auth routes on a host router.

    *router* defaults to a fresh bundled ``Router``; *defaults* to
    ``RouterDefaults()``. Both are fixed for the lifetime of the instance.
    Live-session names must be unique per ``AuthRouter``.
    """

    __slots__ = ("_live_sessions", "defaults", "router")

    def __init__(
        self,
        router: HostRouter | None = None,
        defaults: RouterDefaults | None = None,
    ) -> None:
        self.router: HostRouter = router if router is not None else Router()
        self.defaults: RouterDefaults = defaults or RouterDefaults()
        self._live_sessions: dict[str, LiveSession] = {}

    @property
    def live_sessions(self) -> Mapping[str, LiveSession]:
        """Live sessions declared so far, by name."""
        return MappingProxyType(self._live_sessions)

    # -- Declarations --

    def sign_in_route(self, **directives: Any) -> ResolvedRouteConfig:
        """Sign-in view at ``path``, plus optional reset and register views.

        The three routes share the live session ``{as_name}_sign_in``.
        """
        config = self._resolve(RouteKind.SIGN_IN, directives)
        live = self._live_session(config)
        routes = [self._live_route(config, config.path, "sign_in", config.as_name, live)]
        if config.extras["reset_path"] is not None:
            routes.append(
                self._live_route(
                    config, config.extras["reset_path"], "reset", f"{config.as_name}_reset", live
                )
            )
        if config.extras["register_path"] is not None:
            routes.append(
                self._live_route(
                    config,
                    config.extras["register_path"],
                    "register",
                    f"{config.as_name}_register",
                    live,
                )
            )
        self._add_all(config, routes, live)
        return config

    def sign_out_route(
        self,
        controller: Any,
        path: str | None = None,
        **directives: Any,
    ) -> ResolvedRouteConfig:
        """``GET path`` dispatched to *controller* with action ``"sign_out"``."""
        directives["controller"] = controller
        if path is not None:
            directives["path"] = path
        config = self._resolve(RouteKind.SIGN_OUT, directives)
        route = Route(
            path=config.path or "/",
            handler=config.handler,
            methods=_GET,
            name=config.as_name,
            action=config.action,
            scope_opts=self._scope_opts(config),
        )
        self._add_all(config, [route])
        return config

    def reset_route(self, **directives: Any) -> ResolvedRouteConfig:
        """Password reset view at ``{path}/{token}``."""
        config = self._resolve(RouteKind.RESET, directives)
        live = self._live_session(config)
        path = join_path(config.path or "/", "{token}")
        routes = [self._live_route(config, path, "reset", config.as_name, live)]
        self._add_all(config, routes, live)
        return config

    def confirm_route(self, resource: Any, strategy: Any, **directives: Any) -> ResolvedRouteConfig:
        """Confirmation view for *strategy* of *resource*."""
        return self._tokened_route(RouteKind.CONFIRM, resource, strategy, directives)

    def magic_sign_in_route(
        self,
        resource: Any,
        strategy: Any,
        **directives: Any,
    ) -> ResolvedRouteConfig:
        """Magic-link sign-in view for *strategy* of *resource*."""
        return self._tokened_route(RouteKind.MAGIC_SIGN_IN, resource, strategy, directives)

    def auth_routes(
        self,
        controller: Any,
        resources: Any,
        **directives: Any,
    ) -> ResolvedRouteConfig:
        """Forward everything under ``path`` to the strategy router.

        The strategy router (``strategy_router=`` or
        ``RouterDefaults.default_strategy_router``) dispatches by resource,
        strategy and phase. The route's ``private`` map carries the
        controller, resources, not-found handler and the scoped path.
        """
        if not isinstance(resources, Iterable) or isinstance(resources, str | bytes):
            resources = (resources,)
        directives["controller"] = controller
        directives["resources"] = tuple(resources)
        config = self._resolve(RouteKind.AUTH, directives)
        route = Route(
            path=config.path or "/",
            handler=config.handler,
            methods=ALL_METHODS,
            name=config.as_name,
            private=config.extras,
            scope_opts=self._scope_opts(config),
            forward=True,
        )
        self._add_all(config, [route])
        return config

    def auth_routes_for(
        self,
        resource: Any,
        *,
        to: Any = None,
        path: str | None = None,
        scope_opts: Mapping[str, Any] | None = None,
    ) -> tuple[RouteTuple, ...]:
        """One explicit route per strategy phase of *resource*, under ``path``.

        Each route dispatches to *to* with the action
        ``(subject_name, strategy_name, phase)`` and carries the strategy in
        ``private["strategy"]``.
        """
        directives: dict[str, Any] = {"to": to, "resource": resource}
        if path is not None:
            directives["path"] = path
        if scope_opts is not None:
            directives["scope_opts"] = scope_opts
        config = self._resolve(RouteKind.AUTH_FOR, directives)
        tuples = enumerate_routes(
            resource, config.handler, introspection=self.defaults.introspection
        )
        scope = self._scope_opts(config)
        routes = [
            Route(
                path=join_path(config.path or "/", entry.path),
                handler=entry.controller,
                methods=frozenset({entry.method}),
                name=config.as_name,
                action=entry.action,
                private=entry.metadata,
                scope_opts=scope,
            )
            for entry in tuples
        ]
        self._add_all(config, routes)
        return tuples

    # -- Internals --

    def _resolve(self, kind: RouteKind, directives: Mapping[str, Any]) -> ResolvedRouteConfig:
        return resolve(kind, MappingProxyType(dict(directives)), self.defaults, scope=self.router)

    def _tokened_route(
        self,
        kind: RouteKind,
        resource: Any,
        strategy: Any,
        directives: dict[str, Any],
    ) -> ResolvedRouteConfig:
        directives["resource"] = resource
        directives["strategy"] = strategy
        config = self._resolve(kind, directives)
        live = self._live_session(config)
        path = config.path or "/"
        if config.extras["token_as_route_param"]:
            path = join_path(path, "{token}")
        routes = [self._live_route(config, path, config.action, config.as_name, live)]
        self._add_all(config, routes, live)
        return config

    def _live_session(self, config: ResolvedRouteConfig) -> LiveSession:
        name = config.live_session or f"{config.as_name}_{config.kind}"
        if name in self._live_sessions:
            raise DuplicateRouteName(name)
        return LiveSession(
            name=name,
            session=config.session,
            on_mount=config.hooks,
            layout=config.layout,
        )

    def _scope_opts(self, config: ResolvedRouteConfig) -> Mapping[str, Any]:
        return MappingProxyType({**self.router.scope_options, **config.scope_opts})

    def _live_route(
        self,
        config: ResolvedRouteConfig,
        path: str | None,
        action: str,
        name: str,
        live: LiveSession,
    ) -> Route:
        return Route(
            path=path or "/",
            handler=config.handler,
            methods=_GET,
            name=name,
            action=action,
            scope_opts=self._scope_opts(config),
            live_session=live,
        )

    def _add_all(
        self,
        config: ResolvedRouteConfig,
        routes: list[Route],
        live: LiveSession | None = None,
    ) -> None:
        # Paths are checked up front so a bad one registers nothing
        for route in routes:
            parse_path(route.path)
        for route in routes:
            self.router.add(route)
        if live is not None:
            self._live_sessions[live.name] = live
        _log.debug("Declared %s routes %r at %s", config.kind, config.as_name, config.path)
