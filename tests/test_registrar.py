"""Tests for roost.registrar: declaring auth routes on a host router."""

from collections.abc import Mapping
from typing import Any

import pytest

from roost.config import RouterDefaults
from roost.errors import (
    ConfigurationError,
    DuplicateRouteName,
    MethodNotAllowed,
    MissingRequiredOption,
)
from roost.hooks import guard_session, load_session
from roost.options import unscoped
from roost.registrar import AuthRouter
from roost.routing.route import ALL_METHODS, Route
from roost.routing.router import Router, join_path
from roost.strategies import StrategyAction, authenticated, oauth2, password


class SignInView: ...


class ResetView: ...


class ConfirmView: ...


class MagicView: ...


class AuthController: ...


class StrategyRouter:
    def match(self, resource: Any, strategy: str, phase: str) -> Any:
        return AuthController


@authenticated("user", strategies=[password(registration=False), oauth2("github")])
class User: ...


DEFAULTS = RouterDefaults(
    default_sign_in_view=SignInView,
    default_reset_view=ResetView,
    default_confirm_view=ConfirmView,
    default_magic_sign_in_view=MagicView,
    default_strategy_router=StrategyRouter(),
)


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def auth(router: Router) -> AuthRouter:
    return AuthRouter(router, DEFAULTS)


class RecordingRouter:
    """A minimal host router that only records what it is given."""

    def __init__(self) -> None:
        self.added: list[Route] = []
        self.prefix = "/app"

    def scoped_path(self, path: str) -> str:
        return join_path(self.prefix, path)

    @property
    def scope_options(self) -> Mapping[str, Any]:
        return {"pipe_through": "browser"}

    def add(self, route: Route) -> None:
        self.added.append(route)


class TestSignIn:
    def test_registers_sign_in_reset_and_register(
        self, auth: AuthRouter, router: Router
    ) -> None:
        auth.sign_in_route(register_path="/register", reset_path="/reset")

        sign_in = router.match("GET", "/sign-in").route
        assert sign_in.handler is SignInView
        assert (sign_in.name, sign_in.action) == ("auth", "sign_in")
        assert router.match("GET", "/reset").route.name == "auth_reset"
        assert router.match("GET", "/register").route.action == "register"

    def test_routes_share_one_live_session(self, auth: AuthRouter, router: Router) -> None:
        auth.sign_in_route(register_path="/register")
        live = router.match("GET", "/sign-in").route.live_session
        assert live is not None
        assert live is router.match("GET", "/register").route.live_session
        assert live.name == "auth_sign_in"
        assert live.on_mount == (load_session, guard_session)
        assert auth.live_sessions["auth_sign_in"] is live

    def test_optional_paths_absent(self, auth: AuthRouter, router: Router) -> None:
        auth.sign_in_route()
        assert [r.path for r in router.routes] == ["/sign-in"]

    def test_unscoped_paths_ignore_scope(self, auth: AuthRouter, router: Router) -> None:
        with router.scope("/unscoped"):
            config = auth.sign_in_route(
                register_path=unscoped("/register"),
                reset_path=unscoped("/reset"),
                auth_routes_prefix=unscoped("/auth"),
                as_name="unscoped",
            )
        assert config.path == "/unscoped/sign-in"
        assert config.session["register_path"] == "/register"
        assert config.session["auth_routes_prefix"] == "/auth"
        assert router.match("GET", "/unscoped/sign-in").route.name == "unscoped"
        assert router.match("GET", "/register").route.name == "unscoped_register"

    def test_session_for_request(self, auth: AuthRouter, router: Router) -> None:
        auth.sign_in_route()
        live = router.match("GET", "/sign-in").route.live_session
        assert live is not None
        session = live.session_for(tenant="acme", context={"ip": "::1"})
        assert session["tenant"] == "acme"
        assert session["context"] == {"ip": "::1"}
        assert session["path"] == "/sign-in"


class TestLiveSessionNames:
    def test_duplicate_live_session_is_rejected(self, auth: AuthRouter) -> None:
        auth.sign_in_route()
        with pytest.raises(DuplicateRouteName) as exc_info:
            auth.sign_in_route(path="/login")
        assert exc_info.value.name == "auth_sign_in"

    def test_distinct_as_names(self, auth: AuthRouter, router: Router) -> None:
        auth.reset_route()
        with router.scope("/admin"):
            auth.reset_route(as_name="admin")
        assert set(auth.live_sessions) == {"auth_reset", "admin_reset"}
        assert router.match("GET", "/admin/password-reset/t").route.name == "admin"

    def test_failed_declaration_registers_nothing(self, auth: AuthRouter, router: Router) -> None:
        with pytest.raises(ConfigurationError):
            auth.sign_in_route(register_path="/<bad>")
        assert router.routes == []
        assert dict(auth.live_sessions) == {}

        auth.sign_in_route(register_path="/register")
        assert [r.path for r in router.routes] == ["/sign-in", "/register"]
        assert set(auth.live_sessions) == {"auth_sign_in"}

    def test_compiled_router_keeps_name_free(self, auth: AuthRouter, router: Router) -> None:
        router.compile()
        with pytest.raises(RuntimeError):
            auth.reset_route()
        assert dict(auth.live_sessions) == {}

    def test_different_kinds_share_as_name(self, auth: AuthRouter) -> None:
        auth.sign_in_route()
        auth.reset_route()
        auth.sign_out_route(AuthController)
        assert set(auth.live_sessions) == {"auth_sign_in", "auth_reset"}


class TestSignOut:
    def test_get_route_to_controller(self, auth: AuthRouter, router: Router) -> None:
        auth.sign_out_route(AuthController)
        route = router.match("GET", "/sign-out").route
        assert route.handler is AuthController
        assert route.action == "sign_out"
        assert route.live_session is None

    def test_explicit_path_and_scope_options(self, auth: AuthRouter, router: Router) -> None:
        with router.scope("/", host="auth.example.com"):
            auth.sign_out_route(AuthController, "/logout", as_name="logout")
        route = router.match("GET", "/logout").route
        assert route.name == "logout"
        assert route.scope_opts == {"host": "auth.example.com", "alias": False}


class TestResetConfirmMagic:
    def test_reset_takes_token(self, auth: AuthRouter, router: Router) -> None:
        auth.reset_route()
        match = router.match("GET", "/password-reset/abc")
        assert match.route.handler is ResetView
        assert match.path_params == {"token": "abc"}

    def test_confirm_with_token(self, auth: AuthRouter, router: Router) -> None:
        auth.confirm_route(User, "confirm_new_user")
        match = router.match("GET", "/confirm_new_user/tok")
        assert match.route.action == "confirm"
        assert match.route.live_session is not None
        assert match.route.live_session.session["resource"] is User

    def test_confirm_without_token(self, auth: AuthRouter, router: Router) -> None:
        auth.confirm_route(User, "confirm_new_user", token_as_route_param=False)
        assert router.match("GET", "/confirm_new_user").path_params == {}

    def test_magic_sign_in(self, auth: AuthRouter, router: Router) -> None:
        auth.magic_sign_in_route(User, "magic_link", path="/magic")
        route = router.match("GET", "/magic/tok").route
        assert route.handler is MagicView
        assert route.action == "sign_in"
        assert route.live_session is not None
        assert route.live_session.name == "auth_magic_sign_in"


class TestAuthRoutes:
    def test_forward(self, auth: AuthRouter, router: Router) -> None:
        auth.auth_routes(AuthController, User)
        match = router.match("POST", "/auth/user/password/sign_in")
        assert match.route.forward
        assert match.route.methods == ALL_METHODS
        assert isinstance(match.route.handler, StrategyRouter)
        assert match.route.private["controller"] is AuthController
        assert match.route.private["resources"] == (User,)
        assert match.route.private["path"] == "/auth"

    def test_not_found_handler_and_path(self, auth: AuthRouter, router: Router) -> None:
        def not_found() -> None: ...

        with router.scope("/api"):
            auth.auth_routes(AuthController, [User], path="/authentication", not_found=not_found)
        route = router.match("GET", "/api/authentication/anything").route
        assert route.private["not_found"] is not_found
        assert route.private["path"] == "/api/authentication"

    def test_strategy_router_required(self, router: Router) -> None:
        auth = AuthRouter(router, RouterDefaults())
        with pytest.raises(MissingRequiredOption):
            auth.auth_routes(AuthController, [User])
        assert router.routes == []


class TestAuthRoutesFor:
    def test_one_route_per_phase(self, auth: AuthRouter, router: Router) -> None:
        tuples = auth.auth_routes_for(User, to=AuthController)
        assert len(tuples) == 5
        assert len(router.routes) == 5

        match = router.match("POST", "/auth/user/password/sign_in")
        assert match.route.handler is AuthController
        assert match.route.action == StrategyAction("user", "password", "sign_in")
        assert match.route.private["strategy"].name == "password"
        assert match.route.name == "auth"

        assert router.match("GET", "/auth/user/github/callback").route.action.phase == "callback"

    def test_method_from_strategy(self, auth: AuthRouter, router: Router) -> None:
        auth.auth_routes_for(User, to=AuthController)
        with pytest.raises(MethodNotAllowed, match="Allowed methods: POST"):
            router.match("GET", "/auth/user/password/sign_in")

    def test_path_and_scope_opts(self, auth: AuthRouter, router: Router) -> None:
        with router.scope("/api"):
            auth.auth_routes_for(
                User, to=AuthController, path="v1/auth", scope_opts={"host": "a.example"}
            )
        route = router.match("GET", "/api/v1/auth/user/github/request").route
        assert route.scope_opts == {"alias": False, "host": "a.example"}

    def test_missing_controller_registers_nothing(self, auth: AuthRouter, router: Router) -> None:
        with pytest.raises(MissingRequiredOption) as exc_info:
            auth.auth_routes_for(User)
        assert exc_info.value.option == "to"
        assert router.routes == []


class TestCustomHostRouter:
    def test_registers_through_protocol(self) -> None:
        host = RecordingRouter()
        auth = AuthRouter(host, DEFAULTS)
        auth.sign_in_route(reset_path="/reset")
        auth.sign_out_route(AuthController)

        assert [r.path for r in host.added] == ["/app/sign-in", "/app/reset", "/app/sign-out"]
        assert host.added[0].scope_opts == {"pipe_through": "browser", "alias": False}

    def test_default_router(self) -> None:
        auth = AuthRouter()
        assert isinstance(auth.router, Router)
        assert auth.defaults == RouterDefaults()
