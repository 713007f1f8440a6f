"""Roost: authentication routes for web applications.

Declares sign-in, sign-out, password reset, confirmation, magic-link and
per-strategy routes on a host router, and keeps post-authentication
redirects on the application.

Basic usage::

    from roost import AuthRouter, Router, RouterDefaults

    router = Router()
    auth = AuthRouter(router, RouterDefaults(default_sign_in_view=SignInView))

    auth.sign_in_route(register_path="/register", reset_path="/reset")
    auth.sign_out_route(AuthController)
    auth.auth_routes_for(User, to=AuthController)

Redirect sanitizing::

    from roost import sanitize_path

    target = sanitize_path(query.get("next"), fallback="/home")
"""

__version__ = "0.1.0"
__all__ = [
    "AuthRouter",
    "ConfigurationError",
    "DefaultOverrides",
    "DuplicateRouteName",
    "MissingRequiredOption",
    "Overrides",
    "RoostError",
    "RouteKind",
    "Router",
    "RouterDefaults",
    "UnknownStrategyPhase",
    "authenticated",
    "compose_hooks",
    "enumerate_routes",
    "resolve",
    "sanitize_path",
    "unscoped",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` cheap while providing a clean top-level API.
    """
    if name == "AuthRouter":
        from roost.registrar import AuthRouter

        return AuthRouter

    if name == "RouterDefaults":
        from roost.config import RouterDefaults

        return RouterDefaults

    if name == "Router":
        from roost.routing.router import Router

        return Router

    if name in ("RouteKind", "resolve", "unscoped"):
        from roost import options as _options

        return getattr(_options, name)

    if name in ("authenticated", "enumerate_routes"):
        from roost import strategies as _strategies

        return getattr(_strategies, name)

    if name in ("DefaultOverrides", "Overrides"):
        from roost import overrides as _overrides

        return getattr(_overrides, name)

    if name == "compose_hooks":
        from roost.hooks import compose_hooks

        return compose_hooks

    if name == "sanitize_path":
        from roost.security.urls import sanitize_path

        return sanitize_path

    if name in (
        "ConfigurationError",
        "DuplicateRouteName",
        "MissingRequiredOption",
        "RoostError",
        "UnknownStrategyPhase",
    ):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
