"""Session parameters for the rendered auth views.

Each live route carries a static parameter map built once at router
build time. At mount time ``generate_session`` adds the per-request
values (tenant, context, loaded subjects) and the result is handed to the
view and its mount hooks unchanged.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any


def build_session_params(
    *,
    auth_routes_prefix: str | None,
    overrides: tuple[Any, ...],
    gettext_fn: Any,
    otp_app: Any,
    redirect_param_name: str = "next",
    **kind_params: Any,
) -> Mapping[str, Any]:
    """Package resolved route configuration for the view.

    *kind_params* are the kind-specific entries: ``path``, ``reset_path``,
    ``register_path`` and ``resources`` for sign-in, ``resource`` and
    ``strategy`` for confirmation and magic sign-in. Values are stored as
    given; the returned map is read-only.
    """
    return MappingProxyType(
        {
            "auth_routes_prefix": auth_routes_prefix,
            "overrides": overrides,
            "gettext_fn": gettext_fn,
            "otp_app": otp_app,
            "redirect_param_name": redirect_param_name,
            **kind_params,
        }
    )


def generate_session(
    params: Mapping[str, Any],
    *,
    tenant: Any = None,
    context: Mapping[str, Any] | None = None,
    subjects: Mapping[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Merge the static *params* of a route with per-request values.

    ``tenant`` and ``context`` are always present in the result, ``subjects``
    only when given. *extra* entries (``sign_in_path`` for instance) are
    added last and win over everything else.
    """
    session = dict(params)
    session["tenant"] = tenant
    session["context"] = dict(context or {})
    if subjects is not None:
        session["subjects"] = dict(subjects)
    session.update(extra)
    return session
