"""Mount hooks: composing and running the hooks of an auth live session.

Every live route roost registers runs an ordered list of hooks when its
view mounts. Two of them are mandatory and always present exactly once:

- ``load_session`` copies the subjects, tenant and context found in the
  session into the view assigns
- ``guard_session`` records the current path and sanitizes the
  post-authentication redirect parameter before the view can use it

A hook is a callable ``hook(ctx)``, or a ``(hook, argument)`` pair called
as ``hook(ctx, argument)``. Hooks may be sync or async. A hook stops the
chain by calling ``ctx.halt()``.

Usage::

    hooks = compose_hooks(prepend=[audit_hook], append=[(live_user_optional, "user")])
    ctx = await run_mount_hooks(hooks, MountContext(params=query, session=session, uri=url))
    if ctx.halted:
        return Redirect(ctx.redirect_to)
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlsplit

from roost._internal.invoke import invoke
from roost._internal.types import Hook
from roost.overrides import override_for
from roost.security.audit import emit_security_event
from roost.security.urls import redirect_target

_log = logging.getLogger("roost.security")


# ---------------------------------------------------------------------------
# Mount context
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class MountContext:
    """State threaded through the hooks of one view mount.

    ``params`` are the request's query/path parameters, ``session`` the
    session map produced by ``generate_session()``. Hooks write into
    ``assigns``; the view reads them after the chain completes.
    """

    params: Mapping[str, Any]
    session: Mapping[str, Any]
    uri: str = "/"
    assigns: dict[str, Any] = field(default_factory=dict)
    halted: bool = False
    redirect_to: str | None = None

    @property
    def path(self) -> str:
        return urlsplit(self.uri).path or "/"

    def halt(self, redirect_to: str | None = None) -> None:
        """Stop the hook chain, optionally asking for a redirect."""
        self.halted = True
        self.redirect_to = redirect_to


# ---------------------------------------------------------------------------
# Mandatory hooks
# ---------------------------------------------------------------------------


def load_session(ctx: MountContext) -> None:
    """Session loader. Assigns ``current_<subject>``, ``current_tenant`` and ``context``.

    The session layer (outside roost) stores loaded subjects under
    ``session["subjects"]`` keyed by subject name. A subject mapped to
    ``None`` is assigned ``None``; unlisted subjects are left unassigned.
    """
    subjects = ctx.session.get("subjects") or {}
    for subject_name, subject in subjects.items():
        ctx.assigns[f"current_{subject_name}"] = subject
    ctx.assigns.setdefault("current_tenant", ctx.session.get("tenant"))
    ctx.assigns.setdefault("context", dict(ctx.session.get("context") or {}))


def guard_session(ctx: MountContext) -> None:
    """Session guard. Sanitizes the redirect parameter before the view sees it.

    The parameter name comes from the ``sign_in`` override set, falling back
    to the router's ``redirect_param_name``. The sanitized value is stored in
    ``assigns["context"]`` as ``redirect_param_name``/``redirect_param_value``.
    """
    ctx.assigns["current_path"] = ctx.path

    param_name = override_for(
        ctx.session.get("overrides"),
        "sign_in",
        "redirect_param_name",
        ctx.session.get("redirect_param_name", "next"),
    )
    target = redirect_target(ctx.params, param_name)
    if target is None:
        return

    raw = ctx.params[param_name]
    if isinstance(raw, list | tuple):
        raw = raw[0] if raw else None
    if target != raw:
        _log.debug("Rejected redirect target %r on %s", raw, ctx.path)
        emit_security_event(
            "auth.redirect.rejected",
            path=ctx.path,
            details={"param": param_name, "value": str(raw)},
        )

    context = dict(ctx.assigns.get("context") or {})
    context["redirect_param_name"] = param_name
    context["redirect_param_value"] = target
    ctx.assigns["context"] = context


MANDATORY_HOOKS: tuple[Hook, ...] = (load_session, guard_session)


# ---------------------------------------------------------------------------
# Optional hooks for application live sessions
# ---------------------------------------------------------------------------


def live_user_optional(ctx: MountContext, subject: str = "user") -> None:
    """Make sure ``current_<subject>`` is assigned, possibly to ``None``."""
    ctx.assigns.setdefault(f"current_{subject}", None)


def live_user_required(ctx: MountContext, subject: str = "user") -> None:
    """Halt with a redirect to sign-in when no subject is signed in.

    The current path is carried in the redirect parameter so sign-in can
    send the user back. The sign-in page sanitizes it on arrival.
    """
    if ctx.assigns.get(f"current_{subject}") is not None:
        return
    sign_in_path = ctx.session.get("sign_in_path", "/sign-in")
    param_name = ctx.session.get("redirect_param_name", "next")
    emit_security_event("auth.mount.unauthenticated", path=ctx.path, subject=subject)
    ctx.halt(f"{sign_in_path}?{param_name}={quote(ctx.path, safe='/')}")


def live_no_user(ctx: MountContext, subject: str = "user") -> None:
    """Halt with a redirect to the sanitized redirect target when signed in."""
    if ctx.assigns.get(f"current_{subject}") is None:
        ctx.assigns[f"current_{subject}"] = None
        return
    param_name = ctx.session.get("redirect_param_name", "next")
    ctx.halt(redirect_target(ctx.params, param_name) or "/")


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def hook_identity(hook: Hook) -> Any:
    """Return the part of *hook* that identifies it: the callable."""
    if isinstance(hook, tuple):
        return hook[0]
    return hook


def _is_pair(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and callable(value[0])
        and not callable(value[1])
    )


def _as_hooks(value: Hook | Iterable[Hook] | None) -> list[Hook]:
    if value is None:
        return []
    if callable(value) or _is_pair(value):
        return [value]  # type: ignore[list-item]
    return list(value)  # type: ignore[arg-type]


def compose_hooks(
    prepend: Hook | Iterable[Hook] | None = None,
    append: Hook | Iterable[Hook] | None = None,
) -> tuple[Hook, ...]:
    """Build the mount hook list: *prepend*, the mandatory hooks, *append*.

    Duplicates are dropped by hook identity, keeping the first occurrence,
    so the mandatory hooks appear exactly once even when passed again.
    """
    result: list[Hook] = []
    seen: list[Any] = []
    for hook in (*_as_hooks(prepend), *MANDATORY_HOOKS, *_as_hooks(append)):
        identity = hook_identity(hook)
        if any(identity is other for other in seen):
            continue
        seen.append(identity)
        result.append(hook)
    return tuple(result)


async def run_mount_hooks(hooks: Iterable[Hook], ctx: MountContext) -> MountContext:
    """Run *hooks* in order against *ctx*, stopping early once halted."""
    for hook in hooks:
        if isinstance(hook, tuple):
            func, argument = hook
            await invoke(func, ctx, argument)
        else:
            await invoke(hook, ctx)
        if ctx.halted:
            break
    return ctx
