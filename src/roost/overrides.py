"""Override sets for the rendered auth views.

An override set is a class whose attributes map a component name to the
settings it replaces::

    from roost.overrides import Overrides

    class ReturnTo(Overrides):
        sign_in = {"redirect_param_name": "return_to"}

    auth.sign_in_route(overrides=[ReturnTo, DefaultOverrides])

Sets are consulted in the order given; the first one defining a key wins.
Roost itself only reads ``redirect_param_name``; every other key is for
the views.
"""

from collections.abc import Iterable
from typing import Any, ClassVar


class Overrides:
    """Base class for override sets. Subclasses declare component dicts."""

    @classmethod
    def settings_for(cls, component: str) -> dict[str, Any]:
        value = getattr(cls, component, None)
        return dict(value) if isinstance(value, dict) else {}


class DefaultOverrides(Overrides):
    """Settings every view falls back to."""

    sign_in: ClassVar[dict[str, Any]] = {"sign_in_id": "sign-in", "root_class": "auth-sign-in"}
    reset: ClassVar[dict[str, Any]] = {"reset_id": "reset", "root_class": "auth-reset"}
    confirm: ClassVar[dict[str, Any]] = {"confirm_id": "confirm", "root_class": "auth-confirm"}
    magic_sign_in: ClassVar[dict[str, Any]] = {
        "sign_in_id": "magic-sign-in",
        "root_class": "auth-magic-sign-in",
    }


DEFAULT_OVERRIDES: tuple[type[Overrides], ...] = (DefaultOverrides,)


def override_for(
    overrides: Iterable[type[Overrides]] | None,
    component: str,
    key: str,
    default: Any = None,
) -> Any:
    """Return the first value for *component*/*key* across *overrides*."""
    for override in overrides or ():
        settings = override.settings_for(component)
        if key in settings:
            return settings[key]
    return default
