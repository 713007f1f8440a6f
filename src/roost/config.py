"""Router-level defaults.

One ``RouterDefaults`` instance is built per ``AuthRouter`` and passed by
reference into every route declaration.
"""

from dataclasses import dataclass
from typing import Any

from roost.strategies import DEFAULT_INTROSPECTION, Introspection
from roost.translation import GettextBackend, TranslationGenerator, gettext_fn_for


@dataclass(frozen=True, slots=True)
class RouterDefaults:
    """Defaults shared by every route declared on one router. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        defaults = RouterDefaults(sign_in_path="/login", sign_out_path="/logout")

    Route declarations fall back to these values whenever the call site does
    not supply the matching directive.
    """

    # Paths
    sign_in_path: str = "/sign-in"
    sign_out_path: str = "/sign-out"
    reset_path: str = "/password-reset"
    confirm_path_prefix: str = "/"
    magic_sign_in_path_prefix: str = "/"
    default_auth_scope: str = "/auth"

    # Query/form parameter carrying the post-authentication redirect target
    redirect_param_name: str = "next"

    # Rendering
    default_layout: Any = None
    gettext_backend: GettextBackend | None = None

    # Default handlers per route kind (views render the auth UI)
    default_sign_in_view: Any = None
    default_reset_view: Any = None
    default_confirm_view: Any = None
    default_magic_sign_in_view: Any = None
    default_strategy_router: Any = None

    # Collaborators
    translation_generator: TranslationGenerator = gettext_fn_for
    introspection: Introspection = DEFAULT_INTROSPECTION

    def view_for(self, kind: str) -> Any:
        """Return the default view registered for a live route kind.

        Raises ``AttributeError`` for kinds that are not rendered by a view.
        """
        return getattr(self, f"default_{kind}_view")
