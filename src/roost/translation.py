"""Translation functions for the rendered auth UI.

The core never translates anything itself. A route declaration may name
either an explicit translation callable (``gettext_fn=``) or a gettext
backend (``gettext_backend=``); this module turns that into a single
``(msgid, bindings) -> str`` callable which is stored on the resolved route
and forwarded to the view through the session parameters.

Usage::

    from roost.translation import GettextBackend

    auth.sign_in_route(gettext_backend=GettextBackend("auth", localedir="locale"))
"""

import gettext
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, TypeAlias

TranslateFn: TypeAlias = Callable[[str, Mapping[str, Any]], str]

# (gettext_fn, gettext_backend, path) -> translate callable or None
TranslationGenerator: TypeAlias = Callable[[TranslateFn | None, Any, str], TranslateFn | None]


@dataclass(frozen=True, slots=True)
class GettextBackend:
    """A gettext catalogue: domain plus where to find its ``.mo`` files.

    ``languages`` is passed straight to :func:`gettext.translation`; when
    ``None`` the usual ``LANGUAGE``/``LC_*`` environment lookup applies.
    Missing catalogues fall back to the untranslated message.
    """

    domain: str
    localedir: str | None = None
    languages: tuple[str, ...] | None = None


@lru_cache(maxsize=32)
def _catalogue(backend: GettextBackend) -> gettext.NullTranslations:
    languages = list(backend.languages) if backend.languages is not None else None
    return gettext.translation(
        backend.domain,
        localedir=backend.localedir,
        languages=languages,
        fallback=True,
    )


def _interpolate(text: str, bindings: Mapping[str, Any]) -> str:
    if not bindings:
        return text
    return text % dict(bindings)


def translator_for(backend: GettextBackend) -> TranslateFn:
    """Build a ``(msgid, bindings) -> str`` callable for *backend*.

    Bindings use printf-style named placeholders: ``"Hello %(name)s"``.
    """

    def translate(msgid: str, bindings: Mapping[str, Any] | None = None) -> str:
        return _interpolate(_catalogue(backend).gettext(msgid), bindings or {})

    translate.__qualname__ = f"translate[{backend.domain}]"
    return translate


def gettext_fn_for(
    gettext_fn: TranslateFn | None,
    gettext_backend: GettextBackend | None,
    path: str,
) -> TranslateFn | None:
    """Pick the translation callable for the route mounted at *path*.

    An explicit ``gettext_fn`` wins over a backend. Returns ``None`` when
    neither is configured, in which case views render untranslated text.
    *path* is accepted so replacement generators can key catalogues by route.
    """
    if gettext_fn is not None:
        return gettext_fn
    if gettext_backend is not None:
        return translator_for(gettext_backend)
    return None
