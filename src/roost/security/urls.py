"""Redirect target sanitizing.

Prevents open redirect attacks and redirect loops by checking a
client-supplied redirect target against a small policy. Unlike a plain
"is this safe?" predicate, ``sanitize_path`` always returns a usable
target: the candidate when it passes, the fallback otherwise.

Usage::

    from roost.security.urls import sanitize_path

    next_url = sanitize_path(request.query.get("next", "/"))
    return Redirect(next_url)
"""

from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import SplitResult, urlsplit

DEFAULT_FALLBACK = "/"

DEFAULT_UNSAFE_PATHS: frozenset[str] = frozenset(
    {
        "/auth",
        "/password-reset",
        "/reset",
        "/register",
        "/sign-in",
        "/sign-out",
    }
)

# None stands for "no scheme" / "no host": relative references
DEFAULT_SAFE_SCHEMES: frozenset[str | None] = frozenset({None, "http", "https"})
DEFAULT_SAFE_HOSTS: frozenset[str | None] = frozenset({None, "localhost", "127.0.0.1"})

_URL_NOISE = str.maketrans("", "", "\t\r\n")
_C0_AND_SPACE = "".join(chr(c) for c in range(0x21))


def _scheme(parts: SplitResult) -> str | None:
    return parts.scheme.lower() or None


def _lowered(values: Iterable[Any] | None) -> frozenset[Any]:
    return frozenset(v.lower() if isinstance(v, str) else v for v in values or ())


def _host(candidate: str, parts: SplitResult) -> str | None:
    """Return the host exactly as written, or ``None`` without an authority.

    ``SplitResult.hostname`` lower-cases, so the netloc is taken apart here
    to keep host matching case-sensitive. An empty authority
    (``http:///x``) yields ``""``, which no policy allows.
    """
    if not parts.netloc:
        # urlsplit drops tab/CR/LF and leading control characters; so do browsers
        normalized = candidate.translate(_URL_NOISE).lstrip(_C0_AND_SPACE)
        rest = normalized[len(parts.scheme) + 1 :] if parts.scheme else normalized
        return "" if rest.startswith("//") else None
    hostport = parts.netloc.rpartition("@")[2]
    if hostport.startswith("["):
        return hostport[1:].partition("]")[0]
    return hostport.partition(":")[0]


def sanitize_path(
    candidate: Any,
    *,
    fallback: str = DEFAULT_FALLBACK,
    unsafe_paths: Iterable[str] | None = (),
    safe_schemes: Iterable[str | None] | None = (),
    safe_hosts: Iterable[str | None] | None = (),
    strict: bool = False,
) -> str:
    """Return *candidate* if it is a safe redirect target, else *fallback*.

    Checks, in order (the first failing one returns *fallback*):

    1. *candidate* parses as a URI reference
    2. its path is not exactly one of the unsafe paths
       (``/sign-in`` fails, ``/sign-in-custom`` does not)
    3. it does not start with ``//`` (protocol-relative)
    4. its lower-cased scheme, or no scheme, is allowed
    5. its host, or no host, is allowed by exact, case-sensitive match,
       so ``localhost.evil.com`` is not ``localhost``

    The extra ``unsafe_paths``, ``safe_schemes`` and ``safe_hosts`` are
    added to the defaults, never replace them. ``None`` for any of them
    means "no extras".

    Backslashes and scheme-only targets such as ``/\\evil.com`` or
    ``https:evil.com`` pass the checks above, yet browsers resolve both
    off-site. With ``strict=True`` they return *fallback* as well: any
    backslash, and any scheme without an authority, is rejected.

    Examples::

        >>> sanitize_path("/dashboard")
        '/dashboard'
        >>> sanitize_path("https://evil.com", fallback="/home")
        '/home'
        >>> sanitize_path("/custom", fallback="/home", unsafe_paths=["/custom"])
        '/home'
        >>> sanitize_path("ftp://localhost/", safe_schemes=["ftp"])
        'ftp://localhost/'
        >>> sanitize_path("///danger")
        '/'
        >>> sanitize_path("?admin=true")
        '?admin=true'

    Never raises: hostile or malformed input degrades to *fallback*.
    """
    if not isinstance(candidate, str):
        return fallback
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return fallback

    if parts.path in DEFAULT_UNSAFE_PATHS or parts.path in frozenset(unsafe_paths or ()):
        return fallback
    if candidate.startswith("//"):
        return fallback

    scheme = _scheme(parts)
    if scheme not in DEFAULT_SAFE_SCHEMES and scheme not in _lowered(safe_schemes):
        return fallback

    host = _host(candidate, parts)
    if host not in DEFAULT_SAFE_HOSTS and host not in frozenset(safe_hosts or ()):
        return fallback
    if strict and ("\\" in candidate or (scheme is not None and host is None)):
        return fallback

    return candidate


def redirect_target(
    params: Mapping[str, Any],
    param_name: str,
    **options: Any,
) -> str | None:
    """Read the redirect parameter from *params* and sanitize it.

    Returns ``None`` when the parameter is absent so callers can tell
    "no redirect requested" from "redirect replaced by the fallback".
    Multi-valued parameters use their first value. *options* are passed
    to :func:`sanitize_path`.
    """
    if param_name not in params:
        return None
    value = params[param_name]
    if isinstance(value, list | tuple):
        value = value[0] if value else None
    return sanitize_path(value, **options)
