"""Host router with trie-based path matching and nested scopes.

Routes are registered during setup (inside ``scope()`` blocks that
contribute path prefixes and options) and compiled into an immutable
lookup structure afterwards. Roost registers auth routes here by
default; any object satisfying ``HostRouter`` can take its place.
"""

import logging
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from roost.errors import ConfigurationError, MethodNotAllowed, NotFound
from roost.routing.route import PathSegment, Route, RouteMatch

_log = logging.getLogger("roost.router")

# regex pattern for each supported converter
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}

_PARAM_RE = re.compile(r"\{(\w+)(?::\w+)?\}")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{path:path}" -> [PathSegment("{path:path}", is_param=True, param_type="path")]

    Raises ``ConfigurationError`` for ``<param>`` placeholders and unknown converters.
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route path {path!r} uses <param> placeholders. "
                "Use {param} instead, e.g. /reset/{token}."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown path converter {param_type!r} in {path!r}."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def join_path(prefix: str, path: str) -> str:
    """Join a scope prefix and a path into one absolute path.

    Empty segments collapse, so ``join_path("/", "/auth")`` is ``"/auth"``
    and ``join_path("/nested", "/")`` is ``"/nested"``.
    """
    parts = [p for p in f"{prefix}/{path}".split("/") if p]
    return "/" + "/".join(parts)


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all_route", "children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param pattern per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all route (path converter or forward)
        self.catch_all_route: _CatchAllEdge | None = None
        # Routes at this node, keyed by HTTP method
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """A catch-all edge. Consumes the remaining path."""

    param_name: str
    route_by_method: dict[str, Route]


@dataclass(frozen=True, slots=True)
class _Scope:
    prefix: str
    options: Mapping[str, Any] = field(default_factory=dict)


class Router:
    """Host router with scopes and trie-based path matching.

    Usage::

        router = Router()
        with router.scope("/admin", host="admin.example.com"):
            router.add(Route(router.scoped_path("/users"), handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/admin/users")
    """

    __slots__ = ("_compiled", "_root", "_scopes")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False
        self._scopes: list[_Scope] = [_Scope(prefix="/")]

    # -- Scopes --

    @contextmanager
    def scope(self, path: str = "/", **options: Any) -> Iterator[None]:
        """Nest registrations under *path*, merging *options* into the scope."""
        parent = self._scopes[-1]
        self._scopes.append(
            _Scope(
                prefix=join_path(parent.prefix, path),
                options={**parent.options, **options},
            )
        )
        try:
            yield
        finally:
            self._scopes.pop()

    def scoped_path(self, path: str) -> str:
        """Return *path* prefixed by the enclosing scope."""
        return join_path(self._scopes[-1].prefix, path)

    @property
    def scope_options(self) -> Mapping[str, Any]:
        """Options accumulated by the enclosing scopes."""
        return self._scopes[-1].options

    # -- Registration --

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = parse_path(route.path)
        node = self._root

        for seg in segments:
            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                self._add_catch_all(node, seg.param_name or "path", route)
                return

            if seg.is_param:
                if node.param_child is None:
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        param_type=seg.param_type,
                        regex=re.compile(f"^{CONVERTERS[seg.param_type]}$"),
                        node=_TrieNode(),
                    )
                node = node.param_child.node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        if route.forward:
            # Forwards own their prefix and everything below it
            self._add_catch_all(node, "path", route)

        for method in route.methods:
            node.routes_by_method[method] = route
        _log.debug("Registered %s %s", ",".join(sorted(route.methods)), route.path)

    @staticmethod
    def _add_catch_all(node: _TrieNode, param_name: str, route: Route) -> None:
        if node.catch_all_route is None:
            node.catch_all_route = _CatchAllEdge(param_name=param_name, route_by_method={})
        for method in route.methods:
            node.catch_all_route.route_by_method[method] = route

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes.

        Traverses the trie to collect every unique Route object.
        """
        seen: set[int] = set()
        result: list[Route] = []
        self._collect_routes(self._root, seen, result)
        return result

    def _collect_routes(
        self,
        node: _TrieNode,
        seen: set[int],
        result: list[Route],
    ) -> None:
        """Recursively collect routes from the trie."""
        candidates = list(node.routes_by_method.values())
        if node.catch_all_route is not None:
            candidates.extend(node.catch_all_route.route_by_method.values())
        for route in candidates:
            if id(route) not in seen:
                seen.add(id(route))
                result.append(route)

        for child in node.children.values():
            self._collect_routes(child, seen, result)

        if node.param_child is not None:
            self._collect_routes(node.param_child.node, seen, result)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    # -- Lookup --

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})

        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        node, params = result

        if method in node.routes_by_method:
            return RouteMatch(route=node.routes_by_method[method], path_params=params)

        if node.routes_by_method:
            raise MethodNotAllowed(frozenset(node.routes_by_method))

        raise NotFound(f"No route matches {method} {path!r}")

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[_TrieNode, dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        if index == len(parts):
            if node.routes_by_method:
                return node, params
            return None

        part = parts[index]

        # 1. Try static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Try parameter child
        if node.param_child is not None:
            edge = node.param_child
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, parts, index + 1, new_params)
                if result is not None:
                    return result

        # 3. Try catch-all
        if node.catch_all_route is not None:
            remaining = "/".join(parts[index:])
            new_params = {**params, node.catch_all_route.param_name: remaining}
            synthetic = _TrieNode()
            synthetic.routes_by_method = node.catch_all_route.route_by_method
            return synthetic, new_params

        return None

    def url_for(self, name: str, action: Any = None, **params: Any) -> str:
        """Build the path of the route named *name* (and *action*, if given).

        Path parameters are filled from *params*. Raises ``LookupError``
        when no route matches or a parameter is missing.
        """
        for route in self.routes:
            if route.name != name or (action is not None and route.action != action):
                continue

            def fill(m: re.Match[str]) -> str:
                key = m.group(1)
                if key not in params:
                    msg = f"Route {name!r} needs the {key!r} parameter."
                    raise LookupError(msg)
                return str(params[key])

            return _PARAM_RE.sub(fill, route.path)
        msg = f"No route named {name!r}" + (f" with action {action!r}" if action is not None else "")
        raise LookupError(msg)
