"""Routing: the bundled host router.

Routes are registered inside nested scopes during setup and compiled into
an immutable trie afterwards. ``AuthRouter`` registers on any object that
satisfies ``HostRouter``; ``Router`` is the default.
"""

from roost.routing.protocol import HostRouter, StrategyRouter
from roost.routing.route import ALL_METHODS, LiveSession, Route, RouteMatch
from roost.routing.router import Router, join_path, parse_path

__all__ = [
    "ALL_METHODS",
    "HostRouter",
    "LiveSession",
    "Route",
    "RouteMatch",
    "Router",
    "StrategyRouter",
    "join_path",
    "parse_path",
]
