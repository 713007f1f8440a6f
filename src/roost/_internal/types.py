"""Shared type aliases used across roost modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: controller, view, or forward target; opaque to roost
Handler: TypeAlias = Any

# Mount hook: a callable, or a (callable, argument) pair
Hook: TypeAlias = Callable[..., Any] | tuple[Callable[..., Any], Any]
