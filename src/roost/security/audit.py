"""Security audit events.

Opt-in event channel for redirect and session telemetry raised while auth
views mount. Applications register a sink to forward events to logs,
metrics, or a SIEM. Without a sink, emitting is a no-op.

Event names used by roost:

- ``auth.redirect.rejected``: a redirect parameter failed sanitizing
- ``auth.mount.unauthenticated``: a view requiring a subject mounted without one
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any, TypeAlias


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """A structured security event."""

    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    subject: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


SecurityEventSink: TypeAlias = Callable[[SecurityEvent], None]


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Set a process-wide sink for security events.

    Pass ``None`` to disable event delivery.
    """
    global _sink
    with _sink_lock:
        _sink = sink


def emit_security_event(
    name: str,
    *,
    path: str | None = None,
    subject: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Deliver an event to the configured sink, if any."""
    with _sink_lock:
        sink = _sink
    if sink is None:
        return
    sink(SecurityEvent(name=name, path=path, subject=subject, details=details or {}))
