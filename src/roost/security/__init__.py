"""Security utilities for redirect sanitizing and audit events.

Redirect sanitizing::

    from roost.security import sanitize_path

    target = sanitize_path(params.get("next"), fallback="/home")

Audit events::

    from roost.security import set_security_event_sink

    set_security_event_sink(lambda event: log.info("%s", event))
"""

from roost.security.audit import SecurityEvent, emit_security_event, set_security_event_sink
from roost.security.urls import redirect_target, sanitize_path

__all__ = [
    "SecurityEvent",
    "emit_security_event",
    "redirect_target",
    "sanitize_path",
    "set_security_event_sink",
]
