"""Session instances, their registry and the engine-facing controller protocol.

Example usage:

    from sessionhost.session import SessionKind, SessionRegistry, RecordingController

    registry = SessionRegistry(context, RecordingController)
    sidebar = registry.get_or_create(SessionKind.SIDEBAR)
    panel = registry.get_or_create(SessionKind.PANEL)
    focused = registry.resolve_visible()
"""

from sessionhost.session.controller import (
    ControllerFactory,
    RecordedCall,
    RecordingController,
    SessionController,
)
from sessionhost.session.instance import CHAT_BUTTON_ACTION, SessionInstance, SessionKind
from sessionhost.session.registry import SIDEBAR_ID, SessionRegistry

__all__ = [
    "SessionInstance",
    "SessionKind",
    "SessionRegistry",
    "SIDEBAR_ID",
    "CHAT_BUTTON_ACTION",
    "SessionController",
    "ControllerFactory",
    "RecordingController",
    "RecordedCall",
]
