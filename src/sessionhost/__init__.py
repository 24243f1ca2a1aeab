"""SessionHost: session and view orchestration for an editor-hosted assistant."""

__version__ = "0.1.0"

# Public API
from sessionhost.callbacks import CallbackDispatcher, CallbackRequest, parse_callback
from sessionhost.commands import COMMAND_NAMES, CommandRouter
from sessionhost.config import Config, get_config, load_config
from sessionhost.content import (
    DiffContentProvider,
    VirtualDocumentRequest,
    build_diff_uri,
    decode_payload,
    encode_payload,
)
from sessionhost.errors import (
    DecodeError,
    DuplicateRegistrationError,
    DuplicateSidebarError,
    LifecycleError,
    RoutingMiss,
    SessionHostError,
    SinkClosedError,
    VisibilityConflictError,
)
from sessionhost.host import ExtensionContext, Host, InMemoryHost, Uri, ViewColumn
from sessionhost.lifecycle import ExtensionAPI, LifecycleCoordinator
from sessionhost.output import OutputSink, ProcessScope
from sessionhost.placement import PanelPlacement, target_column
from sessionhost.session import (
    RecordingController,
    SessionController,
    SessionInstance,
    SessionKind,
    SessionRegistry,
)

__all__ = [
    # Lifecycle
    "LifecycleCoordinator",
    "ExtensionAPI",
    "ProcessScope",
    "OutputSink",
    # Components
    "CommandRouter",
    "COMMAND_NAMES",
    "CallbackDispatcher",
    "CallbackRequest",
    "parse_callback",
    "DiffContentProvider",
    "VirtualDocumentRequest",
    "encode_payload",
    "decode_payload",
    "build_diff_uri",
    "PanelPlacement",
    "target_column",
    # Sessions
    "SessionInstance",
    "SessionKind",
    "SessionRegistry",
    "SessionController",
    "RecordingController",
    # Host
    "Host",
    "InMemoryHost",
    "ExtensionContext",
    "Uri",
    "ViewColumn",
    # Config
    "Config",
    "load_config",
    "get_config",
    # Errors
    "SessionHostError",
    "DecodeError",
    "RoutingMiss",
    "DuplicateRegistrationError",
    "DuplicateSidebarError",
    "VisibilityConflictError",
    "LifecycleError",
    "SinkClosedError",
]
