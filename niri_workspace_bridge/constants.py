"""Constants shared across the bridge.

Environment variable names, wire tags and sizing defaults live here so the
codec, transport and CLI agree on a single source of truth.
"""

from typing import Final


class EnvVars:
    """Environment variables read by the bridge."""

    # Set by niri for every client it spawns
    SOCKET_PATH: Final[str] = "NIRI_SOCKET"
    CHANNEL_CAPACITY: Final[str] = "NIRI_WORKSPACES_CHANNEL_CAPACITY"
    LOG_LEVEL: Final[str] = "LOG_LEVEL"


class WireTags:
    """Variant tags used by the niri IPC wire schema.

    The schema is an external, versioned contract with the compositor.
    Renaming any of these is a breaking change.
    """

    # Requests
    EVENT_STREAM: Final[str] = "EventStream"
    WORKSPACES: Final[str] = "Workspaces"
    ACTION: Final[str] = "Action"
    FOCUS_WORKSPACE: Final[str] = "FocusWorkspace"
    FOCUS_WORKSPACE_UP: Final[str] = "FocusWorkspaceUp"
    FOCUS_WORKSPACE_DOWN: Final[str] = "FocusWorkspaceDown"

    # Replies
    OK: Final[str] = "Ok"
    ERR: Final[str] = "Err"
    HANDLED: Final[str] = "Handled"

    # Events
    WORKSPACES_CHANGED: Final[str] = "WorkspacesChanged"
    WORKSPACE_ACTIVATED: Final[str] = "WorkspaceActivated"


# Bounded hand-off between session and consumer
DEFAULT_CHANNEL_CAPACITY: Final[int] = 4
MAX_CHANNEL_CAPACITY: Final[int] = 1024

DEFAULT_LOG_LEVEL: Final[str] = "INFO"
SYSLOG_IDENTIFIER: Final[str] = "niri-workspace-bridge"
