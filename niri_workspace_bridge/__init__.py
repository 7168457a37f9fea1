"""niri Workspace Bridge

Client-side bridge to the niri compositor's IPC socket.

This package provides:
- A long-lived event stream session reconciling workspace state
- Fire-and-forget workspace focus commands
- A consumer-facing model with a bounded update channel
- A small CLI for listing, focusing and watching workspaces
"""

__version__ = "0.1.0"
__author__ = "niri-workspace-bridge contributors"
__license__ = "GPL-3.0-only"

from .bridge import WorkspaceBridge
from .commands import CommandClient
from .models import FocusChanged, Workspace, WorkspaceChanged
from .session import EventStreamSession, SessionState

__all__ = [
    "__version__",
    "CommandClient",
    "EventStreamSession",
    "FocusChanged",
    "SessionState",
    "Workspace",
    "WorkspaceBridge",
    "WorkspaceChanged",
]
