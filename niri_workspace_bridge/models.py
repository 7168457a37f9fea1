"""Pydantic models for the niri workspace bridge.

Three families of models live here:
- Wire payloads exchanged with niri (Workspace, requests, replies, events)
- Outward updates delivered to the consumer (WorkspaceChanged, FocusChanged)
- Session bookkeeping (SessionState)

All models are immutable. State changes produce new objects.
"""

from enum import Enum
from typing import Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, StrictBool, StrictInt


class Workspace(BaseModel):
    """A workspace as reported by niri.

    `index` is the position on its output (wire name "idx") and defines the
    display order. `id` is unique across all workspaces in a snapshot.
    """

    id: StrictInt = Field(..., ge=0, description="Unique workspace id")
    index: StrictInt = Field(..., ge=0, alias="idx", description="Position on its output")
    name: Optional[str] = Field(default=None, description="Optional user-assigned name")
    output: Optional[str] = Field(default=None, description="Output (monitor) name")
    is_urgent: StrictBool = Field(default=False)
    is_active: StrictBool = Field(default=False, description="Visible on its output")
    is_focused: StrictBool = Field(default=False, description="Has keyboard focus")
    active_window_id: Optional[StrictInt] = Field(default=None)

    # niri adds fields over time; unknown ones are dropped
    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    @property
    def display_name(self) -> str:
        """Label shown for the workspace: its name, else its index."""
        return self.name if self.name else str(self.index)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


# ============================================================================
# Requests
# ============================================================================


class _Request(BaseModel):
    model_config = {"frozen": True}

    def label(self) -> str:
        """Short human-readable name for logs."""
        return self.kind  # type: ignore[attr-defined]


class EventStreamRequest(_Request):
    """Subscribe the connection to the event stream."""

    kind: Literal["EventStream"] = "EventStream"


class WorkspacesRequest(_Request):
    """Query the current list of workspaces."""

    kind: Literal["Workspaces"] = "Workspaces"


class FocusWorkspace(_Request):
    """Focus the workspace with the given id."""

    kind: Literal["FocusWorkspace"] = "FocusWorkspace"
    id: int = Field(..., ge=0)

    def label(self) -> str:
        return f"{self.kind}({self.id})"


class FocusWorkspaceUp(_Request):
    kind: Literal["FocusWorkspaceUp"] = "FocusWorkspaceUp"


class FocusWorkspaceDown(_Request):
    kind: Literal["FocusWorkspaceDown"] = "FocusWorkspaceDown"


Request = Union[EventStreamRequest, WorkspacesRequest, FocusWorkspace, FocusWorkspaceUp, FocusWorkspaceDown]


# ============================================================================
# Replies
# ============================================================================


class Reply(BaseModel):
    """Reply to a single request.

    Ok replies carry a response kind ("Handled", "Workspaces", ...) and its
    payload. Err replies carry the compositor's message.
    """

    ok: bool
    response: Optional[str] = Field(default=None, description="Response kind for Ok replies")
    payload: Any = Field(default=None, description="Kind-specific payload")
    error: Optional[str] = Field(default=None, description="Message for Err replies")

    model_config = {"frozen": True}

    @property
    def is_handled(self) -> bool:
        return self.ok and self.response == "Handled"

    @property
    def workspaces(self) -> Optional[List[Workspace]]:
        if self.ok and self.response == "Workspaces":
            return list(self.payload)
        return None


# ============================================================================
# Events
# ============================================================================


class WorkspacesChanged(BaseModel):
    """Full workspace configuration changed."""

    kind: Literal["WorkspacesChanged"] = "WorkspacesChanged"
    workspaces: Tuple[Workspace, ...]

    model_config = {"frozen": True}


class WorkspaceActivated(BaseModel):
    """A workspace was activated on an output, possibly gaining focus."""

    kind: Literal["WorkspaceActivated"] = "WorkspaceActivated"
    id: StrictInt = Field(..., ge=0)
    focused: StrictBool

    model_config = {"frozen": True}


class OtherEvent(BaseModel):
    """Any event kind the bridge does not act on.

    Kept as an explicit case so new niri event kinds decode cleanly.
    """

    kind: str
    payload: Any = None

    model_config = {"frozen": True}


Event = Union[WorkspacesChanged, WorkspaceActivated, OtherEvent]


# ============================================================================
# Outward updates
# ============================================================================


class WorkspaceChanged(BaseModel):
    """The workspace list was replaced. Workspaces are sorted by index."""

    kind: Literal["WorkspaceChanged"] = "WorkspaceChanged"
    workspaces: Tuple[Workspace, ...]

    model_config = {"frozen": True}


class FocusChanged(BaseModel):
    """A workspace gained focus."""

    kind: Literal["FocusChanged"] = "FocusChanged"
    id: int

    model_config = {"frozen": True}


WorkspaceUpdate = Union[WorkspaceChanged, FocusChanged]


class SessionState(str, Enum):
    """Lifecycle of an event stream session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AWAITING_SUBSCRIBE_ACK = "awaiting_subscribe_ack"
    STREAMING = "streaming"
    TERMINATED = "terminated"
