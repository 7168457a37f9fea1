"""Workspace state reconciliation.

Pure functions. A snapshot is a tuple of Workspace sorted by index; every
function returns a new snapshot instead of mutating the one it was given.
After any of them runs, at most one workspace in the snapshot is focused.
"""

import logging
from typing import Iterable, Optional, Tuple

from .models import (
    Event,
    FocusChanged,
    Workspace,
    WorkspaceActivated,
    WorkspaceChanged,
    WorkspacesChanged,
    WorkspaceUpdate,
)

logger = logging.getLogger(__name__)

Snapshot = Tuple[Workspace, ...]


def sort_workspaces(workspaces: Iterable[Workspace]) -> Snapshot:
    """Build a snapshot: sorted by index, at most one workspace focused.

    If several workspaces claim focus, the first in index order keeps it.
    """
    snapshot = tuple(sorted(workspaces, key=lambda ws: ws.index))
    focused = [ws.id for ws in snapshot if ws.is_focused]
    if len(focused) > 1:
        logger.warning(f"niri reported {len(focused)} focused workspaces, keeping {focused[0]}")
        snapshot = set_focus(snapshot, focused[0])
    return snapshot


def set_focus(snapshot: Snapshot, workspace_id: int) -> Snapshot:
    """Mark exactly the workspace with `workspace_id` as focused.

    An id not present in the snapshot leaves every workspace unfocused.
    """
    return tuple(
        ws if ws.is_focused == (ws.id == workspace_id)
        else ws.model_copy(update={"is_focused": ws.id == workspace_id})
        for ws in snapshot
    )


def focused_id(snapshot: Optional[Snapshot]) -> Optional[int]:
    """Id of the focused workspace, or None."""
    for ws in snapshot or ():
        if ws.is_focused:
            return ws.id
    return None


def update_for_event(event: Event) -> Optional[WorkspaceUpdate]:
    """Map a decoded event to the outward update it produces, if any.

    Only focus gain is reported; losing focus is implied by another
    workspace gaining it.
    """
    if isinstance(event, WorkspacesChanged):
        return WorkspaceChanged(workspaces=sort_workspaces(event.workspaces))
    if isinstance(event, WorkspaceActivated):
        if event.focused:
            return FocusChanged(id=event.id)
        logger.debug(f"Ignoring unfocused activation of workspace {event.id}")
        return None
    logger.debug(f"Ignoring niri event {event.kind}")
    return None


def apply_update(snapshot: Optional[Snapshot], update: WorkspaceUpdate) -> Optional[Snapshot]:
    """Apply an outward update to a snapshot.

    A FocusChanged that arrives before any workspace list has nothing to
    apply to and leaves the snapshot absent.
    """
    if isinstance(update, WorkspaceChanged):
        return sort_workspaces(update.workspaces)
    if snapshot is None:
        return None
    return set_focus(snapshot, update.id)


def reconcile(snapshot: Optional[Snapshot], event: Event) -> Tuple[Optional[Snapshot], Optional[WorkspaceUpdate]]:
    """Apply one event to a snapshot.

    Returns:
        (new snapshot, outward update or None)
    """
    update = update_for_event(event)
    if update is None:
        return snapshot, None
    return apply_update(snapshot, update), update
