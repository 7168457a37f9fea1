"""Consumer-facing workspace model.

WorkspaceBridge is what a panel or bar talks to. It owns the consumer's copy
of the workspace snapshot, runs the event stream session in the background,
and turns UI actions into fire-and-forget command calls.

Example:
    ```python
    bridge = WorkspaceBridge()
    await bridge.load_initial()
    bridge.start()
    async for update in bridge.updates():
        render(bridge.workspaces, bridge.focused_id)
    ```
"""

import asyncio
import logging
from typing import AsyncIterator, List, Literal, Optional, Set

from .channel import DeliveryChannel
from .commands import CommandClient
from .config import get_socket_path
from .constants import DEFAULT_CHANNEL_CAPACITY
from .models import (
    FocusWorkspace,
    FocusWorkspaceDown,
    FocusWorkspaceUp,
    Request,
    Workspace,
    WorkspaceChanged,
    WorkspaceUpdate,
)
from .reconciler import Snapshot, apply_update, focused_id
from .session import EventStreamSession

logger = logging.getLogger(__name__)

Direction = Literal["up", "down"]


class WorkspaceBridge:
    """Reconciled workspace state plus workspace commands."""

    def __init__(self, socket_path: Optional[str] = None, channel_capacity: int = DEFAULT_CHANNEL_CAPACITY) -> None:
        """Initialize bridge.

        Args:
            socket_path: niri socket path (default: NIRI_SOCKET)
            channel_capacity: Updates buffered before the session waits for the consumer
        """
        self.socket_path = socket_path
        self.channel_capacity = channel_capacity
        self.commands = CommandClient(socket_path)
        self.session: Optional[EventStreamSession] = None
        # None until the first WorkspaceChanged is applied
        self.workspaces: Optional[Snapshot] = None
        self._pending_commands: Set[asyncio.Task] = set()

    @property
    def focused_id(self) -> Optional[int]:
        return focused_id(self.workspaces)

    def apply(self, update: WorkspaceUpdate) -> None:
        self.workspaces = apply_update(self.workspaces, update)

    # ------------------------------------------------------------------
    # Event stream lifecycle
    # ------------------------------------------------------------------

    def start(self) -> EventStreamSession:
        """Start a new event stream session in the background.

        Raises:
            ConfigError: If no socket path is configured
            RuntimeError: If a session is still running
        """
        if self.session is not None and self.session.is_running:
            raise RuntimeError("Event stream session is still running")

        # Resolve now so a missing NIRI_SOCKET fails the caller, not a task
        path = self.socket_path or get_socket_path()
        channel: DeliveryChannel[WorkspaceUpdate] = DeliveryChannel(self.channel_capacity)
        self.session = EventStreamSession(channel, path)
        self.session.start()
        return self.session

    async def stop(self) -> None:
        """Stop the session and cancel in-flight commands."""
        if self.session is not None:
            await self.session.stop()
        for task in list(self._pending_commands):
            task.cancel()
        if self._pending_commands:
            await asyncio.wait(self._pending_commands)

    async def restart(self) -> EventStreamSession:
        """Replace a terminated (or running) session with a fresh one."""
        if self.session is not None:
            await self.session.stop()
        return self.start()

    async def updates(self) -> AsyncIterator[WorkspaceUpdate]:
        """Yield updates from the current session, applying each one first.

        Ends when the session terminates and its channel is drained.
        """
        if self.session is None:
            raise RuntimeError("Event stream session not started")
        async for update in self.session.channel:
            self.apply(update)
            yield update

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def get_workspaces(self) -> List[Workspace]:
        """Fetch the current workspaces from niri (empty on failure)."""
        return await self.commands.get_workspaces()

    async def load_initial(self) -> Snapshot:
        """Seed the snapshot from a one-off workspace query at startup."""
        workspaces = await self.get_workspaces()
        self.apply(WorkspaceChanged(workspaces=workspaces))
        return self.workspaces

    def focus(self, workspace_id: int) -> asyncio.Task:
        """Focus a workspace without waiting for niri's reply."""
        return self._dispatch(FocusWorkspace(id=workspace_id))

    def focus_relative(self, direction: Direction) -> asyncio.Task:
        """Focus the workspace above or below the current one."""
        if direction == "up":
            return self._dispatch(FocusWorkspaceUp())
        if direction == "down":
            return self._dispatch(FocusWorkspaceDown())
        raise ValueError(f"Unknown focus direction: {direction!r}")

    def _dispatch(self, request: Request) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.commands.send_action(request))
        self._pending_commands.add(task)
        task.add_done_callback(self._on_command_done)
        return task

    def _on_command_done(self, task: asyncio.Task) -> None:
        self._pending_commands.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Workspace command failed: {error}")
