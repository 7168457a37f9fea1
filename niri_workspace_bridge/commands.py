"""Fire-and-forget command client for niri.

Every call opens its own connection, writes one request, reads exactly one
reply and closes. Concurrent calls therefore share nothing and need no
locking.
"""

import logging
from typing import List, Optional

from .errors import BridgeError, ConfigError, ReplyError, UnexpectedReplyError
from .models import (
    FocusWorkspace,
    FocusWorkspaceDown,
    FocusWorkspaceUp,
    Reply,
    Request,
    Workspace,
    WorkspacesRequest,
)
from .protocol import decode_reply, encode_request
from .transport import NiriTransport

logger = logging.getLogger(__name__)


class CommandClient:
    """Client for imperative niri requests.

    Action methods never raise for IPC failures: they log and return, so a UI
    handler can call them without guarding. Missing configuration is the
    exception; ConfigError always propagates.
    """

    def __init__(self, socket_path: Optional[str] = None):
        """Initialize command client.

        Args:
            socket_path: niri socket path (default: NIRI_SOCKET at each call)
        """
        self.socket_path = socket_path

    async def request(self, request: Request) -> Reply:
        """Send one request on a fresh connection and return its reply.

        Raises:
            ConfigError: If the socket path cannot be resolved
            NiriConnectionError, NiriIOError, DecodeError: On IPC failure
            ReplyError: If niri answers with Err
        """
        async with await NiriTransport.connect(self.socket_path) as transport:
            await transport.write_line(encode_request(request).encode("utf-8"))
            reply = decode_reply(await transport.read_line())

        if not reply.ok:
            raise ReplyError(request.label(), reply.error or "")
        return reply

    async def send_action(self, request: Request) -> None:
        """Send an action and discard the reply. Failures are logged."""
        try:
            await self.request(request)
        except ConfigError:
            raise
        except BridgeError as e:
            logger.error(f"Failed to run {request.label()}: {e}")
            return
        logger.debug(f"niri handled {request.label()}")

    async def focus(self, workspace_id: int) -> None:
        await self.send_action(FocusWorkspace(id=workspace_id))

    async def focus_up(self) -> None:
        await self.send_action(FocusWorkspaceUp())

    async def focus_down(self) -> None:
        await self.send_action(FocusWorkspaceDown())

    async def get_workspaces(self) -> List[Workspace]:
        """Fetch all workspaces sorted by index.

        Returns an empty list on any IPC failure.
        """
        request = WorkspacesRequest()
        try:
            reply = await self.request(request)
            workspaces = reply.workspaces
            if workspaces is None:
                raise UnexpectedReplyError(request.label(), reply.response)
        except ConfigError:
            raise
        except BridgeError as e:
            logger.error(f"Failed to get workspaces: {e}")
            return []

        return sorted(workspaces, key=lambda ws: ws.index)
