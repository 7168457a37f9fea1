"""Event stream session.

A session owns one long-lived connection to niri. It sends a single
EventStream request, expects a Handled acknowledgement, then reads events
until the connection closes, a line fails to decode, or the session is
stopped. Each event is reconciled against the session's snapshot and the
resulting update is sent on the delivery channel, in arrival order.

State machine:

    DISCONNECTED -> CONNECTING -> AWAITING_SUBSCRIBE_ACK -> STREAMING -> TERMINATED

Any failure moves straight to TERMINATED. TERMINATED is final; starting over
means creating a new session.
"""

import asyncio
import logging
from typing import Optional

from .channel import ChannelClosed, DeliveryChannel
from .errors import (
    BridgeError,
    ConfigError,
    ConnectionClosedError,
    ReplyError,
    UnexpectedReplyError,
)
from .models import EventStreamRequest, SessionState, WorkspaceUpdate
from .protocol import decode_event, decode_reply, encode_request
from .reconciler import Snapshot, reconcile
from .transport import NiriTransport

logger = logging.getLogger(__name__)


class EventStreamSession:
    """Long-lived niri event stream feeding a delivery channel."""

    def __init__(self, channel: DeliveryChannel[WorkspaceUpdate], socket_path: Optional[str] = None) -> None:
        """Initialize session.

        Args:
            channel: Channel receiving outward updates; closed when the session ends
            socket_path: niri socket path (default: NIRI_SOCKET at connect time)
        """
        self.channel = channel
        self.socket_path = socket_path
        self.state = SessionState.DISCONNECTED
        self.termination_reason: Optional[str] = None
        self.failed = False
        self.snapshot: Optional[Snapshot] = None
        self.events_processed = 0
        self.updates_delivered = 0
        self._transport: Optional[NiriTransport] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        if self._task is not None and not self._task.done():
            return True
        return self.state not in (SessionState.DISCONNECTED, SessionState.TERMINATED)

    def _transition(self, state: SessionState) -> None:
        logger.debug(f"Event stream session: {self.state.value} -> {state.value}")
        self.state = state

    def _terminate(self, reason: str, failed: bool = False) -> None:
        if self.state == SessionState.TERMINATED:
            return
        self.termination_reason = reason
        self.failed = failed
        self._transition(SessionState.TERMINATED)
        if failed:
            logger.error(f"Event stream session terminated: {reason}")
        else:
            logger.info(f"Event stream session terminated: {reason}")

    async def run(self) -> None:
        """Run the session to completion.

        Returns normally when the stream ends or fails; the reason is kept in
        `termination_reason`. The delivery channel is closed on exit.

        Raises:
            ConfigError: If the socket path cannot be resolved
            RuntimeError: If the session was already started
        """
        if self.state != SessionState.DISCONNECTED:
            raise RuntimeError(f"Event stream session already {self.state.value}")

        self._transition(SessionState.CONNECTING)
        try:
            self._transport = await NiriTransport.connect(self.socket_path)

            self._transition(SessionState.AWAITING_SUBSCRIBE_ACK)
            request = EventStreamRequest()
            await self._transport.write_line(encode_request(request).encode("utf-8"))
            reply = decode_reply(await self._transport.read_line())
            if not reply.ok:
                raise ReplyError(request.label(), reply.error or "")
            if not reply.is_handled:
                raise UnexpectedReplyError(request.label(), reply.response)

            self._transition(SessionState.STREAMING)
            logger.info(f"Subscribed to niri event stream at {self._transport.socket_path}")
            await self._stream()

        except ConnectionClosedError:
            self._terminate("connection closed by niri")
        except ChannelClosed:
            self._terminate("delivery channel closed by consumer")
        except ConfigError as e:
            self._terminate(e.message, failed=True)
            raise
        except BridgeError as e:
            self._terminate(e.message, failed=True)
        except asyncio.CancelledError:
            self._terminate("stopped")
            raise
        finally:
            if self.state != SessionState.TERMINATED:
                self._terminate("unexpected error", failed=True)
            await self._close_transport()
            self.channel.close()

    async def _stream(self) -> None:
        while True:
            event = decode_event(await self._transport.read_line())
            self.events_processed += 1
            self.snapshot, update = reconcile(self.snapshot, event)
            if update is not None:
                await self.channel.send(update)
                self.updates_delivered += 1

    async def _close_transport(self) -> None:
        if self._transport is not None:
            await self._transport.close()
            self._transport = None

    def start(self) -> asyncio.Task:
        """Run the session as a background task on the current loop."""
        if self._task is not None:
            raise RuntimeError("Event stream session already started")
        self._task = asyncio.create_task(self.run(), name="niri-event-stream")
        return self._task

    async def stop(self) -> None:
        """Cancel the session and wait for it to release its socket."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait({self._task})
        if self.state != SessionState.TERMINATED:
            # Cancelled before run() got to execute
            self._terminate("stopped")
            await self._close_transport()
            self.channel.close()

    async def wait(self) -> None:
        """Wait for a started session to finish."""
        if self._task is not None:
            await asyncio.wait({self._task})
