"""Line-oriented transport over the niri Unix socket.

One NiriTransport wraps one connection. Connections are never pooled: each
command call and each event stream session opens its own and closes it when
done, which is what makes ordering-based request/reply correlation safe.
"""

import asyncio
import logging
from typing import Optional

from .config import get_socket_path
from .errors import (
    ConnectionClosedError,
    DecodeError,
    ErrorCode,
    NiriConnectionError,
    NiriIOError,
)

logger = logging.getLogger(__name__)

# Workspace lists on large setups can exceed asyncio's 64 KiB default
STREAM_LIMIT = 1024 * 1024


class NiriTransport:
    """Duplex newline-delimited stream to the niri IPC socket."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter, socket_path: str):
        self._reader = reader
        self._writer = writer
        self.socket_path = socket_path
        self._closed = False

    @classmethod
    async def connect(cls, socket_path: Optional[str] = None) -> "NiriTransport":
        """Open a connection to the niri socket.

        Args:
            socket_path: Socket path (default: resolved from NIRI_SOCKET now)

        Returns:
            Connected transport

        Raises:
            ConfigError: If no path is given and NIRI_SOCKET is unset
            NiriConnectionError: If the socket cannot be reached
        """
        path = socket_path or get_socket_path()
        try:
            reader, writer = await asyncio.open_unix_connection(path, limit=STREAM_LIMIT)
        except OSError as e:
            raise NiriConnectionError(path, str(e)) from e

        logger.debug(f"Connected to niri socket {path}")
        return cls(reader, writer, path)

    async def write_line(self, data: bytes) -> None:
        """Write one line and wait until it is flushed to the socket.

        Raises:
            ConnectionClosedError: If close() was already called
            NiriIOError: If the write fails
        """
        if self._closed:
            raise ConnectionClosedError("connection already closed", operation="write")
        try:
            self._writer.write(data + b"\n")
            await self._writer.drain()
        except OSError as e:
            raise NiriIOError("write", str(e), code=ErrorCode.WRITE_FAILED) from e

    async def read_line(self) -> str:
        """Read one full line, without its terminator.

        Raises:
            ConnectionClosedError: If the connection was closed before a full line arrived
            NiriIOError: On any other read failure
            DecodeError: If the line is not valid UTF-8
        """
        if self._closed:
            raise ConnectionClosedError("connection already closed")
        try:
            raw = await self._reader.readline()
        except (OSError, ValueError) as e:
            # ValueError: line longer than STREAM_LIMIT
            raise NiriIOError("read", str(e)) from e

        if not raw.endswith(b"\n"):
            raise ConnectionClosedError()

        try:
            return raw[:-1].decode("utf-8").rstrip("\r")
        except UnicodeDecodeError as e:
            raise DecodeError(repr(raw), "line is not valid UTF-8") from e

    async def close(self) -> None:
        """Close the connection and release the socket."""
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing niri socket: {e}")

    async def __aenter__(self) -> "NiriTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
