"""
Error handling for the niri workspace bridge.

Every failure in the core ends exactly one unit of work (one command call or
one event stream session). Errors carry a structured code so callers and logs
can tell configuration problems apart from transport and protocol problems.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """
    Error codes for the niri workspace bridge.

    - 1000-1099: Configuration errors
    - 1100-1199: Connection errors
    - 1200-1299: Stream I/O errors
    - 1300-1399: Protocol errors
    """

    # Configuration errors (1000-1099)
    SOCKET_PATH_MISSING = 1000
    INVALID_SETTING = 1001

    # Connection errors (1100-1199)
    CONNECT_FAILED = 1100

    # Stream I/O errors (1200-1299)
    WRITE_FAILED = 1200
    READ_FAILED = 1201
    CONNECTION_CLOSED = 1202

    # Protocol errors (1300-1399)
    DECODE_FAILED = 1300
    REPLY_ERROR = 1301
    UNEXPECTED_REPLY = 1302


class BridgeError(Exception):
    """Base exception for niri workspace bridge errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize bridge error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            suggestion: Suggested recovery action
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to a dictionary for structured output.

        Returns:
            Error dictionary with code, message, suggestion, and context
        """
        result = {
            "code": self.code.value,
            "message": self.message
        }

        if self.suggestion:
            result["suggestion"] = self.suggestion

        if self.context:
            result["context"] = self.context

        return result


class ConfigError(BridgeError):
    """Required configuration (socket path, settings) is missing or invalid."""

    def __init__(self, message: str, suggestion: Optional[str] = None, code: ErrorCode = ErrorCode.SOCKET_PATH_MISSING):
        super().__init__(
            code=code,
            message=message,
            suggestion=suggestion,
        )


class NiriConnectionError(BridgeError):
    """Cannot establish a connection to the niri socket."""

    def __init__(self, socket_path: str, reason: str):
        """
        Initialize connection error.

        Args:
            socket_path: Socket path that was attempted
            reason: Reason for failure
        """
        super().__init__(
            code=ErrorCode.CONNECT_FAILED,
            message=f"Failed to connect to niri socket {socket_path}: {reason}",
            suggestion="Ensure niri is running and NIRI_SOCKET points to its socket",
            context={"socket_path": socket_path, "reason": reason}
        )


class NiriIOError(BridgeError):
    """Read or write failure on an established connection."""

    def __init__(self, operation: str, reason: str, code: ErrorCode = ErrorCode.READ_FAILED):
        """
        Initialize stream I/O error.

        Args:
            operation: Operation that failed ("read" or "write")
            reason: Reason for failure
            code: Specific error code
        """
        super().__init__(
            code=code,
            message=f"niri IPC {operation} failed: {reason}",
            context={"operation": operation, "reason": reason}
        )


class ConnectionClosedError(NiriIOError):
    """The peer closed the connection before a full line arrived."""

    def __init__(self, reason: str = "connection closed by peer", operation: str = "read"):
        super().__init__(operation, reason, code=ErrorCode.CONNECTION_CLOSED)


class DecodeError(BridgeError):
    """A line could not be decoded into the expected message shape."""

    def __init__(self, line: str, reason: str):
        """
        Initialize decode error.

        Args:
            line: Raw offending line, kept for diagnostics
            reason: Why decoding failed
        """
        self.line = line
        super().__init__(
            code=ErrorCode.DECODE_FAILED,
            message=f"Failed to decode {line[:200]!r}: {reason}",
            context={"line": line, "reason": reason}
        )


class ReplyError(BridgeError):
    """The compositor answered a request with an Err reply."""

    def __init__(self, request: str, message: str):
        super().__init__(
            code=ErrorCode.REPLY_ERROR,
            message=f"niri rejected {request}: {message}",
            context={"request": request, "reply": message}
        )


class UnexpectedReplyError(BridgeError):
    """The compositor answered Ok, but not with the response the request expects."""

    def __init__(self, request: str, response: Optional[str]):
        super().__init__(
            code=ErrorCode.UNEXPECTED_REPLY,
            message=f"Unexpected {response} reply to {request}",
            context={"request": request, "response": response}
        )
