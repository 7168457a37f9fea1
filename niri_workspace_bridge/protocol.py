"""niri IPC wire codec.

niri speaks newline-delimited JSON. Every message is a single line with no
length prefix. Tagged unions use serde's external tagging: unit variants are
bare strings ("EventStream"), data variants are single-key objects
({"WorkspaceActivated": {...}}).

Decoding never raises anything but DecodeError, which keeps the offending
line for diagnostics.
"""

import json
from typing import Any, Iterable, List

from pydantic import TypeAdapter, ValidationError

from .constants import WireTags
from .errors import DecodeError
from .models import (
    Event,
    EventStreamRequest,
    FocusWorkspace,
    FocusWorkspaceDown,
    FocusWorkspaceUp,
    OtherEvent,
    Reply,
    Request,
    Workspace,
    WorkspaceActivated,
    WorkspacesChanged,
    WorkspacesRequest,
)

_WORKSPACE_LIST = TypeAdapter(List[Workspace])


def _dumps(obj: Any) -> str:
    # json.dumps escapes control characters, so the result never spans lines
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def _loads(line: str) -> Any:
    try:
        return json.loads(line)
    except (ValueError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder can follow
        raise DecodeError(line, f"invalid JSON ({e})") from e


def _single_tag(line: str, data: Any) -> tuple:
    if not isinstance(data, dict) or len(data) != 1:
        raise DecodeError(line, "expected an object with exactly one variant tag")
    return next(iter(data.items()))


def _workspace_list(line: str, payload: Any) -> List[Workspace]:
    try:
        return _WORKSPACE_LIST.validate_python(payload)
    except ValidationError as e:
        raise DecodeError(line, f"invalid workspace list ({e.error_count()} errors)") from e


# ============================================================================
# Requests
# ============================================================================


def encode_request(request: Request) -> str:
    """Serialize a request to a single line of JSON (without terminator)."""
    if isinstance(request, (EventStreamRequest, WorkspacesRequest)):
        return _dumps(request.kind)
    if isinstance(request, FocusWorkspace):
        action = {request.kind: {"reference": {"Id": request.id}}}
    elif isinstance(request, (FocusWorkspaceUp, FocusWorkspaceDown)):
        action = {request.kind: {}}
    else:
        raise TypeError(f"Unsupported request type: {type(request).__name__}")
    return _dumps({WireTags.ACTION: action})


def decode_request(line: str) -> Request:
    """Parse a request line. Used by test servers and for round-trip checks."""
    data = _loads(line)

    if data == WireTags.EVENT_STREAM:
        return EventStreamRequest()
    if data == WireTags.WORKSPACES:
        return WorkspacesRequest()

    tag, body = _single_tag(line, data)
    if tag != WireTags.ACTION:
        raise DecodeError(line, f"unknown request {tag!r}")

    kind, params = _single_tag(line, body)
    if kind == WireTags.FOCUS_WORKSPACE_UP:
        return FocusWorkspaceUp()
    if kind == WireTags.FOCUS_WORKSPACE_DOWN:
        return FocusWorkspaceDown()
    if kind == WireTags.FOCUS_WORKSPACE:
        try:
            return FocusWorkspace(id=params["reference"]["Id"])
        except (KeyError, TypeError, ValidationError) as e:
            raise DecodeError(line, "FocusWorkspace needs an id reference") from e
    raise DecodeError(line, f"unknown action {kind!r}")


# ============================================================================
# Replies
# ============================================================================


def decode_reply(line: str) -> Reply:
    """Parse a reply line into a Reply.

    Raises:
        DecodeError: Invalid JSON, or JSON that is not an Ok/Err reply
    """
    tag, body = _single_tag(line, _loads(line))

    if tag == WireTags.ERR:
        if not isinstance(body, str):
            raise DecodeError(line, "Err reply must carry a message string")
        return Reply(ok=False, error=body)

    if tag != WireTags.OK:
        raise DecodeError(line, f"unknown reply tag {tag!r}")

    if isinstance(body, str):
        return Reply(ok=True, response=body)

    kind, payload = _single_tag(line, body)
    if kind == WireTags.WORKSPACES:
        payload = _workspace_list(line, payload)
    return Reply(ok=True, response=kind, payload=payload)


def encode_reply(reply: Reply) -> str:
    if not reply.ok:
        return _dumps({WireTags.ERR: reply.error or ""})
    if reply.payload is None:
        return _dumps({WireTags.OK: reply.response})
    payload = reply.payload
    if reply.response == WireTags.WORKSPACES:
        payload = [ws.to_wire() for ws in payload]
    return _dumps({WireTags.OK: {reply.response: payload}})


def handled_reply() -> Reply:
    return Reply(ok=True, response=WireTags.HANDLED)


def workspaces_reply(workspaces: Iterable[Workspace]) -> Reply:
    return Reply(ok=True, response=WireTags.WORKSPACES, payload=list(workspaces))


def error_reply(message: str) -> Reply:
    return Reply(ok=False, error=message)


# ============================================================================
# Events
# ============================================================================


def decode_event(line: str) -> Event:
    """Parse an event stream line.

    Event kinds the bridge does not model decode to OtherEvent; only broken
    JSON, a non-tagged shape, or a known kind with a bad payload fail.

    Raises:
        DecodeError: If the line cannot be decoded
    """
    kind, body = _single_tag(line, _loads(line))

    try:
        if kind == WireTags.WORKSPACES_CHANGED:
            return WorkspacesChanged.model_validate(body)
        if kind == WireTags.WORKSPACE_ACTIVATED:
            return WorkspaceActivated.model_validate(body)
    except ValidationError as e:
        raise DecodeError(line, f"invalid {kind} payload ({e.error_count()} errors)") from e

    return OtherEvent(kind=kind, payload=body)


def encode_event(event: Event) -> str:
    if isinstance(event, WorkspacesChanged):
        body = {"workspaces": [ws.to_wire() for ws in event.workspaces]}
    elif isinstance(event, WorkspaceActivated):
        body = {"id": event.id, "focused": event.focused}
    else:
        body = event.payload
    return _dumps({event.kind: body})
