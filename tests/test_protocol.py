"""Wire codec tests.

Covers request encoding against niri's wire shapes, reply/event decoding,
and the guarantee that malformed input only ever raises DecodeError.
"""

import json

import pytest

from niri_workspace_bridge.errors import DecodeError, ErrorCode
from niri_workspace_bridge.models import (
    EventStreamRequest,
    FocusWorkspace,
    FocusWorkspaceDown,
    FocusWorkspaceUp,
    OtherEvent,
    WorkspaceActivated,
    WorkspacesChanged,
    WorkspacesRequest,
)
from niri_workspace_bridge.protocol import (
    decode_event,
    decode_reply,
    decode_request,
    encode_event,
    encode_reply,
    encode_request,
    error_reply,
    handled_reply,
    workspaces_reply,
)

# Nesting deeper than the JSON decoder can follow, well under the line limit
DEEP = "[" * 200000 + "]" * 200000


class TestRequestEncoding:
    """Each request kind has a fixed wire shape."""

    @pytest.mark.parametrize("request_obj, expected", [
        (EventStreamRequest(), "EventStream"),
        (WorkspacesRequest(), "Workspaces"),
        (FocusWorkspace(id=7), {"Action": {"FocusWorkspace": {"reference": {"Id": 7}}}}),
        (FocusWorkspaceUp(), {"Action": {"FocusWorkspaceUp": {}}}),
        (FocusWorkspaceDown(), {"Action": {"FocusWorkspaceDown": {}}}),
    ])
    def test_wire_shape(self, request_obj, expected):
        line = encode_request(request_obj)

        assert "\n" not in line
        assert json.loads(line) == expected

    @pytest.mark.parametrize("request_obj", [
        EventStreamRequest(),
        WorkspacesRequest(),
        FocusWorkspace(id=0),
        FocusWorkspace(id=2**63),
        FocusWorkspaceUp(),
        FocusWorkspaceDown(),
    ])
    def test_round_trip(self, request_obj):
        assert decode_request(encode_request(request_obj)) == request_obj

    def test_unknown_action_is_decode_error(self):
        with pytest.raises(DecodeError):
            decode_request('{"Action": {"Quit": {"skip_confirmation": true}}}')


class TestReplyDecoding:
    """Replies are Ok(response) or Err(message)."""

    def test_handled(self):
        reply = decode_reply('{"Ok":"Handled"}')

        assert reply.ok
        assert reply.is_handled
        assert reply.workspaces is None

    def test_workspaces(self, wire_workspaces):
        reply = decode_reply(json.dumps({"Ok": {"Workspaces": wire_workspaces}}))

        assert reply.ok
        assert not reply.is_handled
        assert [ws.id for ws in reply.workspaces] == [3, 1, 2]
        assert reply.workspaces[0].index == 2

    def test_other_response_kind_is_kept(self):
        reply = decode_reply('{"Ok":{"Version":"25.02"}}')

        assert reply.ok
        assert reply.response == "Version"
        assert reply.payload == "25.02"

    def test_err(self):
        reply = decode_reply('{"Err":"workspace not found"}')

        assert not reply.ok
        assert reply.error == "workspace not found"

    def test_encode_decode_helpers_agree(self, workspaces):
        for reply in (handled_reply(), error_reply("nope"), workspaces_reply(workspaces)):
            assert decode_reply(encode_reply(reply)) == reply


class TestEventDecoding:
    """Events form an open union with an explicit catch-all."""

    def test_workspaces_changed(self, wire_workspaces):
        event = decode_event(json.dumps({"WorkspacesChanged": {"workspaces": wire_workspaces}}))

        assert isinstance(event, WorkspacesChanged)
        assert len(event.workspaces) == 3
        assert event.workspaces[1].is_focused

    def test_workspace_activated(self):
        event = decode_event('{"WorkspaceActivated":{"id":2,"focused":true}}')

        assert event == WorkspaceActivated(id=2, focused=True)

    def test_unknown_kind_decodes_to_other(self):
        event = decode_event('{"WindowFocusChanged":{"id":17}}')

        assert isinstance(event, OtherEvent)
        assert event.kind == "WindowFocusChanged"
        assert event.payload == {"id": 17}

    def test_extra_workspace_fields_are_ignored(self):
        line = '{"WorkspacesChanged":{"workspaces":[{"id":1,"idx":1,"is_focused":true,"future_field":[1,2]}]}}'

        event = decode_event(line)

        assert event.workspaces[0].id == 1

    def test_encode_event_round_trip(self, workspaces):
        for event in (
            WorkspacesChanged(workspaces=workspaces),
            WorkspaceActivated(id=1, focused=False),
            OtherEvent(kind="ConfigLoaded", payload={"failed": False}),
        ):
            assert decode_event(encode_event(event)) == event


class TestMalformedInput:
    """Bad lines surface as DecodeError carrying the raw line."""

    @pytest.mark.parametrize("line", [
        "",
        "not json",
        '{"Ok": "Handled"',
        "42",
        "[]",
        '"Handled"',
        '{"Ok":"Handled","Err":"both"}',
        '{"Maybe":"Handled"}',
        '{"Err":{"code":1}}',
        '{"Ok":{}}',
        '{"Ok":{"Workspaces":[{"id":"x"}]}}',
    ])
    def test_bad_reply(self, line):
        with pytest.raises(DecodeError) as exc_info:
            decode_reply(line)

        assert exc_info.value.line == line
        assert exc_info.value.code == ErrorCode.DECODE_FAILED

    @pytest.mark.parametrize("line", [
        "{",
        "null",
        '"WorkspacesChanged"',
        "{}",
        '{"WorkspacesChanged":{"workspaces":[{"id":1}]}}',
        '{"WorkspacesChanged":{"workspaces":"all"}}',
        '{"WorkspaceActivated":{"id":-1,"focused":true}}',
        '{"WorkspaceActivated":{"focused":true}}',
        '{"WorkspaceActivated":[2,true]}',
        '{"WorkspaceActivated":{"id":"2","focused":"yes"}}',
        '{"WorkspaceActivated":{"id":2,"focused":1}}',
        '{"WorkspacesChanged":{"workspaces":[{"id":1,"idx":"0"}]}}',
        '{"WorkspacesChanged":{"workspaces":[{"id":1,"idx":0,"is_focused":"true"}]}}',
    ])
    def test_bad_event(self, line):
        with pytest.raises(DecodeError) as exc_info:
            decode_event(line)

        assert exc_info.value.line == line

    @pytest.mark.parametrize("decode, line", [
        (decode_reply, DEEP),
        (decode_reply, '{"Ok":{"Version":' + DEEP + "}}"),
        (decode_event, '{"WindowOpenedOrChanged":' + DEEP + "}"),
    ], ids=["reply", "reply-payload", "event-payload"])
    def test_deeply_nested(self, decode, line):
        with pytest.raises(DecodeError) as exc_info:
            decode(line)

        assert exc_info.value.line == line
        # The message quotes only the start of the line
        assert len(exc_info.value.message) < 1000
