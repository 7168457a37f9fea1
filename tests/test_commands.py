"""Command client tests.

Actions are fire-and-forget: failures are logged, never raised, except for
missing configuration.
"""

import logging

import pytest

from niri_workspace_bridge.commands import CommandClient
from niri_workspace_bridge.errors import ConfigError
from niri_workspace_bridge.models import (
    FocusWorkspace,
    FocusWorkspaceDown,
    FocusWorkspaceUp,
    Workspace,
    WorkspacesRequest,
)
from niri_workspace_bridge.protocol import error_reply, workspaces_reply


def error_records(caplog):
    return [r for r in caplog.records if r.levelno >= logging.ERROR]


class TestSendAction:

    @pytest.mark.asyncio
    async def test_focus_sends_one_request_per_connection(self, fake_niri):
        client = CommandClient()

        await client.focus(2)
        await client.focus_up()
        await client.focus_down()

        assert fake_niri.requests == [FocusWorkspace(id=2), FocusWorkspaceUp(), FocusWorkspaceDown()]
        assert fake_niri.connections == 3

    @pytest.mark.asyncio
    async def test_error_reply_is_logged_not_raised(self, fake_niri, caplog):
        fake_niri.set_reply("FocusWorkspace", error_reply("Workspace not found"))
        client = CommandClient()

        with caplog.at_level(logging.ERROR):
            result = await client.focus(2)

        assert result is None
        errors = error_records(caplog)
        assert len(errors) == 1
        assert "FocusWorkspace(2)" in errors[0].getMessage()
        assert "Workspace not found" in errors[0].getMessage()

    @pytest.mark.asyncio
    async def test_malformed_reply_is_logged(self, fake_niri, caplog):
        fake_niri.reply_lines["FocusWorkspaceUp"] = "garbage"

        with caplog.at_level(logging.ERROR):
            await CommandClient().focus_up()

        assert len(error_records(caplog)) == 1

    @pytest.mark.asyncio
    async def test_connect_failure_is_logged(self, socket_dir, caplog):
        client = CommandClient(str(socket_dir / "absent.sock"))

        with caplog.at_level(logging.ERROR):
            await client.focus_down()

        errors = error_records(caplog)
        assert len(errors) == 1
        assert "FocusWorkspaceDown" in errors[0].getMessage()

    @pytest.mark.asyncio
    async def test_missing_socket_env_propagates(self, no_niri_socket):
        with pytest.raises(ConfigError):
            await CommandClient().focus(1)


class TestGetWorkspaces:

    @pytest.mark.asyncio
    async def test_sorted_by_index(self, fake_niri, workspaces):
        fake_niri.set_reply("Workspaces", workspaces_reply(workspaces))

        result = await CommandClient().get_workspaces()

        assert [ws.index for ws in result] == [0, 1, 2]
        assert all(isinstance(ws, Workspace) for ws in result)
        assert fake_niri.requests == [WorkspacesRequest()]

    @pytest.mark.asyncio
    async def test_error_reply_degrades_to_empty(self, fake_niri):
        fake_niri.set_reply("Workspaces", error_reply("busy"))

        assert await CommandClient().get_workspaces() == []

    @pytest.mark.asyncio
    async def test_unexpected_reply_degrades_to_empty(self, fake_niri, caplog):
        # Default fake reply is Handled, which carries no workspaces
        with caplog.at_level(logging.ERROR):
            assert await CommandClient().get_workspaces() == []

        assert any("Unexpected Handled reply to Workspaces" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_decode_failure_degrades_to_empty(self, fake_niri):
        fake_niri.reply_lines["Workspaces"] = '{"Ok":{"Workspaces":[{"idx":0}]}}'

        assert await CommandClient().get_workspaces() == []

    @pytest.mark.asyncio
    async def test_unreachable_socket_degrades_to_empty(self, socket_dir):
        client = CommandClient(str(socket_dir / "absent.sock"))

        assert await client.get_workspaces() == []
