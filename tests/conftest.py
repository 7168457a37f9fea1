"""Pytest configuration and fixtures for niri workspace bridge tests."""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest
import pytest_asyncio

# Make the package and tests.fixtures importable without installation
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from niri_workspace_bridge.models import Workspace  # noqa: E402
from tests.fixtures.fake_niri import FakeNiri  # noqa: E402


@pytest.fixture
def socket_dir() -> Generator[Path, None, None]:
    """Short temporary directory for Unix sockets (sun_path is ~108 bytes)."""
    tmpdir = tempfile.mkdtemp(prefix="niri-")
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest_asyncio.fixture
async def fake_niri(socket_dir, monkeypatch):
    """Running fake niri server with NIRI_SOCKET pointing at it."""
    server = FakeNiri(str(socket_dir / "niri.sock"))
    await server.start()
    monkeypatch.setenv("NIRI_SOCKET", server.socket_path)
    yield server
    await server.stop()


@pytest.fixture
def no_niri_socket(monkeypatch):
    """Environment without NIRI_SOCKET."""
    monkeypatch.delenv("NIRI_SOCKET", raising=False)


@pytest.fixture
def wire_workspaces():
    """Workspaces as niri sends them, deliberately out of index order."""
    return [
        {
            "id": 3,
            "idx": 2,
            "name": "web",
            "output": "DP-1",
            "is_urgent": False,
            "is_active": False,
            "is_focused": False,
            "active_window_id": None
        },
        {
            "id": 1,
            "idx": 0,
            "name": None,
            "output": "DP-1",
            "is_urgent": False,
            "is_active": True,
            "is_focused": True,
            "active_window_id": 42
        },
        {
            "id": 2,
            "idx": 1,
            "name": "code",
            "output": "DP-1",
            "is_urgent": True,
            "is_active": False,
            "is_focused": False,
            "active_window_id": None
        }
    ]


@pytest.fixture
def workspaces(wire_workspaces):
    """Workspace models for wire_workspaces."""
    return [Workspace.model_validate(ws) for ws in wire_workspaces]
