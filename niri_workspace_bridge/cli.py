#!/usr/bin/env python3
"""
niri workspaces CLI

Command-line front end for the workspace bridge: list workspaces, focus
one, or watch reconciled workspace state as JSON lines (one object per
change, suitable for feeding a status bar).
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

try:
    from systemd import journal
    SYSTEMD_AVAILABLE = True
except ImportError:
    SYSTEMD_AVAILABLE = False

from . import __version__
from .bridge import WorkspaceBridge
from .config import BridgeSettings
from .constants import SYSLOG_IDENTIFIER
from .errors import ConfigError
from .models import Workspace

logger = logging.getLogger(__name__)


def setup_logging(level: str, use_journal: bool = False) -> None:
    """Setup logging to the systemd journal or stderr.

    stdout is reserved for command output, so the fallback handler always
    writes to stderr.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if use_journal and SYSTEMD_AVAILABLE:
        handler = journal.JournalHandler(SYSLOG_IDENTIFIER=SYSLOG_IDENTIFIER)
    else:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter("%(levelname)s [%(name)s] %(message)s"))
    root_logger.addHandler(handler)

    logger.debug(f"Logging configured: level={level} journal={use_journal and SYSTEMD_AVAILABLE}")


def workspace_to_dict(ws: Workspace) -> Dict[str, Any]:
    data = ws.model_dump(mode="json")
    data["display_name"] = ws.display_name
    return data


def state_to_dict(bridge: WorkspaceBridge) -> Dict[str, Any]:
    return {
        "focused": bridge.focused_id,
        "workspaces": [workspace_to_dict(ws) for ws in bridge.workspaces or ()],
    }


class NiriWorkspacesCLI:
    """CLI client for the niri workspace bridge."""

    def __init__(self, settings: Optional[BridgeSettings] = None):
        self.settings = settings

    def _bridge(self, args) -> WorkspaceBridge:
        return WorkspaceBridge(
            socket_path=args.socket,
            channel_capacity=self.settings.channel_capacity,
        )

    async def cmd_list(self, args) -> int:
        """List workspaces in display order."""
        workspaces = await self._bridge(args).get_workspaces()

        if args.json:
            print(json.dumps([workspace_to_dict(ws) for ws in workspaces], indent=2))
            return 0

        if not workspaces:
            print("No workspaces (is niri running?)")
            return 1

        for ws in workspaces:
            marker = "*" if ws.is_focused else " "
            output = f"  [{ws.output}]" if ws.output else ""
            print(f"{marker} {ws.index:>3}  {ws.display_name:<20} id={ws.id}{output}")
        return 0

    async def cmd_focus(self, args) -> int:
        """Focus a workspace by id."""
        await self._bridge(args).commands.focus(args.id)
        return 0

    async def cmd_up(self, args) -> int:
        await self._bridge(args).commands.focus_up()
        return 0

    async def cmd_down(self, args) -> int:
        await self._bridge(args).commands.focus_down()
        return 0

    async def cmd_watch(self, args) -> int:
        """Print reconciled workspace state every time it changes."""
        bridge = self._bridge(args)
        if args.initial:
            await bridge.load_initial()
            self._emit(bridge)

        session = bridge.start()
        try:
            async for _update in bridge.updates():
                self._emit(bridge)
        finally:
            await bridge.stop()

        logger.info(f"Event stream ended: {session.termination_reason}")
        return 1 if session.failed else 0

    @staticmethod
    def _json_output(args) -> bool:
        return args.command == "watch" or getattr(args, "json", False)

    @staticmethod
    def _emit(bridge: WorkspaceBridge) -> None:
        print(json.dumps(state_to_dict(bridge), separators=(",", ":")), flush=True)

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="niri-workspaces",
            description="Query and control niri workspaces",
        )
        parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
        parser.add_argument("--socket", help="niri IPC socket path (default: $NIRI_SOCKET)")
        parser.add_argument("--log-level", help="Log level (default: $LOG_LEVEL or INFO)")
        parser.add_argument(
            "--journal",
            action="store_true",
            help="Log to the systemd journal (needs systemd-python; default: stderr)",
        )

        subparsers = parser.add_subparsers(dest="command", help="Command to run")

        list_parser = subparsers.add_parser("list", help="List workspaces")
        list_parser.add_argument("--json", action="store_true", help="Output as JSON")

        focus_parser = subparsers.add_parser("focus", help="Focus a workspace by id")
        focus_parser.add_argument("id", type=int, help="Workspace id")

        subparsers.add_parser("up", help="Focus the workspace above")
        subparsers.add_parser("down", help="Focus the workspace below")

        watch_parser = subparsers.add_parser("watch", help="Stream workspace state as JSON lines")
        watch_parser.add_argument(
            "--no-initial",
            dest="initial",
            action="store_false",
            help="Skip the startup workspace query",
        )

        return parser

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Parse arguments and run the chosen command."""
        parser = self.build_parser()
        args = parser.parse_args(argv)

        if not args.command:
            parser.print_help()
            return 1

        try:
            if self.settings is None:
                self.settings = BridgeSettings.from_env()
            if args.log_level:
                self.settings = BridgeSettings.model_validate(
                    {**self.settings.model_dump(), "log_level": args.log_level}
                )
        except (ConfigError, ValidationError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

        setup_logging(self.settings.log_level, use_journal=args.journal)

        cmd_map = {
            "list": self.cmd_list,
            "focus": self.cmd_focus,
            "up": self.cmd_up,
            "down": self.cmd_down,
            "watch": self.cmd_watch,
        }
        handler = cmd_map[args.command]

        try:
            return asyncio.run(handler(args))
        except ConfigError as e:
            if self._json_output(args):
                # stdout carries JSON for list --json and watch
                print(json.dumps({"error": e.to_dict()}), flush=True)
            print(f"Error: {e.message}", file=sys.stderr)
            if e.suggestion:
                print(f"  → {e.suggestion}", file=sys.stderr)
            return 2
        except KeyboardInterrupt:
            return 130


def main():
    """Main entry point."""
    cli = NiriWorkspacesCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
