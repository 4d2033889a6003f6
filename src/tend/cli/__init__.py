"""Command-line interface for tend.

Usage:
    tend sync [--config P] [--workspace W] [--quiet]
    tend status [--config P] [--workspace W]
    tend list [--config P] [--workspace W]
    tend discover <org> [--provider github]
    tend init [--config P]
    tend flake-update --changed <repo> [--config P] [--workspace W] [--dry-run] [--quiet]
    tend flake check [--config P] [--workspace W]
    tend daemon [--config P] [--workspace W] [--interval S] [--fetch] [--quiet]
"""

import argparse
import logging
import sys

from tend import __version__
from tend.cli.flake import cmd_flake_check, cmd_flake_update
from tend.cli.workspace import (
    cmd_daemon,
    cmd_discover,
    cmd_init,
    cmd_list,
    cmd_status,
    cmd_sync,
)
from tend.display import print_error
from tend.errors import TendError


def _add_config_args(parser: argparse.ArgumentParser, workspace_help: str) -> None:
    parser.add_argument(
        "--config", default=None,
        help="Path to config file",
    )
    parser.add_argument("--workspace", default=None, help=workspace_help)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tend",
        description="Workspace repository manager",
    )
    parser.add_argument("--version", action="version", version=f"tend {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log commands and step outcomes",
    )
    sub = parser.add_subparsers(dest="command")

    sync = sub.add_parser("sync", help="Clone missing repos into the workspace")
    _add_config_args(sync, "Only sync a specific workspace by name")
    sync.add_argument(
        "--quiet", action="store_true",
        help="Suppress per-repo output, only show summary",
    )

    status = sub.add_parser(
        "status", help="Show repo status (clean/dirty/missing/unknown)",
    )
    _add_config_args(status, "Only show status for a specific workspace")

    ls = sub.add_parser("list", help="List configured repos")
    _add_config_args(ls, "Only list repos for a specific workspace")

    disc = sub.add_parser("discover", help="Discover repos from a GitHub org")
    disc.add_argument("org", help="GitHub org or user name")
    disc.add_argument(
        "--provider", default="github",
        help="Provider (only github supported)",
    )

    init = sub.add_parser("init", help="Generate a starter config file")
    init.add_argument("--config", default=None, help="Where to write the config")

    fu = sub.add_parser(
        "flake-update",
        help="Propagate nix flake update through the dependency chain",
    )
    fu.add_argument(
        "--changed", required=True,
        help="Repo that was just pushed (trigger)",
    )
    _add_config_args(fu, "Only process a specific workspace")
    fu.add_argument(
        "--dry-run", action="store_true",
        help="Show the chain without executing",
    )
    fu.add_argument("--quiet", action="store_true", help="Suppress per-step output")

    flake = sub.add_parser("flake", help="Flake dependency operations")
    flake_sub = flake.add_subparsers(dest="subcommand")
    check = flake_sub.add_parser("check", help="Validate flake_deps for cycles")
    _add_config_args(check, "Only check a specific workspace")

    daemon = sub.add_parser(
        "daemon", help="Sync (and optionally fetch) repos on an interval",
    )
    _add_config_args(daemon, "Only process a specific workspace")
    daemon.add_argument(
        "--interval", type=int, default=300,
        help="Seconds between cycles (default 300)",
    )
    daemon.add_argument(
        "--fetch", action="store_true",
        help="Also run git fetch in every cloned repo",
    )
    daemon.add_argument("--quiet", action="store_true", help="Only print changes")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    dispatch = {
        ("sync", ""): cmd_sync,
        ("status", ""): cmd_status,
        ("list", ""): cmd_list,
        ("discover", ""): cmd_discover,
        ("init", ""): cmd_init,
        ("flake-update", ""): cmd_flake_update,
        ("flake", "check"): cmd_flake_check,
        ("daemon", ""): cmd_daemon,
    }

    subcommand: str | None = getattr(args, "subcommand", None)
    handler = dispatch.get((args.command, subcommand or ""))
    if handler is None:
        parser.parse_args([args.command, "--help"])
        return 0

    try:
        return handler(args)
    except FileNotFoundError as e:
        print_error(f"{e.strerror}: {e.filename}" if e.filename else str(e))
        return 1
    except TendError as e:
        print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
