"""Workspace CLI commands — sync, status, list, discover, init, daemon."""

import argparse
from pathlib import Path


def cmd_sync(args: argparse.Namespace) -> int:
    from tend import display
    from tend.cli.common import github_token, load_workspaces
    from tend.sync import resolve_repos, sync_repos

    token = github_token()
    for ws in load_workspaces(args):
        repos = resolve_repos(ws, token=token)
        cloned, present = sync_repos(ws, repos)
        if not args.quiet or cloned > 0:
            display.print_sync_summary(ws.name, cloned, present)
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    from tend import display
    from tend.cli.common import github_token, load_workspaces
    from tend.sync import check_status, resolve_repos

    token = github_token()
    for ws in load_workspaces(args):
        repos = resolve_repos(ws, token=token)
        display.print_status(ws.name, check_status(ws, repos))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    from tend import display
    from tend.cli.common import github_token, load_workspaces
    from tend.sync import resolve_repos

    token = github_token()
    for ws in load_workspaces(args):
        display.print_repo_list(ws.name, resolve_repos(ws, token=token))
    return 0


def cmd_discover(args: argparse.Namespace) -> int:
    from tend import display
    from tend.cli.common import github_token
    from tend.provider import discover_github_repos

    if args.provider != "github":
        print(f"  ERROR: unsupported provider: {args.provider}")
        return 1

    repos = discover_github_repos(args.org, token=github_token())
    display.print_discover_results(args.org, repos)
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    from tend.config import generate_starter_config
    from tend.paths import default_config_path

    path = Path(args.config) if args.config else default_config_path()
    if path.exists():
        print(f"  ERROR: config already exists at {path}")
        return 1

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_starter_config())
    print(f"config written to {path}")
    return 0


def cmd_daemon(args: argparse.Namespace) -> int:
    from tend.cli.common import github_token
    from tend.daemon import DaemonOpts, run

    opts = DaemonOpts(
        config=Path(args.config) if args.config else None,
        workspace=args.workspace,
        interval=args.interval,
        fetch=args.fetch,
        quiet=args.quiet,
        token=github_token(),
    )
    run(opts)
    return 0
