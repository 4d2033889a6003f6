"""Flake propagation CLI commands."""

import argparse
from contextlib import nullcontext


def cmd_flake_update(args: argparse.Namespace) -> int:
    from tend import display
    from tend.cli.common import load_workspaces
    from tend.flake import compute_update_chain, execute_update_chain
    from tend.locking import workspace_lock

    for ws in load_workspaces(args):
        if not ws.flake_deps:
            continue

        chain = compute_update_chain(args.changed, ws.flake_deps)
        if not chain:
            if not args.quiet:
                print(f"{ws.name}: {args.changed} has no dependents in flake_deps")
            continue

        if not args.quiet:
            display.print_flake_chain_header(ws.name, args.changed, chain)

        base_dir = ws.resolved_base_dir()
        lock = nullcontext() if args.dry_run else workspace_lock(base_dir)
        with lock:
            execute_update_chain(
                base_dir,
                chain,
                dry_run=args.dry_run,
                on_event=None if args.quiet else display.print_flake_event,
            )

        if not args.quiet:
            display.print_flake_chain_complete(len(chain), dry_run=args.dry_run)
    return 0


def cmd_flake_check(args: argparse.Namespace) -> int:
    from tend import display
    from tend.cli.common import load_workspaces
    from tend.flake import DependencyGraph

    failed = False
    for ws in load_workspaces(args):
        if not ws.flake_deps:
            continue
        report = DependencyGraph(ws.flake_deps).validate()
        display.print_graph_report(ws.name, report)
        failed = failed or not report.passed
    return 1 if failed else 0
