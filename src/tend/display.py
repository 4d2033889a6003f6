"""Terminal output for tend commands."""

from __future__ import annotations

import sys
from typing import Sequence

from tend.flake.chain import UpdateStep
from tend.flake.executor import StepEvent, StepOutcome
from tend.sync import RepoEntry, RepoStatus

STATUS_ICONS = {
    RepoStatus.CLEAN: "ok",
    RepoStatus.DIRTY: "!!",
    RepoStatus.MISSING: "--",
    RepoStatus.UNKNOWN: "??",
}


def print_status(workspace_name: str, entries: Sequence[RepoEntry]) -> None:
    counts = {status: 0 for status in RepoStatus}
    for entry in entries:
        counts[entry.status] += 1

    print(f"workspace: {workspace_name}")
    print()
    for entry in entries:
        icon = STATUS_ICONS[entry.status]
        print(f"  [{icon}] {entry.name:<40} {entry.status.value}")
    print()
    print(
        f"  {counts[RepoStatus.CLEAN]} clean, {counts[RepoStatus.DIRTY]} dirty, "
        f"{counts[RepoStatus.MISSING]} missing, {counts[RepoStatus.UNKNOWN]} unknown"
    )


def print_sync_summary(workspace_name: str, cloned: int, present: int) -> None:
    if cloned == 0:
        print(f"{workspace_name}: all {present} repos present")
    else:
        print(f"{workspace_name}: cloned {cloned} new, {present} already present")


def print_fetch_summary(workspace_name: str, fetched: int, skipped: int) -> None:
    print(f"{workspace_name}: fetched {fetched} repos, {skipped} skipped")


def print_repo_list(workspace_name: str, repos: Sequence[str]) -> None:
    print(f"{workspace_name} ({len(repos)} repos):")
    for repo in repos:
        print(f"  {repo}")


def print_discover_results(org: str, repos: Sequence[str]) -> None:
    print(f"discovered {len(repos)} repos in {org}:")
    for repo in repos:
        print(f"  {repo}")


# ── Flake propagation ────────────────────────────────────────────


def print_flake_chain_header(workspace_name: str, changed: str, chain: Sequence[UpdateStep]) -> None:
    print(f"{workspace_name}: {changed} changed, {len(chain)} repo(s) to update")
    for i, step in enumerate(chain, 1):
        print(f"  {i}. {step.repo} <- {', '.join(step.inputs)}")
    print()


def print_flake_event(event: StepEvent) -> None:
    """Render one step outcome as it happens."""
    prefix = f"  [{event.index}/{event.total}] {event.step.repo}"
    if event.outcome is StepOutcome.APPLIED:
        print(f"{prefix}: updated {' '.join(event.inputs)}, committed and pushed")
    elif event.outcome is StepOutcome.UNCHANGED:
        print(f"{prefix}: no changes to flake.lock")
    elif event.outcome is StepOutcome.SKIPPED:
        print(f"{prefix}: (dry run) would update {' '.join(event.inputs)}")
    else:
        print(f"{prefix}: FAILED", file=sys.stderr)


def print_flake_chain_complete(total: int, dry_run: bool = False) -> None:
    prefix = "[DRY RUN] " if dry_run else ""
    print(f"\n  {prefix}{total} step(s) complete")


def print_graph_report(workspace_name: str, report) -> None:
    print(f"{workspace_name}: {report.total_edges} flake input edge(s)")
    if report.external_inputs:
        names = sorted({name for _, name in report.external_inputs})
        print(f"  external inputs: {', '.join(names)}")
    if report.passed:
        print("  PASS")
        return
    print(f"  FAIL ({len(report.violations)} violation(s))")
    for v in report.violations:
        print(f"    {v}")


# ── Daemon ───────────────────────────────────────────────────────


def print_daemon_cycle_start(cycle: int) -> None:
    print(f"daemon: cycle {cycle} starting")


def print_daemon_cycle_done(cycle: int, workspace_count: int) -> None:
    print(f"daemon: cycle {cycle} done ({workspace_count} workspace(s))")


def print_daemon_sleeping(interval: int) -> None:
    print(f"daemon: sleeping {interval}s")


def print_error(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)
