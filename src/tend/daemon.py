"""Daemon loop — sync (and optionally fetch) every workspace on an interval."""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import httpx

from tend import display
from tend.config import Workspace, filter_workspaces, load_config
from tend.errors import TendError
from tend.sync import fetch_repos, resolve_repos, sync_repos

logger = logging.getLogger(__name__)


@dataclass
class DaemonOpts:
    config: Path | None = None
    workspace: str | None = None
    interval: int = 300
    fetch: bool = False
    quiet: bool = False
    token: str | None = None


def run_workspace_cycle(ws: Workspace, opts: DaemonOpts) -> None:
    repos = resolve_repos(ws, token=opts.token)
    cloned, present = sync_repos(ws, repos)
    if not opts.quiet or cloned > 0:
        display.print_sync_summary(ws.name, cloned, present)

    if opts.fetch:
        fetched, skipped = fetch_repos(ws, repos)
        if not opts.quiet:
            display.print_fetch_summary(ws.name, fetched, skipped)


def run(
    opts: DaemonOpts,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: int | None = None,
) -> int:
    """Run sync cycles until interrupted, re-reading the config each cycle.

    A failing workspace is logged and the cycle moves on to the next one.

    Returns:
        The number of cycles started.
    """
    cycle = 0
    try:
        while max_cycles is None or cycle < max_cycles:
            cycle += 1
            try:
                cfg = load_config(opts.config)
            except (FileNotFoundError, TendError) as e:
                logger.error("daemon: failed to load config: %s", e)
                sleep(opts.interval)
                continue

            workspaces = filter_workspaces(cfg.workspaces, opts.workspace)
            if not opts.quiet:
                display.print_daemon_cycle_start(cycle)

            for ws in workspaces:
                try:
                    run_workspace_cycle(ws, opts)
                except (TendError, OSError, subprocess.SubprocessError, httpx.HTTPError) as e:
                    logger.error("daemon: workspace %s failed: %s", ws.name, e)

            if not opts.quiet:
                display.print_daemon_cycle_done(cycle, len(workspaces))
                display.print_daemon_sleeping(opts.interval)
            sleep(opts.interval)
    except KeyboardInterrupt:
        logger.info("daemon: interrupted after %d cycle(s)", cycle)

    return cycle
