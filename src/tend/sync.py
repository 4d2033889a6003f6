"""Workspace bookkeeping — resolve, clone, fetch and status of repos."""

from __future__ import annotations

import enum
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from tend.config import Workspace
from tend.provider import discover_github_repos

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 300


class RepoStatus(str, enum.Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    MISSING = "missing"
    UNKNOWN = "unknown"


@dataclass
class RepoEntry:
    name: str
    status: RepoStatus


def _run_git(args: list[str], cwd: Path | None = None, timeout: int | None = None) -> subprocess.CompletedProcess:
    """Run a git command and return the result."""
    return subprocess.run(
        ["git"] + args,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def resolve_repos(
    workspace: Workspace,
    token: str | None = None,
    discover: Callable[..., list[str]] = discover_github_repos,
) -> list[str]:
    """Resolve the full list of repos for a workspace (discover + extras - excludes)."""
    repos: list[str] = []
    if workspace.discover:
        repos.extend(discover(workspace.owner, token=token))

    for extra in workspace.extra_repos:
        if extra not in repos:
            repos.append(extra)

    excluded = set(workspace.exclude)
    return sorted({r for r in repos if r not in excluded})


def sync_repos(workspace: Workspace, repos: list[str]) -> tuple[int, int]:
    """Clone missing repos.

    Returns:
        (cloned, already_present) counts. Failed clones count as neither.
    """
    base_dir = workspace.resolved_base_dir()
    base_dir.mkdir(parents=True, exist_ok=True)

    cloned = 0
    present = 0
    for repo_name in repos:
        repo_path = base_dir / repo_name
        if repo_path.exists():
            present += 1
            continue

        url = workspace.clone_url(repo_name)
        logger.info("cloning %s from %s", repo_name, url)
        result = _run_git(["clone", url, str(repo_path)], timeout=GIT_TIMEOUT)
        if result.returncode != 0:
            logger.warning("failed to clone %s: %s", repo_name, result.stderr.strip())
            continue
        cloned += 1

    return cloned, present


def fetch_repos(workspace: Workspace, repos: list[str]) -> tuple[int, int]:
    """Fetch all remotes for every cloned repo.

    Returns:
        (fetched, skipped) counts. Missing repos and failed fetches are skipped.
    """
    base_dir = workspace.resolved_base_dir()
    fetched = 0
    skipped = 0
    for repo_name in repos:
        repo_path = base_dir / repo_name
        if not (repo_path / ".git").exists():
            skipped += 1
            continue

        result = _run_git(["fetch", "--all", "--prune"], cwd=repo_path, timeout=GIT_TIMEOUT)
        if result.returncode != 0:
            logger.warning("failed to fetch %s: %s", repo_name, result.stderr.strip())
            skipped += 1
            continue
        fetched += 1

    return fetched, skipped


def is_dirty(repo_path: Path) -> bool:
    result = _run_git(["status", "--porcelain"], cwd=repo_path)
    return bool(result.stdout.strip())


def check_status(workspace: Workspace, repos: list[str]) -> list[RepoEntry]:
    """Check status of all repos in a workspace.

    Expected repos come first in the given order, then directories on disk
    that are not expected (hidden directories ignored), sorted.
    """
    base_dir = workspace.resolved_base_dir()
    entries = []

    for repo_name in repos:
        repo_path = base_dir / repo_name
        if not repo_path.exists():
            status = RepoStatus.MISSING
        elif is_dirty(repo_path):
            status = RepoStatus.DIRTY
        else:
            status = RepoStatus.CLEAN
        entries.append(RepoEntry(repo_name, status))

    if base_dir.is_dir():
        expected = set(repos)
        for child in sorted(base_dir.iterdir()):
            if not child.is_dir() or child.name.startswith("."):
                continue
            if child.name in expected:
                continue
            entries.append(RepoEntry(child.name, RepoStatus.UNKNOWN))

    return entries
