"""Execute a planned update chain against the repos in a workspace.

For each step: verify the working tree is clean, run ``nix flake update``
scoped to the step's inputs, stage the lockfile, and commit + push when it
changed. The first failure aborts the rest of the chain.
"""

from __future__ import annotations

import enum
import logging
import signal
import subprocess
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Sequence

from tend.errors import (
    CommitFailedError,
    DirtyTreeError,
    ExecError,
    MissingRepoError,
    PushFailedError,
    StageFailedError,
    UpdateFailedError,
)
from tend.flake.chain import UpdateStep

logger = logging.getLogger(__name__)

DEFAULT_LOCKFILE = "flake.lock"
DEFAULT_UPDATE_COMMAND = ("nix", "flake", "update")

Runner = Callable[[list[str], Path], subprocess.CompletedProcess]


class StepOutcome(str, enum.Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepEvent:
    """Outcome of one step, delivered to the caller as execution proceeds."""

    index: int
    total: int
    step: UpdateStep
    outcome: StepOutcome
    inputs: tuple[str, ...] = ()
    detail: str = ""


def run_command(args: list[str], cwd: Path) -> subprocess.CompletedProcess:
    """Run a command in ``cwd`` and capture its output."""
    logger.debug("running %s in %s", " ".join(args), cwd)
    return subprocess.run(args, cwd=cwd, capture_output=True, text=True)


def commit_message(inputs: Sequence[str]) -> str:
    return f"chore: update {' '.join(inputs)}"


@contextmanager
def _interrupt_deferred() -> Iterator[None]:
    """Hold SIGINT until the block finishes, then re-raise it.

    Only possible from the main thread; elsewhere the block runs as-is.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    received: list[int] = []

    def _record(signum, frame):
        received.append(signum)

    previous = signal.signal(signal.SIGINT, _record)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)
    if received:
        raise KeyboardInterrupt


class ChainExecutor:
    """Walks an update chain step by step, failing fast."""

    def __init__(
        self,
        base_dir: Path | str,
        runner: Runner | None = None,
        on_event: Callable[[StepEvent], None] | None = None,
        lockfile: str = DEFAULT_LOCKFILE,
        update_command: Sequence[str] = DEFAULT_UPDATE_COMMAND,
    ):
        self.base_dir = Path(base_dir)
        self.runner = runner or run_command
        self.on_event = on_event
        self.lockfile = lockfile
        self.update_command = list(update_command)

    def execute(self, chain: Sequence[UpdateStep], dry_run: bool = False) -> list[StepEvent]:
        """Run every step in order and return the completed step events.

        Raises:
            ExecError: On the first failing step. Later steps are not attempted.
        """
        total = len(chain)
        results: list[StepEvent] = []
        # Repos whose lockfile re-resolved to the same state; nothing landed upstream.
        stale: set[str] = set()

        for i, step in enumerate(chain):
            index = i + 1
            inputs = tuple(name for name in step.inputs if name not in stale)
            try:
                outcome = self._run_step(step, inputs, dry_run)
            except ExecError as exc:
                logger.info("step %d/%d %s failed: %s", index, total, step.repo, exc)
                self._emit(StepEvent(index, total, step, StepOutcome.FAILED, inputs, str(exc)))
                raise

            if outcome is StepOutcome.UNCHANGED:
                stale.add(step.repo)
            logger.info("step %d/%d %s %s", index, total, step.repo, outcome.value)
            event = StepEvent(index, total, step, outcome, inputs)
            results.append(event)
            self._emit(event)

        return results

    def _emit(self, event: StepEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)

    def _run(self, args: list[str], repo_path: Path, repo: str, error: type[ExecError]):
        try:
            return self.runner(args, repo_path)
        except OSError as exc:
            raise error(repo, str(exc)) from exc

    def _run_step(self, step: UpdateStep, inputs: tuple[str, ...], dry_run: bool) -> StepOutcome:
        repo_path = self.base_dir / step.repo
        if not repo_path.exists():
            raise MissingRepoError(step.repo, str(repo_path))

        if dry_run:
            return StepOutcome.SKIPPED

        self.ensure_clean(repo_path, step.repo)

        if not inputs:
            return StepOutcome.UNCHANGED

        result = self._run(self.update_command + list(inputs), repo_path, step.repo, UpdateFailedError)
        if result.returncode != 0:
            raise UpdateFailedError(step.repo, result.stderr)

        result = self._run(["git", "add", self.lockfile], repo_path, step.repo, StageFailedError)
        if result.returncode != 0:
            raise StageFailedError(step.repo, result.stderr)

        diff = self._run(["git", "diff", "--cached", "--quiet"], repo_path, step.repo, StageFailedError)
        if diff.returncode == 0:
            return StepOutcome.UNCHANGED
        if diff.returncode != 1:
            raise StageFailedError(step.repo, diff.stderr)

        # A commit that lands without its push leaves the repo ahead of upstream
        with _interrupt_deferred():
            result = self._run(
                ["git", "commit", "-m", commit_message(inputs)],
                repo_path, step.repo, CommitFailedError,
            )
            if result.returncode != 0:
                raise CommitFailedError(step.repo, result.stderr or result.stdout)

            result = self._run(["git", "push"], repo_path, step.repo, PushFailedError)
            if result.returncode != 0:
                raise PushFailedError(step.repo, result.stderr)

        return StepOutcome.APPLIED

    def ensure_clean(self, repo_path: Path, repo: str) -> None:
        result = self._run(["git", "status", "--porcelain"], repo_path, repo, DirtyTreeError)
        if result.returncode != 0:
            raise DirtyTreeError(repo, result.stderr)
        if result.stdout.strip():
            raise DirtyTreeError(repo)


def execute_update_chain(
    base_dir: Path | str,
    chain: Sequence[UpdateStep],
    dry_run: bool = False,
    runner: Runner | None = None,
    on_event: Callable[[StepEvent], None] | None = None,
    lockfile: str = DEFAULT_LOCKFILE,
    update_command: Sequence[str] = DEFAULT_UPDATE_COMMAND,
) -> list[StepEvent]:
    """Execute the update chain: for each step, run nix flake update, commit, push.

    Args:
        base_dir: Workspace root; each step's repo lives at ``base_dir / repo``.
        chain: Steps from ``compute_update_chain``.
        dry_run: Report every step as skipped without running anything.
        runner: Command runner, ``(args, cwd) -> CompletedProcess``.
        on_event: Called once per step with its outcome, including ``failed``.
        lockfile: Lockfile staged after the update.
        update_command: Command prefix; the step's inputs are appended.

    Returns:
        One StepEvent per step, in chain order.

    Raises:
        ExecError: The first step failure; no later step is attempted.
    """
    executor = ChainExecutor(
        base_dir,
        runner=runner,
        on_event=on_event,
        lockfile=lockfile,
        update_command=update_command,
    )
    return executor.execute(chain, dry_run=dry_run)
