"""Per-workspace exclusive lock.

Two update chains must never mutate the same workspace at once, whether
they come from the CLI, the daemon, or both.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

logger = logging.getLogger(__name__)

LOCK_NAME = ".tend.lock"


def _lock_exclusive(fd: IO[str]) -> None:
    """Acquire an exclusive file lock, blocking if another process holds it."""
    if sys.platform == "win32":
        import msvcrt

        msvcrt.locking(fd.fileno(), msvcrt.LK_LOCK, 1)
    else:
        import fcntl

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            logger.info("waiting for another tend run on %s", fd.name)
            fcntl.flock(fd, fcntl.LOCK_EX)


def _unlock(fd: IO[str]) -> None:
    if sys.platform == "win32":
        import msvcrt

        msvcrt.locking(fd.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl

        fcntl.flock(fd, fcntl.LOCK_UN)


@contextmanager
def workspace_lock(base_dir: Path | str) -> Iterator[Path]:
    """Hold ``<base_dir>/.tend.lock`` for the duration of the block."""
    lock_path = Path(base_dir) / LOCK_NAME
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "a") as fd:
        _lock_exclusive(fd)
        try:
            yield lock_path
        finally:
            _unlock(fd)
