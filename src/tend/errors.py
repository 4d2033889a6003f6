"""Exception hierarchy for tend."""

from __future__ import annotations


class TendError(Exception):
    """Base exception for tend errors."""


class ConfigError(TendError):
    """Raised when a config file cannot be parsed into workspaces."""


class ProviderError(TendError):
    """Raised when the hosting API returns a failure or cannot be reached.

    ``status_code`` is 0 when no response was received.
    """

    def __init__(self, status_code: int, body: str, url: str = ""):
        self.status_code = status_code
        self.body = body
        self.url = url
        if status_code:
            super().__init__(f"GitHub API returned {status_code}: {body}")
        else:
            super().__init__(f"GitHub API request failed: {body}")


# ── Planning ─────────────────────────────────────────────────────


class PlanError(TendError):
    """Base exception for update-chain planning errors."""


class CycleError(PlanError):
    """Raised when the affected repos do not form a DAG."""

    def __init__(self, nodes: list[str]):
        self.nodes = nodes
        super().__init__(f"cycle detected in flake_deps among: {', '.join(nodes)}")


# ── Execution ────────────────────────────────────────────────────


class ExecError(TendError):
    """Base exception for a failed update step.

    Every subclass carries the repo, the operation that failed and the
    verbatim diagnostic text of the underlying command.
    """

    operation = "execute"

    def __init__(self, repo: str, detail: str = ""):
        self.repo = repo
        self.detail = detail.strip()
        message = f"{self.operation} failed in {repo}"
        if self.detail:
            message += f": {self.detail}"
        super().__init__(message)


class MissingRepoError(ExecError):
    """Raised when a planned repo has no working tree under the workspace."""

    operation = "locate repo"

    def __init__(self, repo: str, path: str):
        self.path = path
        super().__init__(repo, f"repo directory does not exist: {path}")


class DirtyTreeError(ExecError):
    """Raised when a repo has uncommitted changes before its update."""

    operation = "clean check"

    def __init__(self, repo: str, detail: str = ""):
        super().__init__(repo, detail or "working tree has uncommitted changes")


class UpdateFailedError(ExecError):
    operation = "nix flake update"


class StageFailedError(ExecError):
    operation = "git add"


class CommitFailedError(ExecError):
    operation = "git commit"


class PushFailedError(ExecError):
    operation = "git push"
