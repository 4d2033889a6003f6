"""Tests for workspace bookkeeping — resolve, clone, fetch, status."""

import pytest

from tend.config import Workspace
from tend.sync import RepoStatus, check_status, fetch_repos, resolve_repos, sync_repos


class TestResolveRepos:
    def test_discover_plus_extras_minus_excludes(self):
        ws = Workspace(
            name="acme", base_dir="/x", discover=True,
            exclude=[".github", "legacy"], extra_repos=["side-project", "lib"],
        )
        calls = []

        def fake_discover(org, token=None):
            calls.append((org, token))
            return ["lib", "app", ".github", "legacy"]

        repos = resolve_repos(ws, token="t", discover=fake_discover)
        assert repos == ["app", "lib", "side-project"]
        assert calls == [("acme", "t")]

    def test_no_discover_uses_extras_only(self):
        ws = Workspace(name="me", base_dir="/x", extra_repos=["b", "a"])

        def fail_discover(org, token=None):
            raise AssertionError("should not discover")

        assert resolve_repos(ws, discover=fail_discover) == ["a", "b"]


@pytest.fixture
def local_workspace(tmp_path, make_repo, monkeypatch):
    """A workspace whose clone URLs point at local bare remotes."""
    upstream = tmp_path / "upstream"
    for name in ["lib", "app"]:
        make_repo(upstream, name)
    monkeypatch.setattr(
        Workspace, "clone_url",
        lambda self, name: str(tmp_path / "remotes" / f"{name}.git"),
    )
    return Workspace(name="acme", base_dir=str(tmp_path / "ws"))


class TestSyncRepos:
    def test_clones_missing(self, local_workspace):
        cloned, present = sync_repos(local_workspace, ["app", "lib"])
        assert (cloned, present) == (2, 0)
        base = local_workspace.resolved_base_dir()
        assert (base / "app" / "flake.lock").exists()

        cloned, present = sync_repos(local_workspace, ["app", "lib"])
        assert (cloned, present) == (0, 2)

    def test_failed_clone_counts_as_neither(self, local_workspace):
        cloned, present = sync_repos(local_workspace, ["lib", "does-not-exist"])
        assert (cloned, present) == (1, 0)


class TestFetchRepos:
    def test_fetch_skips_missing(self, local_workspace):
        sync_repos(local_workspace, ["lib"])
        fetched, skipped = fetch_repos(local_workspace, ["lib", "app"])
        assert (fetched, skipped) == (1, 1)


class TestCheckStatus:
    def test_statuses(self, local_workspace):
        sync_repos(local_workspace, ["lib", "app"])
        base = local_workspace.resolved_base_dir()
        (base / "app" / "wip.txt").write_text("x\n")
        (base / "stray").mkdir()
        (base / ".hidden").mkdir()

        entries = check_status(local_workspace, ["app", "lib", "gone"])
        assert [(e.name, e.status) for e in entries] == [
            ("app", RepoStatus.DIRTY),
            ("lib", RepoStatus.CLEAN),
            ("gone", RepoStatus.MISSING),
            ("stray", RepoStatus.UNKNOWN),
        ]
