"""Shared test fixtures for tend."""

import subprocess
from pathlib import Path

import pytest


def _git(args, cwd):
    return subprocess.run(["git"] + args, cwd=cwd, capture_output=True, text=True, check=True)


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolated git identity and config for commits made by the code under test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "t@t")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "t@t")
    return home


@pytest.fixture
def make_repo(tmp_path, git_env):
    """Factory: create ``<base>/<name>`` cloned from a bare remote with a committed flake.lock."""
    remotes = tmp_path / "remotes"
    remotes.mkdir(exist_ok=True)

    def _make(base: Path, name: str) -> Path:
        bare = remotes / f"{name}.git"
        _git(["init", "--bare", "-b", "main", str(bare)], cwd=tmp_path)

        repo = base / name
        repo.mkdir(parents=True)
        _git(["init", "-b", "main"], cwd=repo)
        (repo / "flake.lock").write_text('{"nodes": {}}\n')
        _git(["add", "flake.lock"], cwd=repo)
        _git(["commit", "-m", "init"], cwd=repo)
        _git(["remote", "add", "origin", str(bare)], cwd=repo)
        _git(["push", "-u", "origin", "main"], cwd=repo)
        return repo

    return _make


@pytest.fixture
def remote_subjects(tmp_path):
    """Commit subjects on a bare remote's main branch, newest first."""

    def _subjects(name: str) -> list[str]:
        bare = tmp_path / "remotes" / f"{name}.git"
        result = _git(["--git-dir", str(bare), "log", "--format=%s", "main"], cwd=tmp_path)
        return result.stdout.splitlines()

    return _subjects
