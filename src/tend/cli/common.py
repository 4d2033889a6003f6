"""Helpers shared by CLI command handlers."""

from __future__ import annotations

import argparse
import os

from tend.config import Workspace, filter_workspaces, load_config


def github_token() -> str | None:
    """Return the API token from TEND_GITHUB_TOKEN or GITHUB_TOKEN."""
    return os.environ.get("TEND_GITHUB_TOKEN") or os.environ.get("GITHUB_TOKEN") or None


def load_workspaces(args: argparse.Namespace) -> list[Workspace]:
    cfg = load_config(getattr(args, "config", None))
    return filter_workspaces(cfg.workspaces, getattr(args, "workspace", None))
