"""Config path resolution.

Environment variables:
    TEND_CONFIG — explicit config file path
    XDG_CONFIG_HOME — config root (default: ~/.config)
"""

from __future__ import annotations

import os
from pathlib import Path


def config_home() -> Path:
    """Return the XDG config root; ~/.config even on macOS."""
    env = os.environ.get("XDG_CONFIG_HOME")
    if env:
        return Path(env)
    return Path.home() / ".config"


def default_config_path() -> Path:
    """Return the path to tend's config.yaml."""
    env = os.environ.get("TEND_CONFIG")
    if env:
        return Path(env).expanduser()
    return config_home() / "tend" / "config.yaml"
