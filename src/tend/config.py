"""Load and validate tend's config.yaml."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path

import yaml

from tend.errors import ConfigError
from tend.paths import default_config_path

CLONE_METHODS = ("ssh", "https")


@dataclass
class Workspace:
    """One directory of repos belonging to a single hosting org."""

    name: str
    base_dir: str
    provider: str = "github"
    clone_method: str = "ssh"
    discover: bool = False
    org: str | None = None
    exclude: list[str] = field(default_factory=list)
    extra_repos: list[str] = field(default_factory=list)
    flake_deps: dict[str, list[str]] = field(default_factory=dict)

    @property
    def owner(self) -> str:
        return self.org or self.name

    def resolved_base_dir(self) -> Path:
        """Resolve base_dir with ~ expansion."""
        return Path(self.base_dir).expanduser()

    def clone_url(self, repo_name: str) -> str:
        if self.clone_method == "https":
            return f"https://github.com/{self.owner}/{repo_name}.git"
        return f"git@github.com:{self.owner}/{repo_name}.git"

    @classmethod
    def from_dict(cls, data: dict, source: str = "config") -> Workspace:
        if not isinstance(data, dict):
            raise ConfigError(f"{source}: workspace entry is not a mapping")
        for key in ("name", "base_dir"):
            if not data.get(key):
                raise ConfigError(f"{source}: workspace is missing '{key}'")

        name = str(data["name"])
        clone_method = str(data.get("clone_method") or "ssh").lower()
        if clone_method not in CLONE_METHODS:
            raise ConfigError(
                f"{source}: workspace {name}: clone_method must be one of "
                f"{', '.join(CLONE_METHODS)}, got {clone_method!r}"
            )

        raw_deps = data.get("flake_deps") or {}
        if not isinstance(raw_deps, dict):
            raise ConfigError(f"{source}: workspace {name}: flake_deps must be a mapping")
        flake_deps: dict[str, list[str]] = {}
        for repo, inputs in raw_deps.items():
            if not isinstance(inputs, list):
                raise ConfigError(
                    f"{source}: workspace {name}: flake_deps.{repo} must be a list"
                )
            flake_deps[str(repo)] = [str(i) for i in inputs]

        return cls(
            name=name,
            base_dir=str(data["base_dir"]),
            provider=str(data.get("provider") or "github"),
            clone_method=clone_method,
            discover=bool(data.get("discover", False)),
            org=data.get("org"),
            exclude=[str(r) for r in data.get("exclude") or []],
            extra_repos=[str(r) for r in data.get("extra_repos") or []],
            flake_deps=flake_deps,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        if not self.flake_deps:
            data.pop("flake_deps")
        return data


@dataclass
class Config:
    workspaces: list[Workspace] = field(default_factory=list)


def load_config(path: Path | str | None = None) -> Config:
    """Read and parse config.yaml.

    Args:
        path: Path to the config file. Defaults to the XDG location.

    Returns:
        Parsed Config.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the YAML is malformed or not a valid config.
    """
    config_path = Path(path) if path else default_config_path()
    with open(config_path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"parsing {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} is not a YAML mapping")
    workspaces = data.get("workspaces")
    if not isinstance(workspaces, list):
        raise ConfigError(f"{config_path}: 'workspaces' must be a list")

    return Config(
        workspaces=[Workspace.from_dict(ws, source=str(config_path)) for ws in workspaces],
    )


def filter_workspaces(workspaces: list[Workspace], name: str | None = None) -> list[Workspace]:
    if name is None:
        return list(workspaces)
    return [ws for ws in workspaces if ws.name == name]


def generate_starter_config() -> str:
    """Return the YAML text of a one-workspace starter config."""
    config = {
        "workspaces": [
            Workspace(
                name="my-org",
                base_dir="~/code/github/my-org",
                discover=True,
                org="my-org",
                exclude=[".github"],
            ).to_dict(),
        ],
    }
    return yaml.safe_dump(config, sort_keys=False)
