"""Flake dependency graph — reverse index, reachability, structural checks."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass, field


@dataclass
class GraphReport:
    """Result of flake_deps validation."""

    total_edges: int = 0
    external_inputs: list[tuple[str, str]] = field(default_factory=list)
    self_deps: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return len(self.self_deps) == 0 and len(self.cycles) == 0

    @property
    def violations(self) -> list[str]:
        v = []
        for s in self.self_deps:
            v.append(f"Self-dep: {s}")
        for c in self.cycles:
            v.append(f"Cycle: {' -> '.join(c)}")
        return v


class DependencyGraph:
    """Repo -> flake input names, plus the derived reverse index.

    Input names are opaque: an input may name another repo in the map
    (``lib``) or something outside the workspace (``nixpkgs``).
    """

    def __init__(self, deps: dict[str, list[str]]):
        self.deps = deps
        self._reverse: dict[str, list[str]] | None = None

    def __contains__(self, repo: str) -> bool:
        return repo in self.deps

    def dependencies(self, repo: str) -> list[str]:
        return self.deps.get(repo, [])

    def reverse_index(self) -> dict[str, list[str]]:
        """Map each input name to the repos that declare it."""
        if self._reverse is None:
            reverse: dict[str, list[str]] = defaultdict(list)
            for repo, inputs in self.deps.items():
                for name in inputs:
                    reverse[name].append(repo)
            self._reverse = dict(reverse)
        return self._reverse

    def dependents(self, name: str) -> list[str]:
        return self.reverse_index().get(name, [])

    def affected_by(self, changed: str) -> set[str]:
        """All repos that transitively depend on ``changed``.

        ``changed`` is only included when it depends on itself through a
        cycle.
        """
        affected: set[str] = set()
        queue = deque([changed])
        while queue:
            current = queue.popleft()
            for dependent in self.dependents(current):
                if dependent not in affected:
                    affected.add(dependent)
                    queue.append(dependent)
        return affected

    def validate(self) -> GraphReport:
        """Check for self-dependencies and cycles among workspace repos.

        Inputs that are not repos in the map are reported as external,
        which is normal (nixpkgs, flake-utils, ...).
        """
        report = GraphReport()

        for repo, inputs in self.deps.items():
            for name in inputs:
                report.total_edges += 1
                if name == repo:
                    report.self_deps.append(repo)
                elif name not in self.deps:
                    report.external_inputs.append((repo, name))

        WHITE, GRAY, BLACK = 0, 1, 2
        color: dict[str, int] = defaultdict(lambda: WHITE)

        def dfs(node: str, path: list[str]) -> None:
            color[node] = GRAY
            path.append(node)
            for neighbor in self.deps.get(node, []):
                if neighbor not in self.deps or neighbor == node:
                    continue
                if color[neighbor] == GRAY:
                    cycle_start = path.index(neighbor)
                    report.cycles.append(path[cycle_start:] + [neighbor])
                elif color[neighbor] == WHITE:
                    dfs(neighbor, path)
            path.pop()
            color[node] = BLACK

        for node in sorted(self.deps):
            if color[node] == WHITE:
                dfs(node, [])

        return report
