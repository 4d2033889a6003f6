"""Update chain planning for flake propagation."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass

from tend.errors import CycleError
from tend.flake.graph import DependencyGraph


@dataclass(frozen=True)
class UpdateStep:
    """A single step in the update chain."""

    repo: str
    inputs: tuple[str, ...]


def compute_update_chain(
    changed: str,
    flake_deps: dict[str, list[str]],
) -> list[UpdateStep]:
    """Compute the ordered chain of repos to update after ``changed`` was pushed.

    1. Build the reverse map (input -> repos that depend on it)
    2. BFS from ``changed`` to find all transitively affected repos
    3. Topologically sort (Kahn's) the affected repos
    4. For each repo, select the inputs that were updated earlier in the chain

    A repo whose selected inputs come out empty gets no step and does not
    count as updated for the repos after it.

    Args:
        changed: Repo (flake input name) that was just pushed.
        flake_deps: Repo -> ordered list of flake inputs it depends on.

    Returns:
        Ordered list of UpdateStep. Empty when nothing depends on ``changed``.

    Raises:
        CycleError: If the affected repos contain a dependency cycle.
    """
    graph = DependencyGraph(flake_deps)
    affected = graph.affected_by(changed)
    if not affected:
        return []

    # Only edges from affected repos or from the changed repo count
    in_degree: dict[str, int] = {}
    forward: dict[str, list[str]] = defaultdict(list)
    for repo in sorted(affected):
        in_degree.setdefault(repo, 0)
        for dep in graph.dependencies(repo):
            if dep == changed or dep in affected:
                forward[dep].append(repo)
                in_degree[repo] += 1

    # The changed repo is already done unless it sits on a cycle of its own
    if changed not in affected:
        for dependent in forward.get(changed, []):
            in_degree[dependent] -= 1

    queue = deque(repo for repo, deg in in_degree.items() if deg == 0)
    ordered: list[str] = []
    while queue:
        repo = queue.popleft()
        ordered.append(repo)
        for dependent in forward.get(repo, []):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(ordered) != len(affected):
        raise CycleError(sorted(affected.difference(ordered)))

    updated_so_far = {changed}
    steps = []
    for repo in ordered:
        inputs = tuple(dict.fromkeys(d for d in graph.dependencies(repo) if d in updated_so_far))
        if inputs:
            steps.append(UpdateStep(repo=repo, inputs=inputs))
            updated_so_far.add(repo)

    return steps
