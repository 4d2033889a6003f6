"""Tests for update chain planning."""

import pytest

from tend.errors import CycleError, PlanError
from tend.flake.chain import UpdateStep, compute_update_chain


def _position(chain):
    return {step.repo: i for i, step in enumerate(chain)}


def _assert_topological(chain, changed):
    seen = {changed}
    for step in chain:
        for name in step.inputs:
            assert name in seen, f"{step.repo} uses {name} before it was updated"
        seen.add(step.repo)


class TestComputeUpdateChain:
    def test_diamond_fanout(self):
        deps = {"A": [], "B": ["A"], "C": ["B"], "D": ["A"]}
        chain = compute_update_chain("A", deps)

        assert {s.repo for s in chain} == {"B", "C", "D"}
        pos = _position(chain)
        assert pos["B"] < pos["C"]
        steps = {s.repo: s.inputs for s in chain}
        assert steps == {"B": ("A",), "C": ("B",), "D": ("A",)}

    def test_inputs_keep_declaration_order(self):
        deps = {"A": [], "B": ["A"], "C": ["B", "A"]}
        chain = compute_update_chain("A", deps)
        assert chain == [
            UpdateStep(repo="B", inputs=("A",)),
            UpdateStep(repo="C", inputs=("B", "A")),
        ]

    def test_repeated_input_listed_once(self):
        chain = compute_update_chain("A", {"B": ["A", "nixpkgs", "A"], "C": ["B", "A", "B"]})
        assert chain == [
            UpdateStep(repo="B", inputs=("A",)),
            UpdateStep(repo="C", inputs=("B", "A")),
        ]

    def test_no_dependents(self):
        assert compute_update_chain("A", {"A": [], "B": ["nixpkgs"]}) == []

    def test_changed_not_in_map(self):
        # The changed name can be any flake input, e.g. an upstream flake
        chain = compute_update_chain("nixpkgs", {"app": ["nixpkgs", "lib"], "lib": ["nixpkgs"]})
        assert chain == [
            UpdateStep(repo="lib", inputs=("nixpkgs",)),
            UpdateStep(repo="app", inputs=("nixpkgs", "lib")),
        ]

    def test_external_inputs_do_not_stall_sort(self):
        deps = {
            "lib": ["nixpkgs", "flake-utils"],
            "svc": ["lib", "nixpkgs"],
            "web": ["svc", "crane", "lib"],
        }
        chain = compute_update_chain("lib", deps)
        assert [s.repo for s in chain] == ["svc", "web"]
        assert chain[0].inputs == ("lib",)
        assert chain[1].inputs == ("svc", "lib")

    def test_unaffected_repos_excluded(self):
        deps = {"A": [], "B": ["A"], "X": ["Y"], "Y": []}
        chain = compute_update_chain("A", deps)
        assert [s.repo for s in chain] == ["B"]

    def test_larger_dag_is_topological(self):
        deps = {
            "core": [],
            "util": ["core"],
            "db": ["core", "util"],
            "api": ["db", "util", "nixpkgs"],
            "worker": ["db"],
            "web": ["api", "worker"],
            "docs": ["web", "core"],
        }
        chain = compute_update_chain("core", deps)
        assert len(chain) == 6
        assert len({s.repo for s in chain}) == 6
        _assert_topological(chain, "core")

    def test_deterministic(self):
        deps = {"A": [], "B": ["A"], "C": ["A"], "D": ["A"], "E": ["C", "B"]}
        first = compute_update_chain("A", deps)
        for _ in range(5):
            assert compute_update_chain("A", deps) == first

    def test_independent_repos_ordered_by_name(self):
        deps = {"zeta": ["A"], "alpha": ["A"], "mid": ["A"]}
        chain = compute_update_chain("A", deps)
        assert [s.repo for s in chain] == ["alpha", "mid", "zeta"]

    def test_does_not_mutate_input(self):
        deps = {"A": [], "B": ["A"], "C": ["B", "A"]}
        snapshot = {k: list(v) for k, v in deps.items()}
        compute_update_chain("A", deps)
        assert deps == snapshot

    def test_steps_are_frozen(self):
        step = compute_update_chain("A", {"B": ["A"]})[0]
        with pytest.raises(AttributeError):
            step.repo = "other"


class TestCycles:
    def test_cycle_among_affected(self):
        deps = {"A": [], "B": ["A", "C"], "C": ["B"]}
        with pytest.raises(CycleError) as exc_info:
            compute_update_chain("A", deps)
        assert exc_info.value.nodes == ["B", "C"]
        assert "cycle detected" in str(exc_info.value)

    def test_cycle_through_changed(self):
        deps = {"A": ["B"], "B": ["A"]}
        with pytest.raises(CycleError) as exc_info:
            compute_update_chain("A", deps)
        assert exc_info.value.nodes == ["A", "B"]

    def test_cycle_is_plan_error(self):
        with pytest.raises(PlanError):
            compute_update_chain("A", {"B": ["A", "B"]})

    def test_unreachable_cycle_ignored(self):
        deps = {"A": [], "B": ["A"], "X": ["Y"], "Y": ["X"]}
        chain = compute_update_chain("A", deps)
        assert [s.repo for s in chain] == ["B"]

    def test_cycle_downstream_of_valid_steps(self):
        deps = {"A": [], "B": ["A"], "C": ["B", "D"], "D": ["C"]}
        with pytest.raises(CycleError) as exc_info:
            compute_update_chain("A", deps)
        assert exc_info.value.nodes == ["C", "D"]
