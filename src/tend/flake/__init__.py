"""Flake module — propagate lockfile updates through dependent repos."""

from tend.flake.chain import UpdateStep, compute_update_chain
from tend.flake.executor import ChainExecutor, StepEvent, StepOutcome, execute_update_chain
from tend.flake.graph import DependencyGraph, GraphReport

__all__ = [
    "UpdateStep",
    "compute_update_chain",
    "ChainExecutor",
    "StepEvent",
    "StepOutcome",
    "execute_update_chain",
    "DependencyGraph",
    "GraphReport",
]
