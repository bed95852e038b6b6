"""Dependency graph engine.

Builds an immutable precedence graph from a task list and answers read-only
queries over it: cycle detection, deterministic ordering, the unblocked set
and the critical path.
"""
from partial_planner.core.graph.build import build_graph
from partial_planner.core.graph.critical_path import Schedule, critical_path, schedule
from partial_planner.core.graph.cycles import detect_cycle
from partial_planner.core.graph.order import dependents_of, topo_sort
from partial_planner.core.graph.unblocked import summarize_status, unblocked
from partial_planner.core.model import DependencyType, Graph, PrecedenceEdge, Task

__all__ = [
    "DependencyType",
    "Graph",
    "PrecedenceEdge",
    "Schedule",
    "Task",
    "build_graph",
    "critical_path",
    "dependents_of",
    "detect_cycle",
    "schedule",
    "summarize_status",
    "topo_sort",
    "unblocked",
]
