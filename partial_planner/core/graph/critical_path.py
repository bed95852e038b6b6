"""Critical path over generalized (fs/ss/ff/sf) precedence relations.

A single forward pass in topological order assigns every task its earliest
start and finish; the critical path is then walked backward from the task that
finishes last, always following the edge that fixed the current task's start.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from partial_planner.core.graph.order import topo_sort
from partial_planner.core.model import (
    DEFAULT_DURATION,
    DEPENDENCY_FIELDS,
    DependencyType,
    Graph,
    PrecedenceEdge,
    Task,
)

logger = logging.getLogger(__name__)

_TYPE_RANK: dict[DependencyType, int] = {t: i for i, (_, t) in enumerate(DEPENDENCY_FIELDS)}


@dataclass(frozen=True)
class Schedule:
    order: tuple[str, ...]
    earliest_start: Mapping[str, float]
    earliest_finish: Mapping[str, float]
    binding: Mapping[str, Optional[PrecedenceEdge]]
    finish_time: float
    path: tuple[str, ...]


def _candidate(
    edge: PrecedenceEdge,
    es: dict[str, float],
    ef: dict[str, float],
    duration: float,
) -> float:
    if edge.type is DependencyType.FS:
        return ef[edge.source]
    if edge.type is DependencyType.SS:
        return es[edge.source]
    if edge.type is DependencyType.FF:
        return ef[edge.source] - duration
    if edge.type is DependencyType.SF:
        return es[edge.source] - duration
    raise ValueError(f"unknown dependency type: {edge.type}")


def schedule(graph: Graph, tasks: Iterable[Task]) -> Schedule:
    """Earliest start/finish for every task plus the critical path.

    Raises CyclicGraphError (from topo_sort) on a cyclic graph.
    """

    durations: dict[str, float] = {n: DEFAULT_DURATION for n in graph.nodes}
    for t in tasks:
        if t.id in durations:
            durations[t.id] = t.cost

    order = topo_sort(graph)
    es: dict[str, float] = {}
    ef: dict[str, float] = {}
    binding: dict[str, Optional[PrecedenceEdge]] = {}

    for tid in order:
        dur = durations[tid]
        start = 0.0
        best: Optional[PrecedenceEdge] = None
        best_key: Optional[tuple[str, int]] = None
        for edge in graph.incoming(tid):
            c = _candidate(edge, es, ef, dur)
            key = (edge.source, _TYPE_RANK[edge.type])
            if c > start or (c == start and best is not None and key < best_key):
                start, best, best_key = c, edge, key
            elif c == start and best is None:
                best, best_key = edge, key
        es[tid] = start
        ef[tid] = start + dur
        binding[tid] = best

    if not order:
        return Schedule(
            order=(),
            earliest_start=MappingProxyType({}),
            earliest_finish=MappingProxyType({}),
            binding=MappingProxyType({}),
            finish_time=0.0,
            path=(),
        )

    finish_time = max(ef.values())
    end = min(tid for tid in order if ef[tid] == finish_time)

    path: list[str] = [end]
    edge = binding[end]
    while edge is not None:
        path.append(edge.source)
        edge = binding[edge.source]
    path.reverse()

    logger.debug("critical path: %d tasks, finish=%s", len(path), finish_time)
    return Schedule(
        order=tuple(order),
        earliest_start=MappingProxyType(es),
        earliest_finish=MappingProxyType(ef),
        binding=MappingProxyType(binding),
        finish_time=finish_time,
        path=tuple(path),
    )


def critical_path(graph: Graph, tasks: Iterable[Task]) -> list[Task]:
    """Tasks on the longest weighted chain, first to last."""
    task_list = list(tasks)
    by_id = {t.id: t for t in task_list}
    return [by_id[tid] for tid in schedule(graph, task_list).path if tid in by_id]
