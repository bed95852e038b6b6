from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from partial_planner.core.errors import DanglingReferenceError


class DependencyType(str, Enum):
    """Precedence relation between two tasks (PDM/CPM notation)."""

    FS = "fs"  # finish-to-start
    SS = "ss"  # start-to-start
    FF = "ff"  # finish-to-finish
    SF = "sf"  # start-to-finish

    def __str__(self) -> str:
        return self.value


# Order matters: edge emission, error reporting and tie-breaks all follow it.
DEPENDENCY_FIELDS: tuple[tuple[str, DependencyType], ...] = (
    ("finish_to_start", DependencyType.FS),
    ("start_to_start", DependencyType.SS),
    ("finish_to_finish", DependencyType.FF),
    ("start_to_finish", DependencyType.SF),
)

DEFAULT_DURATION = 1.0


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    done: bool = False
    duration: Optional[float] = None

    finish_to_start: tuple[str, ...] = ()
    start_to_start: tuple[str, ...] = ()
    finish_to_finish: tuple[str, ...] = ()
    start_to_finish: tuple[str, ...] = ()

    parent: Optional[str] = None

    @property
    def cost(self) -> float:
        return DEFAULT_DURATION if self.duration is None else float(self.duration)

    def to_dict(self) -> dict:
        out: dict = {"id": self.id, "title": self.title, "done": self.done}
        if self.duration is not None:
            out["duration"] = self.duration
        for name, _ in DEPENDENCY_FIELDS:
            deps = getattr(self, name)
            if deps:
                out[name] = list(deps)
        if self.parent is not None:
            out["parent"] = self.parent
        return out


@dataclass(frozen=True, order=True)
class PrecedenceEdge:
    source: str
    target: str
    type: DependencyType


@dataclass(frozen=True)
class Graph:
    """Immutable snapshot of a project's precedence graph.

    `nodes` is sorted by id and `edges` is sorted, so two graphs built from the
    same task set compare equal regardless of input order. The adjacency
    indexes are read-only views derived from `edges`.
    """

    nodes: tuple[str, ...]
    edges: tuple[PrecedenceEdge, ...]
    _incoming: Mapping[str, tuple[PrecedenceEdge, ...]] = field(
        default_factory=dict, compare=False, repr=False
    )
    _outgoing: Mapping[str, tuple[PrecedenceEdge, ...]] = field(
        default_factory=dict, compare=False, repr=False
    )

    @classmethod
    def from_edges(cls, nodes: Iterable[str], edges: Iterable[PrecedenceEdge]) -> "Graph":
        node_ids = tuple(sorted(set(nodes)))
        edge_set = tuple(sorted(set(edges)))

        incoming: dict[str, list[PrecedenceEdge]] = {n: [] for n in node_ids}
        outgoing: dict[str, list[PrecedenceEdge]] = {n: [] for n in node_ids}
        for e in edge_set:
            if e.source not in outgoing:
                raise DanglingReferenceError.for_reference(e.target, e.source)
            if e.target not in incoming:
                raise DanglingReferenceError.for_reference(e.source, e.target)
            outgoing[e.source].append(e)
            incoming[e.target].append(e)

        return cls(
            nodes=node_ids,
            edges=edge_set,
            _incoming=MappingProxyType({k: tuple(v) for k, v in incoming.items()}),
            _outgoing=MappingProxyType({k: tuple(v) for k, v in outgoing.items()}),
        )

    def __len__(self) -> int:
        return len(self.nodes)

    def has_node(self, task_id: str) -> bool:
        return task_id in self._outgoing

    def incoming(self, task_id: str) -> tuple[PrecedenceEdge, ...]:
        return self._incoming.get(task_id, ())

    def outgoing(self, task_id: str) -> tuple[PrecedenceEdge, ...]:
        return self._outgoing.get(task_id, ())

    def successors(self, task_id: str) -> list[str]:
        return sorted({e.target for e in self.outgoing(task_id)})

    def predecessors(self, task_id: str) -> list[str]:
        return sorted({e.source for e in self.incoming(task_id)})

    def edge_types(self, source: str, target: str) -> list[DependencyType]:
        return [e.type for e in self.outgoing(source) if e.target == target]

    def to_adjacency(self) -> dict[str, list[dict[str, str]]]:
        """JSON-ready adjacency: source id -> [{"target": id, "type": "fs"}, ...]."""
        return {
            n: [{"target": e.target, "type": e.type.value} for e in self.outgoing(n)]
            for n in self.nodes
        }
