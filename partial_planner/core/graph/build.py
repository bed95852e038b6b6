from __future__ import annotations

import logging
from typing import Iterable

from partial_planner.core.errors import DanglingReferenceError, DuplicateTaskError
from partial_planner.core.model import DEPENDENCY_FIELDS, Graph, PrecedenceEdge, Task

logger = logging.getLogger(__name__)


def build_graph(tasks: Iterable[Task]) -> Graph:
    """Build an immutable precedence graph from a task list.

    Edges point from the prerequisite to the declaring task and carry the
    relation type of the sequence they were declared in. Identical edges
    collapse; edges that differ only by type are both kept.

    Raises DuplicateTaskError for a repeated id and DanglingReferenceError for a
    dependency on an id that is not in `tasks`. When several references dangle,
    the one reported is the first by (declaring id, relation, declaration order).
    """

    by_id: dict[str, Task] = {}
    for task in tasks:
        if task.id in by_id:
            raise DuplicateTaskError.for_task(task.id)
        by_id[task.id] = task

    edges: set[PrecedenceEdge] = set()
    for tid in sorted(by_id):
        task = by_id[tid]
        for name, dep_type in DEPENDENCY_FIELDS:
            for dep in getattr(task, name):
                if dep not in by_id:
                    raise DanglingReferenceError.for_reference(tid, dep)
                edges.add(PrecedenceEdge(source=dep, target=tid, type=dep_type))

    graph = Graph.from_edges(by_id.keys(), edges)
    logger.debug("built graph: %d nodes, %d edges", len(graph.nodes), len(graph.edges))
    return graph
