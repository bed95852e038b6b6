from __future__ import annotations

import heapq

from partial_planner.core.errors import CyclicGraphError
from partial_planner.core.graph.cycles import detect_cycle
from partial_planner.core.model import Graph


def topo_sort(graph: Graph) -> list[str]:
    """Kahn's algorithm; ready nodes leave the queue in ascending id order.

    Every edge counts toward in-degree regardless of its type, so a pair joined
    by both an fs and an ss edge needs both released before the target is ready.

    Raises CyclicGraphError when the graph has a cycle. Callers are expected to
    check detect_cycle() first; the error carries the same witness.
    """

    indegree: dict[str, int] = {n: len(graph.incoming(n)) for n in graph.nodes}
    ready: list[str] = [n for n, d in indegree.items() if d == 0]
    heapq.heapify(ready)

    out: list[str] = []
    while ready:
        cur = heapq.heappop(ready)
        out.append(cur)
        for e in graph.outgoing(cur):
            indegree[e.target] -= 1
            if indegree[e.target] == 0:
                heapq.heappush(ready, e.target)

    if len(out) != len(graph.nodes):
        cycle = detect_cycle(graph) or []
        raise CyclicGraphError.for_cycle(cycle)
    return out


def dependents_of(graph: Graph, task_id: str) -> list[str]:
    """All tasks that transitively depend on `task_id`, ascending.

    Used to warn before deleting a task that others still reference.
    """

    seen: set[str] = set()
    todo = graph.successors(task_id)
    while todo:
        cur = todo.pop()
        if cur in seen or cur == task_id:
            continue
        seen.add(cur)
        todo.extend(graph.successors(cur))
    return sorted(seen)
