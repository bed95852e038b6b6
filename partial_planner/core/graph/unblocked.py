from __future__ import annotations

from typing import Iterable

from partial_planner.core.model import DependencyType, Graph, Task

# ff/sf constrain when the target may finish, which a done/not-done model
# cannot observe, so only these gate starting.
START_GATING: frozenset[DependencyType] = frozenset({DependencyType.FS, DependencyType.SS})


def unblocked(graph: Graph, tasks: Iterable[Task]) -> list[Task]:
    """Tasks that are not done and whose fs/ss prerequisites are all done.

    Returned in ascending id order. Tasks missing from the graph are ignored.
    """

    by_id = {t.id: t for t in tasks if graph.has_node(t.id)}
    out: list[Task] = []
    for tid in graph.nodes:
        task = by_id.get(tid)
        if task is None or task.done:
            continue
        if all(
            by_id[e.source].done if e.source in by_id else False
            for e in graph.incoming(tid)
            if e.type in START_GATING
        ):
            out.append(task)
    return out


def summarize_status(graph: Graph, tasks: Iterable[Task]) -> dict[str, int]:
    """Done / ready / blocked counts, as shown by `partial status`."""
    task_list = [t for t in tasks if graph.has_node(t.id)]
    done = sum(1 for t in task_list if t.done)
    ready = len(unblocked(graph, task_list))
    return {"done": done, "ready": ready, "blocked": len(task_list) - done - ready}
