from __future__ import annotations

import logging
from typing import Optional

from partial_planner.core.model import Graph

logger = logging.getLogger(__name__)

WHITE, GRAY, BLACK = 0, 1, 2


def detect_cycle(graph: Graph) -> Optional[list[str]]:
    """Return None for an acyclic graph, else one cycle as [v1, ..., vk, v1].

    Roots and successors are visited in ascending id order, so a given graph
    always reports the same witness. Iterative to keep long chains off the
    interpreter stack.
    """

    state: dict[str, int] = {nid: WHITE for nid in graph.nodes}

    for root in graph.nodes:
        if state[root] != WHITE:
            continue

        # Each frame is (node, remaining successors).
        stack: list[tuple[str, list[str]]] = [(root, graph.successors(root))]
        path: list[str] = [root]
        state[root] = GRAY

        while stack:
            u, pending = stack[-1]
            if not pending:
                stack.pop()
                path.pop()
                state[u] = BLACK
                continue

            v = pending.pop(0)
            if state[v] == GRAY:
                # back edge u -> v: unwind the path from v to u and close the loop
                cycle = path[path.index(v):] + [v]
                logger.debug("cycle detected: %s", " -> ".join(cycle))
                return cycle
            if state[v] == WHITE:
                state[v] = GRAY
                path.append(v)
                stack.append((v, graph.successors(v)))

    return None
