from __future__ import annotations

from typing import Iterable

from partial_planner.core.model import Graph, Task


def edge_lines(graph: Graph) -> list[str]:
    return [f"{e.source} -> {e.target} ({e.type.value})" for e in graph.edges]


def _dot_escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def graph_to_dot(graph: Graph, tasks: Iterable[Task]) -> str:
    """Graphviz DOT for the graph. Done tasks are filled gray; edges are labeled with their type."""
    by_id = {t.id: t for t in tasks}
    lines = [
        "digraph dependencies {",
        "  rankdir=LR;",
        '  node [shape=box, style=filled, fillcolor="#42a5f5", fontcolor=white];',
    ]
    for nid in graph.nodes:
        task = by_id.get(nid)
        label = f"{_dot_escape(nid)}\\n{_dot_escape(task.title)}" if task else _dot_escape(nid)
        if task is not None and task.done:
            lines.append(f'  "{_dot_escape(nid)}" [label="{label}", fillcolor="#9e9e9e"];')
        else:
            lines.append(f'  "{_dot_escape(nid)}" [label="{label}"];')
    for e in graph.edges:
        lines.append(f'  "{_dot_escape(e.source)}" -> "{_dot_escape(e.target)}" [label="{e.type.value}"];')
    lines.append("}")
    return "\n".join(lines)
