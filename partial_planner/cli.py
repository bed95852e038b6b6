from __future__ import annotations

import dataclasses
import json
import logging
import sys
from collections import Counter
from importlib.metadata import version as package_version
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from partial_planner.core.config import ConfigError, PlannerConfig, load_and_merge
from partial_planner.core.errors import (
    CyclicGraphError,
    GraphError,
    PlanError,
    PlanLoadError,
    PlanValidationError,
)
from partial_planner.core.graph import (
    build_graph,
    dependents_of,
    detect_cycle,
    schedule,
    summarize_status,
    topo_sort,
    unblocked,
)
from partial_planner.core.io.dump_graph import edge_lines, graph_to_dot
from partial_planner.core.io.load_plan import load_plan, load_plan_text
from partial_planner.core.model import Graph, Task
from partial_planner.core.validate.validate_tasks import validate_tasks

DIST_NAME = "partial-planner"

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()

# Set by the callback for each invocation.
state: dict[str, Any] = {"config_file": None}

FILE_HELP = "Path to a plan file (.plan/.yaml/.yml/.json); omit or '-' to read stdin"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(package_version(DIST_NAME))
        raise typer.Exit()


@app.callback()
def _callback(
    config: Optional[str] = typer.Option(
        None, "--config", help="YAML config file (defaults to $PARTIAL_CONFIG)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print version and exit"
    ),
) -> None:
    """Partial: dependency graph queries for .plan files."""
    state["config_file"] = config
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(name)s: %(message)s")


@app.command("validate")
def validate(
    path: Optional[str] = typer.Argument(None, help=FILE_HELP),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """Validate a plan file: schema, references and cycles."""
    fmt = _resolve_format(format, ("text", "json"), "validate")
    tasks, graph = _load_graph(path, fmt, "validate", require_acyclic=True)

    if fmt == "text":
        typer.echo(f"OK: {len(graph.nodes)} tasks, {len(graph.edges)} edges")
        return

    type_counts = Counter(e.type.value for e in graph.edges)
    summary = {
        "task_count": len(graph.nodes),
        "edge_count": len(graph.edges),
        "edge_type_counts": {k: int(v) for k, v in sorted(type_counts.items())},
        **summarize_status(graph, tasks),
    }
    _emit_json("validate", ok=True, errors=[], summary=summary)


@app.command("status")
def status(
    path: Optional[str] = typer.Argument(None, help=FILE_HELP),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """Show task counts: done, ready (unblocked) and blocked."""
    fmt = _resolve_format(format, ("text", "json"), "status")
    tasks, graph = _load_graph(path, fmt, "status")
    counts = summarize_status(graph, tasks)

    if fmt == "json":
        typer.echo(json.dumps(counts, sort_keys=True))
        return

    table = Table(title="Project status")
    table.add_column("State")
    table.add_column("Tasks", justify="right")
    for key in ("done", "ready", "blocked"):
        table.add_row(key.capitalize(), str(counts[key]))
    console.print(table)


@app.command("unblocked")
def unblocked_cmd(
    path: Optional[str] = typer.Argument(None, help=FILE_HELP),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """List tasks that are not done and whose start-gating dependencies are done."""
    fmt = _resolve_format(format, ("text", "json"), "unblocked")
    tasks, graph = _load_graph(path, fmt, "unblocked")
    ready = unblocked(graph, tasks)

    if fmt == "json":
        typer.echo(json.dumps([t.to_dict() for t in ready], indent=2))
        return
    for t in ready:
        typer.echo(t.id)


@app.command("graph")
def graph_cmd(
    path: Optional[str] = typer.Argument(None, help=FILE_HELP),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json|dot"),
) -> None:
    """Show the dependency graph as edges, JSON adjacency or Graphviz DOT."""
    fmt = _resolve_format(format, ("text", "json", "dot"), "graph")
    tasks, graph = _load_graph(path, fmt, "graph")

    if fmt == "json":
        typer.echo(json.dumps(graph.to_adjacency(), indent=2, sort_keys=True))
    elif fmt == "dot":
        typer.echo(graph_to_dot(graph, tasks))
    elif not graph.edges:
        typer.echo("No dependencies")
    else:
        for line in edge_lines(graph):
            typer.echo(line)


@app.command("order")
def order(
    path: Optional[str] = typer.Argument(None, help=FILE_HELP),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """Print tasks in dependency order (ties broken by ascending id)."""
    fmt = _resolve_format(format, ("text", "json"), "order")
    _, graph = _load_graph(path, fmt, "order", require_acyclic=True)
    ids = topo_sort(graph)

    if fmt == "json":
        typer.echo(json.dumps(ids))
        return
    for tid in ids:
        typer.echo(tid)


@app.command("critical")
def critical(
    path: Optional[str] = typer.Argument(None, help=FILE_HELP),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """Show the critical path with earliest start/finish per task."""
    fmt = _resolve_format(format, ("text", "json"), "critical")
    tasks, graph = _load_graph(path, fmt, "critical", require_acyclic=True)
    sched = schedule(graph, tasks)
    by_id = {t.id: t for t in tasks}

    if fmt == "json":
        payload = {
            "finish_time": sched.finish_time,
            "path": [
                {
                    "id": tid,
                    "title": by_id[tid].title,
                    "earliest_start": sched.earliest_start[tid],
                    "earliest_finish": sched.earliest_finish[tid],
                    "via": sched.binding[tid].type.value if sched.binding[tid] else None,
                }
                for tid in sched.path
            ],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    if not sched.path:
        typer.echo("No tasks")
        return

    table = Table(title="Critical path")
    table.add_column("Task")
    table.add_column("Title")
    table.add_column("Via")
    table.add_column("Start", justify="right")
    table.add_column("Finish", justify="right")
    for tid in sched.path:
        edge = sched.binding[tid]
        table.add_row(
            tid,
            by_id[tid].title,
            edge.type.value if edge else "-",
            _fmt_number(sched.earliest_start[tid]),
            _fmt_number(sched.earliest_finish[tid]),
        )
    console.print(table)
    typer.echo(f"Finish: {_fmt_number(sched.finish_time)}")


@app.command("dependents")
def dependents(
    task_id: str = typer.Argument(..., help="Task id"),
    path: Optional[str] = typer.Argument(None, help=FILE_HELP),
    format: Optional[str] = typer.Option(None, "--format", help="Output format: text|json"),
) -> None:
    """List every task that transitively depends on TASK_ID."""
    fmt = _resolve_format(format, ("text", "json"), "dependents")
    _, graph = _load_graph(path, fmt, "dependents")

    if not graph.has_node(task_id):
        _fail(
            "dependents",
            fmt,
            [
                PlanValidationError(
                    code="E_UNKNOWN_TASK",
                    message=f"unknown task id: {task_id}",
                    file=None,
                    path="task_id",
                )
            ],
            exit_code=2,
        )

    ids = dependents_of(graph, task_id)
    if fmt == "json":
        typer.echo(json.dumps(ids))
        return
    for tid in ids:
        typer.echo(tid)


def _config(fmt: str, command: str) -> PlannerConfig:
    try:
        return load_and_merge(state.get("config_file"))
    except FileNotFoundError:
        _fail(
            command,
            fmt,
            [
                PlanLoadError(
                    code="E_CONFIG_FILE_NOT_FOUND",
                    message="config file not found",
                    file=None,
                    path="config",
                )
            ],
            exit_code=1,
        )
    except ConfigError as e:
        _fail(
            command,
            fmt,
            [
                PlanValidationError(
                    code="E_CONFIG_FILE_INVALID",
                    message=str(e),
                    file=None,
                    path="config",
                )
            ],
            exit_code=2,
        )


def _resolve_format(format: Optional[str], allowed: tuple[str, ...], command: str) -> str:
    fmt = format or _config("text", command).default_format
    if fmt not in allowed:
        err = PlanValidationError(
            code="E_UNKNOWN_FORMAT",
            message=f"unknown format: {fmt} (choose one of: {', '.join(allowed)})",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)
    return fmt


def _load_graph(
    path: Optional[str],
    fmt: str,
    command: str,
    *,
    require_acyclic: bool = False,
) -> tuple[list[Task], Graph]:
    """Load, validate and build; exits with 1 on load errors and 2 on validation errors."""
    cfg = _config(fmt, command)

    try:
        if path is None or path == "-":
            plan = load_plan_text(sys.stdin.read(), file="<stdin>")
        else:
            plan = load_plan(path)
    except PlanLoadError as e:
        _fail(command, fmt, [e], exit_code=1)

    tasks, errors = validate_tasks(plan, duration_units=cfg.duration_units)
    if errors or tasks is None:
        _fail(command, fmt, list(errors), exit_code=2)

    file = plan.get("__file__")
    try:
        graph = build_graph(tasks)
    except GraphError as e:
        _fail(command, fmt, [dataclasses.replace(e, file=file)], exit_code=2)

    if require_acyclic:
        cycle = detect_cycle(graph)
        if cycle is not None:
            err = dataclasses.replace(CyclicGraphError.for_cycle(cycle), file=file)
            _fail(command, fmt, [err], exit_code=2)

    return tasks, graph


def _to_item(e: PlanError) -> dict:
    source = "load" if isinstance(e, PlanLoadError) else "graph" if isinstance(e, GraphError) else "validate"
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
        "severity": "error",
        "source": source,
    }


def _emit_json(
    command: str,
    *,
    ok: bool,
    errors: list[PlanError],
    summary: dict | None = None,
) -> None:
    payload = {
        "tool": "partial",
        "command": command,
        "ok": ok,
        "error_count": len(errors),
        "errors": [_to_item(e) for e in errors],
        "summary": summary,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


def _fail(command: str, fmt: str, errors: list[PlanError], *, exit_code: int) -> NoReturn:
    if fmt == "json":
        _emit_json(command, ok=False, errors=errors)
    else:
        _print_errors(errors)
    raise typer.Exit(code=exit_code)


def _fmt_number(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else f"{v:g}"


def _print_errors(errors: list[PlanError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="partial")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
