from __future__ import annotations

import math
import re
from typing import Any, Iterable, Optional, cast

from partial_planner.core.config import DEFAULT_DURATION_UNITS
from partial_planner.core.errors import PlanValidationError
from partial_planner.core.model import Task


DURATION_PATTERN = re.compile(r"^(\d+)([a-z])$")

# Plan-file keys and the Task field each one feeds. `needs` is shorthand for fs.
DEPENDENCY_KEYS: tuple[tuple[str, str], ...] = (
    ("needs", "finish_to_start"),
    ("needs_fs", "finish_to_start"),
    ("needs_ss", "start_to_start"),
    ("needs_ff", "finish_to_finish"),
    ("needs_sf", "start_to_finish"),
)


def _is_list_of_str(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(x, str) for x in v)


def parse_duration(value: Any, units: dict[str, float] | None = None) -> Optional[float]:
    """Number of days for a duration field: a non-negative number or '<int><unit>'.

    Returns None when the value cannot be interpreted.
    """
    table = units if units is not None else DEFAULT_DURATION_UNITS
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) and value >= 0 else None
    if isinstance(value, str):
        m = DURATION_PATTERN.match(value.strip())
        if m and m.group(2) in table:
            return int(m.group(1)) * table[m.group(2)]
    return None


def validate_tasks(
    plan: dict[str, Any],
    *,
    duration_units: dict[str, float] | None = None,
) -> tuple[Optional[list[Task]], list[PlanValidationError]]:
    """Convert a loaded plan into Task objects.

    Returns (tasks, errors). Tasks is None when errors exist. Referential
    integrity and cycles are the graph builder's job, not checked here.
    """

    file = cast(Optional[str], plan.get("__file__"))
    errors: list[PlanValidationError] = []

    version = plan.get("version")
    if not isinstance(version, str) or not version.strip():
        errors.append(
            PlanValidationError(
                code="E_INVALID_TYPE",
                message="version must be a non-empty string",
                file=file,
                path="version",
            )
        )

    if not isinstance(plan.get("project"), str):
        errors.append(
            PlanValidationError(
                code="E_INVALID_TYPE",
                message="project must be a string",
                file=file,
                path="project",
            )
        )

    raw_tasks = plan.get("tasks")
    if not isinstance(raw_tasks, list):
        errors.append(
            PlanValidationError(
                code="E_INVALID_TYPE",
                message="tasks must be an array",
                file=file,
                path="tasks",
            )
        )
        return None, _sorted(errors)

    tasks: list[Task] = []
    for i, raw in enumerate(raw_tasks):
        task_path = f"tasks[{i}]"
        if not isinstance(raw, dict):
            errors.append(
                PlanValidationError(
                    code="E_INVALID_TYPE",
                    message="task must be an object",
                    file=file,
                    path=task_path,
                )
            )
            continue

        task_errors: list[PlanValidationError] = []

        tid = raw.get("id")
        if not isinstance(tid, str) or not tid.strip():
            task_errors.append(
                PlanValidationError(
                    code="E_REQUIRED_FIELD",
                    message="id is required and must be a non-empty string",
                    file=file,
                    path=f"{task_path}.id",
                )
            )

        title = raw.get("title")
        if not isinstance(title, str) or not title.strip():
            task_errors.append(
                PlanValidationError(
                    code="E_REQUIRED_FIELD",
                    message="title is required and must be a non-empty string",
                    file=file,
                    path=f"{task_path}.title",
                )
            )

        done = raw.get("done", False)
        if done is None:
            done = False
        if not isinstance(done, bool):
            task_errors.append(
                PlanValidationError(
                    code="E_INVALID_TYPE",
                    message="done must be a boolean",
                    file=file,
                    path=f"{task_path}.done",
                )
            )

        deps: dict[str, list[str]] = {
            "finish_to_start": [],
            "start_to_start": [],
            "finish_to_finish": [],
            "start_to_finish": [],
        }
        for key, target in DEPENDENCY_KEYS:
            value = raw.get(key)
            if value is None:
                continue
            if not _is_list_of_str(value):
                task_errors.append(
                    PlanValidationError(
                        code="E_INVALID_TYPE",
                        message=f"{key} must be an array of strings",
                        file=file,
                        path=f"{task_path}.{key}",
                    )
                )
                continue
            deps[target].extend(value)

        parent = raw.get("parent")
        if parent is not None and not isinstance(parent, str):
            task_errors.append(
                PlanValidationError(
                    code="E_INVALID_TYPE",
                    message="parent must be a string",
                    file=file,
                    path=f"{task_path}.parent",
                )
            )

        duration: Optional[float] = None
        raw_duration = raw.get("duration")
        if raw_duration is not None:
            duration = parse_duration(raw_duration, duration_units)
            if duration is None:
                task_errors.append(
                    PlanValidationError(
                        code="E_INVALID_DURATION",
                        message=f"duration must be a non-negative number or like 3d, 1w, 2h, 1m (got {raw_duration!r})",
                        file=file,
                        path=f"{task_path}.duration",
                    )
                )

        if task_errors:
            errors.extend(task_errors)
            continue

        tasks.append(
            Task(
                id=cast(str, tid),
                title=cast(str, title),
                done=cast(bool, done),
                duration=duration,
                finish_to_start=tuple(deps["finish_to_start"]),
                start_to_start=tuple(deps["start_to_start"]),
                finish_to_finish=tuple(deps["finish_to_finish"]),
                start_to_finish=tuple(deps["start_to_finish"]),
                parent=cast(Optional[str], parent),
            )
        )

    if errors:
        return None, _sorted(errors)
    return tasks, []


def _sorted(errors: Iterable[PlanValidationError]) -> list[PlanValidationError]:
    return sorted(
        list(errors),
        key=lambda e: (
            e.file or "",
            e.path or "",
            e.code,
        ),
    )
