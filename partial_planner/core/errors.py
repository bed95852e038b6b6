from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PlanError(Exception):
    """Base error envelope. Prefer returning/printing these rather than raising raw exceptions."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<plan>"
        return f"{loc}: {self.code}: {self.message}"


class PlanLoadError(PlanError):
    pass


class PlanValidationError(PlanError):
    pass


class GraphError(PlanValidationError):
    """Raised by the dependency graph engine."""


@dataclass(frozen=True)
class DanglingReferenceError(GraphError):
    """A task declares a dependency on an id that is not part of the task list."""

    source_task_id: str = ""
    missing_target_id: str = ""

    @classmethod
    def for_reference(cls, source_task_id: str, missing_target_id: str) -> "DanglingReferenceError":
        return cls(
            code="E_UNKNOWN_DEPENDENCY",
            message=f'task "{source_task_id}" references unknown dependency "{missing_target_id}"',
            path=f"tasks.{source_task_id}",
            source_task_id=source_task_id,
            missing_target_id=missing_target_id,
        )


@dataclass(frozen=True)
class DuplicateTaskError(GraphError):
    task_id: str = ""

    @classmethod
    def for_task(cls, task_id: str) -> "DuplicateTaskError":
        return cls(
            code="E_DUPLICATE_ID",
            message=f"duplicate task id: {task_id}",
            path=f"tasks.{task_id}",
            task_id=task_id,
        )


@dataclass(frozen=True)
class CyclicGraphError(GraphError):
    """An ordering query was invoked on a graph that contains a cycle."""

    cycle: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def for_cycle(cls, cycle: list[str]) -> "CyclicGraphError":
        return cls(
            code="E_CYCLE_DETECTED",
            message="dependency cycle detected: " + " -> ".join(cycle),
            path=f"tasks.{cycle[0]}" if cycle else None,
            cycle=tuple(cycle),
        )
