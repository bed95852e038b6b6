from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from partial_planner.core.errors import PlanLoadError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".plan", ".yaml", ".yml"}
DEFAULT_VERSION = "1.0.0"


def load_plan(path: str) -> dict[str, Any]:
    """Load a YAML (.plan/.yaml/.yml) or JSON plan file.

    Returns a dict with keys: version, project, tasks.
    Does not coerce task fields; validate_tasks owns shape checking.
    """

    p = Path(path)
    if not p.exists():
        raise PlanLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    if suffix not in YAML_SUFFIXES and suffix != ".json":
        raise PlanLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message="supported formats are .plan/.yaml/.yml and .json",
            file=str(p),
        )

    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as e:  # pragma: no cover
        raise PlanLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    return load_plan_text(raw_text, file=str(p), fmt="json" if suffix == ".json" else "yaml")


def load_plan_text(text: str, *, file: Optional[str] = None, fmt: str = "yaml") -> dict[str, Any]:
    """Parse plan content already in memory (e.g. piped on stdin)."""

    if not text.strip():
        logger.info("empty plan document, using defaults")
        return _normalize({}, file)

    try:
        data = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (yaml.YAMLError, ValueError) as e:
        code = "E_JSON_PARSE" if fmt == "json" else "E_YAML_PARSE"
        raise PlanLoadError(code=code, message=_parse_message(e), file=file) from e

    if data is None:
        logger.info("plan document has no content, using defaults")
        data = {}

    if not isinstance(data, dict):
        raise PlanLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=file,
        )

    return _normalize(data, file)


def _normalize(data: dict[str, Any], file: Optional[str]) -> dict[str, Any]:
    # Keep only expected keys; defaults applied where absent.
    version = data.get("version")
    project = data.get("project")
    normalized: dict[str, Any] = {
        "version": DEFAULT_VERSION if version is None else version,
        "project": "" if project is None else project,
        "tasks": [] if data.get("tasks") is None else data.get("tasks"),
    }
    if file is not None:
        normalized["__file__"] = file
    return normalized


def _parse_message(e: Exception) -> str:
    mark = getattr(e, "problem_mark", None)
    if mark is not None:
        problem = getattr(e, "problem", None) or str(e)
        return f"{problem} (line {mark.line + 1}, column {mark.column + 1})"
    return str(e)
