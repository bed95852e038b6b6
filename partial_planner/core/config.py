from __future__ import annotations

import math
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


CONFIG_ENV_VAR = "PARTIAL_CONFIG"

DEFAULT_DURATION_UNITS: dict[str, float] = {
    # Working days: 8h per day, 5 days per week, 20 per month.
    "h": 0.125,
    "d": 1.0,
    "w": 5.0,
    "m": 20.0,
}

OUTPUT_FORMATS: tuple[str, ...] = ("text", "json")

# Matches the unit letter accepted in plan-file durations such as "3d".
UNIT_NAME_PATTERN = re.compile(r"^[a-z]$")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class PlannerConfig:
    duration_units: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_DURATION_UNITS))
    default_format: str = "text"


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load overrides from a YAML file.

    Format:
      duration_units: {d: 1, w: 7}
      default_format: json

    Returns only the keys present in the file, validated.
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("config file must be a mapping")

    out: dict[str, Any] = {}
    unknown = sorted(set(raw) - {"duration_units", "default_format"})
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(str(k) for k in unknown)}")

    if "duration_units" in raw:
        units = raw["duration_units"]
        if not isinstance(units, dict) or not units:
            raise ConfigError("duration_units must be a non-empty mapping of unit -> number")
        parsed: dict[str, float] = {}
        for k, v in units.items():
            if not isinstance(k, str) or not UNIT_NAME_PATTERN.match(k.strip()):
                raise ConfigError("duration unit names must be a single lowercase letter (a-z)")
            if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v) or v <= 0:
                raise ConfigError(f"duration unit '{k}' must be a positive number")
            parsed[k.strip()] = float(v)
        out["duration_units"] = parsed

    if "default_format" in raw:
        fmt = raw["default_format"]
        if fmt not in OUTPUT_FORMATS:
            raise ConfigError(f"default_format must be one of: {', '.join(OUTPUT_FORMATS)}")
        out["default_format"] = fmt

    return out


def merged_config(overrides: dict[str, Any] | None = None) -> PlannerConfig:
    """Defaults merged with optional overrides; units merge key by key."""
    units = dict(DEFAULT_DURATION_UNITS)
    default_format = "text"
    if overrides:
        units.update(overrides.get("duration_units", {}))
        default_format = overrides.get("default_format", default_format)
    return PlannerConfig(duration_units=units, default_format=default_format)


def load_and_merge(config_file: str | None = None) -> PlannerConfig:
    path = config_file or os.getenv(CONFIG_ENV_VAR)
    if not path:
        return merged_config()
    return merged_config(load_config_file(path))
