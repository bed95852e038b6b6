import pytest

from partial_planner.core.config import (
    CONFIG_ENV_VAR,
    DEFAULT_DURATION_UNITS,
    ConfigError,
    load_and_merge,
    load_config_file,
)
from partial_planner.core.validate.validate_tasks import parse_duration


def test_defaults_without_file(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    cfg = load_and_merge(None)
    assert cfg.duration_units == DEFAULT_DURATION_UNITS
    assert cfg.default_format == "text"


def test_file_overrides_merge(tmp_path):
    p = tmp_path / "partial.yaml"
    p.write_text("duration_units:\n  w: 7\ndefault_format: json\n", encoding="utf-8")
    cfg = load_and_merge(str(p))
    assert cfg.duration_units["w"] == 7.0
    assert cfg.duration_units["d"] == 1.0
    assert cfg.default_format == "json"


def test_env_var_points_at_file(tmp_path, monkeypatch):
    p = tmp_path / "partial.yaml"
    p.write_text("default_format: json\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(p))
    assert load_and_merge(None).default_format == "json"


def test_empty_file(tmp_path):
    p = tmp_path / "partial.yaml"
    p.write_text("", encoding="utf-8")
    assert load_config_file(p) == {}


@pytest.mark.parametrize(
    "text",
    [
        "- not a mapping\n",
        "duration_units: 3\n",
        "duration_units:\n  d: 0\n",
        "duration_units:\n  days: 1\n",
        "duration_units:\n  D: 2\n",
        "duration_units:\n  \"5\": 2\n",
        "duration_units:\n  d: .inf\n",
        "default_format: xml\n",
        "colour: blue\n",
    ],
)
def test_invalid_config(tmp_path, text):
    p = tmp_path / "partial.yaml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config_file(p)


def test_custom_unit_is_usable_in_durations(tmp_path):
    p = tmp_path / "partial.yaml"
    p.write_text("duration_units:\n  s: 10\n", encoding="utf-8")
    cfg = load_and_merge(str(p))
    assert parse_duration("2s", cfg.duration_units) == 20.0
