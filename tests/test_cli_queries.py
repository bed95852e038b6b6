import json
from pathlib import Path

from typer.testing import CliRunner

from partial_planner.cli import app

runner = CliRunner()

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"
BASIC = str(EXAMPLES / "basic.plan")

PLAN_WITH_DEPS = """
version: "1.0.0"
project: UnblockedTest
tasks:
  - id: a
    title: Task A
    done: true
  - id: b
    title: Task B
    done: true
  - id: c
    title: Task C
    needs: [a]
  - id: d
    title: Task D
    needs: [a]
  - id: e
    title: Task E
    needs: [c, d]
  - id: f
    title: Task F
    needs: [b]
"""


def test_cli_unblocked_text():
    r = runner.invoke(app, ["unblocked", BASIC])
    assert r.exit_code == 0
    assert r.stdout.split() == ["build", "content"]


def test_cli_unblocked_stdin_json():
    r = runner.invoke(app, ["unblocked", "-", "--format", "json"], input=PLAN_WITH_DEPS)
    assert r.exit_code == 0
    payload = json.loads(r.stdout)
    assert [t["id"] for t in payload] == ["c", "d", "f"]
    assert payload[0]["finish_to_start"] == ["a"]


def test_cli_status_json():
    r = runner.invoke(app, ["status", BASIC, "--format", "json"])
    assert r.exit_code == 0
    assert json.loads(r.stdout) == {"blocked": 2, "done": 1, "ready": 2}


def test_cli_status_table():
    r = runner.invoke(app, ["status", BASIC])
    assert r.exit_code == 0
    assert "Done" in r.stdout
    assert "Blocked" in r.stdout


def test_cli_graph_text():
    r = runner.invoke(app, ["graph", BASIC])
    assert r.exit_code == 0
    lines = r.stdout.strip().splitlines()
    assert lines == [
        "build -> launch (fs)",
        "content -> review (ss)",
        "design -> build (fs)",
        "review -> launch (ff)",
    ]


def test_cli_graph_no_dependencies():
    r = runner.invoke(app, ["graph"], input="tasks:\n  - {id: x, title: X}\n")
    assert r.exit_code == 0
    assert r.stdout.strip() == "No dependencies"


def test_cli_graph_json_adjacency():
    r = runner.invoke(app, ["graph", BASIC, "--format", "json"])
    assert r.exit_code == 0
    adjacency = json.loads(r.stdout)
    assert adjacency["design"] == [{"target": "build", "type": "fs"}]
    assert adjacency["launch"] == []


def test_cli_graph_dot():
    r = runner.invoke(app, ["graph", BASIC, "--format", "dot"])
    assert r.exit_code == 0
    assert r.stdout.startswith("digraph dependencies {")
    assert '"review" -> "launch" [label="ff"];' in r.stdout
    assert 'fillcolor="#9e9e9e"' in r.stdout


def test_cli_graph_works_on_cycles():
    r = runner.invoke(app, ["graph", str(EXAMPLES / "cycle.plan")])
    assert r.exit_code == 0
    assert "c -> a (fs)" in r.stdout


def test_cli_order():
    r = runner.invoke(app, ["order", BASIC, "--format", "json"])
    assert r.exit_code == 0
    assert json.loads(r.stdout) == ["content", "design", "build", "review", "launch"]


def test_cli_order_rejects_cycle():
    r = runner.invoke(app, ["order", str(EXAMPLES / "cycle.plan")])
    assert r.exit_code == 2
    assert "E_CYCLE_DETECTED" in r.output


def test_cli_critical_json():
    r = runner.invoke(app, ["critical", BASIC, "--format", "json"])
    assert r.exit_code == 0
    payload = json.loads(r.stdout)
    assert [step["id"] for step in payload["path"]] == ["design", "build", "launch"]
    assert payload["finish_time"] == 8.125
    assert payload["path"][0]["via"] is None
    assert payload["path"][2]["via"] == "fs"


def test_cli_critical_table():
    r = runner.invoke(app, ["critical", BASIC])
    assert r.exit_code == 0
    assert "design" in r.stdout
    assert "Finish: 8.125" in r.stdout


def test_cli_dependents():
    r = runner.invoke(app, ["dependents", "design", BASIC])
    assert r.exit_code == 0
    assert r.stdout.split() == ["build", "launch"]


def test_cli_dependents_unknown_task():
    r = runner.invoke(app, ["dependents", "nope", BASIC])
    assert r.exit_code == 2
    assert "E_UNKNOWN_TASK" in r.output
