from partial_planner.core.graph import build_graph, summarize_status, unblocked
from partial_planner.core.model import Task


def task(id: str, *needs: str, done: bool = False, **kw) -> Task:
    return Task(id=id, title=f"Task {id}", done=done, finish_to_start=tuple(needs), **kw)


def _ids(graph, tasks) -> list[str]:
    return [t.id for t in unblocked(graph, tasks)]


def test_scenario_done_root_and_blocked_chain():
    tasks = [task("A", done=True), task("B", "A"), task("C"), task("D", "B")]
    assert _ids(build_graph(tasks), tasks) == ["B", "C"]


def test_done_tasks_excluded():
    tasks = [task("a", done=True), task("b", done=True)]
    assert unblocked(build_graph(tasks), tasks) == []


def test_no_dependencies_all_unblocked_in_id_order():
    tasks = [task("z"), task("m"), task("a")]
    assert _ids(build_graph(tasks), tasks) == ["a", "m", "z"]


def test_any_unfinished_dependency_blocks():
    tasks = [task("a", done=True), task("b"), task("c", "a", "b")]
    assert _ids(build_graph(tasks), tasks) == ["b"]


def test_diamond_with_done_root():
    tasks = [task("a", done=True), task("b", "a"), task("c", "a"), task("d", "b", "c")]
    assert _ids(build_graph(tasks), tasks) == ["b", "c"]


def test_empty():
    assert unblocked(build_graph([]), []) == []


def test_start_to_start_gates():
    tasks = [task("a"), task("b", start_to_start=("a",))]
    assert _ids(build_graph(tasks), tasks) == ["a"]


def test_finish_relations_do_not_gate_start():
    tasks = [
        task("a"),
        task("b", finish_to_finish=("a",)),
        task("c", start_to_finish=("a",)),
    ]
    assert _ids(build_graph(tasks), tasks) == ["a", "b", "c"]


def test_returns_the_task_objects():
    tasks = [task("a", duration=2.5)]
    result = unblocked(build_graph(tasks), tasks)
    assert result[0] is tasks[0]


def test_status_counts():
    tasks = [task("A", done=True), task("B", "A"), task("C"), task("D", "B")]
    assert summarize_status(build_graph(tasks), tasks) == {"done": 1, "ready": 2, "blocked": 1}
