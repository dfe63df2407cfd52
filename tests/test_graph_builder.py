from core.models import Dependency, DependencyType
from core.services.scheduling.graph import (
    analyze_graph,
    build_task_graph,
    extract_dependency_info,
    has_dependencies,
    summarize_graph,
)


def test_tasks_without_dependencies_chain_implicitly(task_factory):
    tasks = [task_factory("A", 2), task_factory("B", 3), task_factory("C", 1)]
    graph = build_task_graph(tasks)

    assert graph.is_valid
    assert graph.start_nodes == ["A"]
    assert graph.end_nodes == ["C"]
    assert graph.nodes["B"].implicit
    assert graph.nodes["B"].dependencies == [Dependency("A", DependencyType.FINISH_TO_START, 0)]
    assert graph.nodes["A"].successors == ["B"]


def test_implicit_edges_stay_within_asset(task_factory):
    tasks = [
        task_factory("A1", 1, asset_id="a"),
        task_factory("B1", 1, asset_id="b"),
        task_factory("A2", 1, asset_id="a"),
    ]
    graph = build_task_graph(tasks)
    assert graph.nodes["A2"].dependencies[0].predecessor_id == "A1"
    assert graph.nodes["B1"].dependencies == []
    assert sorted(graph.start_nodes) == ["A1", "B1"]


def test_explicit_dependencies_replace_implicit_edge(task_factory):
    tasks = [
        task_factory("A", 2),
        task_factory("B", 2),
        task_factory("C", 2, deps=[("A", "SS", 1)]),
    ]
    graph = build_task_graph(tasks)
    assert not graph.nodes["C"].implicit
    assert graph.nodes["C"].dependencies == [Dependency("A", DependencyType.START_TO_START, 1)]
    assert sorted(graph.end_nodes) == ["B", "C"]


def test_duration_overrides_apply_by_name(task_factory):
    graph = build_task_graph([task_factory("A", 2, name="Brief")], {"Brief": 7})
    assert graph.nodes["A"].duration == 7


def test_invalid_graph_keeps_validator_errors(task_factory):
    tasks = [task_factory("A", 1, deps=[("B", "FS", 0)]), task_factory("B", 1, deps=[("A", "FS", 0)])]
    graph = build_task_graph(tasks)
    assert not graph.is_valid
    assert graph.errors[0].startswith("Circular dependency detected in task network")
    assert analyze_graph(graph)["has_cycles"]


def test_duplicate_ids_fail_graph_construction(task_factory):
    graph = build_task_graph([task_factory("A", 1), task_factory("A", 2)])
    assert not graph.is_valid
    assert graph.nodes == {}
    assert graph.errors[0].startswith("Graph construction failed:")


def test_graph_does_not_mutate_tasks(task_factory):
    tasks = [task_factory("A", 2), task_factory("B", 2)]
    build_task_graph(tasks)
    assert tasks[1].dependencies == ()


def test_analysis_helpers(task_factory):
    tasks = [
        task_factory("A", 2),
        task_factory("B", 2, deps=[("A", "FS", 0)]),
        task_factory("C", 2, deps=[("B", "FF", 0)]),
    ]
    assert has_dependencies(tasks)
    assert not has_dependencies([task_factory("X")])

    info = extract_dependency_info(tasks)
    assert info == {
        "tasks_with_dependencies": 2,
        "total_dependencies": 2,
        "dependency_types": {"FS": 1, "FF": 1},
    }

    graph = build_task_graph(tasks)
    analysis = analyze_graph(graph)
    assert analysis["node_count"] == 3
    assert analysis["dependency_count"] == 2
    assert analysis["max_depth"] == 2
    assert not analysis["has_cycles"]
    assert "Valid: True" in summarize_graph(graph)
