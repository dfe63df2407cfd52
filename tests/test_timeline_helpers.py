from datetime import date

from core.models import TaskOwner
from core.services.scheduling import SchedulingEngine, date_assigner, build_task_graph, critical_path_calculator
from core.services.scheduling.dates import create_date_assignment_options
from core.services.scheduling.features import FeatureFlags
from core.services.scheduling.timeline import (
    calculate_task_end_date,
    calculate_timeline_duration,
    compare_timelines,
    filter_tasks_by_owner,
    find_date_conflicts,
    get_earliest_start_date,
    get_latest_end_date,
    group_tasks_by_asset,
    insert_custom_task,
    sort_tasks_by_start_date,
    summarize_timeline,
)


def _timeline(tasks, live="2024-12-31", **flag_values):
    return SchedulingEngine(FeatureFlags(**flag_values)).build_asset_timeline(tasks, live)


def test_span_helpers(overlap_scenario):
    timeline = _timeline(overlap_scenario)

    assert get_earliest_start_date(timeline) == "2024-12-11"
    assert get_latest_end_date(timeline) == "2024-12-31"
    assert calculate_timeline_duration(timeline) == 15
    assert calculate_timeline_duration([]) == 0
    assert get_earliest_start_date([]) is None


def test_task_end_date_counts_start_as_day_one():
    assert calculate_task_end_date("2025-01-03", 1) == "2025-01-03"
    assert calculate_task_end_date("2025-01-03", 2) == "2025-01-06"
    assert calculate_task_end_date("2024-12-24", 2, ["2024-12-25"]) == "2024-12-26"


def test_grouping_filtering_and_sorting(task_factory):
    tasks = [
        task_factory("A", 2, asset_id="x", owner=TaskOwner.CLIENT),
        task_factory("B", 1, asset_id="y"),
        task_factory("C", 1, asset_id="x", deps=[("A", "FS", 0)]),
    ]
    timeline = _timeline(tasks, "2025-01-10")

    grouped = group_tasks_by_asset(timeline)
    assert sorted(grouped) == ["x", "y"]
    assert [t.id for t in grouped["x"]] == ["A", "C"]
    assert [t.id for t in filter_tasks_by_owner(timeline, "c")] == ["A"]

    ordered = sort_tasks_by_start_date(list(reversed(timeline)))
    starts = [t.start for t in ordered]
    assert starts == sorted(starts)


def test_insert_custom_task(task_factory):
    tasks = [task_factory("A"), task_factory("B")]
    custom = task_factory("X", is_custom=True)

    assert [t.id for t in insert_custom_task(tasks, custom, "A")] == ["A", "X", "B"]
    assert [t.id for t in insert_custom_task(tasks, custom, "missing")] == ["X", "A", "B"]
    assert [t.id for t in tasks] == ["A", "B"]


def test_find_date_conflicts():
    starts = {"x": "2025-01-02", "y": "2025-03-01", "z": ""}
    assert find_date_conflicts(starts, today=date(2025, 2, 1)) == ["x"]


def test_summary_reports_critical_tasks(task_factory):
    tasks = [
        task_factory("A", 1),
        task_factory("B", 4, deps=[("A", "FS", 0)]),
        task_factory("C", 1, deps=[("A", "FS", 0)]),
        task_factory("D", 1, deps=[("B", "FS", 0), ("C", "FS", 0)]),
    ]
    graph = build_task_graph(tasks)
    cpm = critical_path_calculator.calculate(graph)
    result = date_assigner.assign_dates(graph, cpm, create_date_assignment_options("2025-01-10"))

    summary = summarize_timeline(result)
    assert "- Total Tasks: 4" in summary
    assert "- Critical Path Tasks: 3" in summary
    assert "- Flexibility: 1 tasks with float time" in summary


def test_compare_timelines_reports_compression(overlap_scenario):
    dag = _timeline(overlap_scenario)
    seq = _timeline(overlap_scenario, use_dag_calculator=False)

    same = compare_timelines(dag, dag)
    assert same.identical and same.differences == []

    diff = compare_timelines(seq, dag)
    assert not diff.identical
    assert diff.compression_achieved == 3
    assert any(d.startswith("Task A start date") for d in diff.differences)

    assert compare_timelines(dag, dag[:2]).differences == ["Different number of tasks: 3 vs 2"]
