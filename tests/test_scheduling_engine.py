import pytest

from core.models import CalculatorKind
from core.services.scheduling.engine import (
    SchedulingEngine,
    calculate_compression_savings,
    compare_timeline_results,
    extract_critical_path,
)
from core.services.scheduling.features import FeatureFlags
from core.services.scheduling.timeline import calculate_timeline_duration


@pytest.mark.parametrize("live_date", ["2025-01-06", "2024-12-28", "2024-12-31"])
@pytest.mark.parametrize("anchor", [True, False])
@pytest.mark.parametrize("last_duration", [1, 3])
def test_dag_reproduces_sequential_without_dependencies(task_factory, live_date, anchor, last_duration):
    tasks = [
        task_factory("A", 3),
        task_factory("B", 5),
        task_factory("C", 2),
        task_factory("Live", last_duration),
    ]
    holidays = ["2024-12-25", "2025-01-01"]

    sequential = SchedulingEngine(FeatureFlags(allow_weekend_live_date=anchor))
    dag = SchedulingEngine(FeatureFlags(allow_weekend_live_date=anchor, force_dag_calculator=True))

    seq_result = sequential.calculate_timeline(tasks, live_date, {}, holidays)
    dag_result = dag.calculate_timeline(tasks, live_date, {}, holidays)

    assert seq_result.calculator == CalculatorKind.SEQUENTIAL
    assert dag_result.calculator == CalculatorKind.DAG
    assert compare_timeline_results(seq_result.tasks, dag_result.tasks)


def test_concrete_overlap_scenario(overlap_scenario):
    engine = SchedulingEngine(FeatureFlags())
    result = engine.calculate_timeline(overlap_scenario, "2024-12-31")

    assert result.success
    assert result.calculator == CalculatorKind.DAG
    assert result.project_duration == 15
    assert result.critical_path == ["A", "B", "C"]
    assert result.tasks[0].start == "2024-12-11"
    assert result.tasks[-1].end == "2024-12-31"
    assert extract_critical_path(result.tasks) == ["A", "B", "C"]


def test_overlaps_compress_the_sequential_schedule(overlap_scenario):
    dag = SchedulingEngine(FeatureFlags()).build_asset_timeline(overlap_scenario, "2024-12-31")
    seq = SchedulingEngine(FeatureFlags(use_dag_calculator=False)).build_asset_timeline(
        overlap_scenario, "2024-12-31"
    )
    # sequential: 5 + 10 + 3 working days back to back
    assert calculate_timeline_duration(seq) == 18
    assert calculate_compression_savings(seq, dag) == 3


def test_terminal_task_ends_on_live_date(task_factory):
    tasks = [task_factory("A", 4), task_factory("B", 2, deps=[("A", "FS", 1)])]
    engine = SchedulingEngine(FeatureFlags())

    on_saturday = engine.build_asset_timeline(tasks, "2024-12-28")
    assert on_saturday[-1].end == "2024-12-28"

    snapped = SchedulingEngine(FeatureFlags(allow_weekend_live_date=False)).build_asset_timeline(
        tasks, "2024-12-28"
    )
    assert snapped[-1].end == "2024-12-27"


def test_cycle_is_rejected_with_diagnostic(task_factory):
    tasks = [task_factory("A", 1, deps=[("B", "FS", 0)]), task_factory("B", 1, deps=[("A", "FS", 0)])]
    result = SchedulingEngine(FeatureFlags()).calculate_timeline(tasks, "2025-01-10")

    assert not result.success
    assert result.tasks == []
    assert any("Circular dependency" in e for e in result.errors)


def test_overlap_bound_is_enforced(task_factory):
    tasks = [task_factory("A", 2), task_factory("B", 2, deps=[("A", "FS", -3)])]
    result = SchedulingEngine(FeatureFlags()).calculate_timeline(tasks, "2025-01-10")

    assert not result.success
    assert any("exceeds predecessor" in e for e in result.errors)


def test_router_selection(task_factory):
    plain = [task_factory("A", 1), task_factory("B", 1)]
    linked = [task_factory("A", 1), task_factory("B", 1, deps=[("A", "FS", 0)])]

    assert SchedulingEngine(FeatureFlags()).select_calculator(plain) == CalculatorKind.SEQUENTIAL
    assert SchedulingEngine(FeatureFlags()).select_calculator(linked) == CalculatorKind.DAG
    assert (
        SchedulingEngine(FeatureFlags(use_dag_calculator=False)).select_calculator(linked)
        == CalculatorKind.SEQUENTIAL
    )
    assert (
        SchedulingEngine(FeatureFlags(force_dag_calculator=True)).select_calculator(plain)
        == CalculatorKind.DAG
    )


def test_empty_or_invalid_inputs(task_factory):
    engine = SchedulingEngine(FeatureFlags())
    assert engine.build_asset_timeline([], "2025-01-10") == []
    assert engine.build_asset_timeline([task_factory("A")], None) == []

    bad = engine.calculate_timeline([task_factory("A")], "31/12/2024")
    assert bad.tasks == []
    assert bad.errors


def test_calculation_details(overlap_scenario):
    details = SchedulingEngine(FeatureFlags()).get_calculation_details(overlap_scenario)

    assert details["graph"].is_valid
    assert details["cpm_result"].project_duration == 15
    assert "Critical path: 3 tasks" in details["summary"]


def test_multi_day_last_task_matches_between_calculators(task_factory):
    tasks = [task_factory("A", 2), task_factory("B", 3)]

    seq = SchedulingEngine(FeatureFlags()).build_asset_timeline(tasks, "2024-12-31")
    dag = SchedulingEngine(FeatureFlags(force_dag_calculator=True)).build_asset_timeline(
        tasks, "2024-12-31"
    )

    assert [(t.id, t.start, t.end) for t in dag] == [
        ("A", "2024-12-25", "2024-12-26"),
        ("B", "2024-12-27", "2024-12-31"),
    ]
    assert compare_timeline_results(seq, dag)


@pytest.mark.parametrize("force_dag", [False, True])
def test_malformed_holiday_returns_failed_result(task_factory, force_dag):
    tasks = [task_factory("A", 2), task_factory("B", 1, deps=[("A", "FS", 0)])]
    flags = FeatureFlags(use_dag_calculator=force_dag, force_dag_calculator=force_dag)

    result = SchedulingEngine(flags).calculate_timeline(tasks, "2024-12-31", {}, ["not-a-date"])

    assert not result.success
    assert result.tasks == []
    assert "not-a-date" in result.errors[0]


def test_calendar_failures_are_reported_on_both_paths(task_factory, monkeypatch):
    from core.exceptions import CalendarBoundsError
    from core.services.scheduling import engine as engine_module

    def _exhausted(*_args, **_kwargs):
        raise CalendarBoundsError("No working day found")

    class _ExhaustedAssigner:
        def assign_dates(self, *_args):
            _exhausted()

    tasks = [task_factory("A", 2), task_factory("B", 1)]

    monkeypatch.setattr(engine_module, "build_asset_timeline_sequential", _exhausted)
    seq = SchedulingEngine(FeatureFlags()).calculate_timeline(tasks, "2024-12-31")
    assert seq.calculator == CalculatorKind.SEQUENTIAL
    assert seq.tasks == []
    assert seq.errors == ["Timeline calculation failed: No working day found"]

    dag = SchedulingEngine(
        FeatureFlags(force_dag_calculator=True), assigner=_ExhaustedAssigner()
    ).calculate_timeline(tasks, "2024-12-31")
    assert dag.calculator == CalculatorKind.DAG
    assert dag.tasks == []
    assert dag.errors == ["Timeline calculation failed: No working day found"]
