# core/services/scheduling/engine.py
from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from core.exceptions import DomainError, ValidationError
from core.models import CalculatorKind, Task, TimelineTask
from core.services.scheduling.critical_path import CriticalPathCalculator, critical_path_calculator
from core.services.scheduling.dates import DateAssigner, create_date_assignment_options, date_assigner
from core.services.scheduling.features import FeatureFlags, load_feature_flags
from core.services.scheduling.graph import build_task_graph, has_dependencies
from core.services.scheduling.sequential import build_asset_timeline_sequential
from core.services.scheduling.models import ScheduleResult
from core.services.scheduling.timeline import calculate_timeline_duration
from core.services.work_calendar.engine import (
    DateLike,
    HolidayInput,
    normalize_holidays,
    parse_iso_date,
)

logger = logging.getLogger(__name__)


class SchedulingEngine:
    """
    Calculator router for one asset batch:
    - DAG path: graph -> validation -> CPM -> calendar dates
    - Sequential path: legacy back-to-back schedule from the live date
    Both paths take the same inputs and return TimelineTask lists.
    """

    def __init__(
        self,
        flags: Optional[FeatureFlags] = None,
        cpm: Optional[CriticalPathCalculator] = None,
        assigner: Optional[DateAssigner] = None,
    ):
        self._flags: FeatureFlags = flags if flags is not None else load_feature_flags()
        self._cpm: CriticalPathCalculator = cpm or critical_path_calculator
        self._assigner: DateAssigner = assigner or date_assigner

    @property
    def flags(self) -> FeatureFlags:
        return self._flags

    def select_calculator(self, tasks: Sequence[Task]) -> CalculatorKind:
        if self._flags.force_dag_calculator:
            return CalculatorKind.DAG
        if self._flags.use_dag_calculator and has_dependencies(tasks):
            return CalculatorKind.DAG
        return CalculatorKind.SEQUENTIAL

    def calculate_timeline(
        self,
        tasks: Sequence[Task],
        live_date: Optional[DateLike],
        duration_overrides: Optional[Mapping[str, int]] = None,
        holidays: HolidayInput = None,
    ) -> ScheduleResult:
        calculator = self.select_calculator(tasks)
        if not tasks or not live_date:
            return ScheduleResult([], [], 0, calculator)
        try:
            live = parse_iso_date(live_date)
            holidays = normalize_holidays(holidays)
        except ValidationError as exc:
            logger.warning("Invalid schedule input: %s", exc)
            return ScheduleResult([], [], 0, calculator, errors=[str(exc)])

        logger.debug(
            "Timeline strategy: calculator=%s use_dag=%s force_dag=%s tasks=%d",
            calculator.value,
            self._flags.use_dag_calculator,
            self._flags.force_dag_calculator,
            len(tasks),
        )

        try:
            if calculator == CalculatorKind.SEQUENTIAL:
                return self._calculate_sequential(tasks, live, duration_overrides, holidays)
            return self._calculate_dag(tasks, live, duration_overrides, holidays)
        except DomainError as exc:
            logger.warning("%s timeline calculation failed: %s", calculator.value, exc)
            return ScheduleResult(
                [], [], 0, calculator, errors=[f"Timeline calculation failed: {exc}"]
            )

    def _calculate_sequential(self, tasks, live, duration_overrides, holidays) -> ScheduleResult:
        timeline = build_asset_timeline_sequential(
            tasks,
            live,
            duration_overrides,
            holidays,
            anchor_weekend_live=self._flags.allow_weekend_live_date,
        )
        return ScheduleResult(
            tasks=timeline,
            critical_path=[],
            project_duration=calculate_timeline_duration(timeline, holidays),
            calculator=CalculatorKind.SEQUENTIAL,
        )

    def _calculate_dag(self, tasks, live, duration_overrides, holidays) -> ScheduleResult:
        graph = build_task_graph(tasks, duration_overrides)
        logger.debug(
            "Graph built: nodes=%d start=%d end=%d valid=%s",
            len(graph.nodes),
            len(graph.start_nodes),
            len(graph.end_nodes),
            graph.is_valid,
        )
        if not graph.is_valid:
            return self._failed(graph.errors)

        cpm_result = self._cpm.calculate(graph)
        if not cpm_result.success:
            return self._failed(cpm_result.errors)

        options = create_date_assignment_options(live, holidays, self._flags)
        dates = self._assigner.assign_dates(graph, cpm_result, options)
        if not dates.success:
            return self._failed(dates.errors)

        if self._flags.debug_timeline_calculations:
            for task in dates.tasks:
                logger.debug(
                    "%s %s: %s..%s ES=%s LS=%s critical=%s",
                    task.id,
                    task.name,
                    task.start,
                    task.end,
                    task.earliest_start,
                    task.latest_start,
                    task.is_critical,
                )

        return ScheduleResult(
            tasks=dates.tasks,
            critical_path=cpm_result.critical_path,
            project_duration=cpm_result.project_duration,
            calculator=CalculatorKind.DAG,
            warnings=dates.warnings,
        )

    @staticmethod
    def _failed(errors: List[str]) -> ScheduleResult:
        logger.warning("DAG timeline calculation failed: %s", errors)
        return ScheduleResult([], [], 0, CalculatorKind.DAG, errors=list(errors))

    def build_asset_timeline(
        self,
        tasks: Sequence[Task],
        live_date: Optional[DateLike],
        duration_overrides: Optional[Mapping[str, int]] = None,
        holidays: HolidayInput = None,
    ) -> List[TimelineTask]:
        return self.calculate_timeline(tasks, live_date, duration_overrides, holidays).tasks

    def get_calculation_details(
        self,
        tasks: Sequence[Task],
        duration_overrides: Optional[Mapping[str, int]] = None,
    ) -> dict:
        graph = build_task_graph(tasks, duration_overrides)
        cpm_result = self._cpm.calculate(graph)
        summary = "\n".join(
            [
                "DAG Calculator Analysis:",
                f"- Task count: {len(tasks)}",
                f"- Dependencies: {sum(1 for t in tasks if t.dependencies)} tasks have dependencies",
                f"- Graph valid: {graph.is_valid}",
                f"- Project duration: {cpm_result.project_duration} days",
                f"- Critical path: {len(cpm_result.critical_path)} tasks",
                f"- Calculation success: {cpm_result.success}",
            ]
        )
        return {"graph": graph, "cpm_result": cpm_result, "summary": summary}


def compare_timeline_results(first: Sequence[TimelineTask], second: Sequence[TimelineTask]) -> bool:
    """True when both timelines list the same tasks with the same dates and durations."""
    if len(first) != len(second):
        return False
    return all(
        a.id == b.id and a.start == b.start and a.end == b.end and a.duration == b.duration
        for a, b in zip(first, second)
    )


def extract_critical_path(tasks: Sequence[TimelineTask]) -> List[str]:
    return [task.id for task in tasks if task.is_critical]


def calculate_compression_savings(
    sequential_tasks: Sequence[TimelineTask],
    dag_tasks: Sequence[TimelineTask],
    holidays: HolidayInput = None,
) -> int:
    if not sequential_tasks or not dag_tasks:
        return 0
    saved = calculate_timeline_duration(sequential_tasks, holidays) - calculate_timeline_duration(
        dag_tasks, holidays
    )
    return max(0, saved)


__all__ = [
    "SchedulingEngine",
    "calculate_compression_savings",
    "compare_timeline_results",
    "extract_critical_path",
]
