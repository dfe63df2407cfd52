from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from core.exceptions import DateAssignmentValidationError, DomainError
from core.models import DependencyType, TimelineTask
from core.services.scheduling.features import FeatureFlags
from core.services.scheduling.models import (
    CPMResult,
    CPMTiming,
    DateAssignmentOptions,
    DateAssignmentResult,
    TaskGraph,
    TaskNode,
)
from core.services.scheduling.results import ordered_by_earliest_start
from core.services.work_calendar.engine import (
    DateLike,
    HolidayInput,
    WorkCalendarEngine,
    normalize_holidays,
    parse_iso_date,
    to_iso,
)

logger = logging.getLogger(__name__)

DURATION_TOLERANCE_DAYS = 2


class DateAssigner:
    """
    Turns CPM offsets into calendar dates, working backwards from the live date.

    The node with the largest EF is the terminal (live) task. Every other task
    is placed at project_start + ES/EF working days, then an FS guard pushes
    successors that would start on or before a predecessor's final end.
    """

    def assign_dates(
        self,
        graph: TaskGraph,
        cpm_result: CPMResult,
        options: DateAssignmentOptions,
    ) -> DateAssignmentResult:
        if not cpm_result.success:
            return DateAssignmentResult.failed(cpm_result.errors)
        if not graph.nodes:
            return DateAssignmentResult(
                tasks=[], project_start_date="", project_end_date="", success=True
            )

        calendar = WorkCalendarEngine(options.holidays)
        try:
            project_start, dates, terminal_id = self._place_tasks(
                graph, cpm_result.timings, options, calendar
            )
            self._apply_ordering_guard(graph, cpm_result.timings, dates, terminal_id, calendar)
            tasks = self._build_timeline_tasks(graph, cpm_result.timings, dates)
            warnings = self._validate(tasks, calendar)
        except DateAssignmentValidationError as exc:
            logger.warning("Date assignment rejected: %s", exc)
            return DateAssignmentResult.failed(exc.errors)
        except DomainError as exc:
            logger.warning("Date assignment failed: %s", exc)
            return DateAssignmentResult.failed([f"Date assignment failed: {exc}"])

        tasks.sort(key=lambda t: t.start)
        return DateAssignmentResult(
            tasks=tasks,
            project_start_date=to_iso(project_start),
            project_end_date=max(t.end for t in tasks),
            success=True,
            warnings=warnings,
        )

    # ------------------------------------------------------------------ steps

    @staticmethod
    def _terminal_id(graph: TaskGraph, timings: Dict[str, CPMTiming]) -> str:
        terminal_id = None
        best = None
        for node_id in graph.nodes:
            finish = timings[node_id].earliest_finish
            if best is None or finish > best:
                best = finish
                terminal_id = node_id
        return terminal_id

    def _place_tasks(
        self,
        graph: TaskGraph,
        timings: Dict[str, CPMTiming],
        options: DateAssignmentOptions,
        calendar: WorkCalendarEngine,
    ) -> Tuple[date, Dict[str, Tuple[date, date]], str]:
        live = options.live_date
        anchor = live
        if not options.anchor_weekend_live and calendar.is_non_working_day(live):
            anchor = calendar.previous_working_day(live)

        terminal_id = self._terminal_id(graph, timings)
        max_finish = timings[terminal_id].earliest_finish
        project_start = calendar.subtract_working_days(anchor, max_finish)
        logger.debug(
            "Project start %s (anchor %s, %d working days)", project_start, anchor, max_finish
        )

        dates: Dict[str, Tuple[date, date]] = {}
        for node_id, node in graph.nodes.items():
            timing = timings[node_id]
            start = calendar.offset_working_days(project_start, timing.earliest_start)
            end = calendar.offset_working_days(project_start, timing.earliest_finish)

            if node_id == terminal_id:
                if options.anchor_weekend_live:
                    end = live
                    start = calendar.subtract_working_days(live, node.duration - 1)
                elif calendar.is_non_working_day(end):
                    end = calendar.previous_working_day(end)
            else:
                if options.adjust_for_holidays and calendar.is_non_working_day(end):
                    end = calendar.previous_working_day(end)
                if end > live:
                    # ties the terminal's EF; offset snapped past a non-working live date
                    end = calendar.previous_working_day(live, include_today=True)
                    logger.debug("Clamped %s end to %s before live date", node_id, end)

            dates[node_id] = (start, end)
        return project_start, dates, terminal_id

    def _apply_ordering_guard(
        self,
        graph: TaskGraph,
        timings: Dict[str, CPMTiming],
        dates: Dict[str, Tuple[date, date]],
        terminal_id: str,
        calendar: WorkCalendarEngine,
    ) -> None:
        """
        FS links with non-negative lag: a successor may not start on or before
        its predecessor's (already adjusted) end. Negative-lag FS, SS and FF
        are left as computed.
        """
        for node_id in ordered_by_earliest_start(graph, timings):
            if node_id == terminal_id:
                continue
            node = graph.nodes[node_id]
            required = self._required_min_start(node, dates, calendar)
            if required is None:
                continue
            min_start, latest_pred_end = required
            start, _ = dates[node_id]
            if start <= latest_pred_end or start < min_start:
                new_end = calendar.add_working_days(min_start, node.duration)
                logger.debug("FS guard moved %s from %s to %s", node_id, start, min_start)
                dates[node_id] = (min_start, new_end)

    @staticmethod
    def _required_min_start(
        node: TaskNode,
        dates: Dict[str, Tuple[date, date]],
        calendar: WorkCalendarEngine,
    ) -> Optional[Tuple[date, date]]:
        min_start: Optional[date] = None
        latest_pred_end: Optional[date] = None
        for dep in node.dependencies:
            if dep.type != DependencyType.FINISH_TO_START or dep.lag < 0:
                continue
            if dep.predecessor_id not in dates:
                continue
            pred_end = dates[dep.predecessor_id][1]
            candidate = calendar.next_working_day(pred_end, include_today=False)
            for _ in range(dep.lag):
                candidate = calendar.next_working_day(candidate, include_today=False)
            if min_start is None or candidate > min_start:
                min_start = candidate
            if latest_pred_end is None or pred_end > latest_pred_end:
                latest_pred_end = pred_end
        if min_start is None:
            return None
        return min_start, latest_pred_end

    @staticmethod
    def _build_timeline_tasks(
        graph: TaskGraph,
        timings: Dict[str, CPMTiming],
        dates: Dict[str, Tuple[date, date]],
    ) -> List[TimelineTask]:
        tasks: List[TimelineTask] = []
        for node_id, node in graph.nodes.items():
            start, end = dates[node_id]
            timing = timings[node_id]
            tasks.append(
                TimelineTask.from_task(
                    node.task,
                    duration=node.duration,
                    start=to_iso(start),
                    end=to_iso(end),
                    dependencies=node.dependencies,
                    is_critical=timing.is_critical,
                    total_float=timing.total_float,
                    earliest_start=timing.earliest_start,
                    latest_start=timing.latest_start,
                )
            )
        return tasks

    @staticmethod
    def _validate(tasks: List[TimelineTask], calendar: WorkCalendarEngine) -> List[str]:
        """Raises on broken dates; returns overlap warnings."""
        errors: List[str] = []
        warnings: List[str] = []
        parsed: Dict[str, Tuple[date, date]] = {}

        for task in tasks:
            try:
                start = parse_iso_date(task.start)
                end = parse_iso_date(task.end)
            except DomainError:
                errors.append(f'Task {task.id}: Invalid dates "{task.start}" / "{task.end}"')
                continue
            parsed[task.id] = (start, end)
            if start > end:
                errors.append(f"Task {task.id}: Start date after end date")
                continue
            actual = calendar.working_days_between(start, end)
            if abs(actual - task.duration) > DURATION_TOLERANCE_DAYS:
                errors.append(
                    f"Task {task.id}: Duration mismatch - expected {task.duration}, "
                    f"calculated {actual}"
                )

        for index, task in enumerate(tasks):
            if task.id not in parsed:
                continue
            start, end = parsed[task.id]
            for other in tasks[index + 1:]:
                if other.asset_id != task.asset_id or other.id not in parsed:
                    continue
                other_start, other_end = parsed[other.id]
                if start > other_end or end < other_start:
                    continue
                linked = any(d.predecessor_id == other.id for d in task.dependencies) or any(
                    d.predecessor_id == task.id for d in other.dependencies
                )
                if not linked:
                    warnings.append(
                        f"Unexpected overlap between tasks {task.id} and {other.id} in same asset"
                    )

        if errors:
            raise DateAssignmentValidationError(errors, code="DATE_ASSIGNMENT_INVALID")
        for warning in warnings:
            logger.warning(warning)
        return warnings


date_assigner = DateAssigner()


def create_date_assignment_options(
    live_date: DateLike,
    holidays: HolidayInput = None,
    flags: Optional[FeatureFlags] = None,
) -> DateAssignmentOptions:
    flags = flags or FeatureFlags()
    return DateAssignmentOptions(
        live_date=parse_iso_date(live_date),
        holidays=tuple(sorted(normalize_holidays(holidays))),
        anchor_weekend_live=flags.allow_weekend_live_date,
        adjust_for_holidays=flags.adjust_for_holidays,
    )


__all__ = [
    "DURATION_TOLERANCE_DAYS",
    "DateAssigner",
    "create_date_assignment_options",
    "date_assigner",
]
