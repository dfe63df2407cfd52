from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence

from core.models import Task, TaskOwner, TimelineTask
from core.services.scheduling.models import DateAssignmentResult, TimelineComparison
from core.services.work_calendar.engine import (
    HolidayInput,
    add_working_days,
    calculate_working_days_between,
    parse_iso_date,
    to_iso,
)


def get_earliest_start_date(timeline: Sequence[TimelineTask]) -> Optional[str]:
    if not timeline:
        return None
    return to_iso(min(parse_iso_date(t.start) for t in timeline))


def get_latest_end_date(timeline: Sequence[TimelineTask]) -> Optional[str]:
    if not timeline:
        return None
    return to_iso(max(parse_iso_date(t.end) for t in timeline))


def calculate_timeline_duration(
    timeline: Sequence[TimelineTask], holidays: HolidayInput = None
) -> int:
    """Working days from the earliest start to the latest end, inclusive."""
    start = get_earliest_start_date(timeline)
    end = get_latest_end_date(timeline)
    if start is None or end is None:
        return 0
    return calculate_working_days_between(parse_iso_date(start), parse_iso_date(end), holidays)


def calculate_task_end_date(start: str, duration: int, holidays: HolidayInput = None) -> str:
    return to_iso(add_working_days(parse_iso_date(start), duration, holidays))


def group_tasks_by_asset(timeline: Sequence[TimelineTask]) -> Dict[str, List[TimelineTask]]:
    grouped: Dict[str, List[TimelineTask]] = {}
    for task in timeline:
        grouped.setdefault(task.asset_id, []).append(task)
    return grouped


def filter_tasks_by_owner(timeline: Sequence[TimelineTask], owner) -> List[TimelineTask]:
    wanted = TaskOwner(owner)
    return [task for task in timeline if task.owner == wanted]


def sort_tasks_by_start_date(timeline: Sequence[TimelineTask]) -> List[TimelineTask]:
    return sorted(timeline, key=lambda t: parse_iso_date(t.start))


def insert_custom_task(
    tasks: Sequence[Task], custom_task: Task, insert_after_task_id: Optional[str] = None
) -> List[Task]:
    """
    New list with ``custom_task`` placed after ``insert_after_task_id``,
    or at the front when that id is missing or unknown.
    """
    result = list(tasks)
    index = 0
    if insert_after_task_id:
        for position, task in enumerate(result):
            if task.id == insert_after_task_id:
                index = position + 1
                break
    result.insert(index, custom_task)
    return result


def find_date_conflicts(
    calculated_start_dates: Dict[str, str], today: Optional[date] = None
) -> List[str]:
    """Asset ids whose computed start lies before ``today``."""
    today = today or date.today()
    return [
        asset_id
        for asset_id, start in calculated_start_dates.items()
        if start and parse_iso_date(start) < today
    ]


def summarize_timeline(result: DateAssignmentResult) -> str:
    if not result.success:
        return f"Timeline generation failed: {', '.join(result.errors)}"

    duration = calculate_working_days_between(
        parse_iso_date(result.project_start_date),
        parse_iso_date(result.project_end_date),
    )
    critical = sum(1 for t in result.tasks if t.is_critical)
    total = len(result.tasks)
    return "\n".join(
        [
            "Timeline Summary:",
            f"- Start Date: {result.project_start_date}",
            f"- End Date: {result.project_end_date}",
            f"- Duration: {duration} working days",
            f"- Total Tasks: {total}",
            f"- Critical Path Tasks: {critical}",
            f"- Flexibility: {total - critical} tasks with float time",
        ]
    )


def _span(timeline: Sequence[TimelineTask]) -> int:
    return calculate_working_days_between(
        parse_iso_date(timeline[0].start), parse_iso_date(timeline[-1].end)
    )


def compare_timelines(
    first: Sequence[TimelineTask], second: Sequence[TimelineTask]
) -> TimelineComparison:
    """Position-by-position comparison of two timelines of the same batch."""
    if len(first) != len(second):
        return TimelineComparison(
            identical=False,
            differences=[f"Different number of tasks: {len(first)} vs {len(second)}"],
        )

    differences: List[str] = []
    for index, (a, b) in enumerate(zip(first, second)):
        if a.id != b.id:
            differences.append(f"Task order differs at position {index}")
            continue
        if a.start != b.start:
            differences.append(f"Task {a.id} start date: {a.start} vs {b.start}")
        if a.end != b.end:
            differences.append(f"Task {a.id} end date: {a.end} vs {b.end}")
        if a.duration != b.duration:
            differences.append(f"Task {a.id} duration: {a.duration} vs {b.duration}")

    compression = _span(first) - _span(second) if first else None
    return TimelineComparison(
        identical=not differences,
        differences=differences,
        compression_achieved=compression,
    )


__all__ = [
    "calculate_task_end_date",
    "calculate_timeline_duration",
    "compare_timelines",
    "filter_tasks_by_owner",
    "find_date_conflicts",
    "get_earliest_start_date",
    "get_latest_end_date",
    "group_tasks_by_asset",
    "insert_custom_task",
    "sort_tasks_by_start_date",
    "summarize_timeline",
]
