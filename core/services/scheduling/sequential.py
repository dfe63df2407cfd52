from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from core.models import Task, TimelineTask
from core.services.scheduling.validator import effective_duration
from core.services.work_calendar.engine import (
    DateLike,
    HolidayInput,
    WorkCalendarEngine,
    parse_iso_date,
    to_iso,
)

logger = logging.getLogger(__name__)


def build_asset_timeline_sequential(
    tasks: Sequence[Task],
    live_date: DateLike,
    duration_overrides: Optional[Mapping[str, int]] = None,
    holidays: HolidayInput = None,
    anchor_weekend_live: bool = True,
) -> List[TimelineTask]:
    """
    Back-to-back schedule ending on the live date.

    Walks the tasks from last to first: the last task ends on the anchor and
    keeps its full duration, every earlier task ends on the working day before
    its successor starts. Declared dependencies are ignored and the output keeps
    input order.
    """
    if not tasks or not live_date:
        return []

    calendar = WorkCalendarEngine(holidays)
    anchor = parse_iso_date(live_date)
    if not anchor_weekend_live and calendar.is_non_working_day(anchor):
        anchor = calendar.previous_working_day(anchor)

    dated: List[TimelineTask] = []
    next_start = anchor
    last_index = len(tasks) - 1
    for index in range(last_index, -1, -1):
        task = tasks[index]
        duration = effective_duration(task, duration_overrides)
        if index == last_index:
            end = anchor
            start = calendar.subtract_working_days(anchor, duration - 1)
        else:
            end = calendar.previous_working_day(next_start)
            start = calendar.subtract_working_days(next_start, duration)

        dated.append(
            TimelineTask.from_task(
                task,
                duration=duration,
                start=to_iso(start),
                end=to_iso(end),
            )
        )
        next_start = start

    dated.reverse()
    logger.debug("Sequential timeline: %d tasks ending %s", len(dated), to_iso(anchor))
    return dated


__all__ = ["build_asset_timeline_sequential"]
