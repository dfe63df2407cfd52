from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from core.domain.enums import TaskOwner
from core.domain.task import Dependency, Task


@dataclass(frozen=True)
class TimelineTask:
    """A task with calendar dates assigned; start/end are ISO strings."""

    id: str
    name: str
    duration: int
    owner: TaskOwner
    asset_id: str
    asset_type: str
    is_custom: bool
    start: str
    end: str
    progress: int = 0
    dependencies: Tuple[Dependency, ...] = field(default_factory=tuple)
    is_critical: Optional[bool] = None
    total_float: Optional[int] = None
    earliest_start: Optional[int] = None
    latest_start: Optional[int] = None

    @staticmethod
    def from_task(
        task: Task,
        *,
        duration: int,
        start: str,
        end: str,
        dependencies=None,
        **cpm_fields,
    ) -> "TimelineTask":
        return TimelineTask(
            id=task.id,
            name=task.name,
            duration=duration,
            owner=task.owner,
            asset_id=task.asset_id,
            asset_type=task.asset_type,
            is_custom=task.is_custom,
            start=start,
            end=end,
            progress=0,
            dependencies=tuple(task.dependencies if dependencies is None else dependencies),
            **cpm_fields,
        )


__all__ = ["TimelineTask"]
