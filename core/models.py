from __future__ import annotations

from core.domain import (
    CalculatorKind,
    Dependency,
    DependencyType,
    Holiday,
    Task,
    TaskOwner,
    TimelineTask,
    generate_id,
)

__all__ = [
    "generate_id",
    "DependencyType",
    "TaskOwner",
    "CalculatorKind",
    "Dependency",
    "Task",
    "TimelineTask",
    "Holiday",
]
