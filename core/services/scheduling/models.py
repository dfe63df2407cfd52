from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from core.models import CalculatorKind, Dependency, Task, TimelineTask


@dataclass
class TaskNode:
    """A task inside one graph build. CPM timings are kept in CPMTiming, not here."""

    id: str
    task: Task
    duration: int
    dependencies: List[Dependency]
    successors: List[str] = field(default_factory=list)
    implicit: bool = False


@dataclass
class TaskGraph:
    nodes: Dict[str, TaskNode]
    start_nodes: List[str]
    end_nodes: List[str]
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    @staticmethod
    def invalid(errors: List[str]) -> "TaskGraph":
        return TaskGraph(nodes={}, start_nodes=[], end_nodes=[], is_valid=False, errors=list(errors))


@dataclass
class CPMTiming:
    earliest_start: int = 0
    earliest_finish: int = 0
    latest_start: int = 0
    latest_finish: int = 0
    total_float: int = 0
    is_critical: bool = False


@dataclass
class CPMResult:
    project_duration: int
    critical_path: List[str]
    success: bool
    errors: List[str] = field(default_factory=list)
    timings: Dict[str, CPMTiming] = field(default_factory=dict)

    @staticmethod
    def failed(errors: List[str]) -> "CPMResult":
        return CPMResult(project_duration=0, critical_path=[], success=False, errors=list(errors))


@dataclass(frozen=True)
class TaskTimingInfo:
    node_id: str
    earliest_start: int
    earliest_finish: int
    latest_start: int
    latest_finish: int
    total_float: int
    is_critical: bool


@dataclass
class CompressionOpportunities:
    tasks_with_float: List[TaskTimingInfo]
    total_float_available: int
    max_compression_possible: int
    recommendations: List[str]


@dataclass
class DependencyValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)

    @property
    def error(self) -> Optional[str]:
        return self.errors[0] if self.errors else None


@dataclass(frozen=True)
class DependencyIssue:
    task_id: str
    dependency_index: int
    error: str
    severity: str = "error"


@dataclass(frozen=True)
class DateAssignmentOptions:
    live_date: date
    holidays: Tuple[date, ...] = ()
    anchor_weekend_live: bool = True
    adjust_for_holidays: bool = True


@dataclass
class DateAssignmentResult:
    tasks: List[TimelineTask]
    project_start_date: str
    project_end_date: str
    success: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @staticmethod
    def failed(errors: List[str]) -> "DateAssignmentResult":
        return DateAssignmentResult(
            tasks=[], project_start_date="", project_end_date="", success=False, errors=list(errors)
        )


@dataclass
class ScheduleResult:
    tasks: List[TimelineTask]
    critical_path: List[str]
    project_duration: int
    calculator: CalculatorKind
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class TimelineComparison:
    identical: bool
    differences: List[str]
    compression_achieved: Optional[int] = None


__all__ = [
    "TaskNode",
    "TaskGraph",
    "CPMTiming",
    "CPMResult",
    "TaskTimingInfo",
    "CompressionOpportunities",
    "DependencyValidationResult",
    "DependencyIssue",
    "DateAssignmentOptions",
    "DateAssignmentResult",
    "ScheduleResult",
    "TimelineComparison",
]
