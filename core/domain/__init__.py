from core.domain.calendar import Holiday
from core.domain.enums import CalculatorKind, DependencyType, TaskOwner
from core.domain.identifiers import generate_id
from core.domain.task import Dependency, Task
from core.domain.timeline import TimelineTask

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
