from __future__ import annotations

from enum import Enum


class DependencyType(str, Enum):
    FINISH_TO_START = "FS"
    START_TO_START = "SS"
    FINISH_TO_FINISH = "FF"

    @classmethod
    def parse(cls, value) -> "DependencyType | None":
        """Return the matching member, or None for unknown values."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        normalized = str(value).strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return None


class TaskOwner(str, Enum):
    CLIENT = "c"
    MMM = "m"
    AGENCY = "a"
    LIVE = "l"


class CalculatorKind(str, Enum):
    SEQUENTIAL = "sequential"
    DAG = "dag"


__all__ = ["DependencyType", "TaskOwner", "CalculatorKind"]
