# core/interfaces.py
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Tuple

from core.models import Dependency, Holiday, Task


class TaskRepository(ABC):
    @abstractmethod
    def add(self, task: Task, position: Optional[int] = None) -> None: ...

    @abstractmethod
    def get(self, task_id: str) -> Optional[Task]: ...

    @abstractmethod
    def list_by_asset(self, asset_id: str) -> List[Task]:
        """Tasks of one asset in their schedule order."""

    @abstractmethod
    def set_schedule(self, task_id: str, start_date: date, end_date: date) -> None: ...

    @abstractmethod
    def get_schedule(self, task_id: str) -> Tuple[Optional[date], Optional[date]]: ...

    @abstractmethod
    def delete(self, task_id: str) -> None: ...


class DependencyRepository(ABC):
    @abstractmethod
    def add(self, successor_id: str, dependency: Dependency) -> str: ...

    @abstractmethod
    def list_by_successor(self, successor_id: str) -> List[Dependency]: ...

    @abstractmethod
    def list_by_asset(self, asset_id: str) -> dict[str, List[Dependency]]:
        """Dependencies of every task in the asset, keyed by successor id."""

    @abstractmethod
    def delete_by_task(self, task_id: str) -> None: ...


class HolidayRepository(ABC):
    @abstractmethod
    def add(self, holiday: Holiday) -> None: ...

    @abstractmethod
    def get_by_date(self, day: date) -> Optional[Holiday]: ...

    @abstractmethod
    def list_all(self) -> List[Holiday]: ...

    @abstractmethod
    def delete(self, holiday_id: str) -> None: ...


__all__ = ["TaskRepository", "DependencyRepository", "HolidayRepository"]
