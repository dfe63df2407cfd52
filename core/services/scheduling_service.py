# core/services/scheduling_service.py
from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.exceptions import BusinessRuleError, DependencyValidationError, NotFoundError, ValidationError
from core.interfaces import DependencyRepository, HolidayRepository, TaskRepository
from core.models import Dependency, DependencyType, Task, TaskOwner
from core.services.scheduling.engine import SchedulingEngine
from core.services.scheduling.models import ScheduleResult
from core.services.scheduling.validator import dependency_validator
from core.services.work_calendar.engine import DateLike, parse_iso_date

logger = logging.getLogger(__name__)


class SchedulingService:
    """
    Persisted asset schedules:
    - tasks and dependencies are stored per asset, ordered by position
    - holidays come from the shared holiday table
    - recalculation runs the engine and writes start/end back in one commit
    """

    def __init__(
        self,
        session: Session,
        task_repo: TaskRepository,
        dependency_repo: DependencyRepository,
        holiday_repo: HolidayRepository,
        engine: Optional[SchedulingEngine] = None,
    ):
        self._session: Session = session
        self._task_repo: TaskRepository = task_repo
        self._dependency_repo: DependencyRepository = dependency_repo
        self._holiday_repo: HolidayRepository = holiday_repo
        self._engine: SchedulingEngine = engine or SchedulingEngine()

    # ---------------------------------------------------------------- tasks

    def add_task(
        self,
        asset_id: str,
        name: str,
        duration: int = 1,
        owner: TaskOwner = TaskOwner.MMM,
        asset_type: str = "",
        is_custom: bool = False,
        position: Optional[int] = None,
    ) -> Task:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Task name is required.", code="TASK_NAME_EMPTY")
        if duration < 1:
            raise ValidationError("Duration must be at least 1 working day.", code="TASK_DURATION_INVALID")

        task = Task.create(
            name=name,
            duration=duration,
            asset_id=asset_id,
            owner=TaskOwner(owner),
            asset_type=asset_type,
            is_custom=is_custom,
        )
        try:
            self._task_repo.add(task, position=position)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        return task

    def list_asset_tasks(self, asset_id: str) -> List[Task]:
        """Tasks of one asset in schedule order, with their stored dependencies."""
        tasks = self._task_repo.list_by_asset(asset_id)
        deps = self._dependency_repo.list_by_asset(asset_id)
        return [task.with_dependencies(deps.get(task.id, [])) for task in tasks]

    def delete_task(self, task_id: str) -> None:
        task = self._task_repo.get(task_id)
        if task is None:
            raise NotFoundError("Task not found.", code="TASK_NOT_FOUND")
        try:
            self._dependency_repo.delete_by_task(task_id)
            self._task_repo.delete(task_id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.schedule_changed.emit(task.asset_id)

    # --------------------------------------------------------- dependencies

    def add_dependency(
        self,
        successor_id: str,
        predecessor_id: str,
        dependency_type: DependencyType = DependencyType.FINISH_TO_START,
        lag: int = 0,
    ) -> Dependency:
        successor = self._task_repo.get(successor_id)
        if successor is None:
            raise NotFoundError("Successor task not found.", code="TASK_NOT_FOUND")
        predecessor = self._task_repo.get(predecessor_id)
        if predecessor is None:
            raise NotFoundError("Predecessor task not found.", code="TASK_NOT_FOUND")

        dependency = Dependency(
            predecessor_id=predecessor_id,
            type=DependencyType(dependency_type),
            lag=int(lag),
        )
        batch = self.list_asset_tasks(successor.asset_id)
        if predecessor.asset_id != successor.asset_id:
            batch = batch + [predecessor.with_dependencies(())]
        candidate = [
            task.with_dependencies(tuple(task.dependencies) + (dependency,))
            if task.id == successor_id
            else task
            for task in batch
        ]
        result = dependency_validator.validate_task_graph(candidate)
        if not result.valid:
            raise DependencyValidationError("\n".join(result.errors), code="DEPENDENCY_INVALID")

        try:
            self._dependency_repo.add(successor_id, dependency)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.schedule_changed.emit(successor.asset_id)
        return dependency

    # ------------------------------------------------------------- schedule

    def preview_asset_schedule(
        self,
        asset_id: str,
        live_date: DateLike,
        duration_overrides: Optional[Mapping[str, int]] = None,
    ) -> ScheduleResult:
        tasks = self.list_asset_tasks(asset_id)
        holidays = [h.date for h in self._holiday_repo.list_all()]
        return self._engine.calculate_timeline(tasks, live_date, duration_overrides, holidays)

    def recalculate_asset_schedule(
        self,
        asset_id: str,
        live_date: DateLike,
        duration_overrides: Optional[Mapping[str, int]] = None,
    ) -> ScheduleResult:
        """
        Full recalculation for one asset:
        - runs the engine over the stored tasks, dependencies and holidays
        - persists start/end on every task and commits
        - on engine failure nothing is written and BusinessRuleError is raised
        """
        result = self.preview_asset_schedule(asset_id, live_date, duration_overrides)
        if not result.success:
            self._session.rollback()
            raise BusinessRuleError("\n".join(result.errors), code="SCHEDULE_FAILED")

        try:
            for task in result.tasks:
                self._task_repo.set_schedule(
                    task.id, parse_iso_date(task.start), parse_iso_date(task.end)
                )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "Schedule recalculated for asset %s: %d tasks via %s calculator",
            asset_id,
            len(result.tasks),
            result.calculator.value,
        )
        domain_events.schedule_changed.emit(asset_id)
        return result


__all__ = ["SchedulingService"]
