# infra/db/repositories.py
from __future__ import annotations
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy import select, or_, func

from core.interfaces import DependencyRepository, HolidayRepository, TaskRepository
from core.models import Dependency, Holiday, Task
from infra.db.mappers import (
    dependency_from_orm,
    dependency_to_orm,
    holiday_from_orm,
    holiday_to_orm,
    task_from_orm,
    task_to_orm,
)
from infra.db.models import HolidayORM, TaskDependencyORM, TaskORM


class SqlAlchemyTaskRepository(TaskRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, task: Task, position: Optional[int] = None) -> None:
        if position is None:
            stmt = select(func.max(TaskORM.position)).where(TaskORM.asset_id == task.asset_id)
            current = self.session.execute(stmt).scalar()
            position = 0 if current is None else current + 1
        self.session.add(task_to_orm(task, position=position))

    def get(self, task_id: str) -> Optional[Task]:
        obj = self.session.get(TaskORM, task_id)
        return task_from_orm(obj) if obj else None

    def list_by_asset(self, asset_id: str) -> List[Task]:
        stmt = (
            select(TaskORM)
            .where(TaskORM.asset_id == asset_id)
            .order_by(TaskORM.position, TaskORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [task_from_orm(row) for row in rows]

    def set_schedule(self, task_id: str, start_date: date, end_date: date) -> None:
        obj = self.session.get(TaskORM, task_id)
        if obj is None:
            return
        obj.start_date = start_date
        obj.end_date = end_date

    def get_schedule(self, task_id: str) -> Tuple[Optional[date], Optional[date]]:
        obj = self.session.get(TaskORM, task_id)
        if obj is None:
            return None, None
        return obj.start_date, obj.end_date

    def delete(self, task_id: str) -> None:
        self.session.query(TaskORM).filter_by(id=task_id).delete()


class SqlAlchemyDependencyRepository(DependencyRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, successor_id: str, dependency: Dependency) -> str:
        stmt = select(func.max(TaskDependencyORM.seq)).where(
            TaskDependencyORM.successor_task_id == successor_id
        )
        current = self.session.execute(stmt).scalar()
        obj = dependency_to_orm(successor_id, dependency, seq=0 if current is None else current + 1)
        self.session.add(obj)
        return obj.id

    def list_by_successor(self, successor_id: str) -> List[Dependency]:
        stmt = (
            select(TaskDependencyORM)
            .where(TaskDependencyORM.successor_task_id == successor_id)
            .order_by(TaskDependencyORM.seq)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [dependency_from_orm(row) for row in rows]

    def list_by_asset(self, asset_id: str) -> Dict[str, List[Dependency]]:
        task_ids = select(TaskORM.id).where(TaskORM.asset_id == asset_id)
        stmt = (
            select(TaskDependencyORM)
            .where(TaskDependencyORM.successor_task_id.in_(task_ids))
            .order_by(TaskDependencyORM.successor_task_id, TaskDependencyORM.seq)
        )
        result: Dict[str, List[Dependency]] = {}
        for row in self.session.execute(stmt).scalars().all():
            result.setdefault(row.successor_task_id, []).append(dependency_from_orm(row))
        return result

    def delete_by_task(self, task_id: str) -> None:
        self.session.query(TaskDependencyORM).filter(
            or_(
                TaskDependencyORM.predecessor_task_id == task_id,
                TaskDependencyORM.successor_task_id == task_id,
            )
        ).delete(synchronize_session=False)


class SqlAlchemyHolidayRepository(HolidayRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, holiday: Holiday) -> None:
        self.session.add(holiday_to_orm(holiday))

    def get_by_date(self, day: date) -> Optional[Holiday]:
        stmt = select(HolidayORM).where(HolidayORM.date == day)
        obj = self.session.execute(stmt).scalars().first()
        return holiday_from_orm(obj) if obj else None

    def list_all(self) -> List[Holiday]:
        stmt = select(HolidayORM).order_by(HolidayORM.date)
        rows = self.session.execute(stmt).scalars().all()
        return [holiday_from_orm(row) for row in rows]

    def delete(self, holiday_id: str) -> None:
        self.session.query(HolidayORM).filter_by(id=holiday_id).delete()
