from __future__ import annotations

from typing import Optional

from core.models import Dependency, DependencyType, Holiday, Task, TaskOwner, generate_id
from infra.db.models import HolidayORM, TaskDependencyORM, TaskORM


def task_to_orm(task: Task, position: int = 0) -> TaskORM:
    return TaskORM(
        id=task.id,
        asset_id=task.asset_id,
        asset_type=task.asset_type,
        position=position,
        name=task.name,
        duration_days=task.duration,
        owner=TaskOwner(task.owner),
        is_custom=task.is_custom,
    )


def task_from_orm(obj: TaskORM) -> Task:
    return Task(
        id=obj.id,
        name=obj.name,
        duration=obj.duration_days,
        owner=obj.owner,
        asset_id=obj.asset_id,
        asset_type=obj.asset_type or "",
        is_custom=bool(obj.is_custom),
    )


def dependency_to_orm(
    successor_id: str,
    dep: Dependency,
    seq: int = 0,
    dep_id: Optional[str] = None,
) -> TaskDependencyORM:
    return TaskDependencyORM(
        id=dep_id or generate_id(),
        predecessor_task_id=dep.predecessor_id,
        successor_task_id=successor_id,
        dependency_type=DependencyType(dep.type),
        lag_days=dep.lag,
        seq=seq,
    )


def dependency_from_orm(obj: TaskDependencyORM) -> Dependency:
    return Dependency(
        predecessor_id=obj.predecessor_task_id,
        type=obj.dependency_type,
        lag=obj.lag_days,
    )


def holiday_to_orm(holiday: Holiday) -> HolidayORM:
    return HolidayORM(id=holiday.id, date=holiday.date, name=holiday.name)


def holiday_from_orm(obj: HolidayORM) -> Holiday:
    return Holiday(id=obj.id, date=obj.date, name=obj.name or "")


__all__ = [
    "task_to_orm",
    "task_from_orm",
    "dependency_to_orm",
    "dependency_from_orm",
    "holiday_to_orm",
    "holiday_from_orm",
]
