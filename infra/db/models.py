# infra/db/models.py
from __future__ import annotations
import datetime as dt
from datetime import date
from typing import Optional

from sqlalchemy import (
    String,
    Date,
    Boolean,
    ForeignKey,
    Enum as SAEnum,
    Index,
    Integer,
)
from sqlalchemy.orm import Mapped, mapped_column

from infra.db.base import Base
from core.models import DependencyType, TaskOwner


class TaskORM(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    asset_id: Mapped[str] = mapped_column(String, nullable=False)
    asset_type: Mapped[str] = mapped_column(String, default="")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    owner: Mapped[TaskOwner] = mapped_column(
        SAEnum(TaskOwner), default=TaskOwner.MMM, nullable=False
    )
    is_custom: Mapped[bool] = mapped_column(Boolean, default=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

Index("idx_tasks_asset_position", TaskORM.asset_id, TaskORM.position)


class TaskDependencyORM(Base):
    __tablename__ = "task_dependencies"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    predecessor_task_id: Mapped[str] = mapped_column(String, ForeignKey("tasks.id",ondelete="CASCADE"), nullable=False)
    successor_task_id: Mapped[str] = mapped_column(String, ForeignKey("tasks.id",ondelete="CASCADE"), nullable=False)
    dependency_type: Mapped[DependencyType] = mapped_column(
        SAEnum(DependencyType), default=DependencyType.FINISH_TO_START, nullable=False
    )
    lag_days: Mapped[int] = mapped_column(nullable=False, default=0)
    # keeps the declared order of a task's dependencies
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
Index("idx_dep_predecessor", TaskDependencyORM.predecessor_task_id)
Index("idx_dep_successor", TaskDependencyORM.successor_task_id)


class HolidayORM(Base):
    __tablename__ = "holidays"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, default="")

Index("idx_holiday_date", HolidayORM.date)
