from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.orm import Session

from core.services.scheduling import FeatureFlags, SchedulingEngine, load_feature_flags
from core.services.scheduling_service import SchedulingService
from core.services.work_calendar.service import HolidayCalendarService
from infra.db.repositories import (
    SqlAlchemyDependencyRepository,
    SqlAlchemyHolidayRepository,
    SqlAlchemyTaskRepository,
)


def build_services(session: Session, flags: Optional[FeatureFlags] = None) -> dict[str, Any]:
    """Wire repositories and services around one session."""
    task_repo = SqlAlchemyTaskRepository(session)
    dependency_repo = SqlAlchemyDependencyRepository(session)
    holiday_repo = SqlAlchemyHolidayRepository(session)

    engine = SchedulingEngine(flags if flags is not None else load_feature_flags())
    scheduling_service = SchedulingService(
        session,
        task_repo,
        dependency_repo,
        holiday_repo,
        engine,
    )
    holiday_service = HolidayCalendarService(session, holiday_repo)

    return {
        "task_repo": task_repo,
        "dependency_repo": dependency_repo,
        "holiday_repo": holiday_repo,
        "engine": engine,
        "scheduling_service": scheduling_service,
        "holiday_service": holiday_service,
    }


__all__ = ["build_services"]
