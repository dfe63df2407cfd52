# core/services/work_calendar/service.py
from __future__ import annotations
from datetime import date
from typing import FrozenSet, List
from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.models import Holiday
from core.interfaces import HolidayRepository
from core.exceptions import NotFoundError, ValidationError
from core.services.work_calendar.engine import DateLike, WorkCalendarEngine, parse_iso_date


class HolidayCalendarService:
    """
    High-level API for the holiday list used by every schedule run.
    The engine is read-only; all writes go through this service.
    """

    def __init__(self, session: Session, holiday_repo: HolidayRepository):
        self._session: Session = session
        self._repo: HolidayRepository = holiday_repo

    def list_holidays(self) -> List[Holiday]:
        return sorted(self._repo.list_all(), key=lambda h: h.date)

    def holiday_dates(self) -> FrozenSet[date]:
        return frozenset(h.date for h in self._repo.list_all())

    def calendar(self) -> WorkCalendarEngine:
        return WorkCalendarEngine(self.holiday_dates())

    def add_holiday(self, date_: DateLike, name: str = "") -> Holiday:
        day = parse_iso_date(date_)
        if self._repo.get_by_date(day) is not None:
            raise ValidationError(
                f"A holiday is already defined on {day.isoformat()}.",
                code="HOLIDAY_EXISTS",
            )
        holiday = Holiday.create(date=day, name=(name or "").strip())
        self._repo.add(holiday)
        self._session.commit()
        domain_events.holidays_changed.emit(holiday.id)
        return holiday

    def delete_holiday(self, holiday_id: str) -> None:
        if not any(h.id == holiday_id for h in self._repo.list_all()):
            raise NotFoundError("Holiday not found.", code="HOLIDAY_NOT_FOUND")
        self._repo.delete(holiday_id)
        self._session.commit()
        domain_events.holidays_changed.emit(holiday_id)
