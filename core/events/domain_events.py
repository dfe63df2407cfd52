"""Notifications raised after persisted schedule data changes."""
from __future__ import annotations

from core.events.signal import Signal


class DomainEvents:
    def __init__(self) -> None:
        self.schedule_changed: Signal[str] = Signal()   # asset_id
        self.holidays_changed: Signal[str] = Signal()   # holiday_id


# SINGLE global instance
domain_events = DomainEvents()
