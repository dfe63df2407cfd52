from .scheduling import SchedulingEngine, FeatureFlags, load_feature_flags
from .scheduling_service import SchedulingService
from .work_calendar.engine import WorkCalendarEngine
from .work_calendar.service import HolidayCalendarService

__all__ = [
    "SchedulingEngine",
    "FeatureFlags",
    "load_feature_flags",
    "SchedulingService",
    "WorkCalendarEngine",
    "HolidayCalendarService",
]
