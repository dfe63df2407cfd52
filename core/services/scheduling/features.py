from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import date
from typing import Mapping, Optional

from core.services.work_calendar.engine import HolidayInput, calculate_working_days_between


_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class FeatureFlags:
    use_dag_calculator: bool = True
    force_dag_calculator: bool = False
    allow_weekend_live_date: bool = True
    adjust_for_holidays: bool = True
    strict_overlap_calc: bool = False
    debug_timeline_calculations: bool = False

    def emergency_rollback(self) -> "FeatureFlags":
        return replace(
            self,
            use_dag_calculator=False,
            force_dag_calculator=False,
            allow_weekend_live_date=False,
            strict_overlap_calc=False,
            debug_timeline_calculations=False,
        )


_ENV_KEYS = {
    "use_dag_calculator": "TL_USE_DAG_CALCULATOR",
    "force_dag_calculator": "TL_FORCE_DAG_CALCULATOR",
    "allow_weekend_live_date": "TL_ALLOW_WEEKEND_LIVE_DATE",
    "adjust_for_holidays": "TL_ADJUST_FOR_HOLIDAYS",
    "strict_overlap_calc": "TL_STRICT_OVERLAP_CALC",
    "debug_timeline_calculations": "TL_DEBUG_TIMELINE",
}


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


def load_feature_flags(environ: Optional[Mapping[str, str]] = None) -> FeatureFlags:
    env = os.environ if environ is None else environ
    defaults = FeatureFlags()
    values = {
        field_name: _env_flag(env, env_key, getattr(defaults, field_name))
        for field_name, env_key in _ENV_KEYS.items()
    }
    return FeatureFlags(**values)


def compute_overlap_days(
    new_start: date,
    predecessor_end: date,
    holidays: HolidayInput = None,
    strict: bool = False,
) -> int:
    """
    Overlap for an FS link created by dragging a successor onto its predecessor.
    Legacy mode counts one extra day for backward-compatible visuals.
    """
    if predecessor_end < new_start:
        return 0
    # exclusive of predecessor_end
    base = calculate_working_days_between(new_start, predecessor_end, holidays)
    base -= calculate_working_days_between(predecessor_end, predecessor_end, holidays)
    overlap = base if strict else base + 1
    return max(0, overlap)


__all__ = ["FeatureFlags", "load_feature_flags", "compute_overlap_days"]
