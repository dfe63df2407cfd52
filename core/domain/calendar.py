from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from core.domain.identifiers import generate_id


@dataclass
class Holiday:
    id: str
    date: date
    name: str = ""

    @staticmethod
    def create(date: date, name: str = "") -> "Holiday":
        return Holiday(id=generate_id(), date=date, name=name)


__all__ = ["Holiday"]
