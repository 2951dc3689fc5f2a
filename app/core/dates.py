from datetime import UTC, date, datetime
from enum import Enum


def utc_now() -> datetime:
    """Aware UTC, for TIMESTAMP WITH TIME ZONE columns."""
    return datetime.now(UTC)


class DayOfWeek(str, Enum):
    MONDAY = "lundi"
    TUESDAY = "mardi"
    WEDNESDAY = "mercredi"
    THURSDAY = "jeudi"
    FRIDAY = "vendredi"
    SATURDAY = "samedi"
    SUNDAY = "dimanche"

    @classmethod
    def from_date(cls, d: date) -> "DayOfWeek":
        return _WEEK[d.weekday()]

    @property
    def weekday(self) -> int:
        """0 for Monday through 6 for Sunday."""
        return _WEEK.index(self)


_WEEK = list(DayOfWeek)
