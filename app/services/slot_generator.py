"""Turn a doctor's weekly availability windows into bookable fixed-length slots.

Everything here works on minutes since midnight and is free of I/O, so the
same inputs always give the same slots in the same order.
"""
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import time

from app.core.dates import DayOfWeek

MINUTES_PER_DAY = 24 * 60
DEFAULT_SLOT_LENGTH_MINUTES = 30


class InvalidArgumentError(ValueError):
    """Raised for arguments that would make slot generation meaningless."""


@dataclass(frozen=True)
class AvailabilityWindow:
    day: DayOfWeek
    start_minute: int
    end_minute: int


@dataclass(frozen=True)
class Booking:
    start_minute: int
    duration_minutes: int

    @property
    def end_minute(self) -> int:
        return self.start_minute + self.duration_minutes


@dataclass(frozen=True)
class Slot:
    start_minute: int
    end_minute: int

    def to_json(self) -> dict[str, str]:
        return {
            "heureDebut": format_minutes(self.start_minute),
            "heureFin": format_minutes(self.end_minute),
        }


def time_to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def format_minutes(minutes: int) -> str:
    """HH:MM for a minute-of-day offset; the end of day renders as 24:00."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Half-open interval intersection: touching boundaries do not overlap."""
    return start < other_end and end > other_start


def generate_slots(
    windows: Iterable[AvailabilityWindow],
    bookings: Iterable[Booking],
    slot_length_minutes: int = DEFAULT_SLOT_LENGTH_MINUTES,
) -> list[Slot]:
    """Return the free slots of `slot_length_minutes` inside `windows`.

    Windows are walked in the order given (callers sort them if they need a
    day-wide chronological list). A slot must fit entirely inside its window
    and must not overlap any booking. Overlapping windows are not merged, so
    they yield duplicate slots.
    """
    if slot_length_minutes <= 0:
        raise InvalidArgumentError(
            f"slot_length_minutes must be a positive integer, got {slot_length_minutes}"
        )
    booked = [(b.start_minute, b.end_minute) for b in bookings]
    slots: list[Slot] = []
    for window in windows:
        start = window.start_minute
        while start + slot_length_minutes <= window.end_minute:
            end = start + slot_length_minutes
            if not any(overlaps(start, end, b_start, b_end) for b_start, b_end in booked):
                slots.append(Slot(start_minute=start, end_minute=end))
            start = end
    return slots
