import subprocess
import sys
from datetime import time
from pathlib import Path

import pytest

from app.core.dates import DayOfWeek
from app.services.slot_generator import (
    AvailabilityWindow,
    Booking,
    InvalidArgumentError,
    Slot,
    format_minutes,
    generate_slots,
    overlaps,
    time_to_minutes,
)

ROOT = Path(__file__).resolve().parents[1]


def _window(start: str, end: str, day: DayOfWeek = DayOfWeek.MONDAY) -> AvailabilityWindow:
    return AvailabilityWindow(
        day=day,
        start_minute=time_to_minutes(time.fromisoformat(start)),
        end_minute=time_to_minutes(time.fromisoformat(end)),
    )


def _booking(start: str, duration: int = 30) -> Booking:
    return Booking(start_minute=time_to_minutes(time.fromisoformat(start)), duration_minutes=duration)


def _labels(slots: list[Slot]) -> list[str]:
    return [f"{s.to_json()['heureDebut']}-{s.to_json()['heureFin']}" for s in slots]


def test_morning_window_without_bookings_yields_half_hour_slots() -> None:
    slots = generate_slots([_window("09:00", "12:00")], [], 30)

    assert _labels(slots) == [
        "09:00-09:30",
        "09:30-10:00",
        "10:00-10:30",
        "10:30-11:00",
        "11:00-11:30",
        "11:30-12:00",
    ]


def test_booked_slot_is_excluded() -> None:
    slots = generate_slots([_window("09:00", "10:00")], [_booking("09:30")], 30)

    assert slots == [Slot(start_minute=540, end_minute=570)]


def test_trailing_partial_slot_is_dropped() -> None:
    slots = generate_slots([_window("09:00", "09:45")], [], 30)

    assert _labels(slots) == ["09:00-09:30"]


def test_booking_touching_slot_boundary_keeps_the_slot() -> None:
    slots = generate_slots([_window("09:30", "10:00")], [_booking("10:00")], 30)

    assert _labels(slots) == ["09:30-10:00"]


@pytest.mark.parametrize("length", [0, -30])
def test_non_positive_slot_length_is_rejected(length: int) -> None:
    with pytest.raises(InvalidArgumentError):
        generate_slots([_window("09:00", "12:00")], [], length)


def test_invalid_length_is_rejected_even_without_windows() -> None:
    with pytest.raises(InvalidArgumentError):
        generate_slots([], [], 0)


def test_no_windows_yields_no_slots() -> None:
    assert generate_slots([], [_booking("09:00"), _booking("14:00", 60)], 30) == []


def test_no_bookings_yields_every_slot_of_the_windows() -> None:
    windows = [_window("08:00", "10:00"), _window("14:00", "15:00")]

    assert _labels(generate_slots(windows, [], 30)) == [
        "08:00-08:30",
        "08:30-09:00",
        "09:00-09:30",
        "09:30-10:00",
        "14:00-14:30",
        "14:30-15:00",
    ]


@pytest.mark.parametrize(
    ("booking_start", "booking_duration"),
    [
        ("09:00", 90),  # booking contains the slot
        ("09:35", 10),  # slot contains the booking
        ("09:15", 30),  # overlaps the slot start
        ("09:45", 30),  # overlaps the slot end
        ("09:30", 30),  # identical
    ],
)
def test_every_kind_of_overlap_removes_the_slot(booking_start: str, booking_duration: int) -> None:
    slots = generate_slots([_window("09:30", "10:00")], [_booking(booking_start, booking_duration)], 30)

    assert slots == []


def test_windows_are_processed_in_input_order() -> None:
    windows = [_window("14:00", "15:00"), _window("09:00", "10:00")]

    assert _labels(generate_slots(windows, [], 30)) == [
        "14:00-14:30",
        "14:30-15:00",
        "09:00-09:30",
        "09:30-10:00",
    ]


def test_duplicate_windows_produce_duplicate_slots() -> None:
    windows = [_window("09:00", "10:00"), _window("09:00", "10:00")]

    slots = generate_slots(windows, [], 30)

    assert _labels(slots) == ["09:00-09:30", "09:30-10:00", "09:00-09:30", "09:30-10:00"]


def test_empty_or_inverted_window_yields_nothing() -> None:
    windows = [_window("09:00", "09:00"), _window("11:00", "10:00")]

    assert generate_slots(windows, [], 30) == []


def test_bookings_outside_windows_are_ignored() -> None:
    slots = generate_slots([_window("09:00", "10:00")], [_booking("18:00", 60)], 30)

    assert len(slots) == 2


def test_custom_slot_length() -> None:
    slots = generate_slots([_window("09:00", "10:00")], [_booking("09:15", 15)], 15)

    assert _labels(slots) == ["09:00-09:15", "09:30-09:45", "09:45-10:00"]


def test_window_ending_at_midnight() -> None:
    window = AvailabilityWindow(day=DayOfWeek.FRIDAY, start_minute=23 * 60, end_minute=24 * 60)

    assert _labels(generate_slots([window], [], 30)) == ["23:00-23:30", "23:30-24:00"]


def test_generated_slots_never_overlap_bookings_and_fit_their_window() -> None:
    windows = [_window("08:00", "12:00"), _window("13:30", "18:10")]
    bookings = [_booking("08:10", 20), _booking("10:00", 45), _booking("13:00", 40), _booking("17:50", 5)]

    for length in (5, 15, 20, 30, 45, 60):
        for slot in generate_slots(windows, bookings, length):
            assert slot.end_minute - slot.start_minute == length
            assert not any(
                slot.start_minute < b.end_minute and slot.end_minute > b.start_minute for b in bookings
            )
            assert any(
                w.start_minute <= slot.start_minute and slot.end_minute <= w.end_minute for w in windows
            )


def test_generation_is_deterministic_and_leaves_inputs_untouched() -> None:
    windows = [_window("09:00", "12:00"), _window("14:00", "17:00")]
    bookings = [_booking("10:00"), _booking("15:15", 50)]
    windows_before = list(windows)
    bookings_before = list(bookings)

    first = generate_slots(windows, bookings, 30)
    second = generate_slots(windows, bookings, 30)

    assert first == second
    assert windows == windows_before
    assert bookings == bookings_before


def test_longer_slots_never_increase_the_count_without_bookings() -> None:
    windows = [_window("08:00", "12:00"), _window("13:00", "17:45")]

    counts = [len(generate_slots(windows, [], length)) for length in range(1, 241)]

    assert counts == sorted(counts, reverse=True)


@pytest.mark.parametrize("base", [5, 10, 15, 30])
def test_doubling_the_slot_length_never_increases_the_count(base: int) -> None:
    windows = [_window("08:00", "12:00"), _window("14:00", "18:00")]
    bookings = [_booking("08:40", 25), _booking("11:05", 10), _booking("15:00", 60)]

    counts = [len(generate_slots(windows, bookings, base * k)) for k in (1, 2, 4, 8)]

    assert counts == sorted(counts, reverse=True)


def test_three_clause_overlap_matches_half_open_overlap() -> None:
    def three_clause(slot_start: int, length: int, booking_start: int, booking_end: int) -> bool:
        return (
            (booking_start <= slot_start < booking_end)
            or (booking_start < slot_start + length <= booking_end)
            or (slot_start <= booking_start < slot_start + length)
        )

    for slot_start in range(0, 12):
        for length in range(1, 6):
            for booking_start in range(0, 12):
                for duration in range(1, 6):
                    booking_end = booking_start + duration
                    assert three_clause(slot_start, length, booking_start, booking_end) == overlaps(
                        slot_start, slot_start + length, booking_start, booking_end
                    )


def test_minute_helpers() -> None:
    assert time_to_minutes(time(9, 30, 59)) == 570
    assert format_minutes(0) == "00:00"
    assert format_minutes(545) == "09:05"
    assert format_minutes(24 * 60) == "24:00"
    assert Slot(start_minute=600, end_minute=630).to_json() == {"heureDebut": "10:00", "heureFin": "10:30"}


def test_generator_module_has_no_database_imports() -> None:
    code = (
        "import sys, app.services.slot_generator; "
        "assert 'sqlalchemy' not in sys.modules and 'sqlmodel' not in sys.modules"
    )
    result = subprocess.run([sys.executable, "-c", code], cwd=ROOT, capture_output=True, text=True)

    assert result.returncode == 0, result.stderr
