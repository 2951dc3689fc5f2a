import logging
from datetime import date, time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dates import DayOfWeek, utc_now
from app.models.appointment import Appointment, AppointmentStatus
from app.models.availability import Availability, AvailabilityCreate, AvailabilityUpdate
from app.models.doctor import Doctor
from app.services.slot_generator import (
    AvailabilityWindow,
    Booking,
    Slot,
    generate_slots,
    time_to_minutes,
)

logger = logging.getLogger(__name__)


class AvailabilityOverlapError(Exception):
    """The window would overlap another window of the same doctor on the same day."""


def _describe(window: Availability) -> str:
    return f"{window.day.value} {window.start_time:%H:%M}-{window.end_time:%H:%M}"


async def get_doctor(session: AsyncSession, doctor_id: int) -> Doctor | None:
    result = await session.execute(select(Doctor).where(Doctor.id == doctor_id))
    return result.scalar_one_or_none()


async def get_window(session: AsyncSession, window_id: int) -> Availability | None:
    result = await session.execute(select(Availability).where(Availability.id == window_id))
    return result.scalar_one_or_none()


async def list_windows_for_doctor(session: AsyncSession, doctor_id: int) -> list[Availability]:
    """All windows of a doctor, Monday first, then by start time."""
    result = await session.execute(select(Availability).where(Availability.doctor_id == doctor_id))
    windows = list(result.scalars().all())
    return sorted(windows, key=lambda w: (w.day.weekday, w.start_time))


async def list_windows_for_day(
    session: AsyncSession, doctor_id: int, day: DayOfWeek
) -> list[Availability]:
    result = await session.execute(
        select(Availability)
        .where(Availability.doctor_id == doctor_id, Availability.day == day)
        .order_by(Availability.start_time)
    )
    return list(result.scalars().all())


async def has_overlapping_window(
    session: AsyncSession,
    doctor_id: int,
    day: DayOfWeek,
    start: time,
    end: time,
    exclude_id: int | None = None,
) -> bool:
    q = select(Availability.id).where(
        Availability.doctor_id == doctor_id,
        Availability.day == day,
        Availability.start_time < end,
        Availability.end_time > start,
    )
    if exclude_id is not None:
        q = q.where(Availability.id != exclude_id)
    result = await session.execute(q.limit(1))
    return result.first() is not None


async def create_window(session: AsyncSession, data: AvailabilityCreate) -> Availability:
    # Check then insert is not atomic: two concurrent creates for the same doctor
    # and day can both pass. Postgres would need an exclusion constraint to close it.
    if await has_overlapping_window(
        session, data.doctor_id, data.day, data.start_time, data.end_time
    ):
        raise AvailabilityOverlapError(
            "An availability already exists for this doctor on this day and time range"
        )
    window = Availability(
        doctor_id=data.doctor_id,
        day=data.day,
        start_time=data.start_time,
        end_time=data.end_time,
    )
    session.add(window)
    await session.flush()
    await session.refresh(window)
    logger.info("[AUDIT] Availability created id=%s doctor=%s %s", window.id, window.doctor_id, _describe(window))
    return window


async def update_window(
    session: AsyncSession, window_id: int, data: AvailabilityUpdate
) -> Availability | None:
    window = await get_window(session, window_id)
    if not window:
        return None
    if await has_overlapping_window(
        session, window.doctor_id, data.day, data.start_time, data.end_time, exclude_id=window_id
    ):
        raise AvailabilityOverlapError("This change would overlap another availability")
    previous = _describe(window)
    window.day = data.day
    window.start_time = data.start_time
    window.end_time = data.end_time
    window.updated_at = utc_now()
    session.add(window)
    await session.flush()
    await session.refresh(window)
    logger.info(
        "[AUDIT] Availability updated id=%s doctor=%s old=%s new=%s",
        window.id,
        window.doctor_id,
        previous,
        _describe(window),
    )
    return window


async def delete_window(session: AsyncSession, window_id: int) -> bool:
    window = await get_window(session, window_id)
    if not window:
        return False
    doctor_id = window.doctor_id
    description = _describe(window)
    await session.delete(window)
    await session.flush()
    logger.info("[AUDIT] Availability deleted id=%s doctor=%s %s", window_id, doctor_id, description)
    return True


async def list_active_bookings(session: AsyncSession, doctor_id: int, d: date) -> list[Booking]:
    """Appointments of the doctor on that date, cancelled ones excluded."""
    result = await session.execute(
        select(Appointment.start_time, Appointment.duration_minutes).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == d,
            Appointment.status != AppointmentStatus.CANCELLED,
        )
    )
    return [
        Booking(start_minute=time_to_minutes(start), duration_minutes=duration)
        for start, duration in result.all()
    ]


async def get_available_slots(
    session: AsyncSession,
    doctor_id: int,
    d: date,
    slot_length_minutes: int,
    client_ip: str | None = None,
) -> list[Slot]:
    day = DayOfWeek.from_date(d)
    rows = await list_windows_for_day(session, doctor_id, day)
    windows = [
        AvailabilityWindow(
            day=row.day,
            start_minute=time_to_minutes(row.start_time),
            end_minute=time_to_minutes(row.end_time),
        )
        for row in rows
    ]
    bookings = await list_active_bookings(session, doctor_id, d) if windows else []
    slots = generate_slots(windows, bookings, slot_length_minutes)
    logger.info(
        "Slots lookup doctor=%s date=%s day=%s slots=%d ip=%s",
        doctor_id,
        d.isoformat(),
        day.value,
        len(slots),
        client_ip or "-",
    )
    return slots
