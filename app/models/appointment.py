from datetime import date, datetime, time
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Column, Field, SQLModel

from app.core.dates import utc_now


class AppointmentStatus(str, Enum):
    PLANNED = "planifié"
    CONFIRMED = "confirmé"
    CANCELLED = "annulé"
    IN_PROGRESS = "en_cours"
    DONE = "terminé"


class Appointment(SQLModel, table=True):
    """Read-only here: appointments are booked by the appointment service."""

    __tablename__ = "appointments"
    id: int | None = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True, ondelete="CASCADE")
    patient_id: int = Field(index=True)
    appointment_date: date = Field(index=True)
    start_time: time
    duration_minutes: int = Field(default=30, sa_column_kwargs={"server_default": "30"})
    status: AppointmentStatus = Field(
        default=AppointmentStatus.PLANNED,
        sa_column=Column(
            sa.Enum(
                AppointmentStatus,
                name="appointment_status",
                native_enum=False,
                values_callable=lambda statuses: [s.value for s in statuses],
            ),
            nullable=False,
            server_default=AppointmentStatus.PLANNED.value,
        ),
    )
    reason: str | None = None
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(sa.DateTime(timezone=True), nullable=False),
    )
