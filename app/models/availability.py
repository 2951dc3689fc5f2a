from datetime import datetime, time

import sqlalchemy as sa
from sqlmodel import Column, Field, SQLModel

from app.core.dates import DayOfWeek, utc_now

__all__ = ["Availability", "AvailabilityCreate", "AvailabilityUpdate", "DayOfWeek"]


class Availability(SQLModel, table=True):
    """A recurring weekly window during which a doctor accepts appointments."""

    __tablename__ = "availabilities"
    __table_args__ = (
        sa.CheckConstraint("start_time < end_time", name="ck_availabilities_time_order"),
    )
    id: int | None = Field(default=None, primary_key=True)
    doctor_id: int = Field(foreign_key="doctors.id", index=True, ondelete="CASCADE")
    day: DayOfWeek = Field(
        sa_column=Column(
            sa.Enum(
                DayOfWeek,
                name="day_of_week",
                native_enum=False,
                values_callable=lambda days: [d.value for d in days],
            ),
            nullable=False,
        )
    )
    start_time: time
    end_time: time
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(sa.DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(sa.DateTime(timezone=True), nullable=False),
    )


class AvailabilityCreate(SQLModel):
    doctor_id: int
    day: DayOfWeek
    start_time: time
    end_time: time


class AvailabilityUpdate(SQLModel):
    day: DayOfWeek
    start_time: time
    end_time: time
