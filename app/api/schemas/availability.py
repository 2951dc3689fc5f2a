import re
from datetime import time

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.config import settings
from app.models.availability import DayOfWeek

# HH:MM or HH:MM:SS, single-digit hours accepted
_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")


def _parse_time(value: object) -> object:
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not (match := _TIME_RE.match(value.strip())):
        raise ValueError("time must be in HH:MM or HH:MM:SS format (e.g. 09:00 or 09:00:00)")
    hours, minutes, seconds = match.groups()
    return time(int(hours), int(minutes), int(seconds or 0))


class AvailabilityWindowFields(BaseModel):
    day: DayOfWeek
    start_time: time
    end_time: time

    @field_validator("day", mode="before")
    @classmethod
    def normalize_day(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_time(cls, value: object) -> object:
        return _parse_time(value)

    @model_validator(mode="after")
    def check_range(self):
        start_minutes = self.start_time.hour * 60 + self.start_time.minute
        end_minutes = self.end_time.hour * 60 + self.end_time.minute
        if end_minutes <= start_minutes:
            raise ValueError("end_time must be after start_time")
        duration = end_minutes - start_minutes
        if duration < settings.availability_min_minutes:
            raise ValueError(
                f"an availability must last at least {settings.availability_min_minutes} minutes"
            )
        if duration > settings.availability_max_minutes:
            raise ValueError(
                f"an availability cannot exceed {settings.availability_max_minutes} consecutive minutes"
            )
        earliest = settings.availability_earliest_hour
        latest = settings.availability_latest_hour
        for t in (self.start_time, self.end_time):
            if not earliest <= t.hour <= latest:
                raise ValueError(
                    f"availability hours must be between {earliest:02d}:00 and {latest:02d}:00"
                )
        return self


class AvailabilityCreateRequest(AvailabilityWindowFields):
    doctor_id: int = Field(gt=0)


class AvailabilityUpdateRequest(AvailabilityWindowFields):
    pass


class AvailabilityPublic(BaseModel):
    id: int
    doctor_id: int
    day: DayOfWeek
    start_time: str  # HH:MM
    end_time: str  # HH:MM


class SlotPublic(BaseModel):
    heureDebut: str  # HH:MM
    heureFin: str  # HH:MM
