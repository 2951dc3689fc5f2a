from app.models.doctor import Doctor
from app.models.availability import Availability, AvailabilityCreate, AvailabilityUpdate, DayOfWeek
from app.models.appointment import Appointment, AppointmentStatus

__all__ = [
    "Doctor",
    "Availability",
    "AvailabilityCreate",
    "AvailabilityUpdate",
    "DayOfWeek",
    "Appointment",
    "AppointmentStatus",
]
