from pydantic import BaseModel
import datetime
from typing import List, Optional
from app.schemas.appointment import AppointmentResponse
from app.schemas.schedule import BlockedPeriodResponse, ScheduleResponse
from app.utils.errors import ErrorKind


class DoctorSummary(BaseModel):
    doctor_id: str
    name: str
    specialty_id: int
    specialty: str


class TimeSlot(BaseModel):
    """Candidate or available booking window. Derived on demand, never stored."""

    doctor: DoctorSummary
    date: datetime.date
    start_time: str
    end_time: str
    available: bool = True
    appointment_id: Optional[int] = None


class ValidationResult(BaseModel):
    valid: bool
    reason: Optional[ErrorKind] = None
    message: str


class DoctorAgenda(BaseModel):
    doctor: DoctorSummary
    date: datetime.date
    day_of_week: int
    schedule: Optional[ScheduleResponse] = None
    slots: List[TimeSlot]
    appointments: List[AppointmentResponse]
    blocked_periods: List[BlockedPeriodResponse]
