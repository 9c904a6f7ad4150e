from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
from typing import List, Optional
from app.models.appointment import AppointmentStatus
from app.utils.validators import validate_time_format, sanitize_text


def _check_time(value: Optional[str]) -> Optional[str]:
    if value is not None and not validate_time_format(value):
        raise ValueError("Invalid time format. Use HH:MM format (e.g., 09:30)")
    return value


def _clean_notes(value: Optional[str]) -> Optional[str]:
    return sanitize_text(value) if value is not None else None


class AppointmentCreate(BaseModel):
    doctor_id: str = Field(..., min_length=1, max_length=50)
    specialty_id: int = Field(..., ge=1)
    appointment_date: date = Field(..., description="Format: YYYY-MM-DD")
    start_time: str = Field(..., description="Format: HH:MM")
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, value):
        return _check_time(value)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, value):
        return _clean_notes(value)


class AppointmentReschedule(BaseModel):
    doctor_id: Optional[str] = Field(None, min_length=1, max_length=50)
    specialty_id: Optional[int] = Field(None, ge=1)
    appointment_date: Optional[date] = None
    start_time: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, value):
        return _check_time(value)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, value):
        return _clean_notes(value)


class AppointmentCancel(BaseModel):
    cancellation_reason: Optional[str] = Field(None, max_length=300)


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: str
    doctor_id: str
    specialty_id: int
    appointment_date: date
    start_time: str
    end_time: str
    status: AppointmentStatus
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AppointmentList(BaseModel):
    appointments: List[AppointmentResponse]
