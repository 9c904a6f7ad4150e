from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional
from app.config.database import settings
from app.utils.validators import validate_time_format


def _check_time(value: Optional[str]) -> Optional[str]:
    if value is not None and not validate_time_format(value):
        raise ValueError("Invalid time format. Use HH:MM format (e.g., 09:30)")
    return value


class ScheduleCreate(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday .. 6=Saturday")
    start_time: str = Field(..., description="Format: HH:MM")
    end_time: str = Field(..., description="Format: HH:MM")
    slot_duration: int = Field(settings.default_slot_duration, ge=15, le=120, description="Minutes per bookable slot")

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value):
        return _check_time(value)


class ScheduleUpdate(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    slot_duration: Optional[int] = Field(None, ge=15, le=120)
    is_active: Optional[bool] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value):
        return _check_time(value)


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    doctor_id: str
    day_of_week: int
    start_time: str
    end_time: str
    slot_duration: int
    is_active: bool


class BlockedPeriodCreate(BaseModel):
    start_datetime: datetime
    end_datetime: datetime
    reason: Optional[str] = Field(None, max_length=300)
    override: bool = Field(False, description="Cancel conflicting appointments instead of rejecting")

    @field_validator("start_datetime", "end_datetime")
    @classmethod
    def to_local_time(cls, value: datetime) -> datetime:
        # Agenda times are naive local wall-clock values.
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.replace(tzinfo=None)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_datetime <= self.start_datetime:
            raise ValueError("end_datetime must be after start_datetime")
        return self


class BlockedPeriodResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    doctor_id: str
    start_datetime: datetime
    end_datetime: datetime
    reason: Optional[str] = None
    created_by: Optional[str] = None
    is_active: bool


class BlockPeriodResult(BaseModel):
    blocked_period: BlockedPeriodResponse
    cancelled_appointments: int = 0
