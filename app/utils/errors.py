import enum
from typing import Any, Optional
from fastapi import HTTPException, status


class ErrorKind(str, enum.Enum):
    INVALID_TIME_FORMAT = "InvalidTimeFormat"
    DOCTOR_NOT_FOUND = "DoctorNotFound"
    SPECIALTY_NOT_FOUND = "SpecialtyNotFound"
    SPECIALTY_MISMATCH = "SpecialtyMismatch"
    NO_SCHEDULE_FOR_DAY = "NoScheduleForDay"
    OUTSIDE_WORKING_HOURS = "OutsideWorkingHours"
    MISALIGNED_SLOT = "MisalignedSlot"
    SLOT_BLOCKED = "SlotBlocked"
    SLOT_TAKEN = "SlotTaken"
    DUPLICATE_PATIENT_BOOKING = "DuplicatePatientBooking"
    APPOINTMENT_NOT_FOUND = "AppointmentNotFound"
    ALREADY_TERMINAL = "AlreadyTerminal"
    UNAUTHORIZED = "Unauthorized"
    UNAUTHENTICATED = "Unauthenticated"

    SCHEDULE_NOT_FOUND = "ScheduleNotFound"
    SCHEDULE_CONFLICT = "ScheduleConflict"
    INVALID_SCHEDULE = "InvalidSchedule"
    BLOCKED_PERIOD_NOT_FOUND = "BlockedPeriodNotFound"
    CONFLICT_WITH_APPOINTMENTS = "ConflictWithAppointments"
    SPECIALTY_EXISTS = "SpecialtyExists"
    DOCTOR_EXISTS = "DoctorExists"


STATUS_BY_KIND = {
    ErrorKind.INVALID_TIME_FORMAT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DOCTOR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.SPECIALTY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.SPECIALTY_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NO_SCHEDULE_FOR_DAY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.OUTSIDE_WORKING_HOURS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.MISALIGNED_SLOT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SLOT_BLOCKED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SLOT_TAKEN: status.HTTP_409_CONFLICT,
    ErrorKind.DUPLICATE_PATIENT_BOOKING: status.HTTP_409_CONFLICT,
    ErrorKind.APPOINTMENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_TERMINAL: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.SCHEDULE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.SCHEDULE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_SCHEDULE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.BLOCKED_PERIOD_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT_WITH_APPOINTMENTS: status.HTTP_409_CONFLICT,
    ErrorKind.SPECIALTY_EXISTS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DOCTOR_EXISTS: status.HTTP_400_BAD_REQUEST,
}


class SchedulingError(HTTPException):
    """HTTPException tagged with the scheduling error kind that caused it."""

    def __init__(self, kind: ErrorKind, message: str, details: Optional[Any] = None):
        super().__init__(status_code=STATUS_BY_KIND[kind], detail=message)
        self.kind = kind
        self.message = message
        self.details = details

    def __str__(self):
        return f"{self.kind.value}: {self.message}"
