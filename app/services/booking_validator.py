# app/services/booking_validator.py

import logging
from datetime import date
from typing import Optional, Tuple

from app.models.schedule import Schedule
from app.schemas.availability import ValidationResult
from app.services.availability_service import overlaps_blocked_period, slot_window
from app.services.slot_service import day_of_week
from app.services.store import SchedulingStore
from app.utils.errors import ErrorKind, SchedulingError
from app.utils.time_utils import format_time, parse_time, time_to_minutes, to_minutes

logger = logging.getLogger("appointments")

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def _reject(kind: ErrorKind, message: str) -> Tuple[ValidationResult, None]:
    return ValidationResult(valid=False, reason=kind, message=message), None


class BookingValidator:
    """Checks a requested (doctor, date, start time) against schedules and existing bookings.

    Checks run in a fixed order and stop at the first failure:
    doctor, specialty, specialty match, weekday schedule, working hours,
    slot alignment, blocked periods, slot taken, duplicate patient booking.
    """

    def __init__(self, store: SchedulingStore):
        self.store = store

    def validate(
        self,
        doctor_id: str,
        specialty_id: int,
        appointment_date: date,
        start_time: str,
        patient_id: Optional[str] = None,
        exclude_appointment_id: Optional[int] = None
    ) -> ValidationResult:
        result, _ = self._run_checks(
            doctor_id, specialty_id, appointment_date, start_time, patient_id, exclude_appointment_id
        )
        return result

    def check(
        self,
        doctor_id: str,
        specialty_id: int,
        appointment_date: date,
        start_time: str,
        patient_id: Optional[str] = None,
        exclude_appointment_id: Optional[int] = None
    ) -> Schedule:
        """Like ``validate`` but raises ``SchedulingError``; returns the matching schedule."""
        result, schedule = self._run_checks(
            doctor_id, specialty_id, appointment_date, start_time, patient_id, exclude_appointment_id
        )
        if not result.valid:
            logger.info(f"Booking rejected ({result.reason.value}): doctor={doctor_id} date={appointment_date} time={start_time}")
            raise SchedulingError(result.reason, result.message)
        return schedule

    def _run_checks(
        self,
        doctor_id: str,
        specialty_id: int,
        appointment_date: date,
        start_time: str,
        patient_id: Optional[str],
        exclude_appointment_id: Optional[int]
    ) -> Tuple[ValidationResult, Optional[Schedule]]:
        doctor = self.store.get_doctor(doctor_id)
        if doctor is None:
            return _reject(ErrorKind.DOCTOR_NOT_FOUND, f"Doctor with ID {doctor_id} not found")

        specialty = self.store.get_specialty(specialty_id)
        if specialty is None:
            return _reject(ErrorKind.SPECIALTY_NOT_FOUND, f"Specialty with ID {specialty_id} not found")

        if doctor.specialty_id != specialty.id:
            return _reject(
                ErrorKind.SPECIALTY_MISMATCH,
                f"Doctor {doctor_id} does not belong to the selected specialty ({specialty.name})"
            )

        weekday = day_of_week(appointment_date)
        schedule = self.store.find_schedule_for_day(doctor_id, weekday)
        if schedule is None:
            return _reject(
                ErrorKind.NO_SCHEDULE_FOR_DAY,
                f"Doctor has no working hours on {DAY_NAMES[weekday]}"
            )

        try:
            hour, minute = parse_time(start_time)
        except SchedulingError as exc:
            return _reject(exc.kind, exc.message)

        requested = to_minutes(hour, minute)
        window_start = time_to_minutes(schedule.start_time)
        window_end = time_to_minutes(schedule.end_time)

        if requested < window_start or requested >= window_end:
            return _reject(
                ErrorKind.OUTSIDE_WORKING_HOURS,
                f"Doctor attends from {schedule.start_time} to {schedule.end_time} on this day"
            )

        if (requested - window_start) % schedule.slot_duration != 0:
            return _reject(
                ErrorKind.MISALIGNED_SLOT,
                f"Appointments must be booked in {schedule.slot_duration}-minute intervals starting at {schedule.start_time}"
            )

        start_time = format_time(hour, minute)

        window = slot_window(appointment_date, start_time, schedule.slot_duration)
        blocked_periods = self.store.find_blocked_periods(doctor_id, *window)
        if blocked_periods:
            period = overlaps_blocked_period(window, blocked_periods)
            if period is not None:
                reason = f": {period.reason}" if period.reason else ""
                return _reject(ErrorKind.SLOT_BLOCKED, f"Doctor's agenda is blocked at {start_time} on {appointment_date}{reason}")

        if self.store.find_slot_appointment(doctor_id, appointment_date, start_time, exclude_appointment_id):
            return _reject(ErrorKind.SLOT_TAKEN, "This time slot is already booked")

        if patient_id is not None and self.store.find_patient_appointment(
            patient_id, doctor_id, appointment_date, exclude_appointment_id
        ):
            return _reject(
                ErrorKind.DUPLICATE_PATIENT_BOOKING,
                "You already have an appointment with this doctor on the same date"
            )

        return ValidationResult(valid=True, message="Valid time slot"), schedule
