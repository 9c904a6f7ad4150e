# app/services/slot_service.py

from datetime import date
from typing import Iterator, Optional

from app.models.doctor import Doctor
from app.models.schedule import Schedule
from app.schemas.availability import DoctorSummary, TimeSlot
from app.utils.time_utils import format_time, from_minutes, time_to_minutes


def day_of_week(target_date: date) -> int:
    """Sunday-based day index (0=Sunday .. 6=Saturday)."""
    return target_date.isoweekday() % 7


def doctor_summary(doctor: Doctor) -> DoctorSummary:
    return DoctorSummary(
        doctor_id=doctor.doctor_id,
        name=doctor.name,
        specialty_id=doctor.specialty_id,
        specialty=doctor.specialty.name if doctor.specialty else "",
    )


class SlotGenerator:
    """Turns a weekly schedule into the concrete slots of one calendar date."""

    @staticmethod
    def generate_slots(
        schedule: Optional[Schedule],
        target_date: date,
        doctor: Optional[DoctorSummary] = None
    ) -> Iterator[TimeSlot]:
        """Yield candidate slots in ascending start order.

        Only a slot's start is compared against the schedule end: a slot
        starting before ``end_time`` is emitted even if it runs past it.
        Nothing is yielded when the schedule is missing, inactive or
        belongs to another weekday.
        """
        if schedule is None or not schedule.is_active:
            return
        if schedule.day_of_week != day_of_week(target_date):
            return

        if doctor is None:
            doctor = doctor_summary(schedule.doctor)

        duration = schedule.slot_duration
        if duration <= 0:
            return
        current = time_to_minutes(schedule.start_time)
        end = time_to_minutes(schedule.end_time)

        while current < end:
            yield TimeSlot(
                doctor=doctor,
                date=target_date,
                start_time=format_time(*from_minutes(current)),
                end_time=format_time(*from_minutes(current + duration)),
            )
            current += duration
