# app/services/availability_service.py

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from app.models.blocked_period import BlockedPeriod
from app.models.doctor import Doctor
from app.schemas.availability import TimeSlot
from app.services.slot_service import SlotGenerator, day_of_week, doctor_summary
from app.services.store import SchedulingStore
from app.utils.time_utils import parse_time

logger = logging.getLogger("availability")


def slot_window(target_date: date, start_time: str, duration_minutes: int) -> Tuple[datetime, datetime]:
    """Absolute [start, end) of a slot. Unlike the displayed end time, this rolls past midnight."""
    hour, minute = parse_time(start_time)
    start = datetime.combine(target_date, time(hour, minute))
    return start, start + timedelta(minutes=duration_minutes)


def overlaps_blocked_period(window: Tuple[datetime, datetime], blocked_periods: Iterable[BlockedPeriod]) -> Optional[BlockedPeriod]:
    start, end = window
    for period in blocked_periods:
        if period.start_datetime < end and period.end_datetime > start:
            return period
    return None


class AvailabilityService:
    def __init__(self, store: SchedulingStore):
        self.store = store

    def get_day_slots(self, doctor: Doctor, target_date: date) -> List[TimeSlot]:
        """Every generated slot of the day, tagged available or occupied."""
        schedule = self.store.find_schedule_for_day(doctor.doctor_id, day_of_week(target_date))
        if schedule is None:
            return []

        booked = {
            appointment.start_time: appointment.id
            for appointment in self.store.find_booked_appointments(doctor.doctor_id, target_date)
        }
        # The last slot of the day may run past midnight.
        day_start = datetime.combine(target_date, time.min)
        blocked_periods = self.store.find_blocked_periods(
            doctor.doctor_id, day_start, day_start + timedelta(days=1, minutes=schedule.slot_duration)
        )

        slots = []
        for slot in SlotGenerator.generate_slots(schedule, target_date, doctor_summary(doctor)):
            if slot.start_time in booked:
                slot.available = False
                slot.appointment_id = booked[slot.start_time]
            elif blocked_periods and overlaps_blocked_period(
                slot_window(target_date, slot.start_time, schedule.slot_duration), blocked_periods
            ):
                slot.available = False
            slots.append(slot)
        return slots

    def resolve_availability(
        self,
        target_date: Optional[date] = None,
        specialty_id: Optional[int] = None,
        doctor_id: Optional[str] = None
    ) -> List[TimeSlot]:
        """Bookable slots for one date across the matching active doctors.

        ``target_date`` defaults to today. Read-only.
        """
        target_date = target_date or date.today()
        doctors = self.store.find_active_doctors(specialty_id=specialty_id, doctor_id=doctor_id)

        available_slots = []
        for doctor in doctors:
            available_slots.extend(
                slot for slot in self.get_day_slots(doctor, target_date) if slot.available
            )

        logger.debug(
            f"Resolved {len(available_slots)} available slots for {target_date} "
            f"(specialty={specialty_id}, doctor={doctor_id}, doctors={len(doctors)})"
        )
        return available_slots
