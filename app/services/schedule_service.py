# app/services/schedule_service.py

import logging
from datetime import date, timedelta
from typing import List, Optional

from app.config.database import settings
from app.models.appointment import Appointment
from app.models.blocked_period import BlockedPeriod
from app.models.schedule import Schedule
from app.schemas.availability import DoctorAgenda
from app.schemas.appointment import AppointmentResponse
from app.schemas.schedule import (
    BlockedPeriodCreate,
    BlockedPeriodResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)
from app.services.availability_service import AvailabilityService, slot_window
from app.services.notification_service import NotificationDispatcher, build_summary
from app.services.slot_service import day_of_week, doctor_summary
from app.services.store import SchedulingStore
from app.utils.errors import ErrorKind, SchedulingError
from app.utils.time_utils import MINUTES_PER_DAY, normalize_time, time_to_minutes

logger = logging.getLogger("schedules")

BLOCK_CANCELLATION_REASON = "Cancelled due to schedule block"
SCHEDULE_CHANGE_HORIZON_DAYS = 365


def appointment_window(appointment: Appointment):
    duration = (time_to_minutes(appointment.end_time) - time_to_minutes(appointment.start_time)) % MINUTES_PER_DAY
    return slot_window(appointment.appointment_date, appointment.start_time, duration or MINUTES_PER_DAY)


def fits_schedule(appointment: Appointment, weekday: int, start_time: str, end_time: str, slot_duration: int) -> bool:
    if day_of_week(appointment.appointment_date) != weekday:
        return False
    requested = time_to_minutes(appointment.start_time)
    window_start = time_to_minutes(start_time)
    if requested < window_start or requested >= time_to_minutes(end_time):
        return False
    return (requested - window_start) % slot_duration == 0


class ScheduleService:
    def __init__(self, store: SchedulingStore, dispatcher: Optional[NotificationDispatcher] = None):
        self.store = store
        self.dispatcher = dispatcher

    def _require_doctor(self, doctor_id: str):
        doctor = self.store.get_doctor(doctor_id, active_only=False)
        if doctor is None:
            raise SchedulingError(ErrorKind.DOCTOR_NOT_FOUND, f"Doctor with ID {doctor_id} not found")
        return doctor

    @staticmethod
    def _check_window(start_time: str, end_time: str, slot_duration: int):
        start_time, end_time = normalize_time(start_time), normalize_time(end_time)
        if time_to_minutes(end_time) <= time_to_minutes(start_time):
            raise SchedulingError(ErrorKind.INVALID_SCHEDULE, "Schedule end time must be after start time")
        if not settings.min_slot_duration <= slot_duration <= settings.max_slot_duration:
            raise SchedulingError(
                ErrorKind.INVALID_SCHEDULE,
                f"Slot duration must be between {settings.min_slot_duration} and {settings.max_slot_duration} minutes"
            )
        return start_time, end_time

    def _check_day_free(self, doctor_id: str, weekday: int, schedule_id: Optional[int] = None):
        existing = self.store.find_schedule_for_day(doctor_id, weekday)
        if existing is not None and existing.id != schedule_id:
            raise SchedulingError(
                ErrorKind.SCHEDULE_CONFLICT,
                f"Doctor {doctor_id} already has an active schedule for day {weekday}"
            )

    def list_schedules(self, doctor_id: str, active_only: bool = True) -> List[Schedule]:
        self._require_doctor(doctor_id)
        return self.store.get_schedules_for_doctor(doctor_id, active_only)

    def create_schedule(self, doctor_id: str, schedule_data: ScheduleCreate) -> Schedule:
        self._require_doctor(doctor_id)
        start_time, end_time = self._check_window(
            schedule_data.start_time, schedule_data.end_time, schedule_data.slot_duration
        )
        self._check_day_free(doctor_id, schedule_data.day_of_week)

        schedule = Schedule(
            doctor_id=doctor_id,
            day_of_week=schedule_data.day_of_week,
            start_time=start_time,
            end_time=end_time,
            slot_duration=schedule_data.slot_duration,
            is_active=True,
        )
        self.store.db.add(schedule)
        self.store.db.commit()
        self.store.db.refresh(schedule)
        logger.info(f"✓ Schedule {schedule.id} created for {doctor_id}: day={schedule.day_of_week} {start_time}-{end_time}")
        return schedule

    def update_schedule(self, schedule_id: int, schedule_data: ScheduleUpdate) -> Schedule:
        schedule = self.store.get_schedule(schedule_id)
        if schedule is None:
            raise SchedulingError(ErrorKind.SCHEDULE_NOT_FOUND, f"Schedule with ID {schedule_id} not found")

        # Explicit nulls leave the field unchanged.
        update_data = schedule_data.model_dump(exclude_unset=True, exclude_none=True)
        weekday = update_data.get("day_of_week", schedule.day_of_week)
        slot_duration = update_data.get("slot_duration") or schedule.slot_duration
        start_time, end_time = self._check_window(
            update_data.get("start_time") or schedule.start_time,
            update_data.get("end_time") or schedule.end_time,
            slot_duration
        )
        is_active = update_data.get("is_active", schedule.is_active)

        if is_active:
            self._check_day_free(schedule.doctor_id, weekday, schedule.id)

        # Booked appointments on the current weekday must stay bookable under the new window.
        if schedule.is_active:
            today = date.today()
            stranded = [
                appointment
                for appointment in self.store.find_booked_appointments_between(
                    schedule.doctor_id, today, today + timedelta(days=SCHEDULE_CHANGE_HORIZON_DAYS)
                )
                if day_of_week(appointment.appointment_date) == schedule.day_of_week
                and not (is_active and fits_schedule(appointment, weekday, start_time, end_time, slot_duration))
            ]
            if stranded:
                raise SchedulingError(
                    ErrorKind.CONFLICT_WITH_APPOINTMENTS,
                    "Cannot modify schedule, there are appointments booked in this time range",
                    details=[appointment.id for appointment in stranded]
                )

        schedule.day_of_week = weekday
        schedule.start_time = start_time
        schedule.end_time = end_time
        schedule.slot_duration = slot_duration
        schedule.is_active = is_active
        self.store.db.commit()
        self.store.db.refresh(schedule)
        logger.info(f"✓ Schedule {schedule.id} updated")
        return schedule

    def deactivate_schedule(self, schedule_id: int) -> Schedule:
        return self.update_schedule(schedule_id, ScheduleUpdate(is_active=False))

    def block_period(self, doctor_id: str, block_data: BlockedPeriodCreate, created_by: Optional[str] = None):
        """Block part of a doctor's agenda.

        Without ``override`` a block over booked appointments is refused.
        With it, those appointments are cancelled and their patients notified.
        """
        self._require_doctor(doctor_id)
        start, end = block_data.start_datetime, block_data.end_datetime
        if end <= start:
            raise SchedulingError(ErrorKind.INVALID_SCHEDULE, "Blocked period end must be after its start")

        conflicting = [
            appointment
            for appointment in self.store.find_booked_appointments_between(
                doctor_id, (start - timedelta(days=1)).date(), end.date()
            )
            if appointment_window(appointment)[0] < end and appointment_window(appointment)[1] > start
        ]

        if conflicting and not block_data.override:
            raise SchedulingError(
                ErrorKind.CONFLICT_WITH_APPOINTMENTS,
                "There are appointments booked in this period",
                details=[appointment.id for appointment in conflicting]
            )

        blocked_period = BlockedPeriod(
            doctor_id=doctor_id,
            start_datetime=start,
            end_datetime=end,
            reason=block_data.reason,
            created_by=created_by,
            is_active=True,
        )
        self.store.db.add(blocked_period)
        cancelled = self.store.cancel_appointments(conflicting, BLOCK_CANCELLATION_REASON)
        self.store.db.commit()
        self.store.db.refresh(blocked_period)

        if self.dispatcher is not None:
            for appointment in conflicting:
                self.dispatcher.cancelled(appointment.patient_id, build_summary(appointment), BLOCK_CANCELLATION_REASON)

        logger.info(f"✓ Blocked {doctor_id} from {start} to {end} ({cancelled} appointments cancelled)")
        return {"blocked_period": blocked_period, "cancelled_appointments": cancelled}

    def unblock_period(self, blocked_period_id: int) -> BlockedPeriod:
        blocked_period = self.store.get_blocked_period(blocked_period_id)
        if blocked_period is None:
            raise SchedulingError(
                ErrorKind.BLOCKED_PERIOD_NOT_FOUND,
                f"Blocked period with ID {blocked_period_id} not found"
            )
        blocked_period.is_active = False
        self.store.db.commit()
        self.store.db.refresh(blocked_period)
        return blocked_period

    def get_doctor_agenda(self, doctor_id: str, target_date: Optional[date] = None) -> DoctorAgenda:
        doctor = self._require_doctor(doctor_id)
        target_date = target_date or date.today()
        weekday = day_of_week(target_date)
        schedule = self.store.find_schedule_for_day(doctor_id, weekday)

        return DoctorAgenda(
            doctor=doctor_summary(doctor),
            date=target_date,
            day_of_week=weekday,
            schedule=ScheduleResponse.model_validate(schedule) if schedule else None,
            slots=AvailabilityService(self.store).get_day_slots(doctor, target_date),
            appointments=[
                AppointmentResponse.model_validate(appointment)
                for appointment in self.store.find_booked_appointments(doctor_id, target_date)
            ],
            blocked_periods=[
                BlockedPeriodResponse.model_validate(period)
                for period in self.store.find_blocked_periods_for_date(doctor_id, target_date)
            ],
        )
