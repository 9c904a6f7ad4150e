# app/services/appointment_service.py

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from app.models.appointment import TERMINAL_STATUSES, Appointment, AppointmentStatus
from app.services.booking_validator import BookingValidator
from app.services.notification_service import NotificationDispatcher, build_summary
from app.services.store import SchedulingStore
from app.utils.errors import ErrorKind, SchedulingError
from app.utils.time_utils import compute_end_time, normalize_time
from app.utils.validators import is_staff_role

logger = logging.getLogger("appointments")

TERMINAL_MESSAGES = {
    AppointmentStatus.CANCELLED: "Appointment is already cancelled",
    AppointmentStatus.COMPLETED: "Appointment is already completed",
    AppointmentStatus.NO_SHOW: "Appointment was marked as no-show",
}


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as forwarded by the auth gateway."""
    user_id: str
    role: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return is_staff_role(self.role)


class AppointmentService:
    """Create, reschedule and cancel appointments.

    Every mutation that moves an appointment in time or to another
    doctor goes through ``BookingValidator``. The partial unique indexes
    on ``appointments`` settle races between concurrent requests; a
    losing insert is reported as ``SlotTaken``.
    """

    def __init__(self, store: SchedulingStore, dispatcher: NotificationDispatcher):
        self.store = store
        self.dispatcher = dispatcher
        self.validator = BookingValidator(store)

    @staticmethod
    def _authorize(actor: Optional[Actor], appointment: Appointment, action: str):
        if actor is None or actor.is_staff or actor.user_id == appointment.patient_id:
            return
        raise SchedulingError(ErrorKind.UNAUTHORIZED, f"You are not allowed to {action} this appointment")

    @staticmethod
    def _require_scheduled(appointment: Appointment):
        if appointment.status in TERMINAL_STATUSES:
            raise SchedulingError(ErrorKind.ALREADY_TERMINAL, TERMINAL_MESSAGES[appointment.status])

    def _classify_conflict(
        self,
        patient_id: str,
        doctor_id: str,
        appointment_date: date,
        start_time: str,
        exclude_appointment_id: Optional[int] = None
    ) -> SchedulingError:
        """Translate a unique-index violation into the matching booking error."""
        if self.store.find_slot_appointment(doctor_id, appointment_date, start_time, exclude_appointment_id) is None and \
                self.store.find_patient_appointment(patient_id, doctor_id, appointment_date, exclude_appointment_id) is not None:
            kind, message = ErrorKind.DUPLICATE_PATIENT_BOOKING, "You already have an appointment with this doctor on the same date"
        else:
            kind, message = ErrorKind.SLOT_TAKEN, "This time slot is already booked"

        logger.warning(f"Concurrent booking lost ({kind.value}): doctor={doctor_id} date={appointment_date} time={start_time}")
        return SchedulingError(kind, message)

    def get_appointment(self, appointment_id: int, actor: Optional[Actor] = None) -> Appointment:
        appointment = self.store.get_appointment(appointment_id)
        if not appointment:
            raise SchedulingError(ErrorKind.APPOINTMENT_NOT_FOUND, f"Appointment with ID {appointment_id} not found")
        self._authorize(actor, appointment, "view")
        return appointment

    def list_patient_appointments(
        self,
        patient_id: str,
        status: Optional[AppointmentStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[Appointment]:
        return self.store.find_patient_appointments(patient_id, status, date_from, date_to)

    def create_appointment(
        self,
        patient_id: str,
        doctor_id: str,
        specialty_id: int,
        appointment_date: date,
        start_time: str,
        notes: Optional[str] = None
    ) -> Appointment:
        schedule = self.validator.check(
            doctor_id, specialty_id, appointment_date, start_time, patient_id=patient_id
        )
        start_time = normalize_time(start_time)

        try:
            appointment = self.store.insert_appointment(
                patient_id=patient_id,
                doctor_id=doctor_id,
                specialty_id=specialty_id,
                appointment_date=appointment_date,
                start_time=start_time,
                end_time=compute_end_time(start_time, schedule.slot_duration),
                status=AppointmentStatus.SCHEDULED,
                notes=notes,
            )
        except IntegrityError:
            self.store.rollback()
            raise self._classify_conflict(patient_id, doctor_id, appointment_date, start_time)

        logger.info(f"✓ Appointment {appointment.id} booked: doctor={doctor_id} {appointment_date} {start_time}-{appointment.end_time}")
        self.dispatcher.confirmed(patient_id, build_summary(appointment))
        return appointment

    def reschedule_appointment(
        self,
        appointment_id: int,
        changes: Dict[str, Any],
        actor: Optional[Actor] = None
    ) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        self._authorize(actor, appointment, "edit")
        self._require_scheduled(appointment)

        new_doctor_id = changes.get("doctor_id") or appointment.doctor_id
        new_specialty_id = changes.get("specialty_id") or appointment.specialty_id
        new_date = changes.get("appointment_date") or appointment.appointment_date
        new_start = normalize_time(changes["start_time"]) if changes.get("start_time") else appointment.start_time

        moved = (
            new_doctor_id != appointment.doctor_id
            or new_specialty_id != appointment.specialty_id
            or new_date != appointment.appointment_date
            or new_start != appointment.start_time
        )

        patch: Dict[str, Any] = {}
        if moved:
            schedule = self.validator.check(
                new_doctor_id,
                new_specialty_id,
                new_date,
                new_start,
                patient_id=appointment.patient_id,
                exclude_appointment_id=appointment.id,
            )
            patch.update(
                doctor_id=new_doctor_id,
                specialty_id=new_specialty_id,
                appointment_date=new_date,
                start_time=new_start,
                end_time=compute_end_time(new_start, schedule.slot_duration),
            )

        if changes.get("notes") is not None:
            patch["notes"] = changes["notes"]

        patient_id = appointment.patient_id
        try:
            appointment = self.store.update_appointment(appointment, patch)
        except IntegrityError:
            self.store.rollback()
            raise self._classify_conflict(patient_id, new_doctor_id, new_date, new_start, appointment_id)

        logger.info(f"✓ Appointment {appointment.id} updated: doctor={appointment.doctor_id} {appointment.appointment_date} {appointment.start_time}")
        self.dispatcher.updated(appointment.patient_id, build_summary(appointment))
        return appointment

    def cancel_appointment(
        self,
        appointment_id: int,
        reason: Optional[str] = None,
        actor: Optional[Actor] = None
    ) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        self._authorize(actor, appointment, "cancel")

        if appointment.status == AppointmentStatus.COMPLETED:
            raise SchedulingError(ErrorKind.ALREADY_TERMINAL, "A completed appointment cannot be cancelled")
        self._require_scheduled(appointment)

        appointment = self.store.update_appointment(appointment, {
            "status": AppointmentStatus.CANCELLED,
            "cancellation_reason": reason,
        })

        logger.info(f"✓ Appointment {appointment.id} cancelled")
        self.dispatcher.cancelled(appointment.patient_id, build_summary(appointment), reason)
        return appointment

    def _close(self, appointment_id: int, status: AppointmentStatus, actor: Optional[Actor]) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        if actor is not None and not actor.is_staff:
            raise SchedulingError(ErrorKind.UNAUTHORIZED, "Only clinic staff can close appointments")
        self._require_scheduled(appointment)

        appointment = self.store.update_appointment(appointment, {"status": status})
        logger.info(f"✓ Appointment {appointment.id} marked {status.value}")
        return appointment

    def complete_appointment(self, appointment_id: int, actor: Optional[Actor] = None) -> Appointment:
        return self._close(appointment_id, AppointmentStatus.COMPLETED, actor)

    def mark_no_show(self, appointment_id: int, actor: Optional[Actor] = None) -> Appointment:
        return self._close(appointment_id, AppointmentStatus.NO_SHOW, actor)
