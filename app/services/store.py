# app/services/store.py

from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.appointment import Appointment, AppointmentStatus
from app.models.blocked_period import BlockedPeriod
from app.models.doctor import Doctor, DoctorStatus, Specialty
from app.models.schedule import Schedule


class SchedulingStore:
    """Persistence handle consumed by the scheduling core.

    Wraps one SQLAlchemy session. Services receive a store explicitly
    instead of reaching for a module-level client.
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Doctors and specialties
    # ------------------------------------------------------------------

    def get_doctor(self, doctor_id: str, active_only: bool = True) -> Optional[Doctor]:
        query = self.db.query(Doctor).options(joinedload(Doctor.specialty)).filter(Doctor.doctor_id == doctor_id)
        if active_only:
            query = query.filter(Doctor.status == DoctorStatus.ACTIVE)
        return query.first()

    def get_specialty(self, specialty_id: int) -> Optional[Specialty]:
        return self.db.query(Specialty).filter(Specialty.id == specialty_id).first()

    def find_active_doctors(self, specialty_id: Optional[int] = None, doctor_id: Optional[str] = None) -> List[Doctor]:
        query = self.db.query(Doctor).options(joinedload(Doctor.specialty)).filter(Doctor.status == DoctorStatus.ACTIVE)
        if specialty_id is not None:
            query = query.filter(Doctor.specialty_id == specialty_id)
        if doctor_id is not None:
            query = query.filter(Doctor.doctor_id == doctor_id)
        return query.order_by(Doctor.id).all()

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    def get_schedules_for_doctor(self, doctor_id: str, active_only: bool = True) -> List[Schedule]:
        query = self.db.query(Schedule).filter(Schedule.doctor_id == doctor_id)
        if active_only:
            query = query.filter(Schedule.is_active.is_(True))
        return query.order_by(Schedule.day_of_week, Schedule.id).all()

    def find_schedule_for_day(self, doctor_id: str, day_of_week: int) -> Optional[Schedule]:
        return self.db.query(Schedule).filter(
            Schedule.doctor_id == doctor_id,
            Schedule.day_of_week == day_of_week,
            Schedule.is_active.is_(True)
        ).order_by(Schedule.id).first()

    def get_schedule(self, schedule_id: int) -> Optional[Schedule]:
        return self.db.query(Schedule).filter(Schedule.id == schedule_id).first()

    # ------------------------------------------------------------------
    # Blocked periods
    # ------------------------------------------------------------------

    def get_blocked_period(self, blocked_period_id: int) -> Optional[BlockedPeriod]:
        return self.db.query(BlockedPeriod).filter(BlockedPeriod.id == blocked_period_id).first()

    def find_blocked_periods(self, doctor_id: str, start: datetime, end: datetime) -> List[BlockedPeriod]:
        """Active blocked periods overlapping [start, end)."""
        return self.db.query(BlockedPeriod).filter(
            BlockedPeriod.doctor_id == doctor_id,
            BlockedPeriod.is_active.is_(True),
            BlockedPeriod.start_datetime < end,
            BlockedPeriod.end_datetime > start
        ).order_by(BlockedPeriod.start_datetime).all()

    def find_blocked_periods_for_date(self, doctor_id: str, day: date) -> List[BlockedPeriod]:
        start_of_day = datetime.combine(day, time.min)
        return self.find_blocked_periods(doctor_id, start_of_day, start_of_day + timedelta(days=1))

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.query(Appointment).filter(Appointment.id == appointment_id).first()

    def find_slot_appointment(
        self,
        doctor_id: str,
        appointment_date: date,
        start_time: str,
        exclude_appointment_id: Optional[int] = None
    ) -> Optional[Appointment]:
        query = self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date,
            Appointment.start_time == start_time,
            Appointment.status != AppointmentStatus.CANCELLED
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)
        return query.first()

    def find_patient_appointment(
        self,
        patient_id: str,
        doctor_id: str,
        appointment_date: date,
        exclude_appointment_id: Optional[int] = None
    ) -> Optional[Appointment]:
        query = self.db.query(Appointment).filter(
            Appointment.patient_id == patient_id,
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date,
            Appointment.status != AppointmentStatus.CANCELLED
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)
        return query.first()

    def find_booked_appointments(self, doctor_id: str, appointment_date: date) -> List[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date,
            Appointment.status != AppointmentStatus.CANCELLED
        ).order_by(Appointment.start_time).all()

    def find_booked_appointments_between(self, doctor_id: str, date_from: date, date_to: date) -> List[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date >= date_from,
            Appointment.appointment_date <= date_to,
            Appointment.status != AppointmentStatus.CANCELLED
        ).order_by(Appointment.appointment_date, Appointment.start_time).all()

    def find_patient_appointments(
        self,
        patient_id: str,
        status: Optional[AppointmentStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[Appointment]:
        query = self.db.query(Appointment).filter(Appointment.patient_id == patient_id)
        if status is not None:
            query = query.filter(Appointment.status == status)
        if date_from is not None:
            query = query.filter(Appointment.appointment_date >= date_from)
        if date_to is not None:
            query = query.filter(Appointment.appointment_date <= date_to)
        return query.order_by(Appointment.appointment_date, Appointment.start_time).all()

    def insert_appointment(self, **values) -> Appointment:
        """Insert and commit. IntegrityError from the unique indexes propagates."""
        appointment = Appointment(**values)
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def update_appointment(self, appointment: Appointment, patch: Dict) -> Appointment:
        for key, value in patch.items():
            setattr(appointment, key, value)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def cancel_appointments(self, appointments: Iterable[Appointment], reason: str) -> int:
        count = 0
        for appointment in appointments:
            appointment.status = AppointmentStatus.CANCELLED
            appointment.cancellation_reason = reason
            count += 1
        return count

    def rollback(self):
        self.db.rollback()
