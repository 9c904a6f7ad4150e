from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Enum, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from app.config.database import Base

class AppointmentStatus(enum.Enum):
    SCHEDULED = "SCHEDULED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"

TERMINAL_STATUSES = {
    AppointmentStatus.CANCELLED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.NO_SHOW,
}

# Uniqueness only holds among rows that still occupy the slot.
NOT_CANCELLED = text("status != 'CANCELLED'")

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_active_slot",
            "doctor_id", "appointment_date", "start_time",
            unique=True,
            sqlite_where=NOT_CANCELLED,
            postgresql_where=NOT_CANCELLED,
        ),
        Index(
            "uq_appointments_active_patient_day",
            "patient_id", "doctor_id", "appointment_date",
            unique=True,
            sqlite_where=NOT_CANCELLED,
            postgresql_where=NOT_CANCELLED,
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    patient_id = Column(String(50), nullable=False, index=True)
    doctor_id = Column(String(50), ForeignKey("doctors.doctor_id"), nullable=False)
    specialty_id = Column(Integer, ForeignKey("specialties.id"), nullable=False)
    appointment_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # Format: HH:MM
    end_time = Column(String(5), nullable=False)  # Format: HH:MM
    status = Column(Enum(AppointmentStatus), default=AppointmentStatus.SCHEDULED, nullable=False)
    notes = Column(String(500))
    cancellation_reason = Column(String(300))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    doctor = relationship("Doctor")
    specialty = relationship("Specialty")

    def __repr__(self):
        return f"<Appointment {self.id} {self.doctor_id} {self.appointment_date} {self.start_time}>"
