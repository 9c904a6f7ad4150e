from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum, func
from sqlalchemy.orm import relationship
from app.config.database import Base
import enum

class DoctorStatus(enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DELETED = "DELETED"

class Specialty(Base):
    __tablename__ = "specialties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(300))

    doctors = relationship("Doctor", back_populates="specialty")

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    degree = Column(String(100), nullable=False)
    doctor_id = Column(String(50), unique=True, nullable=False, index=True)
    specialty_id = Column(Integer, ForeignKey("specialties.id"), nullable=False, index=True)
    status = Column(SQLEnum(DoctorStatus), default=DoctorStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    specialty = relationship("Specialty", back_populates="doctors")
    schedules = relationship("Schedule", back_populates="doctor", order_by="Schedule.day_of_week")

    def __repr__(self):
        return f"<Doctor {self.doctor_id} {self.name}>"
