from sqlalchemy.orm import Session
from app.models.doctor import Doctor, DoctorStatus, Specialty
from app.schemas.doctor import DoctorCreate, SpecialtyCreate
from app.utils.errors import ErrorKind, SchedulingError

class DoctorService:
    @staticmethod
    def create_specialty(db: Session, specialty_data: SpecialtyCreate):
        existing = db.query(Specialty).filter(Specialty.name == specialty_data.name).first()
        if existing:
            raise SchedulingError(
                ErrorKind.SPECIALTY_EXISTS,
                f"Specialty {specialty_data.name} already exists"
            )

        specialty = Specialty(**specialty_data.model_dump())
        db.add(specialty)
        db.commit()
        db.refresh(specialty)
        return specialty

    @staticmethod
    def get_all_specialties(db: Session):
        return db.query(Specialty).order_by(Specialty.name).all()

    @staticmethod
    def create_doctor(db: Session, doctor_data: DoctorCreate):
        existing_doctor = db.query(Doctor).filter(Doctor.doctor_id == doctor_data.doctor_id).first()
        if existing_doctor:
            raise SchedulingError(
                ErrorKind.DOCTOR_EXISTS,
                f"Doctor with ID {doctor_data.doctor_id} already exists"
            )

        specialty = db.query(Specialty).filter(Specialty.id == doctor_data.specialty_id).first()
        if not specialty:
            raise SchedulingError(
                ErrorKind.SPECIALTY_NOT_FOUND,
                f"Specialty with ID {doctor_data.specialty_id} not found"
            )

        db_doctor = Doctor(**doctor_data.model_dump())
        db.add(db_doctor)
        db.commit()
        db.refresh(db_doctor)
        return db_doctor

    @staticmethod
    def get_doctor_by_id(db: Session, doctor_id: str):
        doctor = db.query(Doctor).filter(
            Doctor.doctor_id == doctor_id,
            Doctor.status != DoctorStatus.DELETED
        ).first()
        if not doctor:
            raise SchedulingError(
                ErrorKind.DOCTOR_NOT_FOUND,
                f"Doctor with ID {doctor_id} not found"
            )
        return doctor

    @staticmethod
    def get_all_active_doctors(db: Session, specialty_id: int | None = None, skip: int = 0, limit: int = 100):
        query = db.query(Doctor).filter(Doctor.status == DoctorStatus.ACTIVE)
        if specialty_id is not None:
            query = query.filter(Doctor.specialty_id == specialty_id)
        return query.order_by(Doctor.id).offset(skip).limit(limit).all()
