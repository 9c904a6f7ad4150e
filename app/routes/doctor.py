from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from app.config.database import get_db
from app.routes.dependencies import get_schedule_service, get_staff_actor
from app.schemas.availability import DoctorAgenda
from app.schemas.doctor import DoctorCreate, DoctorResponse, SpecialtyCreate, SpecialtyResponse
from app.schemas.schedule import (
    BlockedPeriodCreate,
    BlockedPeriodResponse,
    BlockPeriodResult,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)
from app.services.appointment_service import Actor
from app.services.doctor_service import DoctorService
from app.services.schedule_service import ScheduleService

router = APIRouter(tags=["Doctors"])

@router.post(
    "/specialties",
    response_model=SpecialtyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a specialty"
)
def create_specialty(
    specialty: SpecialtyCreate,
    actor: Actor = Depends(get_staff_actor),
    db: Session = Depends(get_db)
):
    return DoctorService.create_specialty(db, specialty)

@router.get("/specialties", response_model=List[SpecialtyResponse], summary="List specialties")
def get_specialties(db: Session = Depends(get_db)):
    return DoctorService.get_all_specialties(db)

@router.post(
    "/doctors",
    response_model=DoctorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new doctor",
    responses={
        400: {"description": "Doctor ID already exists"},
        404: {"description": "Specialty not found"}
    }
)
def create_doctor(
    doctor: DoctorCreate,
    actor: Actor = Depends(get_staff_actor),
    db: Session = Depends(get_db)
):
    """
    Register a doctor:

    - **doctor_id**: Unique identifier for the doctor
    - **specialty_id**: Specialty the doctor attends
    """
    return DoctorService.create_doctor(db, doctor)

@router.get("/doctors", response_model=List[DoctorResponse], summary="Get active doctors")
def get_all_doctors(
    specialty_id: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=100, description="Maximum number of records to return"),
    db: Session = Depends(get_db)
):
    return DoctorService.get_all_active_doctors(db, specialty_id, skip, limit)

@router.get(
    "/doctors/{doctor_id}",
    response_model=DoctorResponse,
    summary="Get doctor by ID",
    responses={404: {"description": "Doctor not found"}}
)
def get_doctor(doctor_id: str, db: Session = Depends(get_db)):
    return DoctorService.get_doctor_by_id(db, doctor_id)

@router.get("/doctors/{doctor_id}/schedules", response_model=List[ScheduleResponse])
def get_doctor_schedules(
    doctor_id: str,
    active_only: bool = Query(True),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Weekly working windows of a doctor"""
    return service.list_schedules(doctor_id, active_only)

@router.post(
    "/doctors/{doctor_id}/schedules",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "An active schedule already exists for that day"}}
)
def create_schedule(
    doctor_id: str,
    schedule: ScheduleCreate,
    actor: Actor = Depends(get_staff_actor),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Add a weekly working window (day_of_week 0=Sunday .. 6=Saturday)"""
    return service.create_schedule(doctor_id, schedule)

@router.put(
    "/schedules/{schedule_id}",
    response_model=ScheduleResponse,
    responses={409: {"description": "Booked appointments would fall outside the new window"}}
)
def update_schedule(
    schedule_id: int,
    schedule: ScheduleUpdate,
    actor: Actor = Depends(get_staff_actor),
    service: ScheduleService = Depends(get_schedule_service)
):
    return service.update_schedule(schedule_id, schedule)

@router.post(
    "/doctors/{doctor_id}/blocked-periods",
    response_model=BlockPeriodResult,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Appointments are booked in the period (retry with override)"}}
)
def block_period(
    doctor_id: str,
    block: BlockedPeriodCreate,
    actor: Actor = Depends(get_staff_actor),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Block part of a doctor's agenda"""
    return service.block_period(doctor_id, block, created_by=actor.user_id)

@router.delete("/blocked-periods/{blocked_period_id}", response_model=BlockedPeriodResponse)
def unblock_period(
    blocked_period_id: int,
    actor: Actor = Depends(get_staff_actor),
    service: ScheduleService = Depends(get_schedule_service)
):
    return service.unblock_period(blocked_period_id)

@router.get("/doctors/{doctor_id}/agenda", response_model=DoctorAgenda)
def get_doctor_agenda(
    doctor_id: str,
    date: Optional[date] = Query(None, description="Defaults to today"),
    actor: Actor = Depends(get_staff_actor),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Schedule, slots, appointments and blocks of a doctor for one day"""
    return service.get_doctor_agenda(doctor_id, date)
