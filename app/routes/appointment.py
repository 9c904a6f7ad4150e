from fastapi import APIRouter, Depends, Query, status
from datetime import date
from typing import List, Optional
from app.models.appointment import AppointmentStatus
from app.routes.dependencies import (
    get_actor,
    get_appointment_service,
    get_availability_service,
    get_staff_actor,
)
from app.schemas.appointment import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentList,
    AppointmentReschedule,
    AppointmentResponse,
)
from app.schemas.availability import TimeSlot
from app.services.appointment_service import Actor, AppointmentService
from app.services.availability_service import AvailabilityService

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
    responses={
        400: {"description": "Outside working hours, misaligned slot, blocked agenda or specialty mismatch"},
        401: {"description": "User is not authenticated"},
        404: {"description": "Doctor or specialty not found"},
        409: {"description": "Slot already booked or patient already booked with this doctor that day"}
    }
)
def create_appointment(
    appointment: AppointmentCreate,
    actor: Actor = Depends(get_actor),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Book a new appointment for the calling patient"""
    return service.create_appointment(
        patient_id=actor.user_id,
        doctor_id=appointment.doctor_id,
        specialty_id=appointment.specialty_id,
        appointment_date=appointment.appointment_date,
        start_time=appointment.start_time,
        notes=appointment.notes,
    )

@router.get("/availability", response_model=List[TimeSlot], summary="Available time slots")
def get_availability(
    date: Optional[date] = Query(None, description="Defaults to today"),
    specialty_id: Optional[int] = Query(None, ge=1),
    doctor_id: Optional[str] = Query(None),
    service: AvailabilityService = Depends(get_availability_service)
):
    """Bookable slots for a date, optionally filtered by specialty and/or doctor"""
    return service.resolve_availability(target_date=date, specialty_id=specialty_id, doctor_id=doctor_id)

@router.get("/me", response_model=AppointmentList)
def get_my_appointments(
    status: Optional[AppointmentStatus] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    actor: Actor = Depends(get_actor),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Appointments of the calling patient, ordered by date and time"""
    appointments = service.list_patient_appointments(actor.user_id, status, date_from, date_to)
    return {"appointments": appointments}

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_actor),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Get appointment by ID"""
    return service.get_appointment(appointment_id, actor)

@router.put("/{appointment_id}", response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    appointment: AppointmentReschedule,
    actor: Actor = Depends(get_actor),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Reschedule an appointment. Only provided fields change."""
    return service.reschedule_appointment(
        appointment_id,
        appointment.model_dump(exclude_unset=True),
        actor
    )

@router.patch("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    body: Optional[AppointmentCancel] = None,
    actor: Actor = Depends(get_actor),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Cancel an appointment and free its slot"""
    reason = body.cancellation_reason if body else None
    return service.cancel_appointment(appointment_id, reason, actor)

@router.patch("/{appointment_id}/complete", response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_staff_actor),
    service: AppointmentService = Depends(get_appointment_service)
):
    return service.complete_appointment(appointment_id, actor)

@router.patch("/{appointment_id}/no-show", response_model=AppointmentResponse)
def mark_no_show(
    appointment_id: int,
    actor: Actor = Depends(get_staff_actor),
    service: AppointmentService = Depends(get_appointment_service)
):
    return service.mark_no_show(appointment_id, actor)
