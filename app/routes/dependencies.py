from typing import Optional
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from app.config.database import get_db
from app.services.appointment_service import Actor, AppointmentService
from app.services.availability_service import AvailabilityService
from app.services.notification_service import NotificationDispatcher
from app.services.schedule_service import ScheduleService
from app.services.store import SchedulingStore
from app.utils.errors import ErrorKind, SchedulingError


def get_store(db: Session = Depends(get_db)) -> SchedulingStore:
    return SchedulingStore(db)


def get_notification_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.notification_dispatcher


def get_appointment_service(
    store: SchedulingStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
) -> AppointmentService:
    return AppointmentService(store, dispatcher)


def get_availability_service(store: SchedulingStore = Depends(get_store)) -> AvailabilityService:
    return AvailabilityService(store)


def get_schedule_service(
    store: SchedulingStore = Depends(get_store),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
) -> ScheduleService:
    return ScheduleService(store, dispatcher)


def get_optional_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None)
) -> Optional[Actor]:
    """Caller identity forwarded by the authentication gateway."""
    if not x_user_id:
        return None
    return Actor(user_id=x_user_id, role=x_user_role)


def get_actor(actor: Optional[Actor] = Depends(get_optional_actor)) -> Actor:
    if actor is None:
        raise SchedulingError(ErrorKind.UNAUTHENTICATED, "User is not authenticated")
    return actor


def get_staff_actor(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_staff:
        raise SchedulingError(ErrorKind.UNAUTHORIZED, "Only clinic staff can perform this action")
    return actor
