from app.models.doctor import Doctor, Specialty
from app.models.schedule import Schedule
from app.models.blocked_period import BlockedPeriod
from app.models.appointment import Appointment

__all__ = ["Doctor", "Specialty", "Schedule", "BlockedPeriod", "Appointment"]
