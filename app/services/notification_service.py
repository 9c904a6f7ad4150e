# app/services/notification_service.py
#
# Appointment notifications are best-effort: they are handed to a worker
# pool and never awaited, so a failing notifier cannot undo a booking.

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Protocol, Set

from app.models.appointment import Appointment
from app.services.redis_service import RedisService, get_notification_queue_name

logger = logging.getLogger("notifications")

EVENT_CONFIRMED = "APPOINTMENT_CONFIRMATION"
EVENT_CANCELLED = "APPOINTMENT_CANCELLATION"
EVENT_UPDATED = "APPOINTMENT_UPDATE"


class Notifier(Protocol):
    def notify_confirmed(self, patient_id: str, summary: Dict[str, Any]) -> None: ...

    def notify_cancelled(self, patient_id: str, summary: Dict[str, Any], reason: Optional[str]) -> None: ...

    def notify_updated(self, patient_id: str, summary: Dict[str, Any]) -> None: ...


def build_summary(appointment: Appointment) -> Dict[str, Any]:
    """Plain-data view of an appointment, safe to hand to another thread."""
    doctor = appointment.doctor
    specialty = appointment.specialty
    return {
        "appointment_id": appointment.id,
        "appointment_date": appointment.appointment_date.isoformat(),
        "start_time": appointment.start_time,
        "end_time": appointment.end_time,
        "doctor_id": appointment.doctor_id,
        "doctor_name": doctor.name if doctor else "",
        "specialty": specialty.name if specialty else "",
    }


class RedisNotificationQueue:
    """Pushes notification events onto a Redis list for the delivery worker."""

    def __init__(self, redis_service: Optional[RedisService] = None, queue: Optional[str] = None):
        self.redis_service = redis_service or RedisService()
        self.queue = queue or get_notification_queue_name()

    def _publish(self, event_type: str, patient_id: str, summary: Dict[str, Any], **extra):
        event = {"type": event_type, "patient_id": patient_id, "data": summary, **extra}
        if not self.redis_service.enqueue_event(self.queue, event):
            logger.warning(f"Notification {event_type} for patient {patient_id} was not queued")

    def notify_confirmed(self, patient_id: str, summary: Dict[str, Any]) -> None:
        self._publish(EVENT_CONFIRMED, patient_id, summary)

    def notify_cancelled(self, patient_id: str, summary: Dict[str, Any], reason: Optional[str]) -> None:
        self._publish(EVENT_CANCELLED, patient_id, summary, reason=reason)

    def notify_updated(self, patient_id: str, summary: Dict[str, Any]) -> None:
        self._publish(EVENT_UPDATED, patient_id, summary)


class RecordingNotifier:
    """Keeps events in memory. Used in tests and when Redis is not wanted."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def _record(self, event_type: str, patient_id: str, summary: Dict[str, Any], **extra):
        with self._lock:
            self.events.append({"type": event_type, "patient_id": patient_id, "data": summary, **extra})

    def notify_confirmed(self, patient_id: str, summary: Dict[str, Any]) -> None:
        self._record(EVENT_CONFIRMED, patient_id, summary)

    def notify_cancelled(self, patient_id: str, summary: Dict[str, Any], reason: Optional[str]) -> None:
        self._record(EVENT_CANCELLED, patient_id, summary, reason=reason)

    def notify_updated(self, patient_id: str, summary: Dict[str, Any]) -> None:
        self._record(EVENT_UPDATED, patient_id, summary)

    def of_type(self, event_type: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [event for event in self.events if event["type"] == event_type]


class NotificationDispatcher:
    """Runs notifier calls as detached tasks on a small thread pool."""

    def __init__(self, notifier: Notifier, max_workers: int = 2):
        self.notifier = notifier
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def _submit(self, event_type: str, fn, *args) -> Future:
        future = self._executor.submit(fn, *args)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(lambda done: self._on_done(event_type, done))
        return future

    def _on_done(self, event_type: str, future: Future):
        with self._lock:
            self._pending.discard(future)
        error = future.exception()
        if error is not None:
            logger.error(f"❌ Notification {event_type} failed: {error}")

    def confirmed(self, patient_id: str, summary: Dict[str, Any]) -> Future:
        return self._submit(EVENT_CONFIRMED, self.notifier.notify_confirmed, patient_id, summary)

    def cancelled(self, patient_id: str, summary: Dict[str, Any], reason: Optional[str]) -> Future:
        return self._submit(EVENT_CANCELLED, self.notifier.notify_cancelled, patient_id, summary, reason)

    def updated(self, patient_id: str, summary: Dict[str, Any]) -> Future:
        return self._submit(EVENT_UPDATED, self.notifier.notify_updated, patient_id, summary)

    def wait_for_pending(self, timeout: Optional[float] = None) -> bool:
        """Block until queued notifications finish. Returns False on timeout."""
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_tasks: bool = True):
        self._executor.shutdown(wait=wait_for_tasks)
