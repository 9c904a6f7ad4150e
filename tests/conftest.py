"""Shared fixtures: a file-backed SQLite database per test and a seeded clinic."""

from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.config.database import Base, build_engine, get_db
from app.models.doctor import Doctor, Specialty
from app.models.schedule import Schedule
from app.services.appointment_service import AppointmentService
from app.services.notification_service import NotificationDispatcher, RecordingNotifier
from app.services.slot_service import day_of_week
from app.services.store import SchedulingStore

MONDAY = date(2025, 12, 1)
TUESDAY = date(2025, 12, 2)
SATURDAY = date(2025, 12, 6)

PATIENT = {"X-User-Id": "patient-1"}
OTHER_PATIENT = {"X-User-Id": "patient-2"}
STAFF = {"X-User-Id": "staff-1", "X-User-Role": "SECRETARY"}


def next_weekday(weekday: int, after: date | None = None) -> date:
    """First date strictly after ``after`` (default today) falling on a Sunday-based weekday."""
    start = after or date.today()
    delta = (weekday - day_of_week(start)) % 7 or 7
    return start + timedelta(days=delta)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'scheduling.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return SchedulingStore(db)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier):
    dispatcher = NotificationDispatcher(notifier)
    yield dispatcher
    dispatcher.shutdown()


@pytest.fixture
def seeded(db):
    """Two cardiologists and a dermatologist, all working on Mondays.

    DOC001: Monday 09:00-11:00, 30-minute slots (09:00, 09:30, 10:00, 10:30).
    DOC002: Monday 09:00-10:00, 30-minute slots.
    DOC003: Monday 14:00-15:00, 20-minute slots.
    """
    cardiology = Specialty(name="Cardiology")
    dermatology = Specialty(name="Dermatology")
    db.add_all([cardiology, dermatology])
    db.flush()

    doctors = [
        Doctor(doctor_id="DOC001", name="Dr. Sarah Johnson", degree="MD", specialty_id=cardiology.id),
        Doctor(doctor_id="DOC002", name="Dr. Omar Haddad", degree="MD", specialty_id=cardiology.id),
        Doctor(doctor_id="DOC003", name="Dr. Lena Park", degree="MD", specialty_id=dermatology.id),
    ]
    db.add_all(doctors)
    db.flush()

    db.add_all([
        Schedule(doctor_id="DOC001", day_of_week=1, start_time="09:00", end_time="11:00", slot_duration=30),
        Schedule(doctor_id="DOC002", day_of_week=1, start_time="09:00", end_time="10:00", slot_duration=30),
        Schedule(doctor_id="DOC003", day_of_week=1, start_time="14:00", end_time="15:00", slot_duration=20),
    ])
    db.commit()

    return SimpleNamespace(cardiology_id=cardiology.id, dermatology_id=dermatology.id)


@pytest.fixture
def service(store, dispatcher, seeded):
    return AppointmentService(store, dispatcher)


@pytest.fixture
def client(session_factory, dispatcher, seeded):
    from app.main import app as api
    from app.routes.dependencies import get_notification_dispatcher

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    api.dependency_overrides[get_db] = override_get_db
    api.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    yield TestClient(api)
    api.dependency_overrides.clear()
