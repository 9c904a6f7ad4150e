"""Tests for the ordered booking checks."""

from datetime import datetime

import pytest

from app.models.appointment import Appointment, AppointmentStatus
from app.models.blocked_period import BlockedPeriod
from app.models.doctor import Doctor, DoctorStatus
from app.models.schedule import Schedule
from app.services.booking_validator import BookingValidator
from app.utils.errors import ErrorKind, SchedulingError

from tests.conftest import MONDAY, SATURDAY, TUESDAY


@pytest.fixture
def validator(store, seeded):
    return BookingValidator(store)


def add_appointment(db, patient_id, doctor_id, start_time, specialty_id, status=AppointmentStatus.SCHEDULED):
    appointment = Appointment(
        patient_id=patient_id,
        doctor_id=doctor_id,
        specialty_id=specialty_id,
        appointment_date=MONDAY,
        start_time=start_time,
        end_time="10:30",
        status=status,
    )
    db.add(appointment)
    db.commit()
    return appointment


class TestValidateBooking:
    def test_valid_request(self, validator, seeded):
        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "10:00", patient_id="patient-1")

        assert result.valid is True
        assert result.reason is None

    def test_unknown_doctor(self, validator, seeded):
        result = validator.validate("DOC999", seeded.cardiology_id, MONDAY, "10:00")

        assert result.reason == ErrorKind.DOCTOR_NOT_FOUND

    def test_inactive_doctor_is_not_bookable(self, db, validator, seeded):
        db.query(Doctor).filter(Doctor.doctor_id == "DOC001").update({"status": DoctorStatus.INACTIVE})
        db.commit()

        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "10:00")

        assert result.reason == ErrorKind.DOCTOR_NOT_FOUND

    def test_unknown_specialty(self, validator):
        result = validator.validate("DOC001", 999, MONDAY, "10:00")

        assert result.reason == ErrorKind.SPECIALTY_NOT_FOUND

    def test_specialty_mismatch(self, validator, seeded):
        result = validator.validate("DOC001", seeded.dermatology_id, MONDAY, "10:00")

        assert result.reason == ErrorKind.SPECIALTY_MISMATCH

    def test_no_schedule_for_day(self, validator, seeded):
        result = validator.validate("DOC001", seeded.cardiology_id, TUESDAY, "10:00")

        assert result.reason == ErrorKind.NO_SCHEDULE_FOR_DAY
        assert "Tuesday" in result.message

    @pytest.mark.parametrize("start_time", ["08:30", "11:00", "17:00"])
    def test_outside_working_hours(self, validator, seeded, start_time):
        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, start_time)

        assert result.reason == ErrorKind.OUTSIDE_WORKING_HOURS
        assert "09:00" in result.message and "11:00" in result.message

    def test_misaligned_slot(self, validator, seeded):
        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "09:15")

        assert result.reason == ErrorKind.MISALIGNED_SLOT
        assert "30" in result.message

    def test_malformed_time(self, validator, seeded):
        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "9.30")

        assert result.valid is False
        assert result.reason == ErrorKind.INVALID_TIME_FORMAT

    def test_slot_taken(self, db, validator, seeded):
        add_appointment(db, "patient-2", "DOC001", "10:00", seeded.cardiology_id)

        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "10:00", patient_id="patient-1")

        assert result.reason == ErrorKind.SLOT_TAKEN

    def test_unpadded_time_matches_booked_slot(self, db, validator, seeded):
        add_appointment(db, "patient-2", "DOC001", "09:30", seeded.cardiology_id)

        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "9:30", patient_id="patient-1")

        assert result.reason == ErrorKind.SLOT_TAKEN

    def test_cancelled_appointment_does_not_take_slot(self, db, validator, seeded):
        add_appointment(db, "patient-2", "DOC001", "10:00", seeded.cardiology_id, AppointmentStatus.CANCELLED)

        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "10:00", patient_id="patient-1")

        assert result.valid is True

    def test_duplicate_patient_booking(self, db, validator, seeded):
        add_appointment(db, "patient-1", "DOC001", "09:00", seeded.cardiology_id)

        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "10:00", patient_id="patient-1")

        assert result.reason == ErrorKind.DUPLICATE_PATIENT_BOOKING

    def test_excluded_appointment_does_not_conflict_with_itself(self, db, validator, seeded):
        own = add_appointment(db, "patient-1", "DOC001", "10:00", seeded.cardiology_id)

        result = validator.validate(
            "DOC001", seeded.cardiology_id, MONDAY, "10:00", patient_id="patient-1", exclude_appointment_id=own.id
        )

        assert result.valid is True

    def test_blocked_slot(self, db, validator, seeded):
        db.add(BlockedPeriod(
            doctor_id="DOC001",
            start_datetime=datetime(2025, 12, 1, 10, 0),
            end_datetime=datetime(2025, 12, 1, 11, 0),
            reason="Conference",
            is_active=True,
        ))
        db.commit()

        result = validator.validate("DOC001", seeded.cardiology_id, MONDAY, "10:30")

        assert result.reason == ErrorKind.SLOT_BLOCKED
        assert "Conference" in result.message

    def test_block_after_midnight_catches_overrunning_slot(self, db, validator, seeded):
        """A late slot that runs into the next day is blocked by a block starting at midnight."""
        db.add(Schedule(doctor_id="DOC001", day_of_week=6, start_time="23:00", end_time="23:59", slot_duration=90))
        db.add(BlockedPeriod(
            doctor_id="DOC001",
            start_datetime=datetime(2025, 12, 7, 0, 0),
            end_datetime=datetime(2025, 12, 7, 2, 0),
            reason="Night maintenance",
            is_active=True,
        ))
        db.commit()

        result = validator.validate("DOC001", seeded.cardiology_id, SATURDAY, "23:00")

        assert result.reason == ErrorKind.SLOT_BLOCKED

    def test_checks_short_circuit_in_order(self, db, validator, seeded):
        """A request failing several checks reports the earliest one."""
        add_appointment(db, "patient-2", "DOC001", "10:00", seeded.cardiology_id)

        result = validator.validate("DOC001", seeded.dermatology_id, MONDAY, "10:00")

        assert result.reason == ErrorKind.SPECIALTY_MISMATCH


class TestCheck:
    def test_returns_schedule(self, validator, seeded):
        schedule = validator.check("DOC001", seeded.cardiology_id, MONDAY, "10:00")

        assert schedule.slot_duration == 30

    def test_raises_with_kind(self, validator, seeded):
        with pytest.raises(SchedulingError) as exc_info:
            validator.check("DOC001", seeded.cardiology_id, MONDAY, "09:15")

        assert exc_info.value.kind == ErrorKind.MISALIGNED_SLOT
        assert exc_info.value.status_code == 400
