"""Tests for turning weekly schedules into concrete slots."""

from datetime import date

from app.models.schedule import Schedule
from app.schemas.availability import DoctorSummary
from app.services.slot_service import SlotGenerator, day_of_week

from tests.conftest import MONDAY, SATURDAY, TUESDAY

DOCTOR = DoctorSummary(doctor_id="DOC001", name="Dr. Sarah Johnson", specialty_id=1, specialty="Cardiology")


def make_schedule(start="09:00", end="11:00", duration=30, weekday=1, active=True):
    return Schedule(
        doctor_id="DOC001",
        day_of_week=weekday,
        start_time=start,
        end_time=end,
        slot_duration=duration,
        is_active=active,
    )


def starts(slots):
    return [slot.start_time for slot in slots]


class TestDayOfWeek:
    def test_sunday_based_index(self):
        assert day_of_week(date(2025, 11, 30)) == 0
        assert day_of_week(MONDAY) == 1
        assert day_of_week(SATURDAY) == 6


class TestGenerateSlots:
    def test_two_hour_window_yields_four_slots(self):
        slots = list(SlotGenerator.generate_slots(make_schedule(), MONDAY, DOCTOR))

        assert starts(slots) == ["09:00", "09:30", "10:00", "10:30"]
        assert [slot.end_time for slot in slots] == ["09:30", "10:00", "10:30", "11:00"]
        assert all(slot.available for slot in slots)
        assert all(slot.date == MONDAY for slot in slots)

    def test_no_slot_starts_at_or_after_end(self):
        slots = list(SlotGenerator.generate_slots(make_schedule(), MONDAY, DOCTOR))

        assert "11:00" not in starts(slots)

    def test_last_slot_may_run_past_end(self):
        """Only a slot's start is gated by the end of the window."""
        slots = list(SlotGenerator.generate_slots(make_schedule("09:00", "10:00", 45), MONDAY, DOCTOR))

        assert starts(slots) == ["09:00", "09:45"]
        assert slots[-1].end_time == "10:30"

    def test_other_weekday_yields_nothing(self):
        assert list(SlotGenerator.generate_slots(make_schedule(), TUESDAY, DOCTOR)) == []

    def test_inactive_or_missing_schedule_yields_nothing(self):
        assert list(SlotGenerator.generate_slots(make_schedule(active=False), MONDAY, DOCTOR)) == []
        assert list(SlotGenerator.generate_slots(None, MONDAY, DOCTOR)) == []

    def test_late_slot_end_wraps_to_midnight(self):
        slots = list(SlotGenerator.generate_slots(make_schedule("23:00", "23:59", 30, weekday=6), SATURDAY, DOCTOR))

        assert starts(slots) == ["23:00", "23:30"]
        assert slots[-1].end_time == "00:00"

    def test_deterministic_for_identical_inputs(self):
        schedule = make_schedule()
        first = list(SlotGenerator.generate_slots(schedule, MONDAY, DOCTOR))
        second = list(SlotGenerator.generate_slots(schedule, MONDAY, DOCTOR))

        assert first == second
