"""HTTP tests for doctors, specialties, schedules and agenda blocks."""

from tests.conftest import PATIENT, STAFF

BASE = "/api/v1"


class TestRegistry:
    def test_create_specialty_requires_staff(self, client, seeded):
        denied = client.post(f"{BASE}/specialties", json={"name": "Neurology"}, headers=PATIENT)
        created = client.post(f"{BASE}/specialties", json={"name": "Neurology"}, headers=STAFF)

        assert denied.status_code == 403
        assert created.status_code == 201
        assert created.json()["name"] == "Neurology"

    def test_duplicate_specialty(self, client, seeded):
        response = client.post(f"{BASE}/specialties", json={"name": "Cardiology"}, headers=STAFF)

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "SpecialtyExists"

    def test_list_specialties(self, client, seeded):
        response = client.get(f"{BASE}/specialties")

        assert [s["name"] for s in response.json()] == ["Cardiology", "Dermatology"]

    def test_create_and_fetch_doctor(self, client, seeded):
        payload = {"name": "Dr. Ana Ruiz", "degree": "MD", "doctor_id": "DOC010", "specialty_id": seeded.dermatology_id}

        created = client.post(f"{BASE}/doctors", json=payload, headers=STAFF)
        fetched = client.get(f"{BASE}/doctors/DOC010")

        assert created.status_code == 201
        assert fetched.status_code == 200
        assert fetched.json()["status"] == "ACTIVE"

    def test_duplicate_doctor(self, client, seeded):
        payload = {"name": "Dr. Copy", "degree": "MD", "doctor_id": "DOC001", "specialty_id": seeded.cardiology_id}

        response = client.post(f"{BASE}/doctors", json=payload, headers=STAFF)

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "DoctorExists"

    def test_doctors_by_specialty(self, client, seeded):
        response = client.get(f"{BASE}/doctors", params={"specialty_id": seeded.cardiology_id})

        assert [d["doctor_id"] for d in response.json()] == ["DOC001", "DOC002"]

    def test_missing_doctor(self, client, seeded):
        response = client.get(f"{BASE}/doctors/DOC999")

        assert response.status_code == 404


class TestSchedules:
    def test_list_schedules(self, client, seeded):
        response = client.get(f"{BASE}/doctors/DOC001/schedules")

        assert response.status_code == 200
        assert [(s["day_of_week"], s["start_time"], s["end_time"]) for s in response.json()] == [(1, "09:00", "11:00")]

    def test_create_schedule(self, client, seeded):
        response = client.post(
            f"{BASE}/doctors/DOC001/schedules",
            json={"day_of_week": 5, "start_time": "08:00", "end_time": "12:00", "slot_duration": 15},
            headers=STAFF,
        )

        assert response.status_code == 201
        assert response.json()["slot_duration"] == 15

    def test_conflicting_schedule(self, client, seeded):
        response = client.post(
            f"{BASE}/doctors/DOC001/schedules",
            json={"day_of_week": 1, "start_time": "14:00", "end_time": "18:00"},
            headers=STAFF,
        )

        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "ScheduleConflict"

    def test_slot_duration_bounds(self, client, seeded):
        response = client.post(
            f"{BASE}/doctors/DOC001/schedules",
            json={"day_of_week": 2, "start_time": "08:00", "end_time": "12:00", "slot_duration": 5},
            headers=STAFF,
        )

        assert response.status_code == 422

    def test_update_schedule(self, client, seeded):
        schedule_id = client.get(f"{BASE}/doctors/DOC002/schedules").json()[0]["id"]

        response = client.put(f"{BASE}/schedules/{schedule_id}", json={"end_time": "12:00"}, headers=STAFF)

        assert response.status_code == 200
        assert response.json()["end_time"] == "12:00"

    def test_null_fields_leave_schedule_unchanged(self, client, seeded):
        schedule_id = client.get(f"{BASE}/doctors/DOC002/schedules").json()[0]["id"]

        response = client.put(
            f"{BASE}/schedules/{schedule_id}",
            json={"day_of_week": None, "is_active": None, "end_time": None},
            headers=STAFF,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["day_of_week"] == 1
        assert body["is_active"] is True
        assert body["end_time"] == "10:00"


class TestBlockedPeriods:
    def block(self, client, override=False):
        return client.post(
            f"{BASE}/doctors/DOC001/blocked-periods",
            json={
                "start_datetime": "2025-12-01T09:00:00",
                "end_datetime": "2025-12-01T10:00:00",
                "reason": "Surgery",
                "override": override,
            },
            headers=STAFF,
        )

    def test_block_and_unblock(self, client, seeded):
        blocked = self.block(client)

        assert blocked.status_code == 201
        assert blocked.json()["cancelled_appointments"] == 0

        period_id = blocked.json()["blocked_period"]["id"]
        unblocked = client.delete(f"{BASE}/blocked-periods/{period_id}", headers=STAFF)

        assert unblocked.status_code == 200
        assert unblocked.json()["is_active"] is False

    def test_block_over_booking(self, client, seeded):
        booked = client.post(
            f"{BASE}/appointments/",
            json={"doctor_id": "DOC001", "specialty_id": seeded.cardiology_id, "appointment_date": "2025-12-01", "start_time": "09:30"},
            headers=PATIENT,
        ).json()

        rejected = self.block(client)
        forced = self.block(client, override=True)

        assert rejected.status_code == 409
        assert rejected.json()["error"]["kind"] == "ConflictWithAppointments"
        assert rejected.json()["error"]["details"] == [booked["id"]]
        assert forced.status_code == 201
        assert forced.json()["cancelled_appointments"] == 1

    def test_end_before_start(self, client, seeded):
        response = client.post(
            f"{BASE}/doctors/DOC001/blocked-periods",
            json={"start_datetime": "2025-12-01T10:00:00", "end_datetime": "2025-12-01T09:00:00"},
            headers=STAFF,
        )

        assert response.status_code == 422


class TestAgenda:
    def test_agenda_for_staff(self, client, seeded):
        response = client.get(f"{BASE}/doctors/DOC003/agenda", params={"date": "2025-12-01"}, headers=STAFF)

        assert response.status_code == 200
        body = response.json()
        assert body["day_of_week"] == 1
        assert [slot["start_time"] for slot in body["slots"]] == ["14:00", "14:20", "14:40"]

    def test_agenda_hidden_from_patients(self, client, seeded):
        response = client.get(f"{BASE}/doctors/DOC003/agenda", params={"date": "2025-12-01"}, headers=PATIENT)

        assert response.status_code == 403
