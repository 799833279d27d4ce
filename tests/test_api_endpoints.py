"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

import pytest
from fastapi.testclient import TestClient


EMPLOYER = "admin-uid-1"
EMPLOYEE = "emp-1"
DAY_URL = f"/employers/{EMPLOYER}/employees/{EMPLOYEE}/days/2024-03-18"
PUNCH_URL = f"/employers/{EMPLOYER}/employees/{EMPLOYEE}/punches"


@pytest.fixture
def configured_client(test_client: TestClient):
    """Client with the employer and roster configured."""
    response = test_client.put(
        f"/employers/{EMPLOYER}",
        json={"id": EMPLOYER, "name": "Padaria Central", "timezone": "UTC", "shift_start": "08:00", "shift_end": "17:00"},
    )
    assert response.status_code == 200
    response = test_client.put(f"/employers/{EMPLOYER}/employees", json=[{"id": EMPLOYEE, "name": "Maria Souza"}])
    assert response.status_code == 200
    return test_client


def _punch(client: TestClient, kind: str, timestamp: str):
    return client.post(PUNCH_URL, json={"kind": kind, "timestamp": timestamp})


class TestHealth:
    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestEmployerEndpoints:
    """Test employer configuration endpoints."""

    def test_get_employer(self, configured_client):
        response = configured_client.get(f"/employers/{EMPLOYER}")
        assert response.status_code == 200
        assert response.json()["name"] == "Padaria Central"
        assert response.json()["default_daily_hours"] == 8.0

    def test_get_missing_employer(self, test_client):
        assert test_client.get("/employers/nobody").status_code == 404

    def test_path_id_wins(self, test_client):
        response = test_client.put("/employers/abc", json={"id": "other", "name": "Loja"})
        assert response.status_code == 200
        assert response.json()["id"] == "abc"

    def test_roster(self, configured_client):
        response = configured_client.get(f"/employers/{EMPLOYER}/employees")
        assert response.status_code == 200
        assert [e["id"] for e in response.json()["employees"]] == [EMPLOYEE]

    def test_holidays(self, configured_client):
        response = configured_client.put(
            f"/employers/{EMPLOYER}/holidays/2024",
            json=[{"date": "2024-01-25", "name": "Aniversário da cidade", "scope": "municipal"}],
        )
        assert response.status_code == 200

        response = configured_client.get(f"/employers/{EMPLOYER}/holidays/2024")
        names = [h["name"] for h in response.json()]
        assert "Aniversário da cidade" in names
        assert "Natal" in names


class TestPunchEndpoints:
    """Test punch and day endpoints."""

    def test_record_punch(self, configured_client):
        response = _punch(configured_client, "clock_in", "2024-03-18T08:00:00Z")

        assert response.status_code == 201
        data = response.json()
        assert data["date"] == "2024-03-18"
        assert data["events"][0]["kind"] == "clock_in"
        assert data["events"][0]["version"] == 1
        assert data["inconsistencies"][0]["kind"] == "missing_event"

    def test_invalid_kind(self, configured_client):
        assert _punch(configured_client, "lunch", "2024-03-18T08:00:00Z").status_code == 422

    def test_get_day(self, configured_client):
        _punch(configured_client, "clock_in", "2024-03-18T08:00:00Z")
        response = configured_client.get(DAY_URL)
        assert response.status_code == 200
        assert len(response.json()["events"]) == 1

    def test_get_missing_day(self, configured_client):
        assert configured_client.get(DAY_URL).status_code == 404

    def test_locked_day_returns_conflict(self, configured_client):
        _punch(configured_client, "clock_in", "2024-03-18T08:00:00Z")
        assert configured_client.post(f"{DAY_URL}/lock", json={"actor_id": "manager-1"}).status_code == 200

        response = _punch(configured_client, "clock_out", "2024-03-18T17:00:00Z")

        assert response.status_code == 409

    def test_validate_day(self, configured_client):
        _punch(configured_client, "clock_in", "2024-03-18T08:00:00Z")
        response = configured_client.post(f"{DAY_URL}/validate", json={"actor_id": "manager-1"})
        assert response.status_code == 200
        assert response.json()["audit_trail"][-1]["event_type"] == "day_validated"

    def test_day_status_is_audited(self, configured_client):
        response = configured_client.put(f"{DAY_URL}/status", json={"closed": True, "actor_id": "manager-1"})

        assert response.status_code == 200
        assert response.json()["closed"] is True
        audit = response.json()["audit_trail"][-1]
        assert audit["event_type"] == "day_status_changed"
        assert audit["actor_id"] == "manager-1"

    def test_summary(self, configured_client):
        _punch(configured_client, "clock_in", "2024-03-18T08:00:00Z")
        _punch(configured_client, "clock_out", "2024-03-18T12:00:00Z")

        response = configured_client.get(f"{DAY_URL}/summary")

        assert response.status_code == 200
        assert response.json()["worked_hours"] == 4.0
        assert response.json()["shortfall_hours"] == 4.0

    def test_month_summary(self, configured_client):
        _punch(configured_client, "clock_in", "2024-03-18T08:00:00Z")
        _punch(configured_client, "clock_out", "2024-03-18T12:00:00Z")
        response = configured_client.get(f"/employers/{EMPLOYER}/employees/{EMPLOYEE}/months/2024/3/summary")
        assert response.status_code == 200
        assert response.json()["worked_hours"] == 4.0

    def test_month_summary_unknown_employee(self, configured_client):
        response = configured_client.get(f"/employers/{EMPLOYER}/employees/ghost/months/2024/3/summary")
        assert response.status_code == 404


class TestCorrectionEndpoints:
    """Test the correction workflow over HTTP."""

    def _event_id(self, client):
        _punch(client, "clock_in", "2024-03-18T08:00:00Z")
        _punch(client, "clock_out", "2024-03-18T17:00:00Z")
        return client.get(DAY_URL).json()["events"][0]["id"]

    def test_invalid_proposal_returns_all_errors(self, configured_client):
        event_id = self._event_id(configured_client)

        response = configured_client.post(
            f"{DAY_URL}/corrections",
            json={"original_event_id": event_id, "proposed_timestamp": "2024-03-18T07:30:00Z", "justification": "late"},
        )

        assert response.status_code == 422
        errors = response.json()["detail"]["errors"]
        assert "requester not identified" in errors
        assert any(e.startswith("justification too short") for e in errors)

    def test_propose_and_approve(self, configured_client):
        event_id = self._event_id(configured_client)
        response = configured_client.post(
            f"{DAY_URL}/corrections",
            json={
                "original_event_id": event_id,
                "proposed_timestamp": "2024-03-18T07:30:00Z",
                "justification": "Arrived earlier to receive a delivery",
                "requested_by_id": "manager-1",
                "requested_by_name": "Carlos Lima",
            },
        )
        assert response.status_code == 201
        correction_id = response.json()["correction"]["id"]
        assert response.json()["correction"]["status"] == "pending"

        response = configured_client.post(
            f"{DAY_URL}/corrections/{correction_id}/approve",
            json={"actor_id": EMPLOYEE, "actor_name": "Maria Souza"},
        )
        assert response.status_code == 200

        summary = configured_client.get(f"{DAY_URL}/summary").json()
        assert summary["worked_hours"] == 9.5
        assert summary["applied_correction_ids"] == [correction_id]

    def test_second_decision_conflicts(self, configured_client):
        event_id = self._event_id(configured_client)
        correction_id = configured_client.post(
            f"{DAY_URL}/corrections",
            json={
                "original_event_id": event_id,
                "proposed_timestamp": "2024-03-18T07:30:00Z",
                "justification": "Arrived earlier to receive a delivery",
                "requested_by_id": "manager-1",
                "requested_by_name": "Carlos Lima",
            },
        ).json()["correction"]["id"]
        url = f"{DAY_URL}/corrections/{correction_id}"

        assert configured_client.post(f"{url}/reject", json={"actor_id": EMPLOYEE}).status_code == 200
        assert configured_client.post(f"{url}/approve", json={"actor_id": EMPLOYEE}).status_code == 409
        assert configured_client.post(f"{url}/cancel", json={"actor_id": "manager-1"}).status_code == 409

    def test_unknown_correction(self, configured_client):
        self._event_id(configured_client)
        response = configured_client.post(f"{DAY_URL}/corrections/nope/approve", json={"actor_id": EMPLOYEE})
        assert response.status_code == 404

    def test_resolve_inconsistency(self, configured_client):
        record = _punch(configured_client, "clock_in", "2024-03-18T08:00:00Z").json()
        inconsistency_id = record["inconsistencies"][0]["id"]
        url = f"{DAY_URL}/inconsistencies/{inconsistency_id}/resolve"
        body = {"kind": "justification_accepted", "resolved_by_id": "manager-1", "details": "left early, approved"}

        response = configured_client.post(url, json=body)

        assert response.status_code == 200
        assert response.json()["inconsistencies"][0]["resolved"] is True
        assert configured_client.post(url, json=body).status_code == 409
