"""Integration tests for voter endpoints."""
import pytest


@pytest.mark.integration
class TestVoterRegistration:

    def test_register_device(self, client):
        response = client.post("/api/v1/voters", json={"device_id": "device-1", "device_type": "mobile"})

        assert response.status_code == 200
        data = response.json()
        assert data["id"]
        assert data["device_id"] == "device-1"
        assert data["device_type"] == "mobile"
        assert data["is_judge"] is False

    def test_register_is_idempotent_per_device(self, client):
        first = client.post("/api/v1/voters", json={"device_id": "device-1"}).json()
        second = client.post(
            "/api/v1/voters", json={"device_id": "device-1", "is_judge": True, "judge_name": "Judge Rao"}
        ).json()

        assert second["id"] == first["id"]
        assert second["is_judge"] is True

    def test_register_rejects_unknown_device_type(self, client):
        response = client.post("/api/v1/voters", json={"device_id": "device-1", "device_type": "toaster"})
        assert response.status_code == 422

    def test_read_voter(self, client, voter):
        response = client.get(f"/api/v1/voters/{voter.id}")
        assert response.status_code == 200
        assert response.json()["device_id"] == "device-fixture"

    def test_read_unknown_voter(self, client):
        response = client.get("/api/v1/voters/nobody")
        assert response.status_code == 404
        assert response.json()["detail"] == "Voter not found"


@pytest.mark.integration
class TestIdentityLinking:

    def test_link_and_recover_by_email(self, client, voter):
        response = client.patch(
            f"/api/v1/voters/{voter.id}/identity",
            json={"email": "Maya@Example.com", "email_verified": True, "auth_user_id": "auth-1"},
        )
        assert response.status_code == 200
        assert response.json()["email"] == "maya@example.com"

        found = client.get("/api/v1/voters", params={"email": "maya@example.com"})
        assert found.status_code == 200
        assert found.json()["id"] == voter.id

    def test_email_taken_by_other_voter(self, client, voter):
        other = client.post("/api/v1/voters", json={"device_id": "device-other"}).json()
        client.patch(f"/api/v1/voters/{other['id']}/identity", json={"email": "maya@example.com"})

        response = client.patch(f"/api/v1/voters/{voter.id}/identity", json={"email": "maya@example.com"})

        assert response.status_code == 409
        assert response.json()["detail"] == "Email already linked to another voter"

    def test_invalid_email(self, client, voter):
        response = client.patch(f"/api/v1/voters/{voter.id}/identity", json={"email": "not-an-email"})
        assert response.status_code == 422

    def test_unknown_voter(self, client):
        response = client.patch("/api/v1/voters/nobody/identity", json={"email": "maya@example.com"})
        assert response.status_code == 404

    def test_find_unknown_email(self, client):
        response = client.get("/api/v1/voters", params={"email": "nobody@example.com"})
        assert response.status_code == 404
