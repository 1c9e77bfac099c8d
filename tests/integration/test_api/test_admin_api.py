"""Integration tests for admin authentication and admin endpoints."""
import pytest


@pytest.mark.integration
class TestAdminAuth:

    def test_login_sets_cookie(self, client):
        response = client.post("/api/v1/auth/admin/login", json={"password": "adminpass"})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert "admin_token" in response.cookies

    def test_wrong_password(self, client):
        response = client.post("/api/v1/auth/admin/login", json={"password": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid password"

    def test_logout(self, admin_client):
        response = admin_client.post("/api/v1/auth/admin/logout")
        assert response.status_code == 200

    def test_admin_routes_need_cookie(self, client):
        assert client.delete("/api/v1/admin/votes").status_code == 401
        assert client.get("/api/v1/admin/cache/stats").status_code == 401

    def test_garbage_cookie(self, client):
        client.cookies.set("admin_token", "not-a-jwt")
        assert client.get("/api/v1/admin/cache/stats").status_code == 401


@pytest.mark.integration
class TestAdminOperations:

    def test_create_reel_shows_in_listing(self, admin_client, reels):
        assert len(admin_client.get("/api/v1/reels").json()) == 4

        response = admin_client.post(
            "/api/v1/admin/reels",
            json={"id": "ani-1", "number": 1, "contestant": "Eve Sato", "category": "Animation"},
        )

        assert response.status_code == 200
        assert len(admin_client.get("/api/v1/reels").json()) == 5

    def test_create_duplicate_reel(self, admin_client, reels):
        response = admin_client.post(
            "/api/v1/admin/reels",
            json={"id": "doc-1", "number": 7, "contestant": "Eve Sato", "category": "Documentary"},
        )
        assert response.status_code == 400

    def test_issue_tokens(self, admin_client):
        response = admin_client.post(
            "/api/v1/admin/tokens",
            json={"tokens": [{"person_name": "Sam Park"}, {"person_name": "Judge Okoye", "token_type": "judge"}]},
        )

        assert response.status_code == 200
        issued = response.json()
        assert [token["token_type"] for token in issued] == ["audience", "judge"]
        assert admin_client.get(f"/api/v1/tokens/{issued[0]['token']}").status_code == 200

    def test_clear_votes(self, admin_client, reels):
        voter_id = admin_client.post("/api/v1/voters", json={"device_id": "device-a"}).json()["id"]
        admin_client.put("/api/v1/votes", json={"reel_id": "doc-1", "voter_id": voter_id, "score": 5})

        response = admin_client.delete("/api/v1/admin/votes")

        assert response.json() == {"success": True, "deleted": 1}
        assert admin_client.get("/api/v1/stats").json() == []
        assert admin_client.get(f"/api/v1/votes/doc-1/{voter_id}").status_code == 404

    def test_cache_stats(self, admin_client, reels):
        admin_client.get("/api/v1/reels")

        stats = admin_client.get("/api/v1/admin/cache/stats").json()

        assert "active_reels" in stats["entries"]
