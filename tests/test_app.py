"""Tests for page routing, health and store-failure handling."""

from sqlalchemy.exc import OperationalError

from circulation_service import circulation


class TestPages:
    def test_index_without_session_shows_login(self, client):
        resp = client.get("/")

        assert resp.status_code == 200
        assert "Please login." in resp.get_data(as_text=True)

    def test_index_with_session_shows_catalog(self, alice):
        resp = alice.get("/")

        assert resp.status_code == 200
        assert "<h1>Catalog</h1>" in resp.get_data(as_text=True)

    def test_mybooks_without_session_shows_login(self, client):
        resp = client.get("/mybooks")

        assert "Please login." in resp.get_data(as_text=True)

    def test_mybooks_with_session(self, alice):
        resp = alice.get("/mybooks")

        assert "<h1>My books</h1>" in resp.get_data(as_text=True)

    def test_login_page_clears_session(self, alice):
        resp = alice.get("/login")
        assert "Please login." in resp.get_data(as_text=True)

        assert alice.post("/api/mybooks").get_json() == {
            "success": False,
            "error": "User not logged in",
        }

    def test_privacy_page(self, client):
        resp = client.get("/privacy")

        assert resp.status_code == 200
        assert "<h1>Privacy</h1>" in resp.get_data(as_text=True)


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")

        assert resp.status_code == 200
        assert resp.get_json() == {"status": "ok", "service": "circulation_service"}


class TestStoreFailure:
    def test_store_failure_returns_generic_500(self, client, monkeypatch):
        def broken(session):
            raise OperationalError("SELECT 1", {}, Exception("database is gone"))

        monkeypatch.setattr(circulation, "all_titles", broken)

        resp = client.get("/api/titles")

        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Internal Server Error"}
