"""
Application wiring tests
"""
from fastapi.testclient import TestClient

from frontdesk import database


class TestApp:
    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_startup_does_not_touch_disk_database(self, client: TestClient):
        # lifespan has run init_db() by now
        assert database.engine.url.database in (None, "", ":memory:")


class TestAuth:
    def test_login(self, client: TestClient, receptionist):
        response = client.post("/auth/login", json={"username": "front1", "password": "123456"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["role"] == "receptionist"

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.json()["username"] == "front1"

    def test_wrong_password(self, client: TestClient, receptionist):
        response = client.post("/auth/login", json={"username": "front1", "password": "wrong!"})
        assert response.status_code == 401

    def test_disabled_account(self, client: TestClient, db_session, receptionist):
        receptionist.is_active = False
        db_session.commit()
        response = client.post("/auth/login", json={"username": "front1", "password": "123456"})
        assert response.status_code == 401
