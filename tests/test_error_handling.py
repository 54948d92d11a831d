import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.services.auth import auth_service
from main import app as fastapi_app

GENERIC_MESSAGE = "An error occurred while processing your request."


@pytest.fixture()
def failing_login(db, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("connection string leaked here")

    monkeypatch.setattr(auth_service, "login", boom)
    return TestClient(fastapi_app, raise_server_exceptions=False)


def post_login(client):
    return client.post("/api/auth/login", json={"email": "alice@acme.com", "password": "Passw0rd!"})


def test_unhandled_error_hides_detail_outside_development(failing_login, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")

    response = post_login(failing_login)

    assert response.status_code == 500
    assert response.json()["message"] == GENERIC_MESSAGE
    assert "leaked" not in response.text


def test_unhandled_error_shows_message_in_development(failing_login, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")

    response = post_login(failing_login)

    assert response.status_code == 500
    assert response.json() == {
        "message": "connection string leaked here",
        "type": "RuntimeError",
    }
