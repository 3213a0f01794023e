"""Tests for error response shapes and health endpoints."""
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import StorageError

pytestmark = pytest.mark.unit


def test_malformed_body_is_400_with_message(api_client):
    response = api_client.post("/api/users", json={"username": "x"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid user data"


def test_persona_age_out_of_range(api_client, seeded):
    response = api_client.post(
        "/api/personas",
        json={"userId": seeded["user_id"], "name": "Kid", "age": 5, "interests": ["Lego"], "communicationStyle": "casual"},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid persona data"


def test_bad_path_value_is_400(api_client):
    response = api_client.get("/api/sessions/not-a-number")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid session data"


@pytest.mark.parametrize(
    "path,message",
    [
        ("/api/users/99", "User not found"),
        ("/api/personas/99", "AI Persona not found"),
        ("/api/sessions/99", "Session not found"),
        ("/api/sessions/99/progress", "Session not found"),
        ("/api/sessions/99/export", "Session not found"),
        ("/api/quizzes/99", "Quiz not found"),
    ],
)
def test_unknown_ids_are_404(api_client, path, message):
    response = api_client.get(path)

    assert response.status_code == 404
    assert response.json() == {"message": message}


def test_unknown_route_has_debug_id(api_client):
    response = api_client.get("/api/nowhere")

    assert response.status_code == 404
    assert "debug_id" in response.json()


def test_storage_failure_is_generic_500(api_client, storage):
    storage.list_sessions_by_user = AsyncMock(side_effect=StorageError("connection reset"))

    response = api_client.get("/api/sessions", params={"userId": 1})

    assert response.status_code == 500
    assert response.json()["message"] == "Storage operation failed"
    assert "connection reset" not in response.text


def test_health_and_ready(api_client):
    assert api_client.get("/api/health").json()["status"] == "healthy"

    ready = api_client.get("/api/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"] == {"storage": True}


def test_request_id_header_echoed(api_client):
    response = api_client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
