"""Tests for user, persona, session and message CRUD endpoints."""
import pytest

pytestmark = pytest.mark.unit


def test_create_user_hides_password(api_client):
    response = api_client.post(
        "/api/users",
        json={"username": "grace", "password": "hunter2", "displayName": "Grace Hopper"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["displayName"] == "Grace Hopper"
    assert "password" not in body
    assert api_client.get(f"/api/users/{body['id']}").json()["username"] == "grace"


def test_persona_list_and_edit(api_client, seeded):
    personas = api_client.get("/api/personas", params={"userId": seeded["user_id"]}).json()
    assert [p["name"] for p in personas] == ["Alex"]
    assert personas[0]["active"] is True

    response = api_client.patch(f"/api/personas/{seeded['persona_id']}", json={"age": 17})
    assert response.status_code == 200
    assert response.json()["age"] == 17
    assert response.json()["name"] == "Alex"


def test_session_defaults_and_listing(api_client, seeded):
    session = api_client.get(f"/api/sessions/{seeded['session_id']}").json()

    assert session["currentStep"] == "explain"
    assert session["stepsCompleted"] == []
    assert session["completed"] is False
    assert session["aiPersonaId"] == seeded["persona_id"]

    sessions = api_client.get("/api/sessions", params={"userId": seeded["user_id"]}).json()
    assert [s["id"] for s in sessions] == [seeded["session_id"]]


def test_session_patch_cannot_unmark_steps(api_client, seeded):
    url = f"/api/sessions/{seeded['session_id']}"
    saved = api_client.patch(url, json={"currentStep": "review", "stepsCompleted": ["explain"]})
    assert saved.status_code == 200
    assert saved.json()["stepsCompleted"] == ["explain"]

    response = api_client.patch(url, json={"stepsCompleted": []})
    assert response.status_code == 400
    assert "un-marked" in response.json()["message"]


def test_session_with_unknown_persona_is_404(api_client, seeded):
    response = api_client.post(
        "/api/sessions",
        json={"userId": seeded["user_id"], "aiPersonaId": 999, "title": "Nope"},
    )
    assert response.status_code == 404
    assert response.json() == {"message": "AI Persona not found"}


def test_messages_append_and_list(api_client, seeded):
    sid = seeded["session_id"]
    for content in ("first", "second"):
        response = api_client.post(
            "/api/messages",
            json={"sessionId": sid, "role": "user", "content": content, "feynmanStep": "explain"},
        )
        assert response.status_code == 201

    transcript = api_client.get("/api/messages", params={"sessionId": sid}).json()
    assert [m["content"] for m in transcript] == ["first", "second"]
    assert transcript[0]["feynmanStep"] == "explain"
