"""API-specific test fixtures."""

import pytest
from fastapi.testclient import TestClient

from app.ai.analyzer_heuristic import HeuristicAnalyzer
from app.api.deps import get_analyzer, get_storage
from app.main import create_app


@pytest.fixture
def app(storage):
    """Application wired to the in-memory storage fixture and the heuristic analyzer.

    The lifespan is not entered; dependencies are overridden instead.
    """
    application = create_app()
    application.dependency_overrides[get_storage] = lambda: storage
    application.dependency_overrides[get_analyzer] = lambda: HeuristicAnalyzer()
    return application


@pytest.fixture
def api_client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def seeded(api_client):
    """Create a user, persona and session over HTTP; returns their ids."""
    user = api_client.post(
        "/api/users",
        json={"username": "ada", "password": "secret", "displayName": "Ada Lovelace"},
    ).json()
    persona = api_client.post(
        "/api/personas",
        json={
            "userId": user["id"],
            "name": "Alex",
            "age": 16,
            "interests": ["Science", "Gaming"],
            "communicationStyle": "balanced",
        },
    ).json()
    session = api_client.post(
        "/api/sessions",
        json={"userId": user["id"], "aiPersonaId": persona["id"], "title": "Physics basics"},
    ).json()
    return {"user_id": user["id"], "persona_id": persona["id"], "session_id": session["id"]}
