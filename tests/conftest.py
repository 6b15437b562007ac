# tests/conftest.py
from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from calendar_api.app.core.config import settings
from calendar_api.app.core.db import init_db
from calendar_api.app.main import create_app


API = settings.api_prefix
DEFAULT_PASSWORD = "Str0ng!Pass"


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Fresh SQLite file per test, with all migrations applied."""
    path = tmp_path / "calendar-test.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    init_db()
    return path


@pytest.fixture
def client(db_path):
    with TestClient(create_app()) as test_client:
        yield test_client


def auth(token: str) -> dict:
    """Authorization header; the raw token is sent without a scheme."""
    return {"Authorization": token}


def parse_dt(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def register(client):
    """
    Register a user and return the response body (accessToken, refreshToken).
    """
    def _register(email: str, password: str = DEFAULT_PASSWORD, name: str | None = "Test User") -> dict:
        resp = client.post(f"{API}/auth/register", json={"email": email, "password": password, "name": name})
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _register


@pytest.fixture
def alice(register):
    return register("alice@example.com", name="Alice")


@pytest.fixture
def bob(register):
    return register("bob@example.com", name="Bob")


@pytest.fixture
def make_calendar(client):
    def _create(token: str, name: str = "Work") -> dict:
        resp = client.post(f"{API}/calendar", json={"name": name}, headers=auth(token))
        assert resp.status_code == 201, resp.text
        return resp.json()["calendar"]
    return _create


@pytest.fixture
def make_event(client):
    def _create(token: str, calendar_id: int, **fields) -> dict:
        body = {
            "title": "Standup",
            "startTime": "2023-10-23T09:00:00Z",
            "endTime": "2023-10-23T09:15:00Z",
        }
        body.update(fields)
        resp = client.post(f"{API}/event/{calendar_id}/events", json=body, headers=auth(token))
        assert resp.status_code == 201, resp.text
        return resp.json()["event"]
    return _create
