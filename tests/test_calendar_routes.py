from calendar_api.app.core import security
from calendar_api.app.services.calendar_service import CalendarService

from .conftest import API, auth


def test_create_calendar(client, alice):
    resp = client.post(f"{API}/calendar", json={"name": "  Work  "}, headers=auth(alice["accessToken"]))
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Calendar created successfully"
    calendar = body["calendar"]
    assert calendar["name"] == "Work"
    assert calendar["owner"] == security.decode_access_token(alice["accessToken"])["id"]
    assert calendar["events"] == []
    assert calendar["createdAt"]


def test_create_calendar_requires_name(client, alice):
    resp = client.post(f"{API}/calendar", json={}, headers=auth(alice["accessToken"]))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"


def test_list_only_own_calendars(client, alice, bob, make_calendar):
    mine = make_calendar(alice["accessToken"], "Alice work")
    theirs = make_calendar(bob["accessToken"], "Bob work")

    resp = client.get(f"{API}/calendar", headers=auth(alice["accessToken"]))
    assert resp.status_code == 200
    ids = [c["id"] for c in resp.json()]
    assert mine["id"] in ids
    assert theirs["id"] not in ids

    resp = client.get(f"{API}/calendar", headers=auth(bob["accessToken"]))
    assert [c["id"] for c in resp.json()] == [theirs["id"]]


def test_rename_calendar(client, alice, make_calendar):
    calendar = make_calendar(alice["accessToken"])
    resp = client.put(
        f"{API}/calendar/{calendar['id']}", json={"name": "Personal"}, headers=auth(alice["accessToken"])
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Calendar updated"
    assert body["calendar"]["name"] == "Personal"
    assert body["calendar"]["id"] == calendar["id"]


def test_rename_other_users_calendar_is_not_found(client, alice, bob, make_calendar):
    calendar = make_calendar(alice["accessToken"])
    resp = client.put(
        f"{API}/calendar/{calendar['id']}", json={"name": "Hijacked"}, headers=auth(bob["accessToken"])
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "Calendar not found"

    names = [c["name"] for c in client.get(f"{API}/calendar", headers=auth(alice["accessToken"])).json()]
    assert names == ["Work"]


def test_rename_missing_calendar(client, alice):
    resp = client.put(f"{API}/calendar/999", json={"name": "Nope"}, headers=auth(alice["accessToken"]))
    assert resp.status_code == 404


def test_delete_calendar(client, alice, make_calendar):
    calendar = make_calendar(alice["accessToken"])
    resp = client.delete(f"{API}/calendar/{calendar['id']}", headers=auth(alice["accessToken"]))
    assert resp.status_code == 200
    assert resp.json()["message"] == "Calendar deleted successfully"
    assert client.get(f"{API}/calendar", headers=auth(alice["accessToken"])).json() == []


def test_delete_other_users_calendar_is_not_found(client, alice, bob, make_calendar):
    calendar = make_calendar(alice["accessToken"])
    resp = client.delete(f"{API}/calendar/{calendar['id']}", headers=auth(bob["accessToken"]))
    assert resp.status_code == 404
    assert resp.json()["message"] == "Calendar not found"

    ids = [c["id"] for c in client.get(f"{API}/calendar", headers=auth(alice["accessToken"])).json()]
    assert ids == [calendar["id"]]


def test_delete_calendar_keeps_its_events(client, alice, make_calendar, make_event):
    calendar = make_calendar(alice["accessToken"])
    event = make_event(alice["accessToken"], calendar["id"])

    client.delete(f"{API}/calendar/{calendar['id']}", headers=auth(alice["accessToken"]))

    resp = client.get(f"{API}/event/events/{event['id']}", headers=auth(alice["accessToken"]))
    assert resp.status_code == 200


def test_calendar_routes_require_token(client):
    assert client.post(f"{API}/calendar", json={"name": "Work"}).status_code == 403
    assert client.get(f"{API}/calendar").status_code == 403


def test_store_failure_is_reported_as_server_error(client, alice, monkeypatch):
    async def failing_list(owner_id):
        raise RuntimeError("Server error")

    monkeypatch.setattr(CalendarService, "list_calendars", failing_list)

    resp = client.get(f"{API}/calendar", headers=auth(alice["accessToken"]))
    assert resp.status_code == 500
    assert resp.json() == {
        "message": "Server error during calendar retrieval",
        "error": "Server error",
    }
