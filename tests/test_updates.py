"""
Tests for live updates: formatting, email fan-out and websocket broadcast
"""

from datetime import datetime, timedelta

import pytest
from starlette.websockets import WebSocketDisconnect

from app.services.update_service import event_label, share_text, time_ago, whatsapp_url

from conftest import OWNER_TOKEN, VIEWER_TOKEN, RecordingTransport, auth, make_email_service

NOW = datetime(2030, 6, 15, 12, 0, 0)


def ago(**delta) -> str:
    return (NOW - timedelta(**delta)).isoformat()


def test_time_ago():
    assert time_ago(None, NOW) == "Just now"
    assert time_ago(ago(seconds=30), NOW) == "Just now"
    assert time_ago(ago(minutes=1), NOW) == "1 min ago"
    assert time_ago(ago(minutes=45), NOW) == "45 mins ago"
    assert time_ago(ago(hours=1, minutes=5), NOW) == "1 hour ago"
    assert time_ago(ago(hours=23), NOW) == "23 hours ago"
    assert time_ago(ago(days=1), NOW) == "1 day ago"
    assert time_ago(ago(days=3, hours=2), NOW) == "3 days ago"


def test_event_label():
    events = [{"id": "e1", "name": "Ceremony"}]
    assert event_label(None, events) == "Entire Wedding"
    assert event_label("e1", events) == "Ceremony"
    assert event_label("gone", events) == "Unknown Event"


def test_share_text_and_whatsapp():
    update = {"message": "Running late", "time_update": "5 PM", "map_link": "https://maps.example.com/x"}

    assert share_text({"message": "Hello"}) == "Hello"
    assert share_text(update) == (
        "Running late\n\n⏰ Time: 5 PM\n\n📍 Location: https://maps.example.com/x"
    )
    assert share_text(update, "https://oneknot.app/w/a").endswith("\n\nView full details: https://oneknot.app/w/a")

    url = whatsapp_url({"message": "Hi all"}, "https://oneknot.app/w/a")
    assert url == "https://wa.me/?text=Hi%20all%0A%0AView%20full%20details%3A%20https%3A%2F%2Foneknot.app%2Fw%2Fa"


def _add_guests(client, wedding, events):
    base = f"/admin/weddings/{wedding['id']}/guests"
    for name, email, consent, invited in (
        ("Ann", "ann@example.com", True, [events[0]["id"]]),
        ("Bob", "bob@example.com", False, [events[0]["id"]]),
        ("Cat", "cat@example.com", True, [events[1]["id"]]),
    ):
        client.post(base, json={
            "name": name, "email": email, "email_consent": consent, "events_invited_to": invited
        }, headers=auth(OWNER_TOKEN))


def test_post_update_emails_consenting_guests(client, wedding, events, email_transport):
    _add_guests(client, wedding, events)

    response = client.post(f"/admin/weddings/{wedding['id']}/updates", json={
        "message": "Ceremony moved indoors",
        "event_id": events[0]["id"],
        "time_update": "4:30 PM"
    }, headers=auth(OWNER_TOKEN))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["update"]["event_id"] == events[0]["id"]
    assert data["emails"] == {"success": True, "sent": 1, "failed": 0, "total": 1}
    assert email_transport.recipients == ["ann@example.com"]
    assert email_transport.requests[0]["json"]["subject"] == "Update: Alex & Sam - Ceremony"


def test_post_update_for_entire_wedding(client, wedding, events, email_transport):
    _add_guests(client, wedding, events)

    client.post(f"/admin/weddings/{wedding['id']}/updates", json={"message": "Hello everyone"}, headers=auth(OWNER_TOKEN))
    assert sorted(email_transport.recipients) == ["ann@example.com", "cat@example.com"]


def test_post_update_without_notifications(client, wedding, events, email_transport):
    _add_guests(client, wedding, events)

    response = client.post(f"/admin/weddings/{wedding['id']}/updates", json={
        "message": "Quiet note", "notify_guests": False
    }, headers=auth(OWNER_TOKEN))
    assert response.json()["data"]["emails"] is None
    assert email_transport.requests == []


def test_email_failures_do_not_fail_update(client, wedding, events):
    from app.services.email_service import get_email_service
    from main import app

    _add_guests(client, wedding, events)
    transport = RecordingTransport(fail_for={"ann@example.com", "cat@example.com"})
    app.dependency_overrides[get_email_service] = lambda: make_email_service(transport)

    response = client.post(f"/admin/weddings/{wedding['id']}/updates", json={"message": "Hi"}, headers=auth(OWNER_TOKEN))
    assert response.status_code == 201
    assert response.json()["data"]["emails"]["failed"] == 2


def test_update_validation(client, wedding):
    url = f"/admin/weddings/{wedding['id']}/updates"
    assert client.post(url, json={"message": "   "}, headers=auth(OWNER_TOKEN)).status_code == 422
    assert client.post(url, json={"message": "x" * 501}, headers=auth(OWNER_TOKEN)).status_code == 422
    assert client.post(url, json={"message": "ok", "time_update": "t" * 101}, headers=auth(OWNER_TOKEN)).status_code == 422
    assert client.post(url, json={"message": "ok", "event_id": "missing"}, headers=auth(OWNER_TOKEN)).status_code == 404
    assert client.post(url, json={"message": "ok"}, headers=auth(VIEWER_TOKEN)).status_code == 403


def test_list_and_delete_updates(client, wedding, events):
    url = f"/admin/weddings/{wedding['id']}/updates"
    client.post(url, json={"message": "First"}, headers=auth(OWNER_TOKEN))
    second = client.post(url, json={"message": "Second", "event_id": events[1]["id"]}, headers=auth(OWNER_TOKEN))

    updates = client.get(url, headers=auth(VIEWER_TOKEN)).json()["data"]
    assert [u["message"] for u in updates] == ["Second", "First"]
    assert [u["event_label"] for u in updates] == ["Reception", "Entire Wedding"]
    assert updates[0]["time_ago"] == "Just now"

    scoped = client.get(url, params={"event_id": events[1]["id"]}, headers=auth(OWNER_TOKEN)).json()["data"]
    assert [u["message"] for u in scoped] == ["Second"]

    update_id = second.json()["data"]["update"]["id"]
    assert client.delete(f"{url}/{update_id}", headers=auth(OWNER_TOKEN)).status_code == 200
    assert client.delete(f"{url}/{update_id}", headers=auth(OWNER_TOKEN)).status_code == 404


def test_websocket_receives_posted_update(client, wedding, monkeypatch):
    """Guests on the website get updates pushed as they are posted"""
    import main
    from conftest import engine

    # Keep the startup create_all on the in-memory database
    monkeypatch.setattr(main, "engine", engine)

    with client:
        with client.websocket_connect("/ws/weddings/alex-sam") as websocket:
            welcome = websocket.receive_json()
            assert welcome["type"] == "connection"
            assert welcome["connection_count"] == 1

            websocket.send_json({"type": "ping", "timestamp": 123})
            assert websocket.receive_json() == {"type": "pong", "timestamp": 123}

            client.post(f"/admin/weddings/{wedding['id']}/updates", json={
                "message": "Cake time!", "notify_guests": False
            }, headers=auth(OWNER_TOKEN))

            message = websocket.receive_json()
            assert message["type"] == "update_posted"
            assert message["update"]["message"] == "Cake time!"


def test_websocket_unknown_wedding(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/weddings/nobody") as websocket:
            websocket.receive_json()
