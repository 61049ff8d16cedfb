"""
Tests for the public wedding website
"""

from datetime import datetime

from app.services.website_service import THEME_STYLES, countdown, theme_styles

from conftest import OWNER_TOKEN, VIEWER_TOKEN, auth


def test_countdown_labels():
    wedding_day = "2030-06-15"

    assert countdown(wedding_day, datetime(2030, 6, 1))["label"] == "14 days to go"
    assert countdown(wedding_day, datetime(2030, 6, 13, 12))["label"] == "Tomorrow!"
    assert countdown(wedding_day, datetime(2030, 6, 14, 21, 30))["label"] == "Today! 2h 30m 0s"
    assert countdown(wedding_day, datetime(2030, 6, 14, 23, 59, 30))["label"] == "Today's the day!"

    past = countdown(wedding_day, datetime(2030, 6, 16, 1))
    assert past["is_past"] is True
    assert past["label"] == "We're Married! 1 day ago"
    assert countdown(wedding_day, datetime(2030, 6, 25))["label"] == "We're Married! 10 days ago"


def test_countdown_parts():
    parts = countdown("2030-06-15", datetime(2030, 6, 13, 22, 58, 50))
    assert (parts["days"], parts["hours"], parts["minutes"], parts["seconds"]) == (1, 1, 1, 10)
    assert parts["is_past"] is False


def test_theme_styles_fallback():
    assert theme_styles("beach") == THEME_STYLES["beach"]
    assert theme_styles("disco") == THEME_STYLES["modern"]
    assert theme_styles(None) == THEME_STYLES["modern"]


def test_public_site_hides_private_fields(client, wedding, events):
    response = client.get("/public/weddings/alex-sam")

    assert response.status_code == 200
    site = response.json()["data"]
    assert site["couple_names"] == "Alex & Sam"
    assert site["website_url"] == "http://testserver/w/alex-sam"
    assert [e["name"] for e in site["events"]] == ["Ceremony", "Reception"]
    for private in ("collaborators", "owner_id", "owner_email"):
        assert private not in site["wedding"]
    assert site["theme"] == THEME_STYLES["modern"]


def test_unknown_site(client):
    assert client.get("/public/weddings/nobody").status_code == 404
    assert client.get("/w/nobody").status_code == 404


def test_wedding_website_html(client, wedding, events):
    response = client.get("/w/alex-sam")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Alex &amp; Sam" in response.text
    assert f'id="event-{events[0]["id"]}"' in response.text


def test_event_page_shows_only_its_updates(client, wedding, events):
    ceremony, reception = events
    for event, message in ((ceremony, "Doors open"), (reception, "Dinner is served"), (None, "Welcome all")):
        body = {"message": message, "notify_guests": False}
        if event:
            body["event_id"] = event["id"]
        created = client.post(f"/admin/weddings/{wedding['id']}/updates", json=body, headers=auth(OWNER_TOKEN))
        assert created.status_code == 201

    response = client.get(f"/public/weddings/alex-sam/events/{ceremony['id']}")

    assert response.status_code == 200
    page = response.json()["data"]
    assert page["event"]["name"] == "Ceremony"
    assert page["wedding"]["couple_names"] == "Alex & Sam"
    assert [u["message"] for u in page["updates"]] == ["Doors open"]
    assert page["updates"][0]["event_label"] == "Ceremony"

    site = client.get("/public/weddings/alex-sam").json()["data"]
    assert len(site["updates"]) == 3


def test_unknown_event_page(client, wedding):
    assert client.get("/public/weddings/alex-sam/events/missing").status_code == 404


def test_qr_code(client, wedding):
    response = client.get("/public/weddings/alex-sam/qr.png")

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_invite_link_redirects_to_website(client, wedding):
    response = client.get("/invite/alex-sam", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/w/alex-sam"


def test_import_template(client):
    response = client.get("/template/guest_import_template.csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text.splitlines()[0] == "name,email,phone,events,email_consent"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_site_shows_latest_three_updates(client, wedding):
    for message in ("One", "Two", "Three", "Four"):
        client.post(
            f"/admin/weddings/{wedding['id']}/updates",
            json={"message": message, "notify_guests": False},
            headers=auth(OWNER_TOKEN)
        )

    site = client.get("/public/weddings/alex-sam").json()["data"]
    assert [u["message"] for u in site["updates"]] == ["Four", "Three", "Two"]


def test_public_site_reports_viewer_role(client, wedding):
    url = "/public/weddings/alex-sam"

    assert client.get(url).json()["data"]["role"] is None
    assert client.get(url, headers=auth("garbage")).json()["data"]["role"] is None
    assert client.get(url, headers=auth(OWNER_TOKEN)).json()["data"]["role"] == "owner"
    assert client.get(url, headers=auth(VIEWER_TOKEN)).json()["data"]["role"] == "viewer"
