"""
Tests for the gallery and memory wall
"""

from conftest import OWNER_TOKEN, VIEWER_TOKEN, auth

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"0" * 32


def _upload(client, wedding, *files):
    return client.post(
        f"/admin/weddings/{wedding['id']}/gallery",
        files=[("files", f) for f in files],
        headers=auth(OWNER_TOKEN)
    )


def test_upload_photos_and_videos(client, wedding):
    response = _upload(
        client, wedding,
        ("first dance.jpg", JPEG_BYTES, "image/jpeg"),
        ("toast.mp4", b"video-bytes", "video/mp4")
    )
    assert response.status_code == 200
    uploaded = response.json()["data"]["uploaded"]
    assert [i["type"] for i in uploaded] == ["photo", "video"]
    assert uploaded[0]["file_name"] == "first dance.jpg"
    assert uploaded[0]["reactions"] == {"heart": [], "laugh": [], "cry": []}


def test_upload_reports_oversized_files(client, wedding, monkeypatch):
    from app.core.config import settings
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 20)

    response = _upload(
        client, wedding,
        ("small.jpg", b"tiny", "image/jpeg"),
        ("big.jpg", JPEG_BYTES, "image/jpeg")
    )
    data = response.json()["data"]
    assert [i["file_name"] for i in data["uploaded"]] == ["small.jpg"]
    assert data["errors"][0]["file_name"] == "big.jpg"


def test_viewer_cannot_upload(client, wedding):
    response = client.post(
        f"/admin/weddings/{wedding['id']}/gallery",
        files=[("files", ("a.jpg", JPEG_BYTES, "image/jpeg"))],
        headers=auth(VIEWER_TOKEN)
    )
    assert response.status_code == 403


def test_pinned_items_first(client, wedding):
    uploaded = _upload(
        client, wedding,
        ("one.jpg", JPEG_BYTES, "image/jpeg"),
        ("two.jpg", JPEG_BYTES, "image/jpeg"),
        ("three.jpg", JPEG_BYTES, "image/jpeg")
    ).json()["data"]["uploaded"]

    pin = client.patch(
        f"/admin/weddings/{wedding['id']}/gallery/{uploaded[0]['id']}/pin", headers=auth(OWNER_TOKEN)
    )
    assert pin.json()["data"]["pinned"] is True

    gallery = client.get("/guest/weddings/alex-sam/gallery").json()["data"]
    assert [i["file_name"] for i in gallery] == ["one.jpg", "three.jpg", "two.jpg"]


def test_gallery_reactions_toggle(client, wedding):
    item = _upload(client, wedding, ("one.jpg", JPEG_BYTES, "image/jpeg")).json()["data"]["uploaded"][0]
    url = f"/guest/weddings/alex-sam/gallery/{item['id']}/reactions"

    first = client.post(url, json={"kind": "heart", "guest_id": "guest_1"})
    assert first.json()["data"]["reactions"]["heart"] == ["guest_1"]

    client.post(url, json={"kind": "heart", "guest_id": "guest_2"})
    again = client.post(url, json={"kind": "heart", "guest_id": "guest_1"})
    assert again.json()["data"]["reactions"]["heart"] == ["guest_2"]

    assert client.post(url, json={"kind": "angry", "guest_id": "guest_1"}).status_code == 422


def test_delete_gallery_item_removes_file(client, wedding, tmp_path):
    item = _upload(client, wedding, ("one.jpg", JPEG_BYTES, "image/jpeg")).json()["data"]["uploaded"][0]
    assert len(list((tmp_path / "uploads").rglob("*.jpg"))) == 1

    response = client.delete(f"/admin/weddings/{wedding['id']}/gallery/{item['id']}", headers=auth(OWNER_TOKEN))
    assert response.status_code == 200
    assert list((tmp_path / "uploads").rglob("*.jpg")) == []
    assert client.get("/guest/weddings/alex-sam/gallery").json()["data"] == []


def test_memory_wall(client, wedding):
    url = "/guest/weddings/alex-sam/memories"

    assert client.post(url, json={"name": "Ann", "message": "  "}).status_code == 422

    first = client.post(url, json={"name": "Ann", "message": "Congrats!"})
    assert first.status_code == 201
    client.post(url, json={"name": "Ben", "message": "So happy for you"})

    memories = client.get(url).json()["data"]
    assert [m["name"] for m in memories] == ["Ben", "Ann"]

    memory_id = first.json()["data"]["id"]
    reacted = client.post(f"{url}/{memory_id}/reactions", json={"kind": "cry", "guest_id": "guest_9"})
    assert reacted.json()["data"]["reactions"]["cry"] == ["guest_9"]

    delete_url = f"/admin/weddings/{wedding['id']}/memories/{memory_id}"
    assert client.delete(delete_url, headers=auth(VIEWER_TOKEN)).status_code == 403
    assert client.delete(delete_url, headers=auth(OWNER_TOKEN)).status_code == 200
    assert [m["name"] for m in client.get(url).json()["data"]] == ["Ben"]


def test_memory_on_unknown_wedding(client):
    response = client.post("/guest/weddings/nobody/memories", json={"name": "Ann", "message": "Hi"})
    assert response.status_code == 404


def test_memory_length_limits(client, wedding):
    url = "/guest/weddings/alex-sam/memories"

    assert client.post(url, json={"name": "A" * 51, "message": "Hi"}).status_code == 422
    assert client.post(url, json={"name": "Ann", "message": "x" * 301}).status_code == 422
    assert client.post(url, json={"name": "A" * 50, "message": "x" * 300}).status_code == 201


def test_guests_can_upload_to_gallery(client, wedding):
    response = client.post(
        "/guest/weddings/alex-sam/gallery",
        files=[("files", ("selfie.jpg", JPEG_BYTES, "image/jpeg"))]
    )

    assert response.status_code == 200
    assert response.json()["data"]["uploaded"][0]["type"] == "photo"
    assert len(client.get("/guest/weddings/alex-sam/gallery").json()["data"]) == 1


def test_gallery_rejects_other_file_types(client, wedding, tmp_path):
    response = client.post(
        "/guest/weddings/alex-sam/gallery",
        files=[
            ("files", ("selfie.jpg", JPEG_BYTES, "image/jpeg")),
            ("files", ("notes.pdf", b"%PDF-1.4", "application/pdf"))
        ]
    )

    assert response.status_code == 422
    assert client.get("/guest/weddings/alex-sam/gallery").json()["data"] == []
    assert not (tmp_path / "uploads").exists() or list((tmp_path / "uploads").rglob("*.*")) == []

    admin = _upload(client, wedding, ("notes.txt", b"hello", "text/plain"))
    assert admin.status_code == 422


def test_guest_uploads_rate_limited(client, wedding, monkeypatch):
    from app.core.config import settings
    monkeypatch.setattr(settings, "RATE_LIMIT_PER_MINUTE", 1)

    files = [("files", ("selfie.jpg", JPEG_BYTES, "image/jpeg"))]
    first = client.post("/guest/weddings/alex-sam/gallery", files=files)
    second = client.post("/guest/weddings/alex-sam/gallery", files=files)
    assert (first.status_code, second.status_code) == (200, 429)
