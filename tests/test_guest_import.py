"""
Tests for CSV guest import, preview and undo
"""

from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from app.schemas.guest import ImportRow
from app.services.import_service import ImportService, dedup_key
from app.services.repositories import wedding_collection
from app.utils.security import AuthUser

from conftest import OWNER_TOKEN, auth

OWNER = AuthUser(uid="owner-uid", email="owner@example.com")

EVENTS = [
    {"id": "ev1", "name": "Ceremony"},
    {"id": "ev2", "name": "Reception"},
]


def row(number, name="", email="", phone="", events="", consent=False):
    return {
        "row_number": number,
        "name": name,
        "email": email,
        "phone": phone,
        "events": events,
        "email_consent": consent
    }


def test_parse_csv_comma_separated():
    content = (
        b"Name,Email,Phone,Events,Email Consent\n"
        b"Jane Smith,jane@example.com,+1 555 0100,Ceremony; Reception,yes\n"
        b"John Doe,,555-0101,Reception,no\n"
    )
    rows = ImportService.parse_csv(content)

    assert len(rows) == 2
    assert rows[0]["name"] == "Jane Smith"
    assert rows[0]["events"] == "Ceremony; Reception"
    assert rows[0]["email_consent"] is True
    assert rows[1]["email"] == ""
    assert rows[1]["email_consent"] is False
    assert [r["row_number"] for r in rows] == [2, 3]


def test_parse_csv_semicolon_and_aliases():
    """Semicolon files with 'Full Name' / 'Mobile' headers are understood"""
    content = "Full Name;Mobile;Consent\nAna Lima;912 345 678;x\n".encode("utf-8")
    rows = ImportService.parse_csv(content)

    assert rows == [row(2, name="Ana Lima", phone="912 345 678", consent=True)]


def test_parse_csv_tab_separated_with_bom():
    content = "\ufeffname\temail\nBea\tbea@example.com\n".encode("utf-8")
    rows = ImportService.parse_csv(content)
    assert rows[0]["name"] == "Bea"
    assert rows[0]["email"] == "bea@example.com"


def test_parse_csv_single_column():
    rows = ImportService.parse_csv(b"name\nAlice\nBob\n")
    assert [r["name"] for r in rows] == ["Alice", "Bob"]


def test_parse_csv_row_numbers_count_blank_lines():
    content = b"\nname,email\nAnn,ann@example.com\n\n\nBen,ben@example.com\n"
    rows = ImportService.parse_csv(content)

    assert [(r["name"], r["row_number"]) for r in rows] == [("Ann", 3), ("Ben", 6)]


def test_parse_csv_windows_1252():
    content = "name;email\nJosé Müller;jose@example.com\n".encode("cp1252")
    rows = ImportService.parse_csv(content)
    assert rows[0]["name"] == "José Müller"


def test_parse_csv_undecodable_bytes():
    with pytest.raises(HTTPException) as exc:
        ImportService.parse_csv(b"name\n\x81\x8d\x8f\n")
    assert exc.value.status_code == 422


def test_parse_csv_requires_name_column():
    with pytest.raises(HTTPException) as exc:
        ImportService.parse_csv(b"email,phone\na@example.com,123\n")
    assert exc.value.status_code == 422


def test_parse_csv_empty_file():
    with pytest.raises(HTTPException) as exc:
        ImportService.parse_csv(b"   \n")
    assert exc.value.status_code == 422


def test_dedup_key_normalizes():
    assert dedup_key(" Jane@Example.com ", "+1 (555) 0100") == "jane@example.com|+15550100"
    assert dedup_key("", "") is None
    assert dedup_key(None, "555") == "|555"


def test_preview_skips_invalid_rows():
    rows = [
        row(2, name="Jane", email="jane@example.com", events="ceremony|RECEPTION"),
        row(3, name="", email="nobody@example.com"),
        row(4, name="Jim", events="Brunch"),
        row(5, name="Janet", email="JANE@example.com"),
        row(6, name="Existing", phone="555 0100"),
        row(7, name="No Contact"),
    ]
    existing = [{"id": "g1", "name": "Old", "email": None, "phone": "5550100"}]

    preview = ImportService.build_preview(rows, EVENTS, existing)
    by_row = {r["row_number"]: r for r in preview["rows"]}

    assert by_row[2]["status"] == "ok"
    assert by_row[2]["event_ids"] == ["ev1", "ev2"]
    assert by_row[3]["reasons"] == ["Missing name"]
    assert by_row[4]["reasons"] == ["Unknown event(s): Brunch"]
    assert by_row[5]["reasons"] == ["Duplicate of row 2"]
    assert by_row[6]["reasons"] == ["Already on the guest list"]
    # Rows without email or phone have no dedup key and are never duplicates
    assert by_row[7]["status"] == "ok"
    assert by_row[7]["dedup_key"] is None

    assert preview["total"] == 6
    assert preview["ok"] == 2
    assert preview["skipped"] == 4


def test_commit_and_undo_import(db_session):
    now = datetime(2030, 1, 1, 12, 0, 0)
    wedding_collection(db_session, "w1", "events").add({"name": "Ceremony", "date": "2030-06-15"})

    rows = [
        ImportRow(row_number=2, name="Jane", email="jane@example.com", events="Ceremony", email_consent=True),
        ImportRow(row_number=3, name="John", phone="555 0101"),
        ImportRow(row_number=4, name=""),
    ]
    result = ImportService.commit_import(db_session, "w1", OWNER, rows, now=now)

    assert result["imported"] == 2
    assert result["skipped"] == 1
    assert result["undo_expires_at"] == (now + timedelta(seconds=30)).isoformat()

    guests = wedding_collection(db_session, "w1", "guests").list(order_by="name")
    assert [g["name"] for g in guests] == ["Jane", "John"]
    assert all(g["import_id"] == result["import_id"] for g in guests)
    assert guests[0]["email_consent"] is True
    assert guests[1]["email"] is None

    deleted = ImportService.undo_import(db_session, "w1", result["import_id"], now=now + timedelta(seconds=10))
    assert deleted == 2
    assert wedding_collection(db_session, "w1", "guests").count() == 0

    record = wedding_collection(db_session, "w1", "guest_imports").get(result["import_id"])
    assert record["undone"] is True
    assert record["created_by"] == "owner-uid"


def test_undo_after_window_expires(db_session):
    now = datetime(2030, 1, 1, 12, 0, 0)
    result = ImportService.commit_import(
        db_session, "w1", OWNER, [ImportRow(row_number=2, name="Jane")], now=now
    )

    with pytest.raises(HTTPException) as exc:
        ImportService.undo_import(db_session, "w1", result["import_id"], now=now + timedelta(seconds=31))
    assert exc.value.status_code == 409
    assert exc.value.detail == "Undo window has expired"
    assert wedding_collection(db_session, "w1", "guests").count() == 1


def test_undo_twice_and_unknown_import(db_session):
    now = datetime(2030, 1, 1, 12, 0, 0)
    result = ImportService.commit_import(
        db_session, "w1", OWNER, [ImportRow(row_number=2, name="Jane")], now=now
    )
    ImportService.undo_import(db_session, "w1", result["import_id"], now=now)

    with pytest.raises(HTTPException) as exc:
        ImportService.undo_import(db_session, "w1", result["import_id"], now=now)
    assert exc.value.status_code == 409

    with pytest.raises(HTTPException) as exc:
        ImportService.undo_import(db_session, "w1", "missing", now=now)
    assert exc.value.status_code == 404


def test_commit_with_nothing_valid(db_session):
    result = ImportService.commit_import(db_session, "w1", OWNER, [ImportRow(row_number=2)])
    assert result["imported"] == 0
    assert result["import_id"] is None
    assert wedding_collection(db_session, "w1", "guest_imports").count() == 0


def test_csv_template_parses_back():
    rows = ImportService.parse_csv(ImportService.csv_template().encode("utf-8"))
    assert len(rows) == 3
    assert rows[0]["name"] == "Jane Smith"


def test_import_flow_over_http(client, wedding, events):
    """Preview, commit then undo through the admin API"""
    base = f"/admin/weddings/{wedding['id']}/guests"
    csv_bytes = b"name,email,events\nJane,jane@example.com,Ceremony\nJim,jim@example.com,Brunch\n"

    preview = client.post(
        f"{base}/import/preview",
        files={"file": ("guests.csv", csv_bytes, "text/csv")},
        headers=auth(OWNER_TOKEN)
    )
    assert preview.status_code == 200
    preview_rows = preview.json()["data"]["rows"]
    assert [r["status"] for r in preview_rows] == ["ok", "skipped"]

    # Fix the unknown event in the preview before committing
    preview_rows[1]["events"] = "Reception"
    commit = client.post(f"{base}/import", json={"rows": preview_rows}, headers=auth(OWNER_TOKEN))
    assert commit.status_code == 200
    data = commit.json()["data"]
    assert data["imported"] == 2

    listed = client.get(base, headers=auth(OWNER_TOKEN)).json()["data"]
    assert [g["event_names"] for g in listed] == ["Ceremony", "Reception"]

    undo = client.post(f"{base}/import/{data['import_id']}/undo", headers=auth(OWNER_TOKEN))
    assert undo.status_code == 200
    assert undo.json()["data"]["deleted"] == 2
    assert client.get(base, headers=auth(OWNER_TOKEN)).json()["data"] == []


def test_import_preview_rejects_non_csv(client, wedding):
    response = client.post(
        f"/admin/weddings/{wedding['id']}/guests/import/preview",
        files={"file": ("guests.xlsx", b"binary", "application/octet-stream")},
        headers=auth(OWNER_TOKEN)
    )
    assert response.status_code == 400
