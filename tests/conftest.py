"""
Shared fixtures: in-memory SQLite document store, API client and a recording email transport
"""

import json
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.db import Base, get_db
from app.services.email_service import EmailService, get_email_service
from app.utils.security import rate_limiter
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER_TOKEN = "dev:owner-uid:owner@example.com"
ADMIN_TOKEN = "dev:admin-uid:admin@example.com"
VIEWER_TOKEN = "dev:viewer-uid:viewer@example.com"
STRANGER_TOKEN = "dev:stranger-uid:stranger@example.com"


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class RecordingTransport:
    """httpx handler that records requests and fails for chosen recipients"""

    def __init__(self, fail_for=()):
        self.requests = []
        self.fail_for = set(fail_for)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append({"url": str(request.url), "headers": request.headers, "json": body})

        recipient = (body.get("to") or [None])[0] if "to" in body else body["template_params"]["to_email"]
        if recipient in self.fail_for:
            return httpx.Response(500, json={"message": "provider error"})
        return httpx.Response(200, json={"id": f"email_{len(self.requests)}"})

    @property
    def recipients(self):
        return [r["json"]["to"][0] for r in self.requests if "to" in r["json"]]


def make_email_config(**overrides):
    values = {
        "RESEND_API_KEY": "re_test_key",
        "RESEND_FROM_EMAIL": "updates@oneknot.app",
        "RESEND_FROM_NAME": "OneKnot Updates",
        "EMAILJS_SERVICE_ID": "service_test",
        "EMAILJS_TEMPLATE_ID": "template_test",
        "EMAILJS_PUBLIC_KEY": "public_test",
        "EMAILJS_PRIVATE_KEY": "",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def make_email_service(transport: RecordingTransport, **config_overrides) -> EmailService:
    return EmailService(
        config=make_email_config(**config_overrides),
        http_client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(transport))
    )


@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def email_transport():
    return RecordingTransport()


@pytest.fixture
def email_service(email_transport):
    return make_email_service(email_transport)


@pytest.fixture(autouse=True)
def local_settings(tmp_path, monkeypatch):
    """Local backend, dev tokens and a throwaway upload directory"""
    monkeypatch.setattr(settings, "USE_FIREBASE", False)
    monkeypatch.setattr(settings, "DEV_AUTH_ENABLED", True)
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "BASE_URL", "http://testserver")
    rate_limiter.clear()
    yield
    rate_limiter.clear()


@pytest.fixture
def client(db_session, email_service):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def wedding(client):
    """A wedding owned by OWNER_TOKEN with an admin and a viewer collaborator"""
    response = client.post("/admin/weddings", json={
        "partner1_name": "Alex",
        "partner2_name": "Sam",
        "wedding_date": "2030-06-15",
        "city": "Lisbon",
        "slug": "alex-sam"
    }, headers=auth(OWNER_TOKEN))
    assert response.status_code == 201
    wedding = response.json()["data"]

    for email, role in (("admin@example.com", "admin"), ("viewer@example.com", "viewer")):
        added = client.post(
            f"/admin/weddings/{wedding['id']}/collaborators",
            json={"email": email, "role": role},
            headers=auth(OWNER_TOKEN)
        )
        assert added.status_code == 201

    return client.get(f"/admin/weddings/{wedding['id']}", headers=auth(OWNER_TOKEN)).json()["data"]


@pytest.fixture
def events(client, wedding):
    """Ceremony and Reception events"""
    created = []
    for name, date in (("Ceremony", "2030-06-15"), ("Reception", "2030-06-16")):
        response = client.post(
            f"/admin/weddings/{wedding['id']}/events",
            json={"name": name, "date": date, "location": "Quinta"},
            headers=auth(OWNER_TOKEN)
        )
        assert response.status_code == 201
        created.append(response.json()["data"])
    return created
