"""
Pytest configuration.

Adds the project root to the Python path so tests can import domain,
repositories, services and api, and provides the in-memory store, the
recording payment gateway and an API client wired to both.
"""

import sys
from pathlib import Path

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.settings import Settings
from repositories import event_repository
from repositories.client import use_client
from tests.fakes import FakeSupabase, RecordingGateway

ADMIN_EMAIL = "admin@example.org"
ADMIN_PASSWORD = "correct horse battery staple"
JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"
WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture
def store():
    fake = FakeSupabase()
    use_client(fake)
    yield fake
    use_client(None)


@pytest.fixture
def gateway():
    return RecordingGateway(webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://fake.supabase.test",
        supabase_key="fake-key",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        jwt_secret=JWT_SECRET,
        stripe_webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
def client(settings, gateway, store):
    app = create_app(settings, gateway=gateway, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def make_event(store):
    """Create an event directly in the store (paid, $25, capacity 50 by default)."""

    def _make(**overrides):
        fields = {
            "title": "Spring Gala",
            "date": "2026-05-01",
            "time": "6:00 PM",
            "place": "Town Hall",
            "desc": "Annual fundraising gala",
            "action_type": "Buy Tickets",
            "cost": "$25",
            "ticket_cost": 25.0,
            "capacity": 50,
            "highlights": ["Dinner", "Auction"],
        }
        fields.update(overrides)
        return event_repository.create_event(fields)

    return _make
