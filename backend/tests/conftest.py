"""Pytest fixtures — an in-memory fake booking service behind httpx."""
import httpx
import pytest

from londonpark.boundary.client import BoundaryClient
from londonpark.models.event import Event
from londonpark.models.session import Role, Session
from londonpark.services.admin_coordinator import AdminCoordinator
from londonpark.services.booking_service import BookingService
from londonpark.services.entity_store import EntityStore
from tests.fake_boundary import ADMIN_TOKEN, USER_TOKEN, FakeBoundary

BASE_URL = "http://testserver/london-park/"


@pytest.fixture(scope="function")
def fake():
    """A freshly seeded fake service for each test."""
    return FakeBoundary.seeded()


@pytest.fixture(scope="function")
def boundary(fake):
    """BoundaryClient wired to the fake service through ASGI."""
    return BoundaryClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=fake.app))


@pytest.fixture(scope="function")
def store():
    return EntityStore()


@pytest.fixture(scope="function")
def admin(boundary, store):
    return AdminCoordinator(boundary, store)


@pytest.fixture(scope="function")
def booking_service(boundary, store):
    return BookingService(boundary, store)


@pytest.fixture
def admin_session():
    return Session(role=Role.admin, credential=ADMIN_TOKEN)


@pytest.fixture
def user_session():
    return Session(role=Role.user, credential=USER_TOKEN, subject_id=1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def make_event(event_id: int = 1, requires_adult: bool = False, **overrides) -> Event:
    """Helper — a canonical Event with sensible defaults."""
    fields = {
        "id": event_id,
        "name": f"Event {event_id}",
        "description": "",
        "date": "2026-12-31",
        "requires_adult": requires_adult,
    }
    fields.update(overrides)
    return Event(**fields)


def failing_boundary(exc: Exception) -> BoundaryClient:
    """Helper — a BoundaryClient whose every request raises ``exc``."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise exc

    return BoundaryClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


def text_boundary(body: str, status_code: int = 200) -> BoundaryClient:
    """Helper — a BoundaryClient whose every request gets ``body`` back verbatim."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body)

    return BoundaryClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
