"""Tests for envelope classification and the boundary client."""
import httpx
import pytest

from londonpark.boundary.client import BoundaryClient
from londonpark.boundary.envelope import Corrupt, DomainError, Ok, parse_envelope, unwrap
from londonpark.boundary.operations import Operation, endpoint_for
from londonpark.errors import DomainFailure, SessionInvalid, TransportCorruption
from londonpark.models.kinds import EntityKind
from londonpark.models.session import Role, Session
from tests.conftest import BASE_URL, failing_boundary, text_boundary
from tests.fake_boundary import PHP_NOISE

ADMIN = Session(role=Role.admin, credential="admin-token")


class TestParseEnvelope:
    def test_success(self):
        result = parse_envelope('{"status": "success", "events": [{"id": 1}]}')
        assert isinstance(result, Ok)
        assert result.payload("events") == [{"id": 1}]
        assert result.payload(None) is None

    def test_domain_error_keeps_message(self):
        result = parse_envelope('{"status": "error", "message": "Email already exists"}')
        assert result == DomainError(message="Email already exists")

    @pytest.mark.parametrize("body", [
        PHP_NOISE,
        "",
        "<html><body>502 Bad Gateway</body></html>",
        "[]",
        '{"events": []}',
        '{"status": "maybe"}',
        '"success"',
    ])
    def test_noise_is_corrupt(self, body):
        result = parse_envelope(body)
        assert isinstance(result, Corrupt)
        assert result.raw == body

    def test_unwrap(self):
        assert unwrap(Ok(message="fine")).message == "fine"
        with pytest.raises(DomainFailure) as exc_info:
            unwrap(DomainError(message="Capacity exceeded"))
        assert exc_info.value.user_message == "Capacity exceeded"
        with pytest.raises(TransportCorruption) as exc_info:
            unwrap(Corrupt(reason="bad", raw="<b>"))
        assert exc_info.value.raw == "<b>"


class TestOperations:
    def test_booking_has_no_admin_create_or_update(self):
        with pytest.raises(ValueError):
            endpoint_for(EntityKind.booking, Operation.update)

    def test_listing_payload_keys(self):
        assert endpoint_for(EntityKind.user, Operation.fetch_all).payload_key == "data"
        assert endpoint_for(EntityKind.booking, Operation.fetch_own).payload_key == "tickets"


class TestBoundaryClient:
    @pytest.mark.asyncio
    async def test_attaches_bearer_credential(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"status": "success", "data": []})

        client = BoundaryClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        result = await client.call(EntityKind.user, Operation.fetch_all, ADMIN)
        assert isinstance(result, Ok)
        assert seen["auth"] == "Bearer admin-token"
        assert seen["url"] == BASE_URL + "admin_get_users.php"

    @pytest.mark.asyncio
    async def test_noise_body_is_corrupt(self):
        result = await text_boundary(PHP_NOISE).call(EntityKind.event, Operation.create, ADMIN, {"name": "x"})
        assert isinstance(result, Corrupt)

    @pytest.mark.asyncio
    async def test_timeout_is_corrupt(self):
        client = failing_boundary(httpx.ReadTimeout("timed out"))
        result = await client.call(EntityKind.user, Operation.fetch_all, ADMIN)
        assert isinstance(result, Corrupt)
        assert "timeout" in result.reason

    @pytest.mark.asyncio
    async def test_network_failure_is_corrupt(self):
        client = failing_boundary(httpx.ConnectError("refused"))
        result = await client.call(EntityKind.user, Operation.fetch_all, ADMIN)
        assert isinstance(result, Corrupt)

    @pytest.mark.asyncio
    async def test_unauthorized_forwards_session_invalid(self):
        client = text_boundary('{"status": "error", "message": "Unauthorized"}', status_code=401)
        with pytest.raises(SessionInvalid) as exc_info:
            await client.call(EntityKind.user, Operation.fetch_all, ADMIN)
        assert exc_info.value.redirect_to == "/admin/login"

    @pytest.mark.asyncio
    async def test_admin_operation_without_session(self):
        client = text_boundary('{"status": "success"}')
        with pytest.raises(SessionInvalid) as exc_info:
            await client.call(EntityKind.event, Operation.delete, None, {"id": 1})
        assert exc_info.value.redirect_to == "/admin/login"

    @pytest.mark.asyncio
    async def test_public_operation_needs_no_session(self):
        client = text_boundary('{"status": "success", "events": []}')
        result = await client.call(EntityKind.event, Operation.fetch_public)
        assert isinstance(result, Ok)

    @pytest.mark.asyncio
    async def test_no_content(self):
        client = text_boundary("", status_code=204)
        assert await client.call(EntityKind.booking, Operation.delete, ADMIN, {"id": 1}) == Ok()

    def test_resolve_url(self):
        client = BoundaryClient(base_url="http://localhost/london-park")
        assert client.resolve_url("uploads/a.jpg") == "http://localhost/london-park/uploads/a.jpg"
        assert client.resolve_url("/uploads/a.jpg") == "http://localhost/london-park/uploads/a.jpg"
        assert client.resolve_url("https://cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"
        assert client.resolve_url(None) is None
