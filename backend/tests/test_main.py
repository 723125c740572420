"""Tests for booking core wiring."""
import httpx
import pytest

from londonpark.config import Settings
from londonpark.main import create_core
from londonpark.models.kinds import EntityKind
from tests.conftest import BASE_URL


class TestCreateCore:
    @pytest.mark.asyncio
    async def test_services_share_one_store(self, fake):
        config = Settings(BOUNDARY_BASE_URL=BASE_URL, LOG_LEVEL="debug")
        async with create_core(config, transport=httpx.ASGITransport(app=fake.app)) as core:
            assert core.bookings.store is core.store
            assert core.admin.store is core.store
            await core.bookings.load_events()
            assert {e.id for e in core.store.events} == {1, 2}
            assert core.store.is_stale(EntityKind.user)

    def test_base_url_from_settings(self):
        core = create_core(Settings(BOUNDARY_BASE_URL="http://park.example/api/"))
        assert core.boundary.base_url == "http://park.example/api/"
        assert core.boundary.resolve_url("uploads/a.png") == "http://park.example/api/uploads/a.png"
