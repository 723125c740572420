"""Booking core entry point — wires settings, logging and services."""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from londonpark.boundary.client import BoundaryClient
from londonpark.config import Settings, settings as default_settings
from londonpark.services.admin_coordinator import AdminCoordinator
from londonpark.services.booking_service import BookingService
from londonpark.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@dataclass
class BookingCore:
    """Everything presentation code talks to, sharing one store."""

    boundary: BoundaryClient
    store: EntityStore
    bookings: BookingService
    admin: AdminCoordinator

    async def aclose(self) -> None:
        await self.boundary.aclose()

    async def __aenter__(self) -> "BookingCore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def create_core(
    config: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BookingCore:
    config = config or default_settings
    configure_logging(config.LOG_LEVEL)
    boundary = BoundaryClient(
        base_url=config.BOUNDARY_BASE_URL,
        timeout=config.BOUNDARY_TIMEOUT_SECONDS,
        transport=transport,
    )
    store = EntityStore()
    logger.info("Booking core ready against %s", config.BOUNDARY_BASE_URL)
    return BookingCore(
        boundary=boundary,
        store=store,
        bookings=BookingService(boundary, store),
        admin=AdminCoordinator(boundary, store),
    )
