"""User-facing booking flow.

Registration, the event catalogue, the caller's own tickets, and booking
submission. A successful booking is echoed into local state straight away
as a tentative Booking; the next ``load_my_bookings`` replaces it with the
service's record.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from londonpark.boundary.client import BoundaryClient
from londonpark.boundary.envelope import unwrap
from londonpark.boundary.operations import Operation, endpoint_for
from londonpark.errors import InvalidFieldValue, MalformedRecord, SessionInvalid, TransportCorruption
from londonpark.models.booking import Booking, BookingState
from londonpark.models.event import Event
from londonpark.models.kinds import EntityKind
from londonpark.models.session import Role, Session
from londonpark.schemas.booking import BookingIntent, BookingRequest
from londonpark.schemas.user import RegistrationForm
from londonpark.services.booking_engine import propose_booking
from londonpark.services.coercion import coerce_id
from londonpark.services.entity_store import EntityStore, ReconciliationReport
from londonpark.services.normalization import NormalizationResult, normalize_collection

logger = logging.getLogger(__name__)


def _server_booking_id(data: dict) -> Optional[int]:
    """Booking id from a success acknowledgment, when the service sends one."""
    scopes = [data] + [data[k] for k in ("data", "booking") if isinstance(data.get(k), dict)]
    for scope in scopes:
        for key in ("booking_id", "bookingId", "id"):
            if scope.get(key) is None:
                continue
            try:
                return coerce_id(scope[key], key)
            except MalformedRecord:
                logger.warning("Ignoring unusable %s in booking acknowledgment: %r", key, scope[key])
                return None
    return None


def make_echo(request: BookingRequest, event: Event, server_id: Optional[int] = None) -> Booking:
    """Build the tentative local copy of a just-accepted booking."""
    return Booking(
        id=server_id,
        user_id=request.user_id,
        event_id=request.event_id,
        quantity=request.quantity,
        seat_type=request.seat_type,
        adult_photo=request.evidence_reference,
        booked_at=datetime.now(timezone.utc),
        event_name=event.name,
        event_date=event.date,
        state=BookingState.tentative,
        local_id=uuid.uuid4().hex,
    )


async def fetch_collection(
    boundary: BoundaryClient,
    kind: EntityKind,
    operation: Operation,
    session: Optional[Session],
    payload: Optional[dict] = None,
) -> NormalizationResult:
    """Fetch and normalize one listing. Nothing is stored here.

    A listing whose payload is not a list is reported as TransportCorruption.
    """
    endpoint = endpoint_for(kind, operation)
    ok = unwrap(await boundary.call(kind, operation, session, payload))
    try:
        return normalize_collection(kind, ok.payload(endpoint.payload_key))
    except MalformedRecord as exc:
        raise TransportCorruption(f"{endpoint.path} returned {exc.reason}")


class BookingService:
    """Booking operations for one signed-in (or registering) user."""

    def __init__(self, boundary: BoundaryClient, store: EntityStore) -> None:
        self._boundary = boundary
        self._store = store

    @property
    def store(self) -> EntityStore:
        return self._store

    async def register(self, form: RegistrationForm) -> str:
        """Create an account. Returns the service's confirmation message."""
        payload = form.to_payload()
        ok = unwrap(await self._boundary.call(EntityKind.user, Operation.register, None, payload))
        logger.info("Registered user %s", payload["email"])
        return ok.message or "Registration successful"

    async def load_events(self, session: Optional[Session] = None) -> NormalizationResult:
        async with self._store.lock(EntityKind.event):
            result = await fetch_collection(
                self._boundary, EntityKind.event, Operation.fetch_public, session
            )
            self._store.replace(EntityKind.event, result.items)
        return result

    async def load_my_bookings(self, session: Session) -> ReconciliationReport:
        """Refetch the caller's bookings. Tentative echoes are reconciled away."""
        session.require(Role.user)
        if session.subject_id is None:
            raise SessionInvalid("Session does not identify a user", session.login_route)
        async with self._store.lock(EntityKind.booking):
            result = await fetch_collection(
                self._boundary,
                EntityKind.booking,
                Operation.fetch_own,
                session,
                {"userId": session.subject_id},
            )
            report = self._store.replace(EntityKind.booking, result.items)
        logger.info(
            "Loaded %d bookings for user %s (%d echoes confirmed)",
            len(result.items),
            session.subject_id,
            len(report.confirmed),
        )
        return report

    async def book(
        self,
        session: Session,
        event: Event,
        intent: BookingIntent,
    ) -> Booking:
        """Validate, submit, and echo a booking.

        Raises RuleViolation before anything is sent, DomainFailure with
        the service's message if it refuses, TransportCorruption if the
        response is unusable. Local state only changes on success.
        """
        session.require(Role.user)
        if session.subject_id is None:
            raise SessionInvalid("Session does not identify a user", session.login_route)
        if intent.user_id != session.subject_id:
            raise InvalidFieldValue("user_id", "bookings can only be made for the signed-in user")
        async with self._store.lock(EntityKind.booking):
            prior = [b for b in self._store.bookings if b.user_id == intent.user_id]
            request = propose_booking(event, intent, prior)
            data, files = request.to_form()
            ok = unwrap(
                await self._boundary.call(
                    EntityKind.booking, Operation.create, session, data, files
                )
            )
            echo = make_echo(request, event, _server_booking_id(ok.data))
            self._store.append_echo(echo)
        logger.info(
            "Booked %d x %s for user %s on event %s (echo %s)",
            request.quantity,
            request.seat_type.value,
            request.user_id,
            request.event_id,
            echo.local_id,
        )
        return echo
