"""Admin console mutations — users, events and bookings.

Responsibilities:
- Pre-submission validation of user/event forms, per explicit Mode
- Two-step delete: request_delete() issues a confirmation, delete() needs it acknowledged
- One mutation in flight per entity kind (the kind's store lock is held
  from submission through the refetch)
- Refetch and renormalize after every successful mutation
- Boundary messages passed through verbatim; no retries
"""
import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from londonpark.boundary.client import BoundaryClient
from londonpark.boundary.envelope import unwrap
from londonpark.boundary.operations import Operation
from londonpark.errors import ConfirmationRequired, InvalidFieldValue, MalformedRecord
from londonpark.models.booking import Booking
from londonpark.models.event import Event
from londonpark.models.kinds import EntityKind
from londonpark.models.session import Role, Session
from londonpark.models.user import User
from londonpark.schemas.event import EventForm
from londonpark.schemas.mode import Mode
from londonpark.schemas.user import UserForm
from londonpark.services.booking_service import fetch_collection
from londonpark.services.coercion import coerce_id
from londonpark.services.entity_store import EntityStore
from londonpark.services.normalization import Anomaly, NormalizationResult

logger = logging.getLogger(__name__)

_MODE_OPERATIONS = {
    Mode.create: Operation.create,
    Mode.edit: Operation.update,
}


@dataclass(frozen=True)
class DeleteConfirmation:
    """A pending delete. Must be acknowledged before it can be executed."""

    kind: EntityKind
    entity_id: int
    token: str
    acknowledged: bool = False

    @property
    def prompt(self) -> str:
        return f"Delete this {self.kind.value}?"

    def acknowledge(self) -> "DeleteConfirmation":
        return replace(self, acknowledged=True)


@dataclass(frozen=True)
class MutationOutcome:
    kind: EntityKind
    operation: Operation
    message: Optional[str]
    entity_id: Optional[int] = None
    anomalies: list[Anomaly] = field(default_factory=list)


@dataclass(frozen=True)
class BookingRow:
    """A booking joined to whatever user and event it still resolves to."""

    booking: Booking
    user: Optional[User]
    event: Optional[Event]
    evidence_url: Optional[str]

    @property
    def user_name(self) -> Optional[str]:
        return self.user.name if self.user else None

    @property
    def event_name(self) -> Optional[str]:
        if self.event:
            return self.event.name
        return self.booking.event_name


class AdminCoordinator:
    """Orchestrates admin create/update/delete flows against the boundary."""

    def __init__(self, boundary: BoundaryClient, store: EntityStore) -> None:
        self._boundary = boundary
        self._store = store
        self._pending: dict[tuple[EntityKind, int], str] = {}  # target -> latest token

    @property
    def store(self) -> EntityStore:
        return self._store

    # ── Fetching ────────────────────────────────────────────────────
    async def _refetch(self, session: Session, kind: EntityKind) -> NormalizationResult:
        """Fetch, normalize and swap in ``kind``. Caller holds the kind's lock."""
        result = await fetch_collection(self._boundary, kind, Operation.fetch_all, session)
        self._store.replace(kind, result.items)
        if result.anomalies:
            logger.warning("%d anomalies normalizing %s records", len(result.anomalies), kind.value)
        return result

    async def refresh(self, session: Session, kind: EntityKind) -> NormalizationResult:
        session.require(Role.admin)
        async with self._store.lock(kind):
            return await self._refetch(session, kind)

    async def refresh_all(self, session: Session) -> dict[EntityKind, NormalizationResult]:
        return {kind: await self.refresh(session, kind) for kind in EntityKind}

    # ── Mutations ───────────────────────────────────────────────────
    async def _mutate(
        self,
        session: Session,
        kind: EntityKind,
        operation: Operation,
        payload: dict[str, Any],
        entity_id: Optional[int] = None,
    ) -> MutationOutcome:
        session.require(Role.admin)
        async with self._store.lock(kind):
            ok = unwrap(await self._boundary.call(kind, operation, session, payload))
            self._store.invalidate(kind)
            result = await self._refetch(session, kind)
        logger.info("Admin %s %s %s: %s", operation.value, kind.value, entity_id or "(new)", ok.message)
        return MutationOutcome(
            kind=kind,
            operation=operation,
            message=ok.message,
            entity_id=entity_id,
            anomalies=result.anomalies,
        )

    async def save_user(self, session: Session, mode: Mode, form: UserForm) -> MutationOutcome:
        """Create or edit a user. Edit with an empty password keeps the old one."""
        payload = form.to_payload(mode)
        return await self._mutate(
            session, EntityKind.user, _MODE_OPERATIONS[mode], payload, payload.get("id")
        )

    async def save_event(self, session: Session, mode: Mode, form: EventForm) -> MutationOutcome:
        payload = form.to_payload(mode)
        return await self._mutate(
            session, EntityKind.event, _MODE_OPERATIONS[mode], payload, payload.get("id")
        )

    def request_delete(self, kind: EntityKind, entity_id: Any) -> DeleteConfirmation:
        """First step of a delete: issue an unacknowledged confirmation."""
        try:
            target = coerce_id(entity_id)
        except MalformedRecord as exc:
            raise InvalidFieldValue("id", exc.reason)
        confirmation = DeleteConfirmation(kind=kind, entity_id=target, token=uuid.uuid4().hex)
        # a newer request for the same target supersedes the older token
        self._pending[(kind, target)] = confirmation.token
        return confirmation

    async def delete(self, session: Session, confirmation: DeleteConfirmation) -> MutationOutcome:
        """Second step: execute an acknowledged confirmation, once."""
        if not confirmation.acknowledged:
            raise ConfirmationRequired("Deletion has not been confirmed")
        target = (confirmation.kind, confirmation.entity_id)
        if self._pending.get(target) != confirmation.token:
            raise ConfirmationRequired("Unknown, superseded or already used confirmation")
        session.require(Role.admin)
        del self._pending[target]
        return await self._mutate(
            session,
            confirmation.kind,
            Operation.delete,
            {"id": confirmation.entity_id},
            confirmation.entity_id,
        )

    # ── Views ───────────────────────────────────────────────────────
    def booking_rows(self) -> list[BookingRow]:
        return [
            BookingRow(
                booking=booking,
                user=self._store.find_user(booking.user_id),
                event=self._store.find_event(booking.event_id),
                evidence_url=self._boundary.resolve_url(booking.adult_photo),
            )
            for booking in self._store.bookings
        ]
