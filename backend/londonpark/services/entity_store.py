"""In-memory entity collections.

Collections are only ever swapped whole: a refetch either completes and
replaces the collection, or fails and leaves the previous one in place.
The single exception is the optimistic booking echo, which is appended
while the bookings lock is held and reconciled on the next refetch.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from londonpark.models.booking import Booking
from londonpark.models.event import Event
from londonpark.models.kinds import EntityKind
from londonpark.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """Outcome of replacing bookings that contained tentative echoes."""

    confirmed: dict[str, int] = field(default_factory=dict)  # local_id -> server id
    unconfirmed: list[str] = field(default_factory=list)


def reconcile(current: Iterable[Booking], fetched: Iterable[Booking]) -> ReconciliationReport:
    """Match tentative echoes in ``current`` against a refetched collection.

    An echo is confirmed by a fetched booking with the same server id, or
    failing that, by a newly appeared booking with the same user, event,
    quantity and seat type. Each fetched booking confirms at most one echo.
    """
    current = list(current)
    fetched = list(fetched)
    report = ReconciliationReport()
    echoes = [b for b in current if b.is_tentative]
    if not echoes:
        return report

    known = {b.id for b in current if not b.is_tentative}
    fetched_ids = {b.id for b in fetched}
    candidates = [b for b in fetched if b.id not in known]

    pending = []
    for echo in echoes:
        if echo.id is not None and echo.id in fetched_ids:
            report.confirmed[echo.local_id] = echo.id
            candidates = [c for c in candidates if c.id != echo.id]
        else:
            pending.append(echo)

    for echo in pending:
        match = next((c for c in candidates if c.signature == echo.signature), None)
        if match is None:
            report.unconfirmed.append(echo.local_id)
            continue
        report.confirmed[echo.local_id] = match.id
        candidates.remove(match)
    return report


class EntityStore:
    """Holds the normalized Users, Events and Bookings for one session."""

    def __init__(self) -> None:
        self._collections: dict[EntityKind, tuple] = {kind: () for kind in EntityKind}
        self._locks = {kind: asyncio.Lock() for kind in EntityKind}
        self._stale: set[EntityKind] = set(EntityKind)

    @property
    def users(self) -> tuple[User, ...]:
        return self._collections[EntityKind.user]

    @property
    def events(self) -> tuple[Event, ...]:
        return self._collections[EntityKind.event]

    @property
    def bookings(self) -> tuple[Booking, ...]:
        return self._collections[EntityKind.booking]

    def collection(self, kind: EntityKind) -> tuple:
        return self._collections[kind]

    def lock(self, kind: EntityKind) -> asyncio.Lock:
        """Serializes mutate-then-refetch sequences for one entity kind."""
        return self._locks[kind]

    def is_stale(self, kind: EntityKind) -> bool:
        return kind in self._stale

    def invalidate(self, kind: EntityKind) -> None:
        """Mark a kind as needing a refetch. The held items stay readable."""
        self._stale.add(kind)

    def replace(self, kind: EntityKind, items: Iterable) -> Optional[ReconciliationReport]:
        """Swap in a freshly normalized collection.

        For bookings, tentative echoes are reconciled against the new
        collection and then discarded: the refetch is authoritative.
        """
        items = tuple(items)
        report = None
        if kind is EntityKind.booking:
            report = reconcile(self.bookings, items)
            for local_id in report.unconfirmed:
                logger.warning("Booking echo %s was not confirmed by refetch", local_id)
        self._collections[kind] = items
        self._stale.discard(kind)
        return report

    def append_echo(self, booking: Booking) -> None:
        """Append an optimistic booking. Never duplicates a known server id."""
        if booking.id is not None and any(b.id == booking.id for b in self.bookings):
            logger.debug("Echo for booking %s already present", booking.id)
            return
        self._collections[EntityKind.booking] = self.bookings + (booking,)

    def get(self, kind: EntityKind, entity_id: Optional[int]):
        """Look an entity up by id. Dangling references resolve to None."""
        if entity_id is None:
            return None
        return next((item for item in self._collections[kind] if item.id == entity_id), None)

    def find_user(self, user_id: Optional[int]) -> Optional[User]:
        return self.get(EntityKind.user, user_id)

    def find_event(self, event_id: Optional[int]) -> Optional[Event]:
        return self.get(EntityKind.event, event_id)
