"""Normalization of boundary records into canonical entities.

Every record received from the boundary passes through here before it is
held in memory. Field resolution is table-driven: each canonical field
lists its wire synonyms in priority order and the coercion applied to the
first present value.

Degradation policy:
- A malformed ordinary field falls back to its default and is recorded as
  an Anomaly; the record survives.
- A missing or malformed ``id`` drops the record from a collection (and
  raises MalformedRecord for single-record normalization).
"""
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from londonpark.config import settings
from londonpark.errors import MalformedRecord
from londonpark.models.booking import Booking, SeatType
from londonpark.models.event import Event
from londonpark.models.kinds import EntityKind
from londonpark.models.user import User
from londonpark.services.coercion import (
    coerce_bool,
    coerce_id,
    coerce_price,
    coerce_quantity,
    coerce_seat_type,
    coerce_text,
    coerce_timestamp,
)

logger = logging.getLogger(__name__)

Entity = Union[User, Event, Booking]


@dataclass(frozen=True)
class FieldRule:
    """Canonical field ← first present of ``sources``, through ``coerce``."""

    name: str
    sources: tuple[str, ...]
    coerce: Callable[[Any, str], Any]
    default: Any = None
    # "" counts as absent for text-like fields only; flags and ids must coerce it
    empty_is_absent: bool = True


@dataclass(frozen=True)
class Anomaly:
    kind: EntityKind
    record_id: Optional[Any]
    field: str
    value: Any
    reason: str


@dataclass
class NormalizationResult:
    items: tuple = ()
    anomalies: list[Anomaly] = field(default_factory=list)

    @property
    def dropped(self) -> list[Anomaly]:
        return [a for a in self.anomalies if a.field == "id"]


# ── Resolution tables ──────────────────────────────────────────────
ID_SOURCES = ("id",)

USER_FIELDS = (
    FieldRule("name", ("name",), coerce_text, ""),
    FieldRule("email", ("email",), coerce_text, ""),
)

EVENT_FIELDS = (
    FieldRule("name", ("name",), coerce_text, ""),
    FieldRule("description", ("description",), coerce_text, ""),
    FieldRule("date", ("date", "event_date"), coerce_text, ""),
    FieldRule("price", ("price",), coerce_price, None),
    FieldRule("requires_adult", ("requires_adult", "requiresAdult"), coerce_bool, False, empty_is_absent=False),
)

BOOKING_FIELDS = (
    FieldRule("user_id", ("user_id", "userId"), coerce_id, None, empty_is_absent=False),
    FieldRule("event_id", ("event_id", "eventId"), coerce_id, None, empty_is_absent=False),
    FieldRule("quantity", ("quantity",), coerce_quantity, None, empty_is_absent=False),
    FieldRule("seat_type", ("seat_type", "seatType"), coerce_seat_type, SeatType.without_table),
    FieldRule("adult_photo", ("adult_photo", "adultPhoto"), coerce_text, None),
    FieldRule("booked_at", ("booked_at", "bookedAt", "booked_at_sql"), coerce_timestamp, None),
    FieldRule("event_name", ("event_name", "eventName", "name"), coerce_text, None),
    FieldRule("event_date", ("event_date", "eventDate", "date"), coerce_text, None),
)

TABLES: dict[EntityKind, tuple[type, tuple[FieldRule, ...]]] = {
    EntityKind.user: (User, USER_FIELDS),
    EntityKind.event: (Event, EVENT_FIELDS),
    EntityKind.booking: (Booking, BOOKING_FIELDS),
}


def _is_absent(value: Any, empty_is_absent: bool = True) -> bool:
    if value is None:
        return True
    return empty_is_absent and isinstance(value, str) and value == ""


def resolve(
    raw: Mapping[str, Any],
    sources: Iterable[str],
    empty_is_absent: bool = True,
) -> tuple[Optional[str], Any]:
    """Return (source key, value) of the first present, non-null synonym."""
    for key in sources:
        value = raw.get(key)
        if not _is_absent(value, empty_is_absent):
            return key, value
    return None, None


def _coercion(rule: FieldRule, tz_name: str) -> Callable[[Any, str], Any]:
    if rule.coerce is coerce_timestamp:
        return partial(coerce_timestamp, tz_name=tz_name)
    return rule.coerce


def _normalize(
    kind: EntityKind,
    raw: Mapping[str, Any],
    anomalies: list[Anomaly],
    tz_name: str,
) -> Entity:
    """Build one entity, appending field anomalies. Raises on identity failure."""
    if not isinstance(raw, Mapping):
        raise MalformedRecord("record", raw, "not a mapping")

    model, rules = TABLES[kind]
    _, raw_id = resolve(raw, ID_SOURCES, empty_is_absent=False)
    if raw_id is None:
        raise MalformedRecord("id", None, "missing identifier")
    record_id = coerce_id(raw_id, "id")

    values: dict[str, Any] = {"id": record_id}
    for rule in rules:
        source, value = resolve(raw, rule.sources, rule.empty_is_absent)
        if source is None:
            values[rule.name] = rule.default
            continue
        try:
            values[rule.name] = _coercion(rule, tz_name)(value, rule.name)
        except MalformedRecord as exc:
            anomalies.append(Anomaly(kind, record_id, rule.name, value, exc.reason))
            logger.warning(
                "Degraded %s %s field %s (%r): %s", kind.value, record_id, rule.name, value, exc.reason
            )
            values[rule.name] = rule.default

    try:
        return model(**values)
    except ValidationError as exc:
        # coercions already enforce every field invariant; reaching here means
        # the tables and the model disagree
        raise MalformedRecord("record", dict(raw), str(exc))


def normalize_record(
    kind: EntityKind,
    raw: Mapping[str, Any],
    tz_name: Optional[str] = None,
) -> Entity:
    """Normalize a single record. Field anomalies are logged and discarded."""
    return _normalize(kind, raw, [], tz_name or settings.BOUNDARY_TIMEZONE)


def normalize_user(raw: Mapping[str, Any]) -> User:
    return normalize_record(EntityKind.user, raw)


def normalize_event(raw: Mapping[str, Any]) -> Event:
    return normalize_record(EntityKind.event, raw)


def normalize_booking(raw: Mapping[str, Any], tz_name: Optional[str] = None) -> Booking:
    return normalize_record(EntityKind.booking, raw, tz_name)


def normalize_collection(
    kind: EntityKind,
    raws: Any,
    tz_name: Optional[str] = None,
) -> NormalizationResult:
    """Normalize a list of records, dropping those without a usable identity.

    A payload that is not a list at all is a transport-level problem and
    is left for the caller to reject; here it raises MalformedRecord.
    """
    if raws is None:
        return NormalizationResult()
    if not isinstance(raws, list):
        raise MalformedRecord(f"{kind.value} collection", raws, "not a list")

    tz_name = tz_name or settings.BOUNDARY_TIMEZONE
    result = NormalizationResult()
    items = []
    for raw in raws:
        try:
            items.append(_normalize(kind, raw, result.anomalies, tz_name))
        except MalformedRecord as exc:
            record_id = raw.get("id") if isinstance(raw, Mapping) else None
            result.anomalies.append(Anomaly(kind, record_id, "id", exc.value, exc.reason))
            logger.warning("Dropped %s record %r: %s", kind.value, record_id, exc.reason)
    result.items = tuple(items)
    return result


def booking_to_wire(booking: Booking) -> dict[str, Any]:
    """Serialize a booking back into the boundary's field naming."""
    return {
        "id": booking.id,
        "user_id": booking.user_id,
        "event_id": booking.event_id,
        "quantity": booking.quantity,
        "seat_type": booking.seat_type.value,
        "adult_photo": booking.adult_photo,
        "booked_at": booking.booked_at.isoformat() if booking.booked_at else None,
        "event_name": booking.event_name,
        "event_date": booking.event_date,
    }


def event_to_wire(event: Event) -> dict[str, Any]:
    return {
        "id": event.id,
        "name": event.name,
        "description": event.description,
        "date": event.date,
        "price": str(event.price) if event.price is not None else None,
        "requires_adult": 1 if event.requires_adult else 0,
    }
