"""Booking rule engine — eligibility and capacity checks before submission.

Rules, first failure wins, nothing is mutated:

1. quantity is a positive integer; absent means 1
2. adult-only events need adult-verification evidence in an image format
3. adult-only events accept at most 8 tickets per booking
4. other events accept at most 100 tickets per booking
5. seat type is ``without_table`` (default) or ``with_table``

On adult-only events rule 2 is checked before rule 1, so a booking without
evidence is always reported as MissingEvidence whatever its quantity.

Limits are enforced by rejection. A presentation layer may clamp its
inputs with ``quantity_ceiling`` but the engine never clamps.
"""
import logging
from typing import Any, Iterable

from londonpark.errors import (
    InvalidQuantity,
    InvalidSeatType,
    MissingEvidence,
    QuantityLimitExceeded,
    UnsupportedEvidence,
)
from londonpark.models.booking import Booking, SeatType
from londonpark.models.event import Event
from londonpark.schemas.booking import BookingIntent, BookingRequest, Evidence

logger = logging.getLogger(__name__)

DEFAULT_QUANTITY = 1
ADULT_QUANTITY_LIMIT = 8
QUANTITY_LIMIT = 100


def quantity_ceiling(event: Event) -> int:
    return ADULT_QUANTITY_LIMIT if event.requires_adult else QUANTITY_LIMIT


def _resolve_quantity(value: Any) -> int:
    if value is None:
        return DEFAULT_QUANTITY
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidQuantity(value)
    return value


def _check_evidence(evidence: Any) -> None:
    if evidence is None:
        raise MissingEvidence()
    if isinstance(evidence, str):
        if not evidence.strip():
            raise MissingEvidence()
        return
    if isinstance(evidence, Evidence):
        if not evidence.filename or not evidence.content:
            raise MissingEvidence()
        if not evidence.is_image:
            raise UnsupportedEvidence(evidence.content_type)
        return
    raise MissingEvidence()


def _resolve_seat_type(value: Any) -> SeatType:
    if value is None:
        return SeatType.without_table
    if isinstance(value, SeatType):
        return value
    if isinstance(value, str):
        try:
            return SeatType(value)
        except ValueError:
            pass
    raise InvalidSeatType(value)


def propose_booking(
    event: Event,
    intent: BookingIntent,
    prior_bookings: Iterable[Booking] = (),
) -> BookingRequest:
    """Validate ``intent`` against ``event`` and build a BookingRequest.

    ``prior_bookings`` are the user's existing bookings. Limits apply per
    booking, so they do not change the outcome; they are only logged.

    Raises:
        MissingEvidence: adult-only event and no evidence attached.
        UnsupportedEvidence: attached evidence is not an image.
        InvalidQuantity: quantity is not a positive integer.
        QuantityLimitExceeded: quantity above the event's ceiling.
        InvalidSeatType: seat type outside the closed set.
    """
    if event.requires_adult:
        _check_evidence(intent.adult_photo)

    quantity = _resolve_quantity(intent.quantity)
    limit = quantity_ceiling(event)
    if quantity > limit:
        raise QuantityLimitExceeded(quantity, limit, adult_only=event.requires_adult)

    seat_type = _resolve_seat_type(intent.seat_type)

    already = sum(b.quantity or 0 for b in prior_bookings if b.event_id == event.id)
    if already:
        logger.debug("User %s already holds %d tickets for event %s", intent.user_id, already, event.id)

    return BookingRequest(
        user_id=intent.user_id,
        event_id=event.id,
        quantity=quantity,
        seat_type=seat_type,
        # evidence is only forwarded where the event asks for it
        adult_photo=intent.adult_photo if event.requires_adult else None,
    )
