"""Canonical Booking shape and its reconciliation state."""
import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class SeatType(str, enum.Enum):
    without_table = "without_table"
    with_table = "with_table"


class BookingState(str, enum.Enum):
    tentative = "tentative"  # optimistic echo, not yet seen on a refetch
    confirmed = "confirmed"


class Booking(BaseModel):
    """A booking references its user and event by id only.

    Tentative bookings are keyed by ``local_id`` and may or may not
    already carry the server-issued ``id``. Confirmed bookings always
    carry ``id``.
    """

    id: Optional[int] = Field(default=None, gt=0)
    user_id: Optional[int] = Field(default=None, gt=0)
    event_id: Optional[int] = Field(default=None, gt=0)
    quantity: Optional[int] = Field(default=None, gt=0)
    seat_type: SeatType = SeatType.without_table
    adult_photo: Optional[str] = None
    booked_at: Optional[datetime] = None
    event_name: Optional[str] = None
    event_date: Optional[str] = None
    state: BookingState = BookingState.confirmed
    local_id: Optional[str] = None

    model_config = {"frozen": True, "strict": True, "extra": "forbid"}

    @model_validator(mode="after")
    def _check_state(self) -> "Booking":
        if self.state is BookingState.confirmed and self.id is None:
            raise ValueError("confirmed booking requires an id")
        if self.state is BookingState.tentative and not self.local_id:
            raise ValueError("tentative booking requires a local_id")
        return self

    @property
    def is_tentative(self) -> bool:
        return self.state is BookingState.tentative

    @property
    def signature(self) -> tuple:
        """Fields a refetched booking must share with an echo to confirm it."""
        return (self.user_id, self.event_id, self.quantity, self.seat_type)
