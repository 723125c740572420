"""Canonical Event shape."""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class Event(BaseModel):
    """A bookable event.

    ``requires_adult`` caps bookings at 8 tickets and requires adult
    verification evidence on every booking.
    """

    id: int = Field(gt=0)
    name: str = ""
    description: str = ""
    date: str = ""
    price: Optional[Decimal] = Field(default=None, ge=0)
    requires_adult: bool = False

    model_config = {"frozen": True, "strict": True, "extra": "forbid"}

    @property
    def display_price(self) -> str:
        if self.price is None:
            return "-"
        return f"{self.price:.2f}"
