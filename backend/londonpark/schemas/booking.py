"""Pydantic schemas for booking intents and outbound booking requests."""
from __future__ import annotations
from typing import Any, Optional, Union
from pydantic import BaseModel, Field

from londonpark.models.booking import SeatType


class Evidence(BaseModel):
    """Uploaded adult-verification material. Only the format is checked."""

    filename: str
    content_type: str
    content: bytes = b""

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


class BookingIntent(BaseModel):
    """What the user asked for, unvalidated.

    Values are kept as given so the rule engine stays the single
    authority on what is acceptable.
    """

    user_id: int = Field(gt=0)
    quantity: Any = None
    seat_type: Any = None
    adult_photo: Union[Evidence, str, None] = None


class BookingRequest(BaseModel):
    """A validated booking, ready for submission."""

    user_id: int = Field(gt=0)
    event_id: int = Field(gt=0)
    quantity: int = Field(gt=0)
    seat_type: SeatType = SeatType.without_table
    adult_photo: Union[Evidence, str, None] = None

    model_config = {"frozen": True}

    @property
    def evidence_reference(self) -> Optional[str]:
        if isinstance(self.adult_photo, Evidence):
            return self.adult_photo.filename
        return self.adult_photo

    def to_form(self) -> tuple[dict[str, str], dict[str, tuple]]:
        """Multipart form fields and files in the boundary's naming."""
        data = {
            "userId": str(self.user_id),
            "eventId": str(self.event_id),
            "quantity": str(self.quantity),
            "seat_type": self.seat_type.value,
        }
        files: dict[str, tuple] = {}
        if isinstance(self.adult_photo, Evidence):
            files["adult_photo"] = (
                self.adult_photo.filename,
                self.adult_photo.content,
                self.adult_photo.content_type,
            )
        elif self.adult_photo is not None:
            data["adult_photo"] = self.adult_photo
        return data, files
