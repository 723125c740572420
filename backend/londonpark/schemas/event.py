"""Pydantic schemas for outbound Event forms."""
from __future__ import annotations
from decimal import Decimal, InvalidOperation
from typing import Any, Union
from pydantic import BaseModel

from londonpark.errors import InvalidFieldValue, MissingRequiredField
from londonpark.schemas.mode import Mode, edit_target, is_blank


class EventForm(BaseModel):
    id: Any = None
    name: str = ""
    description: str = ""
    date: str = ""
    price: Union[Decimal, str, None] = None
    requires_adult: bool = False

    def to_payload(self, mode: Mode) -> dict[str, Any]:
        missing = [f for f in ("name", "date", "price") if is_blank(getattr(self, f))]
        if mode is Mode.edit and is_blank(self.id):
            missing.insert(0, "id")
        if missing:
            raise MissingRequiredField(tuple(missing))
        target = edit_target(self.id) if mode is Mode.edit else None

        try:
            price = Decimal(str(self.price).strip())
        except InvalidOperation:
            raise InvalidFieldValue("price", "must be a number")
        if not price.is_finite() or price < 0:
            raise InvalidFieldValue("price", "must be a non-negative number")

        payload: dict[str, Any] = {
            "name": self.name.strip(),
            "description": self.description,
            "date": self.date.strip(),
            "price": str(price),
            # the boundary expects 1/0 rather than JSON booleans
            "requiresAdult": 1 if self.requires_adult else 0,
        }
        if mode is Mode.edit:
            payload = {"id": target, **payload}
        return payload
