"""Pydantic schemas for outbound User forms."""
from __future__ import annotations
from typing import Any
from pydantic import BaseModel

from londonpark.errors import MissingRequiredField
from londonpark.schemas.mode import Mode, edit_target, is_blank


class UserForm(BaseModel):
    """Admin create/edit form. ``id`` is only read in edit mode."""

    id: Any = None
    name: str = ""
    email: str = ""
    password: str = ""

    def to_payload(self, mode: Mode) -> dict[str, Any]:
        """Validate for ``mode`` and build the boundary payload.

        A blank password in edit mode means "leave unchanged": the
        field is omitted rather than sent empty.
        """
        missing = [f for f in ("name", "email") if is_blank(getattr(self, f))]
        if mode is Mode.create and is_blank(self.password):
            missing.append("password")
        if mode is Mode.edit and is_blank(self.id):
            missing.insert(0, "id")
        if missing:
            raise MissingRequiredField(tuple(missing))
        target = edit_target(self.id) if mode is Mode.edit else None

        payload: dict[str, Any] = {"name": self.name.strip(), "email": self.email.strip()}
        if mode is Mode.edit:
            payload = {"id": target, **payload}
        if not is_blank(self.password):
            payload["password"] = self.password
        return payload


class RegistrationForm(BaseModel):
    """Self-service registration. All fields required."""

    name: str = ""
    email: str = ""
    password: str = ""

    def to_payload(self) -> dict[str, Any]:
        missing = [f for f in ("name", "email", "password") if is_blank(getattr(self, f))]
        if missing:
            raise MissingRequiredField(tuple(missing))
        return {"name": self.name.strip(), "email": self.email.strip(), "password": self.password}
