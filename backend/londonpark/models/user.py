"""Canonical User shape."""
from pydantic import BaseModel, Field


class User(BaseModel):
    """A registered user as held in memory.

    The password is write-only: it exists on outbound forms
    (schemas.user) and never on a canonical User.
    """

    id: int = Field(gt=0)
    name: str = ""
    email: str = ""

    model_config = {"frozen": True, "strict": True, "extra": "forbid"}
