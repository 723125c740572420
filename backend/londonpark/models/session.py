"""Explicit caller session, passed into every boundary-facing operation."""
import enum
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from londonpark.errors import SessionInvalid


class Role(str, enum.Enum):
    user = "user"
    admin = "admin"


LOGIN_ROUTES = {
    Role.user: "/login",
    Role.admin: "/admin/login",
}


class Session(BaseModel):
    role: Role
    credential: str = Field(min_length=1)
    subject_id: Optional[int] = Field(default=None, gt=0)
    expires_at: Optional[datetime] = None

    model_config = {"frozen": True}

    @field_validator("expires_at")
    @classmethod
    def _require_aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            raise ValueError("expires_at must be timezone-aware")
        return value

    @property
    def login_route(self) -> str:
        return LOGIN_ROUTES[self.role]

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    def require(self, role: Role, now: Optional[datetime] = None) -> None:
        """Raise SessionInvalid unless this session is live and has ``role``."""
        if self.role is not role:
            raise SessionInvalid(f"{role.value} session required", LOGIN_ROUTES[role])
        if self.is_expired(now):
            raise SessionInvalid("Session expired", self.login_route)

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.credential}"}
