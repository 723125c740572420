"""Tagged results at the boundary seam.

Every response body is classified exactly once, here:

- ``Ok``: ``{"status": "success", ...}``
- ``DomainError``: ``{"status": "error", "message": ...}``
- ``Corrupt``: anything else (PHP warnings, HTML, truncated JSON, timeouts)

Downstream code branches on the tag, never on the body's shape.
"""
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ValidationError

from londonpark.errors import DomainFailure, TransportCorruption


class Envelope(BaseModel):
    status: Literal["success", "error"]
    message: Optional[str] = None

    model_config = {"extra": "allow"}


@dataclass(frozen=True)
class Ok:
    data: dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None

    def payload(self, key: Optional[str]) -> Any:
        if key is None:
            return None
        return self.data.get(key)


@dataclass(frozen=True)
class DomainError:
    message: Optional[str]


@dataclass(frozen=True)
class Corrupt:
    reason: str
    raw: Optional[str] = None


BoundaryResult = Union[Ok, DomainError, Corrupt]


def parse_envelope(text: str) -> BoundaryResult:
    """Classify a response body."""
    try:
        envelope = Envelope.model_validate_json(text)
    except ValidationError as exc:
        first = exc.errors()[0]
        return Corrupt(reason=f"unparseable response: {first['msg']}", raw=text)
    if envelope.status == "error":
        return DomainError(message=envelope.message)
    return Ok(data=envelope.model_dump(), message=envelope.message)


def unwrap(result: BoundaryResult) -> Ok:
    """Return ``Ok`` or raise the matching failure."""
    if isinstance(result, Ok):
        return result
    if isinstance(result, DomainError):
        raise DomainFailure(result.message)
    raise TransportCorruption(result.reason, raw=result.raw)
