"""Create/edit mode carried explicitly through admin mutations."""
import enum
from typing import Any

from londonpark.errors import InvalidFieldValue, MalformedRecord
from londonpark.services.coercion import coerce_id


class Mode(str, enum.Enum):
    create = "create"
    edit = "edit"


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def edit_target(value: Any) -> int:
    """Resolve the id of the record an edit applies to. Never 0 or empty."""
    try:
        return coerce_id(value)
    except MalformedRecord as exc:
        raise InvalidFieldValue("id", exc.reason)
