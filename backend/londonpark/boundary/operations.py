"""Boundary operations keyed by (entity kind, operation)."""
import enum
from dataclasses import dataclass
from typing import Optional

from londonpark.models.kinds import EntityKind
from londonpark.models.session import Role


class Operation(str, enum.Enum):
    fetch_all = "fetch_all"        # admin console listing
    fetch_public = "fetch_public"  # catalogue shown to users
    fetch_own = "fetch_own"        # the caller's own bookings
    create = "create"
    update = "update"
    delete = "delete"
    register = "register"


@dataclass(frozen=True)
class Endpoint:
    path: str
    method: str = "POST"
    payload_key: Optional[str] = None  # where a listing lives in the success envelope
    role: Optional[Role] = Role.admin  # None: no session needed
    multipart: bool = False


ENDPOINTS: dict[tuple[EntityKind, Operation], Endpoint] = {
    (EntityKind.user, Operation.fetch_all): Endpoint("admin_get_users.php", "GET", "data"),
    (EntityKind.user, Operation.create): Endpoint("admin_create_user.php"),
    (EntityKind.user, Operation.update): Endpoint("admin_update_user.php"),
    (EntityKind.user, Operation.delete): Endpoint("admin_delete_user.php"),
    (EntityKind.user, Operation.register): Endpoint("register_user.php", role=None),
    (EntityKind.event, Operation.fetch_all): Endpoint("admin_get_events.php", "GET", "events"),
    (EntityKind.event, Operation.fetch_public): Endpoint("get_events.php", "GET", "events", role=None),
    (EntityKind.event, Operation.create): Endpoint("admin_create_event.php"),
    (EntityKind.event, Operation.update): Endpoint("admin_update_event.php"),
    (EntityKind.event, Operation.delete): Endpoint("admin_delete_event.php"),
    (EntityKind.booking, Operation.fetch_all): Endpoint("admin_get_bookings.php", "GET", "bookings"),
    (EntityKind.booking, Operation.fetch_own): Endpoint("get_bookings.php", payload_key="tickets", role=Role.user),
    (EntityKind.booking, Operation.create): Endpoint("book_ticket.php", role=Role.user, multipart=True),
    (EntityKind.booking, Operation.delete): Endpoint("admin_delete_booking.php"),
}


def endpoint_for(kind: EntityKind, operation: Operation) -> Endpoint:
    try:
        return ENDPOINTS[(kind, operation)]
    except KeyError:
        raise ValueError(f"{kind.value} does not support {operation.value}")
