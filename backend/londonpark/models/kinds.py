"""Entity kinds the core tracks."""
import enum


class EntityKind(str, enum.Enum):
    user = "user"
    event = "event"
    booking = "booking"
