"""Failure taxonomy for the booking core.

Three families reach presentation code:

- ValidationFailure: raised locally before anything is sent to the boundary.
- DomainFailure: the boundary understood the request and refused it.
- TransportCorruption: the boundary answered with noise, or not at all.

MalformedRecord and SessionInvalid sit beside them.
"""
from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """Stable error codes for presentation-layer message lookup."""

    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    QUANTITY_LIMIT_EXCEEDED = "QUANTITY_LIMIT_EXCEEDED"
    MISSING_EVIDENCE = "MISSING_EVIDENCE"
    UNSUPPORTED_EVIDENCE = "UNSUPPORTED_EVIDENCE"
    INVALID_SEAT_TYPE = "INVALID_SEAT_TYPE"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
    DOMAIN_FAILURE = "DOMAIN_FAILURE"
    TRANSPORT_CORRUPTION = "TRANSPORT_CORRUPTION"
    MALFORMED_RECORD = "MALFORMED_RECORD"
    SESSION_INVALID = "SESSION_INVALID"


class BookingCoreError(Exception):
    """Base error with code and user-safe message."""

    code: ErrorCode

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def user_message(self) -> str:
        return self.message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


# ── Validation ─────────────────────────────────────────────────────


class ValidationFailure(BookingCoreError):
    """Local, pre-submission failure. Never reaches the boundary."""


class MissingRequiredField(ValidationFailure):
    """Raised when a form lacks one or more required values."""

    def __init__(self, fields: tuple[str, ...]) -> None:
        self.fields = fields
        super().__init__(
            code=ErrorCode.MISSING_FIELD,
            message=f"Required: {', '.join(fields)}",
        )


class InvalidFieldValue(ValidationFailure):
    """Raised when a form value is present but unusable."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        super().__init__(code=ErrorCode.INVALID_FIELD, message=f"{field}: {reason}")


class ConfirmationRequired(ValidationFailure):
    """Raised when a delete is attempted without an acknowledged confirmation."""

    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.CONFIRMATION_REQUIRED, message=reason)


class RuleViolation(ValidationFailure):
    """A booking rule rejected the intent."""


class InvalidQuantity(RuleViolation):
    def __init__(self, quantity: Any) -> None:
        self.quantity = quantity
        super().__init__(
            code=ErrorCode.INVALID_QUANTITY,
            message="Quantity must be a positive whole number.",
        )


class QuantityLimitExceeded(RuleViolation):
    def __init__(self, quantity: int, limit: int, adult_only: bool) -> None:
        self.quantity = quantity
        self.limit = limit
        self.adult_only = adult_only
        if adult_only:
            message = f"Cannot book more than {limit} tickets for adult events."
        else:
            message = f"Cannot book more than {limit} tickets per booking."
        super().__init__(code=ErrorCode.QUANTITY_LIMIT_EXCEEDED, message=message)


class MissingEvidence(RuleViolation):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.MISSING_EVIDENCE,
            message="You must upload an adult photo for this event.",
        )


class UnsupportedEvidence(RuleViolation):
    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(
            code=ErrorCode.UNSUPPORTED_EVIDENCE,
            message="The adult photo must be an image file.",
        )


class InvalidSeatType(RuleViolation):
    def __init__(self, seat_type: Any) -> None:
        self.seat_type = seat_type
        super().__init__(
            code=ErrorCode.INVALID_SEAT_TYPE,
            message=f"Unknown seat type: {seat_type!r}",
        )


# ── Boundary ───────────────────────────────────────────────────────


class DomainFailure(BookingCoreError):
    """The boundary rejected a well-formed request; message is passed through verbatim."""

    def __init__(self, message: Optional[str]) -> None:
        super().__init__(
            code=ErrorCode.DOMAIN_FAILURE,
            message=message or "Request was rejected.",
        )


class TransportCorruption(BookingCoreError):
    """Unparseable response, network failure or timeout. Never retried."""

    def __init__(self, reason: str, raw: Optional[str] = None) -> None:
        self.reason = reason
        self.raw = raw
        super().__init__(code=ErrorCode.TRANSPORT_CORRUPTION, message=reason)

    @property
    def user_message(self) -> str:
        return "The booking service is unavailable or returned an invalid response. Please try again."


class MalformedRecord(BookingCoreError):
    """A wire record (or one of its fields) could not be read."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            code=ErrorCode.MALFORMED_RECORD,
            message=f"{field}: {reason}",
        )


class SessionInvalid(BookingCoreError):
    """The caller's session is missing, expired or of the wrong role."""

    def __init__(self, reason: str, redirect_to: str) -> None:
        self.redirect_to = redirect_to
        super().__init__(code=ErrorCode.SESSION_INVALID, message=reason)
