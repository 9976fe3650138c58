"""
Domain errors for ticket issuance and admission control.

Every error carries a machine-readable ``ErrorCode`` and the HTTP status it
maps to. Services raise these; a single exception handler registered in
``ticketing.main`` turns them into ``{"error": code, "detail": message}``
responses, so nothing below the API layer needs to know about HTTP.
"""

from enum import Enum
from typing import Optional

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable failure reasons returned to clients."""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    EVENT_NOT_FREE = "EVENT_NOT_FREE"
    APPLICATIONS_CLOSED = "APPLICATIONS_CLOSED"

    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN_ROLE = "FORBIDDEN_ROLE"

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"

    PAYMENT_REQUIRED = "PAYMENT_REQUIRED"
    INVALID_PAYMENT_SIGNATURE = "INVALID_PAYMENT_SIGNATURE"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    GATEWAY_UNAVAILABLE = "GATEWAY_UNAVAILABLE"

    CONFLICT = "CONFLICT"
    ALREADY_JOINED = "ALREADY_JOINED"
    ALREADY_APPLIED = "ALREADY_APPLIED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    EMAIL_TAKEN = "EMAIL_TAKEN"


class DomainError(Exception):
    """Base domain error with code, HTTP status and user-safe message."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: ErrorCode = ErrorCode.INVALID_REQUEST

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict:
        return {"error": self.code.value, "detail": self.message}


class ValidationError(DomainError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = ErrorCode.INVALID_REQUEST


class AuthorizationError(DomainError):
    """Role mismatch, owner self-join, non-owner check-in."""

    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.UNAUTHORIZED


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = ErrorCode.EVENT_NOT_FOUND


class CapacityError(DomainError):
    """The event cannot hold the requested number of tickets."""

    status_code = status.HTTP_409_CONFLICT
    default_code = ErrorCode.CAPACITY_EXCEEDED


class PaymentError(DomainError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_code = ErrorCode.PAYMENT_REQUIRED


class ConflictError(DomainError):
    """A concurrent update won the race, or the record already exists."""

    status_code = status.HTTP_409_CONFLICT
    default_code = ErrorCode.CONFLICT


class AlreadyCheckedInError(ConflictError):
    """A ticket was scanned after it had already been consumed."""

    default_code = ErrorCode.ALREADY_CHECKED_IN

    def __init__(self, ticket_id: str) -> None:
        super().__init__("Ticket has already been checked in")
        self.ticket_id = ticket_id
