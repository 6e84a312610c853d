"""Typed failures raised by the reservation lifecycle.

Every business-rule violation is a ``ReservationError`` subclass carrying a
stable code and the HTTP status the API layer answers with.
"""

from enum import Enum


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    EVENT_NOT_PUBLISHED = "EVENT_NOT_PUBLISHED"
    SOLD_OUT = "SOLD_OUT"
    DUPLICATE_ACTIVE_RESERVATION = "DUPLICATE_ACTIVE_RESERVATION"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATE = "INVALID_STATE"
    STORAGE_FAULT = "STORAGE_FAULT"


class ReservationError(Exception):
    """Base class for all reservation failures."""

    code: ErrorCode = ErrorCode.STORAGE_FAULT
    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class NotFoundError(ReservationError):
    code = ErrorCode.NOT_FOUND
    status_code = 404


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: int) -> None:
        super().__init__("Event not found")
        self.event_id = event_id


class ReservationNotFoundError(NotFoundError):
    def __init__(self, reservation_id: int) -> None:
        super().__init__("Reservation not found")
        self.reservation_id = reservation_id


class EventNotPublishedError(ReservationError):
    code = ErrorCode.EVENT_NOT_PUBLISHED
    status_code = 400

    def __init__(self, event_id: int) -> None:
        super().__init__("Event is not published")
        self.event_id = event_id


class SoldOutError(ReservationError):
    code = ErrorCode.SOLD_OUT
    status_code = 400

    def __init__(self, event_id: int) -> None:
        super().__init__("No tickets available")
        self.event_id = event_id


class DuplicateActiveReservationError(ReservationError):
    code = ErrorCode.DUPLICATE_ACTIVE_RESERVATION
    status_code = 400

    def __init__(self, event_id: int, user_id: int) -> None:
        super().__init__("You already have an active reservation for this event")
        self.event_id = event_id
        self.user_id = user_id


class InvalidTransitionError(ReservationError):
    code = ErrorCode.INVALID_TRANSITION
    status_code = 400


class AlreadyCancelledError(ReservationError):
    code = ErrorCode.ALREADY_CANCELLED
    status_code = 400

    def __init__(self, reservation_id: int) -> None:
        super().__init__("Reservation already cancelled")
        self.reservation_id = reservation_id


class ForbiddenError(ReservationError):
    # Reported as 400 like every other rule violation on the reservation routes.
    code = ErrorCode.FORBIDDEN
    status_code = 400


class InvalidStateError(ReservationError):
    code = ErrorCode.INVALID_STATE
    status_code = 400


class StorageFaultError(ReservationError):
    code = ErrorCode.STORAGE_FAULT
    status_code = 500
