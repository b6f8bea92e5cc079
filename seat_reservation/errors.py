"""Failure taxonomy for the reservation core.

Each business failure maps to exactly one HTTP status at the route boundary.
"""

from __future__ import annotations


class ReservationError(Exception):
    """Base class for failures surfaced to callers of the reservation core."""

    code = "RESERVATION_ERROR"
    status_code = 500
    default_message = "Reservation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, object]:
        return {"ok": False, "error": self.code, "message": self.message}


class ValidationError(ReservationError):
    """Malformed or missing input, rejected before any transaction opens."""

    code = "INVALID_INPUT"
    status_code = 400
    default_message = "Missing or invalid parameters"


class UserNotFound(ReservationError):
    code = "USER_NOT_FOUND"
    status_code = 404
    default_message = "User not found"

    def __init__(self, user_id: int) -> None:
        super().__init__()
        self.user_id = user_id


class SeatNotFound(ReservationError):
    code = "SEAT_NOT_FOUND"
    status_code = 404
    default_message = "Seat not found"

    def __init__(self, seat_id: int) -> None:
        super().__init__()
        self.seat_id = seat_id


class ReservationNotFound(ReservationError):
    """Raised for ids that never existed and for reservations already canceled alike."""

    code = "RESERVATION_NOT_FOUND"
    status_code = 404
    default_message = "Reservation not found or already canceled"

    def __init__(self, reservation_id: int) -> None:
        super().__init__()
        self.reservation_id = reservation_id


class SlotConflict(ReservationError):
    code = "SLOT_CONFLICT"
    status_code = 409
    default_message = "Seat already reserved during that time"


class InternalFailure(ReservationError):
    code = "INTERNAL_FAILURE"
    status_code = 500
    default_message = "Reservation failed"


class ReservationStorageError(RuntimeError):
    pass
