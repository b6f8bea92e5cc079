from .errors import (
    InternalFailure,
    ReservationError,
    ReservationNotFound,
    ReservationStorageError,
    SeatNotFound,
    SlotConflict,
    UserNotFound,
    ValidationError,
)
from .event_log import ReservationEventLog
from .intervals import TimeInterval, can_reserve, has_time_overlap
from .queries import ReservationFilters, ReservationRow, list_reservations
from .schema import STATUS_CANCELED, STATUS_RESERVED
from .service import ReservationRequest, ReservationService
from .store import Reservation, ReservationStore, StoreTransaction

__all__ = [
    "InternalFailure",
    "ReservationError",
    "ReservationNotFound",
    "ReservationStorageError",
    "SeatNotFound",
    "SlotConflict",
    "UserNotFound",
    "ValidationError",
    "ReservationEventLog",
    "TimeInterval",
    "can_reserve",
    "has_time_overlap",
    "ReservationFilters",
    "ReservationRow",
    "list_reservations",
    "STATUS_CANCELED",
    "STATUS_RESERVED",
    "ReservationRequest",
    "ReservationService",
    "Reservation",
    "ReservationStore",
    "StoreTransaction",
]
