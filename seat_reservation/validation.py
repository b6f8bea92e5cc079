from __future__ import annotations

import re
from datetime import date
from typing import Any, Mapping

from .errors import ValidationError
from .intervals import is_wall_time, parse_wall_time
from .queries import ReservationFilters
from .schema import RESERVATION_STATUSES
from .service import ReservationRequest

# Ids live in INTEGER columns.
MAX_ID = 2**31 - 1

_ISO_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def parse_reservation_payload(payload: Any) -> ReservationRequest:
    """Build a ReservationRequest from a JSON body using the camelCase wire names."""
    if not isinstance(payload, Mapping):
        raise ValidationError()

    user_id = payload.get("userId")
    seat_id = payload.get("seatId")
    reserved_date = payload.get("reservedDate")
    start_time = payload.get("startTime")
    end_time = payload.get("endTime")

    if (
        not _is_id(user_id)
        or not _is_id(seat_id)
        or not isinstance(reserved_date, str)
        or not isinstance(start_time, str)
        or not isinstance(end_time, str)
        or not is_wall_time(start_time)
        or not is_wall_time(end_time)
    ):
        raise ValidationError()

    parsed_date = _parse_iso_date(reserved_date)
    if parsed_date is None:
        raise ValidationError()

    parsed_start = parse_wall_time(start_time)
    parsed_end = parse_wall_time(end_time)
    if parsed_start >= parsed_end:
        raise ValidationError("startTime must be earlier than endTime")

    return ReservationRequest(
        user_id=user_id,
        seat_id=seat_id,
        reserved_date=parsed_date,
        start_time=parsed_start,
        end_time=parsed_end,
    )


def parse_reservation_id(raw: Any) -> int:
    if _is_int(raw):
        value = raw
    elif isinstance(raw, str) and raw.strip().isdecimal():
        value = int(raw.strip())
    else:
        raise ValidationError("Reservation ID required")

    if not 0 < value <= MAX_ID:
        raise ValidationError("Reservation ID required")
    return value


def parse_list_query(args: Mapping[str, str]) -> tuple[ReservationFilters, bool]:
    status = args.get("status") or None
    if status is not None and status not in RESERVATION_STATUSES:
        raise ValidationError("status must be 'reserved' or 'canceled'")

    filters = ReservationFilters(
        user_id=_optional_positive_int(args, "userId"),
        from_date=_optional_date(args, "fromDate"),
        to_date=_optional_date(args, "toDate"),
        seat_id=_optional_positive_int(args, "seatId"),
        status=status,
    )
    return filters, args.get("order") == "true"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_id(value: Any) -> bool:
    return _is_int(value) and 0 < value <= MAX_ID


def _parse_iso_date(value: str) -> date | None:
    if not _ISO_DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _optional_positive_int(args: Mapping[str, str], name: str) -> int | None:
    raw = args.get(name)
    if raw is None or raw == "":
        return None
    if not raw.strip().isdecimal() or not 0 < int(raw) <= MAX_ID:
        raise ValidationError(f"{name} must be a positive integer")
    return int(raw)


def _optional_date(args: Mapping[str, str], name: str) -> date | None:
    raw = args.get(name)
    if raw is None or raw == "":
        return None
    parsed = _parse_iso_date(raw)
    if parsed is None:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date")
    return parsed
