"""Read-only reservation listing.

Runs on its own connection outside any orchestrator transaction and always
sees the latest committed rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Any

from sqlalchemy import select

from .intervals import format_date, format_wall_time
from .schema import reservations, seats, users
from .store import ReservationStore


@dataclass(frozen=True)
class ReservationFilters:
    user_id: int | None = None
    from_date: date | None = None
    to_date: date | None = None
    seat_id: int | None = None
    status: str | None = None


@dataclass(frozen=True)
class ReservationRow:
    reservation_id: int
    user_id: int
    first_name: str
    last_name: str
    seat_id: int
    seat_name: str
    reserved_date: date
    start_time: time
    end_time: time
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "reservation_id": self.reservation_id,
            "user_id": self.user_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "seat_id": self.seat_id,
            "seat_name": self.seat_name,
            "reserved_date": format_date(self.reserved_date),
            "start_time": format_wall_time(self.start_time),
            "end_time": format_wall_time(self.end_time),
            "status": self.status,
        }


def list_reservations(
    store: ReservationStore,
    filters: ReservationFilters | None = None,
    order: bool = False,
) -> list[ReservationRow]:
    """Return reservations joined with user and seat names.

    Every supplied filter narrows the result (AND). ``from_date`` and
    ``to_date`` are inclusive. With ``order`` set, rows come back newest
    first by ``(reserved_date, start_time)``; otherwise the order is
    whatever the database returns.
    """
    filters = filters or ReservationFilters()

    query = (
        select(
            reservations.c.id,
            reservations.c.user_id,
            users.c.first_name,
            users.c.last_name,
            reservations.c.seat_id,
            seats.c.name.label("seat_name"),
            reservations.c.reserved_date,
            reservations.c.start_time,
            reservations.c.end_time,
            reservations.c.status,
        )
        .join(users, reservations.c.user_id == users.c.id)
        .join(seats, reservations.c.seat_id == seats.c.id)
    )

    if filters.user_id is not None:
        query = query.where(reservations.c.user_id == filters.user_id)
    if filters.from_date is not None:
        query = query.where(reservations.c.reserved_date >= filters.from_date)
    if filters.to_date is not None:
        query = query.where(reservations.c.reserved_date <= filters.to_date)
    if filters.seat_id is not None:
        query = query.where(reservations.c.seat_id == filters.seat_id)
    if filters.status is not None:
        query = query.where(reservations.c.status == filters.status)

    if order:
        query = query.order_by(reservations.c.reserved_date.desc(), reservations.c.start_time.desc())

    with store.read() as connection:
        rows = connection.execute(query).all()

    return [
        ReservationRow(
            reservation_id=int(row.id),
            user_id=int(row.user_id),
            first_name=str(row.first_name),
            last_name=str(row.last_name),
            seat_id=int(row.seat_id),
            seat_name=str(row.seat_name),
            reserved_date=row.reserved_date,
            start_time=row.start_time,
            end_time=row.end_time,
            status=str(row.status),
        )
        for row in rows
    ]
