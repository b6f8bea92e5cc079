"""Durable reservation table with lifecycle state.

Locking strategy for the overlap check: ``find_overlapping`` takes a
seat/date key lock and then reads every ``reserved`` row of that seat/date
with ``SELECT ... FOR UPDATE``. Both are held until the enclosing
transaction commits or rolls back, so a concurrent create or rebook on the
same seat/date cannot pass its own check before this one finishes.

- PostgreSQL: the key lock is ``pg_advisory_xact_lock(seat_id, day)``, so
  disjoint seats or dates never wait on each other.
- SQLite: write transactions open with ``BEGIN IMMEDIATE``, which
  serializes all writers on the database file. Reads use a deferred
  ``BEGIN``.
- Other dialects: row-level ``FOR UPDATE`` only.

A rebook touches two seat/date keys, the one it leaves and the one it
moves to. ``lock_for_rebook`` takes both key locks in sorted order before
any row lock, so two rebooks crossing between the same seats queue instead
of deadlocking.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterable, Iterator

from sqlalchemy import Connection, Engine, create_engine, event, select, text, update
from sqlalchemy.engine import make_url

from .intervals import TimeInterval, can_reserve, format_date, format_wall_time
from .schema import STATUS_CANCELED, STATUS_RESERVED, create_schema, reservations, seats, users

READ_ONLY_OPTION = "seat_reservation_read_only"

_SEAT_DAY_LOCK_SQL = text(
    "SELECT pg_advisory_xact_lock(CAST(:seat_key AS integer), CAST(:day_key AS integer))"
)


@dataclass(frozen=True)
class Reservation:
    id: int
    user_id: int
    seat_id: int
    reserved_date: date
    start_time: time
    end_time: time
    status: str
    created_at: datetime

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "seat_id": self.seat_id,
            "reserved_date": format_date(self.reserved_date),
            "start_time": format_wall_time(self.start_time),
            "end_time": format_wall_time(self.end_time),
            "status": self.status,
            "created_at": self.created_at.isoformat(timespec="seconds"),
        }

    @staticmethod
    def from_row(row: Any) -> "Reservation":
        return Reservation(
            id=int(row.id),
            user_id=int(row.user_id),
            seat_id=int(row.seat_id),
            reserved_date=row.reserved_date,
            start_time=row.start_time,
            end_time=row.end_time,
            status=str(row.status),
            created_at=row.created_at,
        )


class StoreTransaction:
    """One connection and one open transaction, owned by a single orchestrator call."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._transaction = connection.begin()

    def __enter__(self) -> StoreTransaction:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_active(self) -> bool:
        return self._transaction.is_active

    def reservation_exists(self, reservation_id: int) -> bool:
        # Row lock so a concurrent cancel of the same id re-reads the status after we commit.
        query = (
            select(reservations.c.id)
            .where(reservations.c.id == reservation_id, reservations.c.status == STATUS_RESERVED)
            .with_for_update()
        )
        return self._connection.execute(query).first() is not None

    def lock_for_rebook(self, reservation_id: int, seat_id: int, reserved_date: date) -> None:
        if not self._uses_advisory_locks():
            return
        keys = [(seat_id, reserved_date)]
        current = self._connection.execute(
            select(reservations.c.seat_id, reservations.c.reserved_date).where(reservations.c.id == reservation_id)
        ).first()
        if current is not None:
            keys.append((current.seat_id, current.reserved_date))
        self._lock_seat_days(keys)

    def user_exists(self, user_id: int) -> bool:
        return self._connection.execute(select(users.c.id).where(users.c.id == user_id)).first() is not None

    def seat_exists(self, seat_id: int) -> bool:
        return self._connection.execute(select(seats.c.id).where(seats.c.id == seat_id)).first() is not None

    def find_overlapping(
        self,
        seat_id: int,
        reserved_date: date,
        start_time: time,
        end_time: time,
        exclude_id: int | None = None,
    ) -> bool:
        self._lock_seat_days([(seat_id, reserved_date)])

        query = (
            select(reservations.c.id, reservations.c.start_time, reservations.c.end_time)
            .where(
                reservations.c.seat_id == seat_id,
                reservations.c.reserved_date == reserved_date,
                reservations.c.status == STATUS_RESERVED,
            )
            .with_for_update()
        )
        if exclude_id is not None:
            query = query.where(reservations.c.id != exclude_id)

        booked = [TimeInterval(row.start_time, row.end_time) for row in self._connection.execute(query)]
        return not can_reserve(start_time, end_time, booked)

    def insert(
        self,
        user_id: int,
        seat_id: int,
        reserved_date: date,
        start_time: time,
        end_time: time,
    ) -> Reservation:
        result = self._connection.execute(
            reservations.insert().values(
                user_id=user_id,
                seat_id=seat_id,
                reserved_date=reserved_date,
                start_time=start_time,
                end_time=end_time,
                status=STATUS_RESERVED,
            )
        )
        reservation_id = result.inserted_primary_key[0]
        row = self._connection.execute(select(reservations).where(reservations.c.id == reservation_id)).one()
        return Reservation.from_row(row)

    def cancel(self, reservation_id: int) -> None:
        self._connection.execute(
            update(reservations)
            .where(reservations.c.id == reservation_id, reservations.c.status == STATUS_RESERVED)
            .values(status=STATUS_CANCELED)
        )

    def commit(self) -> None:
        self._transaction.commit()

    def rollback(self) -> None:
        if self._transaction.is_active:
            self._transaction.rollback()

    def close(self) -> None:
        self._connection.close()

    def _uses_advisory_locks(self) -> bool:
        return self._connection.dialect.name == "postgresql"

    def _lock_seat_days(self, keys: Iterable[tuple[int, date]]) -> None:
        if not self._uses_advisory_locks():
            return
        for seat_id, day in sorted({(seat_id, day.toordinal()) for seat_id, day in keys}):
            self._connection.execute(_SEAT_DAY_LOCK_SQL, {"seat_key": seat_id, "day_key": day})


class ReservationStore:
    """Explicitly opened handle over the reservation database.

    Open it once at startup and ``close()`` it at shutdown.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        if engine.dialect.name == "sqlite":
            _configure_sqlite(engine)

    @classmethod
    def open(cls, database_url: str, **engine_options: Any) -> ReservationStore:
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite":
            connect_args = engine_options.setdefault("connect_args", {})
            connect_args.setdefault("check_same_thread", False)
            connect_args.setdefault("timeout", 30)
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        else:
            engine_options.setdefault("pool_pre_ping", True)
        return cls(create_engine(url, **engine_options))

    def __enter__(self) -> ReservationStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_schema(self) -> None:
        create_schema(self._engine)

    def begin(self) -> StoreTransaction:
        connection = self._engine.connect()
        try:
            return StoreTransaction(connection)
        except Exception:
            connection.close()
            raise

    @contextmanager
    def read(self) -> Iterator[Connection]:
        with self._engine.connect() as connection:
            yield connection.execution_options(**{READ_ONLY_OPTION: True})

    def get_reservation(self, reservation_id: int) -> Reservation | None:
        with self.read() as connection:
            row = connection.execute(select(reservations).where(reservations.c.id == reservation_id)).first()
        return Reservation.from_row(row) if row is not None else None

    def close(self) -> None:
        self._engine.dispose()


def _configure_sqlite(engine: Engine) -> None:
    if not event.contains(engine, "connect", _sqlite_on_connect):
        event.listen(engine, "connect", _sqlite_on_connect)
    if not event.contains(engine, "begin", _sqlite_on_begin):
        event.listen(engine, "begin", _sqlite_on_begin)


def _sqlite_on_connect(dbapi_connection: Any, connection_record: Any) -> None:
    # Hand BEGIN over to _sqlite_on_begin instead of pysqlite's implicit transactions.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def _sqlite_on_begin(connection: Connection) -> None:
    if connection.get_execution_options().get(READ_ONLY_OPTION):
        connection.exec_driver_sql("BEGIN")
    else:
        connection.exec_driver_sql("BEGIN IMMEDIATE")
