from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Engine,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Time,
    func,
)

STATUS_RESERVED = "reserved"
STATUS_CANCELED = "canceled"
RESERVATION_STATUSES = (STATUS_RESERVED, STATUS_CANCELED)
USER_ROLES = ("admin", "back_office", "user")

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("last_name", String(50), nullable=False),
    Column("first_name", String(50), nullable=False),
    Column("email", String(100), nullable=False, unique=True),
    Column("role", String(50), nullable=False),
    CheckConstraint("role IN ('admin', 'back_office', 'user')", name="ck_users_role"),
)

seats = Table(
    "seats",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False),
)

reservations = Table(
    "reservations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("seat_id", Integer, ForeignKey("seats.id"), nullable=False),
    Column("reserved_date", Date, nullable=False),
    Column("start_time", Time, nullable=False),
    Column("end_time", Time, nullable=False),
    Column("status", String(20), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    CheckConstraint("status IN ('reserved', 'canceled')", name="ck_reservations_status"),
    CheckConstraint("start_time < end_time", name="ck_reservations_interval"),
    Index("ix_reservations_seat_day_status", "seat_id", "reserved_date", "status"),
)


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine, checkfirst=True)


def drop_schema(engine: Engine) -> None:
    metadata.drop_all(engine, checkfirst=True)
