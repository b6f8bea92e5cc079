from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, time, timedelta

from sqlalchemy import func, select

from .intervals import TimeInterval, can_reserve
from .schema import seats, users
from .store import Reservation, ReservationStore

DEMO_USERS = [
    {"last_name": "田中", "first_name": "太郎", "email": "tanaka@example.com", "role": "admin"},
    {"last_name": "佐藤", "first_name": "花子", "email": "sato@example.com", "role": "user"},
    {"last_name": "鈴木", "first_name": "一郎", "email": "suzuki@example.com", "role": "user"},
    {"last_name": "高橋", "first_name": "美咲", "email": "takahashi@example.com", "role": "back_office"},
    {"last_name": "伊藤", "first_name": "健太", "email": "ito@example.com", "role": "user"},
]
SEAT_ROWS = "ABCDEF"
SEATS_PER_ROW = 7
FIRST_SLOT_HOUR = 9
LAST_SLOT_HOUR = 17


@dataclass(frozen=True)
class DemoReservation:
    user_id: int
    seat_id: int
    reserved_date: date
    start_time: time
    end_time: time


def seat_names() -> list[str]:
    return [f"{row}-{column}" for row in SEAT_ROWS for column in range(1, SEATS_PER_ROW + 1)]


def seed_reference_data(store: ReservationStore) -> tuple[int, int]:
    """Insert the demo users and the 42 seats A-1..F-7 into empty tables.

    Returns how many users and seats were inserted.
    """
    with store.engine.begin() as connection:
        user_count = connection.execute(select(func.count()).select_from(users)).scalar_one()
        seat_count = connection.execute(select(func.count()).select_from(seats)).scalar_one()

        inserted_users = 0
        if user_count == 0:
            connection.execute(users.insert(), DEMO_USERS)
            inserted_users = len(DEMO_USERS)

        inserted_seats = 0
        if seat_count == 0:
            names = seat_names()
            connection.execute(seats.insert(), [{"name": name} for name in names])
            inserted_seats = len(names)

    return inserted_users, inserted_seats


def generate_demo_reservations(
    start_date: date,
    days: int = 30,
    user_count: int = len(DEMO_USERS),
    seat_count: int = SEATS_PER_ROW * len(SEAT_ROWS),
    rng_seed: str | None = None,
) -> list[DemoReservation]:
    """One or two one-hour reservations per day between 09:00 and 18:00, never overlapping per seat."""
    if days <= 0:
        raise ValueError("days must be greater than zero")
    if user_count <= 0 or seat_count <= 0:
        raise ValueError("user_count and seat_count must be greater than zero")

    rng = random.Random(rng_seed or f"demo:{start_date.isoformat()}:{days}")
    generated: list[DemoReservation] = []
    booked: dict[tuple[int, date], list[TimeInterval]] = {}

    for offset in range(days):
        day = start_date + timedelta(days=offset)
        for _ in range(rng.choice([1, 2])):
            user_id = rng.randint(1, user_count)
            seat_id = rng.randint(1, seat_count)
            start_hour = rng.randint(FIRST_SLOT_HOUR, LAST_SLOT_HOUR)
            start = time(start_hour, 0)
            end = time(start_hour + 1, 0)

            existing = booked.setdefault((seat_id, day), [])
            if not can_reserve(start, end, existing):
                continue

            existing.append(TimeInterval(start, end))
            generated.append(DemoReservation(user_id, seat_id, day, start, end))

    return generated


def seed_demo_reservations(
    store: ReservationStore,
    start_date: date,
    days: int = 30,
    rng_seed: str | None = None,
) -> list[Reservation]:
    """Write generated demo reservations, skipping any that would overlap rows already stored."""
    created: list[Reservation] = []
    for demo in generate_demo_reservations(start_date, days=days, rng_seed=rng_seed):
        with store.begin() as transaction:
            if transaction.find_overlapping(demo.seat_id, demo.reserved_date, demo.start_time, demo.end_time):
                transaction.rollback()
                continue
            created.append(
                transaction.insert(
                    demo.user_id,
                    demo.seat_id,
                    demo.reserved_date,
                    demo.start_time,
                    demo.end_time,
                )
            )
            transaction.commit()
    return created
