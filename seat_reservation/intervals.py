from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, time
from typing import Iterable

_WALL_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass(frozen=True)
class TimeInterval:
    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError("Reservation start time must be earlier than end time.")

    def overlaps(self, other: TimeInterval) -> bool:
        return has_time_overlap(self.start, self.end, other.start, other.end)


def has_time_overlap(new_start: time, new_end: time, exist_start: time, exist_end: time) -> bool:
    """Return True when two wall-clock intervals on the same date overlap by even one minute.

    Intervals are treated as half-open ranges: [start, end)
    so touching boundaries (e.g. 10:00-11:00 and 11:00-12:00) do not overlap.
    The reservation date is never part of this comparison; callers match dates by equality first.
    """
    if new_start >= new_end:
        raise ValueError("new_start must be earlier than new_end.")
    if exist_start >= exist_end:
        raise ValueError("exist_start must be earlier than exist_end.")

    return new_start < exist_end and exist_start < new_end


def can_reserve(new_start: time, new_end: time, existing_intervals: Iterable[TimeInterval]) -> bool:
    """Return True if the requested interval does not overlap any existing interval."""
    if new_start >= new_end:
        raise ValueError("new_start must be earlier than new_end.")

    for interval in existing_intervals:
        if has_time_overlap(new_start, new_end, interval.start, interval.end):
            return False
    return True


def is_wall_time(value: str) -> bool:
    return bool(_WALL_TIME_RE.match(value))


def parse_wall_time(value: str) -> time:
    if not is_wall_time(value):
        raise ValueError(f"Expected HH:mm wall-clock time, got {value!r}")
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def format_wall_time(value: time) -> str:
    return value.strftime("%H:%M")


def format_date(value: date) -> str:
    return value.isoformat()
