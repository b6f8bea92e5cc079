from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///data/seat_reservations.db"


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    event_log_dir: str | None = "data"
    host: str = "127.0.0.1"
    port: int = 5000
    seed_demo_data: bool = False

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> Settings:
        """Read settings from the environment, loading ``.env`` first when present.

        Variables already set in the process environment win over the file.
        An empty ``RESERVATION_EVENT_LOG_DIR`` turns the audit log off.
        """
        load_dotenv(env_file)

        event_log_dir = os.environ.get("RESERVATION_EVENT_LOG_DIR", "data").strip()
        return cls(
            database_url=os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL),
            event_log_dir=event_log_dir or None,
            host=os.environ.get("HOST", "127.0.0.1"),
            port=int(os.environ.get("PORT", "5000")),
            seed_demo_data=_as_bool(os.environ.get("SEED_DEMO_DATA", "")),
        )


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}
