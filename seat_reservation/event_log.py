from __future__ import annotations

import shutil
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import ReservationStorageError

EVENT_LOG_FILENAME = "reservation_events.yaml"


class ReservationEventLog:
    """Append-only YAML audit trail of committed reservation changes."""

    def __init__(self, base_dir: str | Path = "data") -> None:
        self.base_dir = Path(base_dir)
        self.log_file = self.base_dir / EVENT_LOG_FILENAME
        self._lock = threading.Lock()
        self._ensure_file()

    def _ensure_file(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        if not self.log_file.exists():
            self.log_file.write_text("[]\n", encoding="utf-8")

    def record(self, event_type: str, payload: dict[str, Any], event_time: datetime | None = None) -> None:
        timestamp = (event_time or datetime.now()).isoformat(timespec="seconds")
        with self._lock:
            events = self._read_yaml_list()
            events.append({"event_time": timestamp, "event_type": event_type, "payload": payload})
            self._write_yaml_list(events)

    def read_events(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._read_yaml_list()

    def _read_yaml_list(self) -> list[dict[str, Any]]:
        try:
            payload = yaml.safe_load(self.log_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            self.log_file.write_text("[]\n", encoding="utf-8")
            return []
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as error:
            return self._recover_corrupted_yaml(error)

        if payload is None:
            return []
        if not isinstance(payload, list):
            return self._recover_corrupted_yaml(ValueError("top-level YAML is not a list"))

        return [row for row in payload if isinstance(row, dict)]

    def _write_yaml_list(self, rows: list[dict[str, Any]]) -> None:
        temp_path = self.log_file.with_suffix(self.log_file.suffix + ".tmp")
        try:
            temp_path.write_text(yaml.safe_dump(rows, allow_unicode=True, sort_keys=False), encoding="utf-8")
            temp_path.replace(self.log_file)
        except OSError as error:
            raise ReservationStorageError(f"Failed to write YAML file: {self.log_file}") from error
        finally:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)

    def _recover_corrupted_yaml(self, error: Exception) -> list[dict[str, Any]]:
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        backup_path = self.log_file.with_name(f"{self.log_file.stem}.corrupt.{timestamp}{self.log_file.suffix}")
        try:
            if self.log_file.exists():
                shutil.copy2(self.log_file, backup_path)
        except OSError as copy_error:
            raise ReservationStorageError(f"Failed to back up corrupted YAML file: {self.log_file}") from copy_error

        recovered = [
            {
                "event_time": datetime.now().isoformat(timespec="seconds"),
                "event_type": "YAML_RECOVERED",
                "payload": {
                    "file": self.log_file.name,
                    "backup": backup_path.name,
                    "reason": str(error),
                },
            }
        ]
        self._write_yaml_list(recovered)
        return recovered
