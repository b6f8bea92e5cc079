import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from seat_reservation import ReservationEventLog


class TestReservationEventLog(unittest.TestCase):
    def test_records_events_in_order(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            log = ReservationEventLog(Path(temp_dir) / "data")
            log.record("RESERVATION_CREATED", {"reservation_id": 1}, event_time=datetime(2025, 7, 15, 9, 0))
            log.record("RESERVATION_CANCELED", {"reservation_id": 1}, event_time=datetime(2025, 7, 15, 9, 5))

            events = log.read_events()

            self.assertEqual([event["event_type"] for event in events], ["RESERVATION_CREATED", "RESERVATION_CANCELED"])
            self.assertEqual(events[0]["event_time"], "2025-07-15T09:00:00")
            self.assertEqual(events[1]["payload"], {"reservation_id": 1})

    def test_survives_reopening(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            base_dir = Path(temp_dir) / "data"
            ReservationEventLog(base_dir).record("RESERVATION_CREATED", {"reservation_id": 7})

            events = ReservationEventLog(base_dir).read_events()

            self.assertEqual(len(events), 1)
            self.assertEqual(events[0]["payload"]["reservation_id"], 7)

    def test_recovers_corrupted_file_with_backup(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            base_dir = Path(temp_dir) / "data"
            log = ReservationEventLog(base_dir)
            log.log_file.write_text("- event_type: [unterminated\n", encoding="utf-8")

            events = log.read_events()

            self.assertEqual(len(events), 1)
            self.assertEqual(events[0]["event_type"], "YAML_RECOVERED")
            backups = list(base_dir.glob("reservation_events.corrupt.*.yaml"))
            self.assertEqual(len(backups), 1)
            self.assertIn("unterminated", backups[0].read_text(encoding="utf-8"))

            log.record("RESERVATION_CREATED", {"reservation_id": 2})
            self.assertEqual(
                [event["event_type"] for event in log.read_events()],
                ["YAML_RECOVERED", "RESERVATION_CREATED"],
            )

    def test_non_list_document_is_treated_as_corrupted(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            log = ReservationEventLog(Path(temp_dir) / "data")
            log.log_file.write_text("event_type: RESERVATION_CREATED\n", encoding="utf-8")

            events = log.read_events()

            self.assertEqual(events[0]["event_type"], "YAML_RECOVERED")
            self.assertIn("not a list", events[0]["payload"]["reason"])


if __name__ == "__main__":
    unittest.main()
