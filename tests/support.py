import tempfile
import unittest
from pathlib import Path

from seat_reservation import ReservationStore
from seat_reservation.seed import seed_reference_data


class SeededStoreTestCase(unittest.TestCase):
    """Fresh SQLite file per test with users 1-5 and seats 1-42."""

    def setUp(self) -> None:
        temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(temp_dir.cleanup)
        self.temp_path = Path(temp_dir.name)

        self.store = ReservationStore.open(f"sqlite:///{self.temp_path / 'reservations.db'}")
        self.addCleanup(self.store.close)
        self.store.create_schema()
        seed_reference_data(self.store)
