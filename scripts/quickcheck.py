from __future__ import annotations

from datetime import date, time
from pathlib import Path
import tempfile
import traceback

from seat_reservation import (
    ReservationEventLog,
    ReservationFilters,
    ReservationRequest,
    ReservationService,
    ReservationStore,
    SlotConflict,
)
from seat_reservation.seed import seed_demo_reservations, seed_reference_data


def main() -> int:
    print("[INFO] Seat Reservation Quick Check")

    with tempfile.TemporaryDirectory() as temp_dir:
        database_path = Path(temp_dir) / "quickcheck.db"
        with ReservationStore.open(f"sqlite:///{database_path}") as store:
            store.create_schema()
            users, seats = seed_reference_data(store)
            print(f"[OK] Reference data: {users} users, {seats} seats")

            seeded = seed_demo_reservations(store, start_date=date(2025, 8, 1), days=30)
            print(f"[OK] Demo reservations generated: {len(seeded)} records")

            service = ReservationService(store, ReservationEventLog(Path(temp_dir) / "data"))
            day = date(2025, 7, 15)

            first = service.create(ReservationRequest(1, 10, day, time(14, 0), time(15, 0)))
            print(f"[OK] Scenario A: reservation {first.id} {first.status} 14:00-15:00")

            try:
                service.create(ReservationRequest(1, 10, day, time(14, 30), time(15, 30)))
                print("[ERROR] Scenario B: overlapping reservation was accepted")
                return 1
            except SlotConflict:
                print("[OK] Scenario B: 14:30-15:30 rejected with SlotConflict")

            adjacent = service.create(ReservationRequest(1, 10, day, time(15, 0), time(16, 0)))
            print(f"[OK] Scenario C: adjacent reservation {adjacent.id} accepted")

            moved = service.rebook(first.id, ReservationRequest(1, 10, day, time(16, 0), time(17, 0)))
            print(f"[OK] Scenario D: reservation {first.id} rebooked as {moved.id} 16:00-17:00")

            active = service.list_reservations(ReservationFilters(seat_id=10, status="reserved"), order=True)
            for row in active:
                print(f"[OK] Active: {row.seat_name} {row.reserved_date} {row.start_time:%H:%M}-{row.end_time:%H:%M}")

    print("[DONE] Quick check completed successfully.")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except Exception:
        print("[ERROR] Quick check failed.")
        traceback.print_exc()
        raise SystemExit(1)
