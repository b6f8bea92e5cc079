from __future__ import annotations

import logging
from datetime import date
from typing import Any

from flask import Flask, jsonify, request

from .config import Settings
from .errors import ReservationError
from .event_log import ReservationEventLog
from .seed import seed_demo_reservations, seed_reference_data
from .service import ReservationService
from .store import ReservationStore
from .validation import parse_list_query, parse_reservation_id, parse_reservation_payload

logger = logging.getLogger(__name__)


def create_app(store: ReservationStore, event_log: ReservationEventLog | None = None) -> Flask:
    """Build the HTTP layer around an already opened store.

    The caller owns the store and closes it when the app shuts down.
    """
    app = Flask(__name__)
    service = ReservationService(store, event_log)
    app.extensions["seat_reservation"] = service

    @app.after_request
    def add_cors_headers(response: Any) -> Any:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.errorhandler(ReservationError)
    def handle_reservation_error(error: ReservationError) -> Any:
        return jsonify(error.to_dict()), error.status_code

    @app.get("/api/reservations")
    def get_reservations() -> Any:
        filters, order = parse_list_query(request.args)
        rows = service.list_reservations(filters, order=order)
        return jsonify([row.to_dict() for row in rows])

    @app.post("/api/reservations")
    def create_reservation() -> Any:
        reservation_request = parse_reservation_payload(request.get_json(silent=True))
        created = service.create(reservation_request)
        return (
            jsonify({"ok": True, "message": "Reservation created", "reservation": created.to_dict()}),
            201,
        )

    @app.put("/api/reservations/<reservation_id>")
    def rebook_reservation(reservation_id: str) -> Any:
        target_id = parse_reservation_id(reservation_id)
        reservation_request = parse_reservation_payload(request.get_json(silent=True))
        created = service.rebook(target_id, reservation_request)
        return jsonify({"ok": True, "message": "Reservation updated", "new_reservation": created.to_dict()})

    @app.delete("/api/reservations/<reservation_id>")
    def cancel_reservation(reservation_id: str) -> Any:
        target_id = parse_reservation_id(reservation_id)
        service.cancel(target_id)
        return jsonify({"ok": True, "message": "Reservation canceled"})

    return app


def open_store(settings: Settings) -> ReservationStore:
    store = ReservationStore.open(settings.database_url)
    store.create_schema()
    if settings.seed_demo_data:
        inserted_users, inserted_seats = seed_reference_data(store)
        if inserted_users or inserted_seats:
            seeded = seed_demo_reservations(store, start_date=date.today())
            logger.info("Seeded %d users, %d seats and %d reservations", inserted_users, inserted_seats, len(seeded))
    return store


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = Settings.from_env()
    store = open_store(settings)
    event_log = ReservationEventLog(settings.event_log_dir) if settings.event_log_dir else None
    try:
        app = create_app(store, event_log)
        app.run(host=settings.host, port=settings.port, debug=False, threaded=True)
    finally:
        store.close()


if __name__ == "__main__":
    main()
