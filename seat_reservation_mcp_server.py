from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from seat_reservation import ReservationEventLog, ReservationService
from seat_reservation.config import Settings
from seat_reservation.validation import parse_list_query, parse_reservation_id, parse_reservation_payload
from seat_reservation.web_app import open_store


def build_server(service: ReservationService) -> FastMCP:
    mcp = FastMCP(
        "Seat Reservation MCP Server",
        instructions="List, create, cancel and rebook seat reservations.",
        json_response=True,
    )

    @mcp.tool()
    def list_reservations(
        user_id: int | None = None,
        seat_id: int | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
        status: str | None = None,
        order: bool = False,
    ) -> list[dict[str, Any]]:
        """Return reservations matching every given filter. Dates are YYYY-MM-DD."""
        args = {
            "userId": user_id,
            "seatId": seat_id,
            "fromDate": from_date,
            "toDate": to_date,
            "status": status,
        }
        filters, _ = parse_list_query({key: str(value) for key, value in args.items() if value is not None})
        return [row.to_dict() for row in service.list_reservations(filters, order=order)]

    @mcp.tool()
    def create_reservation(
        user_id: int,
        seat_id: int,
        reserved_date: str,
        start_time: str,
        end_time: str,
    ) -> dict[str, Any]:
        """Reserve a seat. Times are HH:mm and the end is exclusive."""
        request = parse_reservation_payload(
            {
                "userId": user_id,
                "seatId": seat_id,
                "reservedDate": reserved_date,
                "startTime": start_time,
                "endTime": end_time,
            }
        )
        return service.create(request).to_dict()

    @mcp.tool()
    def cancel_reservation(reservation_id: int) -> dict[str, Any]:
        """Cancel a reserved reservation."""
        service.cancel(parse_reservation_id(reservation_id))
        return {"ok": True, "reservation_id": reservation_id}

    @mcp.tool()
    def rebook_reservation(
        reservation_id: int,
        user_id: int,
        seat_id: int,
        reserved_date: str,
        start_time: str,
        end_time: str,
    ) -> dict[str, Any]:
        """Replace a reservation with a new one in a single transaction."""
        request = parse_reservation_payload(
            {
                "userId": user_id,
                "seatId": seat_id,
                "reservedDate": reserved_date,
                "startTime": start_time,
                "endTime": end_time,
            }
        )
        return service.rebook(parse_reservation_id(reservation_id), request).to_dict()

    return mcp


def main() -> None:
    settings = Settings.from_env()
    store = open_store(settings)
    event_log = ReservationEventLog(settings.event_log_dir) if settings.event_log_dir else None
    try:
        build_server(ReservationService(store, event_log)).run()
    finally:
        store.close()


if __name__ == "__main__":
    main()
