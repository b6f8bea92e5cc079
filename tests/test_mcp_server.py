import asyncio
import json
import unittest
from typing import Any

from mcp.server.fastmcp.exceptions import ToolError

from seat_reservation import STATUS_CANCELED, STATUS_RESERVED, ReservationService
from seat_reservation_mcp_server import build_server
from support import SeededStoreTestCase

BOOKING = {
    "user_id": 1,
    "seat_id": 10,
    "reserved_date": "2025-07-15",
    "start_time": "14:00",
    "end_time": "15:00",
}


class TestMcpServer(SeededStoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.server = build_server(ReservationService(self.store))

    def _call(self, name: str, arguments: dict[str, Any]) -> list[Any]:
        result = asyncio.run(self.server.call_tool(name, arguments))
        # Newer releases return (content, structured_content).
        if isinstance(result, tuple):
            result = result[0]
        decoded: list[Any] = []
        for block in result:
            value = json.loads(block.text)
            # Lists arrive either item by item or as one JSON array.
            decoded.extend(value if isinstance(value, list) else [value])
        return decoded

    def test_exposes_reservation_tools(self) -> None:
        tools = asyncio.run(self.server.list_tools())

        self.assertEqual(
            {tool.name for tool in tools},
            {"list_reservations", "create_reservation", "cancel_reservation", "rebook_reservation"},
        )

    def test_create_maps_arguments_onto_a_reservation(self) -> None:
        [created] = self._call("create_reservation", BOOKING)

        self.assertEqual(created["user_id"], 1)
        self.assertEqual(created["seat_id"], 10)
        self.assertEqual(created["reserved_date"], "2025-07-15")
        self.assertEqual(created["start_time"], "14:00")
        self.assertEqual(created["end_time"], "15:00")
        self.assertEqual(created["status"], STATUS_RESERVED)

    def test_slot_conflict_surfaces_as_tool_error(self) -> None:
        self._call("create_reservation", BOOKING)

        with self.assertRaises(ToolError) as caught:
            self._call("create_reservation", {**BOOKING, "start_time": "14:30", "end_time": "15:30"})

        self.assertIn("SLOT_CONFLICT", str(caught.exception))

    def test_invalid_arguments_surface_as_tool_error(self) -> None:
        with self.assertRaises(ToolError) as caught:
            self._call("create_reservation", {**BOOKING, "reserved_date": "20250715"})
        self.assertIn("INVALID_INPUT", str(caught.exception))

        with self.assertRaises(ToolError) as caught:
            self._call("list_reservations", {"status": "pending"})
        self.assertIn("INVALID_INPUT", str(caught.exception))

    def test_list_applies_integer_and_date_filters(self) -> None:
        self._call("create_reservation", BOOKING)
        self._call("create_reservation", {**BOOKING, "seat_id": 11, "user_id": 2})
        self._call("create_reservation", {**BOOKING, "reserved_date": "2025-07-16"})

        rows = self._call(
            "list_reservations",
            {"seat_id": 10, "from_date": "2025-07-15", "to_date": "2025-07-15", "order": True},
        )

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["seat_name"], "B-3")
        self.assertEqual(rows[0]["reserved_date"], "2025-07-15")

        rows = self._call("list_reservations", {"user_id": 2})
        self.assertEqual([row["seat_id"] for row in rows], [11])

    def test_cancel_returns_ok_and_reservation_id(self) -> None:
        [created] = self._call("create_reservation", BOOKING)

        [result] = self._call("cancel_reservation", {"reservation_id": created["id"]})

        self.assertEqual(result, {"ok": True, "reservation_id": created["id"]})
        self.assertEqual(self.store.get_reservation(created["id"]).status, STATUS_CANCELED)

        with self.assertRaises(ToolError) as caught:
            self._call("cancel_reservation", {"reservation_id": created["id"]})
        self.assertIn("RESERVATION_NOT_FOUND", str(caught.exception))

    def test_rebook_replaces_the_reservation(self) -> None:
        [created] = self._call("create_reservation", BOOKING)

        [moved] = self._call(
            "rebook_reservation",
            {**BOOKING, "reservation_id": created["id"], "start_time": "16:00", "end_time": "17:00"},
        )

        self.assertNotEqual(moved["id"], created["id"])
        self.assertEqual(moved["start_time"], "16:00")
        self.assertEqual(self.store.get_reservation(created["id"]).status, STATUS_CANCELED)


if __name__ == "__main__":
    unittest.main()
