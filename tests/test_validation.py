import unittest
from datetime import date, time

from seat_reservation import ReservationFilters, ValidationError
from seat_reservation.validation import parse_list_query, parse_reservation_id, parse_reservation_payload

VALID_PAYLOAD = {
    "userId": 1,
    "seatId": 10,
    "reservedDate": "2025-07-15",
    "startTime": "14:00",
    "endTime": "15:00",
}


class TestParseReservationPayload(unittest.TestCase):
    def test_valid_payload(self) -> None:
        request = parse_reservation_payload(VALID_PAYLOAD)

        self.assertEqual(request.user_id, 1)
        self.assertEqual(request.seat_id, 10)
        self.assertEqual(request.reserved_date, date(2025, 7, 15))
        self.assertEqual(request.start_time, time(14, 0))
        self.assertEqual(request.end_time, time(15, 0))
        self.assertIsNone(request.exclude_reservation_id)

    def test_rejects_missing_or_mistyped_fields(self) -> None:
        broken = [
            {key: value for key, value in VALID_PAYLOAD.items() if key != "seatId"},
            {**VALID_PAYLOAD, "userId": "1"},
            {**VALID_PAYLOAD, "userId": True},
            {**VALID_PAYLOAD, "seatId": 10.5},
            {**VALID_PAYLOAD, "reservedDate": "15/07/2025"},
            {**VALID_PAYLOAD, "reservedDate": 20250715},
            {**VALID_PAYLOAD, "reservedDate": "20250715"},
            {**VALID_PAYLOAD, "reservedDate": "2025-W29-2"},
            {**VALID_PAYLOAD, "reservedDate": "2025-02-30"},
            {**VALID_PAYLOAD, "userId": 0},
            {**VALID_PAYLOAD, "userId": 2**31},
            {**VALID_PAYLOAD, "seatId": 99999999999999999999},
            {**VALID_PAYLOAD, "startTime": "9:00"},
            {**VALID_PAYLOAD, "endTime": "24:00"},
        ]
        for payload in broken:
            with self.subTest(payload=payload):
                with self.assertRaises(ValidationError):
                    parse_reservation_payload(payload)

    def test_rejects_non_mapping_body(self) -> None:
        for body in [None, [], "text"]:
            with self.subTest(body=body):
                with self.assertRaises(ValidationError):
                    parse_reservation_payload(body)

    def test_rejects_start_not_before_end(self) -> None:
        with self.assertRaises(ValidationError) as caught:
            parse_reservation_payload({**VALID_PAYLOAD, "startTime": "15:00", "endTime": "15:00"})
        self.assertEqual(caught.exception.message, "startTime must be earlier than endTime")


class TestParseReservationId(unittest.TestCase):
    def test_accepts_positive_integers(self) -> None:
        self.assertEqual(parse_reservation_id("43"), 43)
        self.assertEqual(parse_reservation_id(7), 7)
        self.assertEqual(parse_reservation_id(str(2**31 - 1)), 2**31 - 1)

    def test_rejects_everything_else(self) -> None:
        for raw in ["0", "-1", "abc", "", "1.5", 0, None, str(2**31), 2**31]:
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    parse_reservation_id(raw)


class TestParseListQuery(unittest.TestCase):
    def test_empty_query_means_no_filters(self) -> None:
        self.assertEqual(parse_list_query({}), (ReservationFilters(), False))

    def test_all_filters(self) -> None:
        filters, order = parse_list_query(
            {
                "userId": "1",
                "fromDate": "2025-07-13",
                "toDate": "2025-07-20",
                "seatId": "10",
                "status": "reserved",
                "order": "true",
            }
        )

        self.assertEqual(
            filters,
            ReservationFilters(
                user_id=1,
                from_date=date(2025, 7, 13),
                to_date=date(2025, 7, 20),
                seat_id=10,
                status="reserved",
            ),
        )
        self.assertTrue(order)

    def test_order_only_when_literally_true(self) -> None:
        self.assertFalse(parse_list_query({"order": "1"})[1])

    def test_rejects_malformed_filters(self) -> None:
        for args in [
            {"userId": "x"},
            {"userId": "99999999999999999999"},
            {"seatId": "0"},
            {"fromDate": "yesterday"},
            {"fromDate": "20250715"},
            {"toDate": "2025-W29-2"},
            {"status": "pending"},
        ]:
            with self.subTest(args=args):
                with self.assertRaises(ValidationError):
                    parse_list_query(args)


if __name__ == "__main__":
    unittest.main()
