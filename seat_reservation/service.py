"""Reservation transaction orchestrator.

Every mutating operation runs as ``begin -> checks -> (commit | rollback)``
on one store transaction. Checks run in a fixed order: existence checks,
then the overlap check, then the mutation. Nothing is retried; a
``SlotConflict`` is a final answer for that request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, time
from typing import Any, Callable, TypeVar

from .errors import (
    InternalFailure,
    ReservationError,
    ReservationNotFound,
    ReservationStorageError,
    SeatNotFound,
    SlotConflict,
    UserNotFound,
    ValidationError,
)
from .event_log import ReservationEventLog
from .intervals import format_date, format_wall_time
from .queries import ReservationFilters, ReservationRow, list_reservations
from .store import Reservation, ReservationStore, StoreTransaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ReservationRequest:
    user_id: int
    seat_id: int
    reserved_date: date
    start_time: time
    end_time: time
    exclude_reservation_id: int | None = None

    def __post_init__(self) -> None:
        if self.start_time >= self.end_time:
            raise ValidationError("startTime must be earlier than endTime")

    def describe(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "seat_id": self.seat_id,
            "reserved_date": format_date(self.reserved_date),
            "start_time": format_wall_time(self.start_time),
            "end_time": format_wall_time(self.end_time),
        }


class ReservationService:
    def __init__(self, store: ReservationStore, event_log: ReservationEventLog | None = None) -> None:
        self._store = store
        self._event_log = event_log

    @property
    def store(self) -> ReservationStore:
        return self._store

    def create(self, request: ReservationRequest) -> Reservation:
        """Reserve a seat for the requested interval.

        Raises:
            UserNotFound, SeatNotFound: the referenced user or seat does not exist.
            SlotConflict: the interval overlaps a reserved interval on that seat and date.
            InternalFailure: the store failed; the transaction was rolled back.
        """

        def work(transaction: StoreTransaction) -> Reservation:
            self._require_user_and_seat(transaction, request)
            self._require_free_slot(transaction, request, exclude_id=None)
            return self._insert(transaction, request)

        created = self._run_in_transaction("create", "Reservation failed", work)
        self._audit("RESERVATION_CREATED", {"reservation_id": created.id, **request.describe()})
        return created

    def cancel(self, reservation_id: int) -> None:
        """Move a reserved reservation to canceled.

        Unknown ids and already canceled reservations both raise ReservationNotFound.
        """

        def work(transaction: StoreTransaction) -> None:
            if not transaction.reservation_exists(reservation_id):
                raise ReservationNotFound(reservation_id)
            transaction.cancel(reservation_id)

        self._run_in_transaction("cancel", "Failed to cancel reservation", work)
        self._audit("RESERVATION_CANCELED", {"reservation_id": reservation_id})

    def rebook(self, reservation_id: int, request: ReservationRequest) -> Reservation:
        """Cancel ``reservation_id`` and create its replacement in one transaction.

        The reservation being replaced is left out of the overlap check, so
        a rebook may shift within its own interval. If anything fails after
        the cancel, the rollback restores the original reservation.
        """
        request = replace(request, exclude_reservation_id=reservation_id)

        def work(transaction: StoreTransaction) -> Reservation:
            transaction.lock_for_rebook(reservation_id, request.seat_id, request.reserved_date)
            if not transaction.reservation_exists(reservation_id):
                raise ReservationNotFound(reservation_id)
            self._require_user_and_seat(transaction, request)
            self._require_free_slot(transaction, request, exclude_id=reservation_id)
            transaction.cancel(reservation_id)
            return self._insert(transaction, request)

        created = self._run_in_transaction("rebook", "Failed to update reservation", work)
        self._audit(
            "RESERVATION_REBOOKED",
            {"canceled_reservation_id": reservation_id, "reservation_id": created.id, **request.describe()},
        )
        return created

    def list_reservations(self, filters: ReservationFilters | None = None, order: bool = False) -> list[ReservationRow]:
        try:
            return list_reservations(self._store, filters, order=order)
        except Exception as error:
            logger.exception("Listing reservations failed")
            raise InternalFailure("DB error") from error

    def _require_user_and_seat(self, transaction: StoreTransaction, request: ReservationRequest) -> None:
        if not transaction.user_exists(request.user_id):
            raise UserNotFound(request.user_id)
        if not transaction.seat_exists(request.seat_id):
            raise SeatNotFound(request.seat_id)

    def _require_free_slot(
        self,
        transaction: StoreTransaction,
        request: ReservationRequest,
        exclude_id: int | None,
    ) -> None:
        if transaction.find_overlapping(
            request.seat_id,
            request.reserved_date,
            request.start_time,
            request.end_time,
            exclude_id=exclude_id,
        ):
            logger.debug("Slot conflict for %s", request.describe())
            raise SlotConflict()

    @staticmethod
    def _insert(transaction: StoreTransaction, request: ReservationRequest) -> Reservation:
        return transaction.insert(
            request.user_id,
            request.seat_id,
            request.reserved_date,
            request.start_time,
            request.end_time,
        )

    def _run_in_transaction(
        self,
        operation: str,
        failure_message: str,
        work: Callable[[StoreTransaction], T],
    ) -> T:
        transaction: StoreTransaction | None = None
        try:
            transaction = self._store.begin()
            result = work(transaction)
            transaction.commit()
            return result
        except ReservationError:
            _rollback_quietly(transaction, operation)
            raise
        except Exception as error:
            logger.exception("Reservation %s failed", operation)
            _rollback_quietly(transaction, operation)
            raise InternalFailure(failure_message) from error
        finally:
            _close_quietly(transaction, operation)

    def _audit(self, event_type: str, payload: dict[str, Any]) -> None:
        if self._event_log is None:
            return
        try:
            self._event_log.record(event_type, payload)
        except ReservationStorageError:
            logger.exception("Could not record %s after commit", event_type)


def _rollback_quietly(transaction: StoreTransaction | None, operation: str) -> None:
    if transaction is None:
        return
    try:
        transaction.rollback()
    except Exception:
        # The caller sees the original failure, not this one.
        logger.exception("Rollback failed during reservation %s", operation)


def _close_quietly(transaction: StoreTransaction | None, operation: str) -> None:
    if transaction is None:
        return
    try:
        transaction.close()
    except Exception:
        logger.exception("Closing the connection failed during reservation %s", operation)
