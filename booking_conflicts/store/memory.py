"""
In-memory booking store.

Backs tests and local experiments. A production deployment implements the
same ``BookingStore`` methods against its relational database.
"""

import datetime as dt
import logging
import threading
from typing import Callable, Optional

from booking_conflicts.errors import EntityNotFoundError
from booking_conflicts.schemas.records import (
    BookingRecord,
    ServiceTypeRecord,
    VehicleRecord,
)

logger = logging.getLogger(__name__)


class InMemoryBookingStore:
    """Dict-backed store. Reads and writes are serialized by one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._vehicles: dict[str, VehicleRecord] = {}
        self._service_types: dict[str, ServiceTypeRecord] = {}
        self._bookings: dict[str, BookingRecord] = {}

    # -- writes (outside the engine's contract, used to seed data) --

    def add_vehicle(self, vehicle: VehicleRecord) -> None:
        with self._lock:
            self._vehicles[vehicle.id] = vehicle

    def add_service_type(self, service_type: ServiceTypeRecord) -> None:
        with self._lock:
            self._service_types[service_type.id] = service_type

    def add_booking(self, booking: BookingRecord) -> None:
        with self._lock:
            self._bookings[booking.id] = booking
        logger.debug(
            "Booking stored: %s on %s at %s (%s)",
            booking.id, booking.date, booking.time_slot, booking.status.value,
        )

    def reset(self) -> None:
        """Clear all records. Used by test fixtures for isolation."""
        with self._lock:
            self._vehicles.clear()
            self._service_types.clear()
            self._bookings.clear()

    # -- reads --

    def get_vehicle(self, vehicle_id: str) -> VehicleRecord:
        with self._lock:
            vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            raise EntityNotFoundError("vehicle", vehicle_id)
        return vehicle

    def get_service_types(self, service_type_ids: list[str]) -> list[ServiceTypeRecord]:
        with self._lock:
            return [
                self._service_types[sid]
                for sid in service_type_ids
                if sid in self._service_types
            ]

    def list_vehicle_bookings(
        self, vehicle_id: str, date: dt.date, exclude_booking_id: Optional[str] = None
    ) -> list[BookingRecord]:
        return self._select(date, exclude_booking_id, lambda b: b.vehicle_id == vehicle_id)

    def list_service_bookings(
        self, service_type_id: str, date: dt.date, exclude_booking_id: Optional[str] = None
    ) -> list[BookingRecord]:
        return self._select(
            date, exclude_booking_id, lambda b: b.service_type_id == service_type_id
        )

    def list_bookings(
        self, date: dt.date, exclude_booking_id: Optional[str] = None
    ) -> list[BookingRecord]:
        return self._select(date, exclude_booking_id, lambda b: True)

    def count_bookings(self, date: dt.date, exclude_booking_id: Optional[str] = None) -> int:
        return len(self.list_bookings(date, exclude_booking_id))

    def _select(
        self,
        date: dt.date,
        exclude_booking_id: Optional[str],
        predicate: Callable[[BookingRecord], bool],
    ) -> list[BookingRecord]:
        with self._lock:
            bookings = list(self._bookings.values())
        return [
            b
            for b in bookings
            if b.date == date
            and b.is_active
            and b.id != exclude_booking_id
            and predicate(b)
        ]
