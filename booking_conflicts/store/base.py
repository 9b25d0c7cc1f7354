"""
Read interface the engine needs from the persistence layer.

The engine only reads. Implementations raise ``EntityNotFoundError`` for an
unknown vehicle id and ``StoreError`` (or a subclass) when a read cannot be
completed; the engine propagates both rather than guessing an answer.
"""

import datetime as dt
from typing import Optional, Protocol

from booking_conflicts.schemas.records import (
    BookingRecord,
    ServiceTypeRecord,
    VehicleRecord,
)


class BookingStore(Protocol):
    def get_vehicle(self, vehicle_id: str) -> VehicleRecord:
        """Look up a vehicle by id."""
        ...

    def get_service_types(self, service_type_ids: list[str]) -> list[ServiceTypeRecord]:
        """Resolve service type ids, silently skipping unknown ones."""
        ...

    def list_vehicle_bookings(
        self, vehicle_id: str, date: dt.date, exclude_booking_id: Optional[str] = None
    ) -> list[BookingRecord]:
        """Active (PENDING/CONFIRMED) test-drives of a vehicle on a date."""
        ...

    def list_service_bookings(
        self, service_type_id: str, date: dt.date, exclude_booking_id: Optional[str] = None
    ) -> list[BookingRecord]:
        """Active service visits of one service type on a date."""
        ...

    def list_bookings(
        self, date: dt.date, exclude_booking_id: Optional[str] = None
    ) -> list[BookingRecord]:
        """All active bookings of both kinds on a date."""
        ...

    def count_bookings(self, date: dt.date, exclude_booking_id: Optional[str] = None) -> int:
        """Number of active bookings of both kinds on a date."""
        ...
