"""Shared test fixtures and helpers."""

import datetime as dt
from itertools import count
from typing import Optional

import pytest

from booking_conflicts.aggregator import ConflictAggregator
from booking_conflicts.config import SchedulingRules
from booking_conflicts.schemas.booking_schema import ConflictCheckRequest
from booking_conflicts.schemas.records import (
    BookingRecord,
    BookingStatus,
    ServiceTypeRecord,
    VehicleRecord,
    VehicleStatus,
)
from booking_conflicts.store.memory import InMemoryBookingStore
from booking_conflicts.store.staff import StaffAvailability

# A Monday, so the following four days are all open weekdays.
MONDAY = dt.date(2025, 3, 17)
FRIDAY = dt.date(2025, 3, 21)

_booking_ids = count(1)


@pytest.fixture
def rules():
    return SchedulingRules()


@pytest.fixture
def store():
    store = InMemoryBookingStore()
    store.add_vehicle(VehicleRecord(id="V1", status=VehicleStatus.AVAILABLE))
    store.add_vehicle(VehicleRecord(id="V2", status=VehicleStatus.AVAILABLE))
    store.add_vehicle(VehicleRecord(id="V-SOLD", status=VehicleStatus.SOLD))
    store.add_service_type(ServiceTypeRecord(id="OIL", name="Oil Change", duration=30))
    store.add_service_type(ServiceTypeRecord(id="BRAKES", name="Brake Inspection", duration=45))
    store.add_service_type(ServiceTypeRecord(id="TYRES", name="Tyre Rotation", duration=60))
    yield store
    store.reset()


@pytest.fixture
def aggregator(store, rules):
    return ConflictAggregator(store, rules)


def make_booking(
    time_slot: str,
    date: dt.date = MONDAY,
    vehicle_id: Optional[str] = None,
    service_type_id: Optional[str] = None,
    status: BookingStatus = BookingStatus.CONFIRMED,
    booking_id: Optional[str] = None,
    duration_minutes: Optional[int] = None,
) -> BookingRecord:
    """Helper to create a BookingRecord with a unique id."""
    return BookingRecord(
        id=booking_id or f"B{next(_booking_ids)}",
        date=date,
        time_slot=time_slot,
        status=status,
        vehicle_id=vehicle_id,
        service_type_id=service_type_id,
        duration_minutes=duration_minutes,
    )


def make_request(
    time_slot: str,
    date: dt.date = MONDAY,
    vehicle_id: Optional[str] = None,
    service_type_ids: Optional[list[str]] = None,
    exclude_booking_id: Optional[str] = None,
    buffer_minutes: Optional[int] = None,
    duration_minutes: Optional[int] = None,
) -> ConflictCheckRequest:
    """Helper to create a ConflictCheckRequest with sensible defaults."""
    return ConflictCheckRequest(
        vehicle_id=vehicle_id,
        service_type_ids=service_type_ids or [],
        date=date,
        time_slot=time_slot,
        exclude_booking_id=exclude_booking_id,
        buffer_minutes=buffer_minutes,
        duration_minutes=duration_minutes,
    )


class FixedStaffOracle:
    """Staff oracle that always gives the same answer."""

    def __init__(self, available: bool, reason: Optional[str] = None) -> None:
        self.answer = StaffAvailability(available=available, reason=reason)
        self.calls: list[tuple] = []

    def check_staff_availability(self, date, interval, required_units, exclude_booking_id=None):
        self.calls.append((date, interval, required_units, exclude_booking_id))
        return self.answer
