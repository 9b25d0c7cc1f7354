from booking_conflicts.store.base import BookingStore
from booking_conflicts.store.memory import InMemoryBookingStore
from booking_conflicts.store.staff import (
    RosterStaffOracle,
    StaffAvailability,
    StaffAvailabilityOracle,
)

__all__ = [
    "BookingStore",
    "InMemoryBookingStore",
    "RosterStaffOracle",
    "StaffAvailability",
    "StaffAvailabilityOracle",
]
