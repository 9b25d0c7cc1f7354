"""
Staff availability oracles.

An oracle answers whether enough technicians or sales staff are free for a
time window. ``RosterStaffOracle`` derives the answer from a weekday roster
and the bookings already on the calendar, so the same inputs always give the
same answer.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from booking_conflicts.store.base import BookingStore
from booking_conflicts.utils import TimeWindow

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 60


@dataclass(frozen=True)
class StaffAvailability:
    available: bool
    reason: Optional[str] = None


class StaffAvailabilityOracle(Protocol):
    def check_staff_availability(
        self,
        date: dt.date,
        interval: TimeWindow,
        required_units: int,
        exclude_booking_id: Optional[str] = None,
    ) -> StaffAvailability:
        ...


class RosterStaffOracle:
    """Headcount from a weekday roster minus bookings overlapping the window.

    Each active booking overlapping the window occupies one staff member.

    Args:
        store: Source of the day's bookings.
        default_headcount: Staff on shift for weekdays missing from ``roster``.
        roster: Optional headcount per weekday (Monday=0).
        default_duration_minutes: Length assumed for bookings with no duration.
    """

    def __init__(
        self,
        store: BookingStore,
        default_headcount: int = 5,
        roster: Optional[Mapping[int, int]] = None,
        default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
    ) -> None:
        self.store = store
        self.default_headcount = default_headcount
        self.roster = dict(roster or {})
        self.default_duration_minutes = default_duration_minutes

    def headcount(self, date: dt.date) -> int:
        return self.roster.get(date.weekday(), self.default_headcount)

    def check_staff_availability(
        self,
        date: dt.date,
        interval: TimeWindow,
        required_units: int,
        exclude_booking_id: Optional[str] = None,
    ) -> StaffAvailability:
        busy = sum(
            1
            for booking in self.store.list_bookings(date, exclude_booking_id)
            if TimeWindow.from_slot(
                booking.time_slot,
                booking.duration_minutes or self.default_duration_minutes,
            ).overlaps(interval)
        )
        free = max(self.headcount(date) - busy, 0)
        logger.debug(
            "Staff on %s %s: %d free, %d required", date, interval, free, required_units
        )
        if free >= required_units:
            return StaffAvailability(available=True)
        return StaffAvailability(
            available=False,
            reason=f"Only {free} staff available, {required_units} required",
        )
