"""
Resource availability checkers.

Four independent checkers, each looking at one resource dimension:
1. VehicleAvailabilityChecker: vehicle status and its other test-drives
2. ServiceCapacityChecker: concurrent bookings per service type
3. DailyVolumeChecker: shop-wide cap on bookings per day
4. StaffAvailabilityChecker: free staff for the requested window

Each returns a (possibly empty) list of ConflictEntry and only reads from the
store, so they can run in any order. The ConflictAggregator composes them.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Optional

from booking_conflicts.alternatives import ALTERNATIVE_DATE_DAYS
from booking_conflicts.config import SchedulingRules
from booking_conflicts.errors import EntityNotFoundError
from booking_conflicts.logging_context import get_check_logger
from booking_conflicts.schemas.booking_schema import (
    AlternativeDay,
    ConflictCheckRequest,
    ConflictEntry,
    ConflictType,
    Severity,
    SuggestedSlot,
)
from booking_conflicts.schemas.records import ServiceTypeRecord, VehicleStatus
from booking_conflicts.slot_calendar import suggest_time_slots
from booking_conflicts.store.base import BookingStore
from booking_conflicts.store.staff import StaffAvailabilityOracle
from booking_conflicts.utils import TimeWindow

logger = get_check_logger(__name__)


@dataclass(frozen=True)
class CheckContext:
    """Everything the checkers share for one candidate slot."""

    request: ConflictCheckRequest
    service_types: tuple[ServiceTypeRecord, ...]
    window: TimeWindow
    buffer_minutes: int
    include_suggestions: bool = True


class VehicleAvailabilityChecker:
    """Rejects unavailable vehicles and test-drives too close to another one."""

    def __init__(
        self, store: BookingStore, rules: SchedulingRules, strict_references: bool = False
    ) -> None:
        self.store = store
        self.rules = rules
        self.strict_references = strict_references

    def check(self, ctx: CheckContext) -> list[ConflictEntry]:
        request = ctx.request
        vehicle_id = request.vehicle_id
        if vehicle_id is None:
            return []

        try:
            vehicle = self.store.get_vehicle(vehicle_id)
        except EntityNotFoundError:
            if self.strict_references:
                raise
            logger.warning("Vehicle %s not found, reporting it as unavailable", vehicle_id)
            return [self._unavailable(f"Vehicle {vehicle_id} is not available")]

        if vehicle.status != VehicleStatus.AVAILABLE:
            return [
                self._unavailable(
                    f"Vehicle {vehicle_id} is not available ({vehicle.status.value.lower()})"
                )
            ]

        conflicts = []
        for booking in self.store.list_vehicle_bookings(
            vehicle_id, request.date, request.exclude_booking_id
        ):
            existing = TimeWindow.from_slot(
                booking.time_slot,
                booking.duration_minutes or self.rules.default_duration_minutes,
            ).expanded(ctx.buffer_minutes)
            if not ctx.window.overlaps(existing):
                continue
            logger.debug(
                "Vehicle %s: requested %s clashes with %s %s",
                vehicle_id, ctx.window, booking.id, existing,
            )
            conflicts.append(
                ConflictEntry(
                    type=ConflictType.VEHICLE_UNAVAILABLE,
                    booking_id=booking.id,
                    message=(
                        f"Vehicle {vehicle_id} already has a test drive at "
                        f"{booking.time_slot}"
                    ),
                    severity=Severity.HIGH,
                    suggested_alternatives=self._suggest(ctx, [booking.time_slot]),
                )
            )
        return conflicts

    def _unavailable(self, message: str) -> ConflictEntry:
        return ConflictEntry(
            type=ConflictType.VEHICLE_UNAVAILABLE,
            message=message,
            severity=Severity.HIGH,
        )

    def _suggest(self, ctx: CheckContext, conflicting: list[str]) -> list[SuggestedSlot]:
        if not ctx.include_suggestions:
            return []
        return suggest_time_slots(ctx.request.date, self.rules, conflicting)


class ServiceCapacityChecker:
    """Caps how many bookings of one service type may overlap."""

    def __init__(self, store: BookingStore, rules: SchedulingRules) -> None:
        self.store = store
        self.rules = rules

    def check(self, ctx: CheckContext) -> list[ConflictEntry]:
        request = ctx.request
        conflicts = []
        for service_type in ctx.service_types:
            clashing_slots = []
            for booking in self.store.list_service_bookings(
                service_type.id, request.date, request.exclude_booking_id
            ):
                existing = TimeWindow.from_slot(
                    booking.time_slot, booking.duration_minutes or service_type.duration
                ).expanded(ctx.buffer_minutes)
                if ctx.window.overlaps(existing):
                    clashing_slots.append(booking.time_slot)

            logger.debug(
                "Service %s: %d concurrent booking(s), limit %d",
                service_type.id, len(clashing_slots), self.rules.max_concurrent_bookings,
            )
            if len(clashing_slots) < self.rules.max_concurrent_bookings:
                continue
            conflicts.append(
                ConflictEntry(
                    type=ConflictType.SERVICE_OVERLAP,
                    message=(
                        f"Maximum concurrent bookings reached for {service_type.name}"
                    ),
                    severity=Severity.MEDIUM,
                    suggested_alternatives=(
                        suggest_time_slots(request.date, self.rules, clashing_slots)
                        if ctx.include_suggestions
                        else []
                    ),
                )
            )
        return conflicts


class DailyVolumeChecker:
    """Enforces the shop-wide cap on bookings per calendar day.

    ``find_alternative_dates`` is the Alternative Finder's date search; it is
    only called when suggestions are requested.
    """

    def __init__(
        self,
        store: BookingStore,
        rules: SchedulingRules,
        find_alternative_dates: Callable[
            [dt.date, int, Optional[ConflictCheckRequest]], list[AlternativeDay]
        ],
    ) -> None:
        self.store = store
        self.rules = rules
        self.find_alternative_dates = find_alternative_dates

    def check(self, ctx: CheckContext) -> list[ConflictEntry]:
        request = ctx.request
        total = self.store.count_bookings(request.date, request.exclude_booking_id)
        if total < self.rules.max_bookings_per_day:
            return []

        logger.info(
            "Daily cap reached on %s: %d/%d", request.date, total, self.rules.max_bookings_per_day
        )
        suggestions = []
        if ctx.include_suggestions:
            suggestions = [
                SuggestedSlot(date=day.date, time_slot=day.time_slots[0], reason=day.reason)
                for day in self.find_alternative_dates(
                    request.date, ALTERNATIVE_DATE_DAYS, request
                )
            ]
        return [
            ConflictEntry(
                type=ConflictType.TIME_SLOT_FULL,
                message="Maximum number of bookings reached for this day",
                severity=Severity.HIGH,
                suggested_alternatives=suggestions,
            )
        ]


class StaffAvailabilityChecker:
    """Asks a staff oracle whether enough people are free for the window."""

    def __init__(self, oracle: StaffAvailabilityOracle, rules: SchedulingRules) -> None:
        self.oracle = oracle
        self.rules = rules

    def check(self, ctx: CheckContext) -> list[ConflictEntry]:
        request = ctx.request
        # Every appointment needs at least one person, one more per extra service.
        required_units = max(1, len(request.service_type_ids))
        staff = self.oracle.check_staff_availability(
            request.date, ctx.window, required_units, request.exclude_booking_id
        )
        if staff.available:
            return []

        message = "No technicians available at this time"
        if staff.reason:
            message = f"{message}: {staff.reason}"
        return [
            ConflictEntry(
                type=ConflictType.STAFF_UNAVAILABLE,
                message=message,
                severity=Severity.MEDIUM,
                suggested_alternatives=(
                    suggest_time_slots(request.date, self.rules, [request.time_slot])
                    if ctx.include_suggestions
                    else []
                ),
            )
        ]
