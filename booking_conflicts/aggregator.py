"""
Conflict aggregation for a single candidate appointment.

Runs the calendar sanity checks and the four resource checkers in a fixed
order and merges their findings into one ConflictResult:

1. blocked date        -> stop, offer dates over the next 7 days
2. outside work hours  -> stop, offer same-day slots
3. inside a break      -> stop, offer same-day slots
4. vehicle             (when a vehicle is requested)
5. service capacity    (when service types are requested)
6. daily volume
7. staff

Usage:
    aggregator = ConflictAggregator(store, rules)
    result = aggregator.check_conflicts(
        ConflictCheckRequest(vehicle_id="V1", date=date(2025, 3, 18), time_slot="10:00")
    )
    if result.has_conflicts:
        ...  # offer result.available_alternatives

The engine only reads. A caller that books a conflict-free slot must make
the check-then-create sequence exclusive itself (a unique constraint in the
store, or a per-resource lock held across both steps).
"""

import datetime as dt
from typing import Optional

from booking_conflicts.alternatives import AlternativeFinder
from booking_conflicts.checkers import (
    CheckContext,
    DailyVolumeChecker,
    ServiceCapacityChecker,
    StaffAvailabilityChecker,
    VehicleAvailabilityChecker,
)
from booking_conflicts.config import EngineConfig, SchedulingRules
from booking_conflicts.errors import EntityNotFoundError
from booking_conflicts.logging_context import (
    NO_CHECK_ID,
    get_check_id,
    get_check_logger,
    new_check_id,
    reset_check_id,
    set_check_id,
)
from booking_conflicts.schemas.booking_schema import (
    ConflictCheckRequest,
    ConflictEntry,
    ConflictResult,
    ConflictType,
    Severity,
    TimeSlotsResult,
)
from booking_conflicts.slot_calendar import (
    blocked_reason,
    is_during_break,
    is_within_working_hours,
)
from booking_conflicts.store.base import BookingStore
from booking_conflicts.store.staff import RosterStaffOracle, StaffAvailabilityOracle
from booking_conflicts.utils import TimeWindow

logger = get_check_logger(__name__)

BLOCKED_DATE_SEARCH_DAYS = 7


class ConflictAggregator:
    """
    Decides whether a requested slot can be granted under one rule set.

    Holds no mutable state after construction, so one instance can serve
    concurrent callers as long as the store is thread-safe.

    Args:
        store: Read access to vehicles, service types and bookings.
        rules: Rule set to enforce (built-in defaults when omitted).
        staff_oracle: Staff availability source (a roster oracle over
            ``store`` when omitted).
        strict_references: Raise ``EntityNotFoundError`` for unknown vehicle
            or service type ids instead of folding them into conflicts.
    """

    def __init__(
        self,
        store: BookingStore,
        rules: Optional[SchedulingRules] = None,
        staff_oracle: Optional[StaffAvailabilityOracle] = None,
        strict_references: bool = False,
    ) -> None:
        self.store = store
        self.rules = rules or SchedulingRules()
        self.strict_references = strict_references
        self.staff_oracle = staff_oracle or RosterStaffOracle(
            store, default_duration_minutes=self.rules.default_duration_minutes
        )

        self.alternatives = AlternativeFinder(self)
        self.vehicle = VehicleAvailabilityChecker(store, self.rules, strict_references)
        self.capacity = ServiceCapacityChecker(store, self.rules)
        self.daily_volume = DailyVolumeChecker(
            store, self.rules, self.alternatives.find_alternative_dates
        )
        self.staff = StaffAvailabilityChecker(self.staff_oracle, self.rules)

    @classmethod
    def from_config(
        cls, store: BookingStore, config: EngineConfig, roster: Optional[dict[int, int]] = None
    ) -> "ConflictAggregator":
        """Build an aggregator with a roster oracle sized from ``config``."""
        oracle = RosterStaffOracle(
            store,
            default_headcount=config.staff_headcount,
            roster=roster,
            default_duration_minutes=config.rules.default_duration_minutes,
        )
        return cls(store, config.rules, oracle, config.strict_references)

    def check_conflicts(self, request: ConflictCheckRequest) -> ConflictResult:
        """Check one candidate slot and propose alternatives if it is taken."""
        token = None
        if get_check_id() == NO_CHECK_ID:
            token = set_check_id(new_check_id())
        try:
            return self._check_conflicts(request)
        finally:
            if token is not None:
                reset_check_id(token)

    def resource_checks_only(
        self, request: ConflictCheckRequest, include_suggestions: bool = False
    ) -> list[ConflictEntry]:
        """Run the four resource checkers without any alternative search.

        Calendar sanity checks (blocked date, hours, breaks) are not applied
        here; callers iterating calendar slots filter those themselves.
        """
        ctx = self._build_context(request, include_suggestions)
        conflicts: list[ConflictEntry] = []
        if request.vehicle_id:
            conflicts.extend(self.vehicle.check(ctx))
        if request.service_type_ids:
            conflicts.extend(self.capacity.check(ctx))
        conflicts.extend(self.daily_volume.check(ctx))
        conflicts.extend(self.staff.check(ctx))
        return conflicts

    def get_available_time_slots(
        self,
        date: dt.date,
        service_type_ids: Optional[list[str]] = None,
        exclude_booking_id: Optional[str] = None,
        vehicle_id: Optional[str] = None,
        buffer_minutes: Optional[int] = None,
    ) -> TimeSlotsResult:
        return self.alternatives.get_available_time_slots(
            date, service_type_ids, exclude_booking_id, vehicle_id, buffer_minutes
        )

    def _check_conflicts(self, request: ConflictCheckRequest) -> ConflictResult:
        logger.debug(
            "Checking %s %s vehicle=%s services=%s",
            request.date, request.time_slot, request.vehicle_id, request.service_type_ids,
        )

        reason = blocked_reason(request.date, self.rules)
        if reason is not None:
            logger.info("Rejected %s: date blocked (%s)", request.date, reason)
            conflict = ConflictEntry(
                type=ConflictType.TIME_SLOT_FULL,
                message=f"{request.date.isoformat()} is not available for booking: {reason}",
                severity=Severity.HIGH,
            )
            return ConflictResult.conflicting(
                [conflict],
                self.alternatives.find_alternative_dates(
                    request.date, BLOCKED_DATE_SEARCH_DAYS, request
                ),
            )

        if not is_within_working_hours(request.time_slot, self.rules):
            hours = self.rules.working_hours
            logger.info("Rejected %s: outside working hours", request.time_slot)
            conflict = ConflictEntry(
                type=ConflictType.TIME_SLOT_FULL,
                message=(
                    f"{request.time_slot} is outside working hours "
                    f"({hours.start}-{hours.end})"
                ),
                severity=Severity.HIGH,
            )
            return ConflictResult.conflicting(
                [conflict], self.alternatives.same_day_alternatives(request)
            )

        if is_during_break(request.time_slot, self.rules):
            logger.info("Rejected %s: during a break", request.time_slot)
            conflict = ConflictEntry(
                type=ConflictType.TIME_SLOT_FULL,
                message=f"{request.time_slot} falls within a break period",
                severity=Severity.MEDIUM,
            )
            return ConflictResult.conflicting(
                [conflict], self.alternatives.same_day_alternatives(request)
            )

        conflicts = self.resource_checks_only(request, include_suggestions=True)
        if not conflicts:
            logger.info("No conflicts for %s %s", request.date, request.time_slot)
            return ConflictResult.clear()

        logger.info(
            "%d conflict(s) for %s %s: %s",
            len(conflicts),
            request.date,
            request.time_slot,
            ", ".join(c.type.value for c in conflicts),
        )
        return ConflictResult.conflicting(
            conflicts, self.alternatives.find_alternatives(request, conflicts)
        )

    def _build_context(
        self, request: ConflictCheckRequest, include_suggestions: bool
    ) -> CheckContext:
        service_types = ()
        if request.service_type_ids:
            service_types = tuple(self.store.get_service_types(request.service_type_ids))
            found = {s.id for s in service_types}
            missing = [sid for sid in request.service_type_ids if sid not in found]
            if missing:
                if self.strict_references:
                    raise EntityNotFoundError("service type", missing[0])
                logger.warning("Ignoring unknown service type(s): %s", ", ".join(missing))

        duration = request.duration_minutes or (
            sum(s.duration for s in service_types) or self.rules.default_duration_minutes
        )
        buffer_minutes = request.buffer_minutes
        if buffer_minutes is None:
            buffer_minutes = self.rules.min_buffer_minutes

        return CheckContext(
            request=request,
            service_types=service_types,
            window=TimeWindow.from_slot(request.time_slot, duration),
            buffer_minutes=buffer_minutes,
            include_suggestions=include_suggestions,
        )
