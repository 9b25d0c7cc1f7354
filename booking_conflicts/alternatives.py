"""
Alternative slot search.

Finds conflict-free substitutes for a rejected request: free slots later on
the same day first, then free slots on the next few open days. Candidate
slots are checked with ``ConflictAggregator.resource_checks_only``, which
never searches for alternatives itself, so the search cannot recurse.
"""

import datetime as dt
from typing import TYPE_CHECKING, Optional

from booking_conflicts.logging_context import get_check_logger
from booking_conflicts.schemas.booking_schema import (
    MAX_ALTERNATIVES,
    AlternativeDay,
    ConflictCheckRequest,
    ConflictEntry,
    TimeSlotsResult,
)
from booking_conflicts.slot_calendar import (
    blocked_reason,
    generate_time_slots,
    is_closed_weekday,
    is_date_blocked,
    is_during_break,
    is_within_working_hours,
    weekday_label,
)

if TYPE_CHECKING:
    from booking_conflicts.aggregator import ConflictAggregator

logger = get_check_logger(__name__)

ALTERNATIVE_DATE_DAYS = 3
SAME_DAY_REASON = "Available same day"
NO_SLOTS_REASON = "No free time slots on this date"


class AlternativeFinder:
    """Searches the calendar for slots a request could move to."""

    def __init__(self, aggregator: "ConflictAggregator") -> None:
        self.aggregator = aggregator
        self.rules = aggregator.rules

    def get_available_time_slots(
        self,
        date: dt.date,
        service_type_ids: Optional[list[str]] = None,
        exclude_booking_id: Optional[str] = None,
        vehicle_id: Optional[str] = None,
        buffer_minutes: Optional[int] = None,
    ) -> TimeSlotsResult:
        """Every calendar slot on ``date`` that passes all resource checks."""
        template = ConflictCheckRequest(
            vehicle_id=vehicle_id,
            service_type_ids=list(service_type_ids or []),
            date=date,
            time_slot=self.rules.working_hours.start,
            exclude_booking_id=exclude_booking_id,
            buffer_minutes=buffer_minutes,
        )
        return self._available_on(template, date)

    def find_alternative_dates(
        self,
        date: dt.date,
        days_ahead: int,
        request: Optional[ConflictCheckRequest] = None,
    ) -> list[AlternativeDay]:
        """Open days within ``days_ahead`` calendar days that have a free slot.

        Closed weekdays and blocked dates are skipped. When ``request`` is
        given, its vehicle, services and buffer are applied to every slot.
        """
        template = request or ConflictCheckRequest(
            date=date, time_slot=self.rules.working_hours.start
        )
        days = []
        for offset in range(1, days_ahead + 1):
            candidate = date + dt.timedelta(days=offset)
            if is_closed_weekday(candidate, self.rules) or is_date_blocked(candidate, self.rules):
                continue
            result = self._available_on(template, candidate)
            if result.time_slots:
                days.append(
                    AlternativeDay(
                        date=candidate,
                        time_slots=result.time_slots,
                        reason=weekday_label(candidate, self.rules),
                    )
                )
        logger.debug("Found %d alternative date(s) after %s", len(days), date)
        return days

    def same_day_alternatives(self, request: ConflictCheckRequest) -> list[AlternativeDay]:
        result = self._available_on(request, request.date)
        if not result.time_slots:
            return []
        return [AlternativeDay(date=request.date, time_slots=result.time_slots, reason=SAME_DAY_REASON)]

    def find_alternatives(
        self, request: ConflictCheckRequest, conflicts: list[ConflictEntry]
    ) -> list[AlternativeDay]:
        """Same-day slots first, then nearby dates, at most five entries."""
        logger.debug(
            "Searching alternatives for %s %s after %d conflict(s)",
            request.date, request.time_slot, len(conflicts),
        )
        alternatives = self.same_day_alternatives(request)
        alternatives.extend(
            self.find_alternative_dates(request.date, ALTERNATIVE_DATE_DAYS, request)
        )
        return alternatives[:MAX_ALTERNATIVES]

    def _available_on(self, template: ConflictCheckRequest, date: dt.date) -> TimeSlotsResult:
        reason = blocked_reason(date, self.rules)
        if reason is not None:
            return TimeSlotsResult(time_slots=[], reason=reason)

        free = []
        for slot in generate_time_slots(self.rules):
            if not is_within_working_hours(slot, self.rules) or is_during_break(slot, self.rules):
                continue
            candidate = template.model_copy(update={"date": date, "time_slot": slot})
            if not self.aggregator.resource_checks_only(candidate):
                free.append(slot)
        return TimeSlotsResult(time_slots=free, reason=None if free else NO_SLOTS_REASON)
