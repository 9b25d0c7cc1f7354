"""
Single-pass, priority-ordered reassignment of pending booking requests.

Requests are processed highest priority first. Each is checked against the
store as it stands; reassignments made earlier in the same pass are not
written back, so two requests can be moved into the same free slot. Callers
must run ``check_conflicts`` again for each result before committing it.
"""

from booking_conflicts.aggregator import ConflictAggregator
from booking_conflicts.logging_context import (
    NO_CHECK_ID,
    get_check_id,
    get_check_logger,
    new_check_id,
    reset_check_id,
    set_check_id,
)
from booking_conflicts.schemas.booking_schema import ConflictCheckRequest
from booking_conflicts.schemas.optimizer_schema import (
    OptimizationResult,
    OptimizedSlot,
    ScheduleRequest,
)

logger = get_check_logger(__name__)

PREFERRED_CONFIDENCE = 1.0
ALTERNATIVE_CONFIDENCE = 0.8


class ScheduleOptimizer:
    """Best-effort batch optimizer built on ``ConflictAggregator.check_conflicts``."""

    def __init__(self, aggregator: ConflictAggregator) -> None:
        self.aggregator = aggregator

    def optimize_schedule(self, requests: list[ScheduleRequest]) -> list[OptimizationResult]:
        """Return one result per request, in processing (priority) order."""
        token = None
        if get_check_id() == NO_CHECK_ID:
            token = set_check_id(new_check_id("OPT"))
        try:
            ordered = sorted(requests, key=lambda r: r.priority.rank, reverse=True)
            results = [self._optimize_one(request) for request in ordered]
        finally:
            if token is not None:
                reset_check_id(token)

        moved = sum(1 for r in results if r.moved)
        logger.info("Optimized %d request(s), %d moved", len(results), moved)
        return results

    def _optimize_one(self, request: ScheduleRequest) -> OptimizationResult:
        check = self.aggregator.check_conflicts(
            ConflictCheckRequest(
                vehicle_id=request.vehicle_id,
                service_type_ids=request.service_type_ids,
                date=request.preferred_date,
                time_slot=request.preferred_time_slot,
                exclude_booking_id=request.id,
                duration_minutes=request.duration,
            )
        )
        optimized = OptimizedSlot(
            date=request.preferred_date,
            time_slot=request.preferred_time_slot,
            confidence=PREFERRED_CONFIDENCE,
        )
        if not check.has_conflicts:
            return OptimizationResult(original=request, optimized=optimized)

        if check.available_alternatives:
            first = check.available_alternatives[0]
            optimized = OptimizedSlot(
                date=first.date,
                time_slot=first.time_slots[0],
                confidence=ALTERNATIVE_CONFIDENCE,
            )
            logger.debug(
                "Request %s moved from %s %s to %s %s",
                request.id, request.preferred_date, request.preferred_time_slot,
                optimized.date, optimized.time_slot,
            )
        else:
            logger.debug("Request %s has conflicts and no alternative", request.id)

        return OptimizationResult(original=request, optimized=optimized, conflicts=check.messages)
