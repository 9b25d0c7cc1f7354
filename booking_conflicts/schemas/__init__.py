from booking_conflicts.schemas.booking_schema import (
    AlternativeDay,
    ConflictCheckRequest,
    ConflictEntry,
    ConflictResult,
    ConflictType,
    Severity,
    SuggestedSlot,
    TimeSlotsResult,
)
from booking_conflicts.schemas.optimizer_schema import (
    OptimizationResult,
    OptimizedSlot,
    Priority,
    ScheduleRequest,
)
from booking_conflicts.schemas.records import (
    BookingRecord,
    BookingStatus,
    ServiceTypeRecord,
    VehicleRecord,
    VehicleStatus,
)

__all__ = [
    "AlternativeDay", "ConflictCheckRequest", "ConflictEntry", "ConflictResult",
    "ConflictType", "Severity", "SuggestedSlot", "TimeSlotsResult",
    "OptimizationResult", "OptimizedSlot", "Priority", "ScheduleRequest",
    "BookingRecord", "BookingStatus", "ServiceTypeRecord", "VehicleRecord", "VehicleStatus",
]
