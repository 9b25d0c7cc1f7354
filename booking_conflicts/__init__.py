from booking_conflicts.aggregator import ConflictAggregator
from booking_conflicts.alternatives import AlternativeFinder
from booking_conflicts.config import EngineConfig, SchedulingRules, load_engine_config, rules_from_env
from booking_conflicts.optimizer import ScheduleOptimizer
from booking_conflicts.schemas import (
    ConflictCheckRequest,
    ConflictResult,
    Priority,
    ScheduleRequest,
)
from booking_conflicts.store import InMemoryBookingStore, RosterStaffOracle

__all__ = [
    "ConflictAggregator", "AlternativeFinder", "ScheduleOptimizer",
    "EngineConfig", "SchedulingRules", "load_engine_config", "rules_from_env",
    "ConflictCheckRequest", "ConflictResult", "Priority", "ScheduleRequest",
    "InMemoryBookingStore", "RosterStaffOracle",
]
