"""Batch optimization request and result models."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from booking_conflicts.schemas.booking_schema import check_time_slot


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return PRIORITY_RANKS[self]


PRIORITY_RANKS: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


class ScheduleRequest(BaseModel):
    """A pending booking submitted for batch optimization."""

    id: Optional[str] = None
    vehicle_id: Optional[str] = None
    service_type_ids: list[str] = Field(default_factory=list)
    preferred_date: dt.date
    preferred_time_slot: str
    duration: Optional[int] = Field(default=None, ge=1)
    priority: Priority = Priority.MEDIUM

    @field_validator("preferred_time_slot")
    @classmethod
    def validate_time_slot(cls, value: str) -> str:
        return check_time_slot(value)


class OptimizedSlot(BaseModel):
    date: dt.date
    time_slot: str
    confidence: float = Field(ge=0.0, le=1.0)


class OptimizationResult(BaseModel):
    original: ScheduleRequest
    optimized: OptimizedSlot
    conflicts: list[str] = Field(default_factory=list)

    @property
    def moved(self) -> bool:
        return (
            self.optimized.date != self.original.preferred_date
            or self.optimized.time_slot != self.original.preferred_time_slot
        )
