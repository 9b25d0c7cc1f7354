"""Conflict check request, conflict and result models."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from booking_conflicts.utils import format_time_slot, parse_time_slot

MAX_ALTERNATIVES = 5


def check_time_slot(value: str) -> str:
    """Reject anything that is not a valid HH:MM time of day and zero-pad the rest."""
    return format_time_slot(parse_time_slot(value))


class ConflictType(str, Enum):
    VEHICLE_UNAVAILABLE = "VEHICLE_UNAVAILABLE"
    SERVICE_OVERLAP = "SERVICE_OVERLAP"
    STAFF_UNAVAILABLE = "STAFF_UNAVAILABLE"
    TIME_SLOT_FULL = "TIME_SLOT_FULL"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ConflictCheckRequest(BaseModel):
    """A candidate appointment to check. Built per call, never persisted."""

    vehicle_id: Optional[str] = None
    service_type_ids: list[str] = Field(default_factory=list)
    date: dt.date
    time_slot: str
    exclude_booking_id: Optional[str] = None
    buffer_minutes: Optional[int] = Field(default=None, ge=0)
    duration_minutes: Optional[int] = Field(default=None, ge=1)

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, value: str) -> str:
        return check_time_slot(value)


class SuggestedSlot(BaseModel):
    """Narrow suggestion attached by the checker that raised a conflict."""

    date: dt.date
    time_slot: str
    reason: str


class ConflictEntry(BaseModel):
    type: ConflictType
    booking_id: Optional[str] = None
    message: str
    severity: Severity
    suggested_alternatives: list[SuggestedSlot] = Field(default_factory=list)


class AlternativeDay(BaseModel):
    """Conflict-free slots on one date, offered as a substitute."""

    date: dt.date
    time_slots: list[str]
    reason: str


class TimeSlotsResult(BaseModel):
    time_slots: list[str] = Field(default_factory=list)
    reason: Optional[str] = None


class ConflictResult(BaseModel):
    has_conflicts: bool
    conflicts: list[ConflictEntry] = Field(default_factory=list)
    available_alternatives: list[AlternativeDay] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_invariants(self) -> "ConflictResult":
        if self.has_conflicts != bool(self.conflicts):
            raise ValueError("has_conflicts must match whether conflicts were found")
        if self.available_alternatives and not self.has_conflicts:
            raise ValueError("alternatives are only offered for conflicting requests")
        if len(self.available_alternatives) > MAX_ALTERNATIVES:
            raise ValueError(f"at most {MAX_ALTERNATIVES} alternatives may be offered")
        if any(not alt.time_slots for alt in self.available_alternatives):
            raise ValueError("every alternative must offer at least one time slot")
        return self

    @classmethod
    def clear(cls) -> "ConflictResult":
        return cls(has_conflicts=False)

    @classmethod
    def conflicting(
        cls, conflicts: list[ConflictEntry], alternatives: list[AlternativeDay]
    ) -> "ConflictResult":
        return cls(
            has_conflicts=True,
            conflicts=conflicts,
            available_alternatives=alternatives[:MAX_ALTERNATIVES],
        )

    @property
    def messages(self) -> list[str]:
        return [c.message for c in self.conflicts]
