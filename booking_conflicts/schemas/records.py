"""Read-only views of records owned by the booking store."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class VehicleStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    MAINTENANCE = "MAINTENANCE"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"


# Bookings in any other status never block a slot.
ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class VehicleRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: VehicleStatus


class ServiceTypeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    duration: int


class BookingRecord(BaseModel):
    """A test-drive (vehicle_id set) or service visit (service_type_id set)."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: dt.date
    time_slot: str
    status: BookingStatus = BookingStatus.PENDING
    vehicle_id: Optional[str] = None
    service_type_id: Optional[str] = None
    duration_minutes: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
