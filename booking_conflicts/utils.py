"""Time-of-day helpers and standalone booking utilities shared across the engine."""

import math
from dataclasses import dataclass
from datetime import datetime

MINUTES_PER_DAY = 24 * 60
BASE_BUFFER_MINUTES = 15

COMPLEXITY_MULTIPLIERS: dict[str, float] = {
    "SIMPLE": 1.0,
    "MEDIUM": 1.5,
    "COMPLEX": 2.0,
}


def parse_time_slot(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes since midnight.

    Examples:
        >>> parse_time_slot("09:30")
        570
        >>> parse_time_slot("00:00")
        0
    """
    try:
        parsed = datetime.strptime(value.strip(), "%H:%M")
    except (ValueError, AttributeError):
        raise ValueError(f"Invalid time slot {value!r}, expected HH:MM") from None
    return parsed.hour * 60 + parsed.minute


def format_time_slot(minutes: int) -> str:
    """Convert minutes since midnight back to ``HH:MM``.

    Examples:
        >>> format_time_slot(570)
        '09:30'
    """
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minute offset out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start, end)`` in minutes since midnight."""

    start: int
    end: int

    @classmethod
    def from_slot(cls, time_slot: str, duration_minutes: int) -> "TimeWindow":
        start = parse_time_slot(time_slot)
        return cls(start, start + duration_minutes)

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and other.start < self.end

    def expanded(self, buffer_minutes: int) -> "TimeWindow":
        """Widen the window by ``buffer_minutes`` on both sides."""
        return TimeWindow(self.start - buffer_minutes, self.end + buffer_minutes)

    def contains(self, minute: int) -> bool:
        return self.start <= minute < self.end

    def __str__(self) -> str:
        return f"[{_clock(self.start)}, {_clock(self.end)})"


def _clock(minutes: int) -> str:
    # Buffer expansion can push a window past midnight in either direction.
    sign = "-" if minutes < 0 else ""
    minutes = abs(minutes)
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def calculate_buffer_time(service_duration: int, complexity: str = "MEDIUM") -> int:
    """Suggested spacing in minutes after a service of the given duration.

    Scales the 15 minute base buffer by job complexity and by the service
    length in hours, rounding up.

    Examples:
        >>> calculate_buffer_time(60)
        23
        >>> calculate_buffer_time(120, "COMPLEX")
        60
    """
    try:
        multiplier = COMPLEXITY_MULTIPLIERS[complexity.upper()]
    except KeyError:
        raise ValueError(f"Unknown complexity: {complexity!r}") from None
    return math.ceil(BASE_BUFFER_MINUTES * multiplier * (service_duration / 60))


def do_time_slots_overlap(slot1: str, slot2: str, buffer_minutes: int = 0) -> bool:
    """Check whether two one-hour slots overlap once both are buffer-expanded."""
    first = TimeWindow.from_slot(slot1, 60).expanded(buffer_minutes)
    second = TimeWindow.from_slot(slot2, 60).expanded(buffer_minutes)
    return first.overlaps(second)


def optimize_booking_sequence(bookings: list[dict]) -> list[str]:
    """Order bookings by start time to minimise idle gaps.

    Each booking is a mapping with at least a ``time_slot`` key.
    """
    ordered = sorted(bookings, key=lambda b: parse_time_slot(b["time_slot"]))
    return [b["time_slot"] for b in ordered]
