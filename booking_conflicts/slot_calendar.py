"""
Slot calendar: the bookable start times of a day under a rule set.

All functions here are pure functions of their arguments. Times are
``HH:MM`` strings; working hours and breaks are half-open ranges.
"""

import datetime as dt
from typing import Iterable, Optional

from booking_conflicts.config import SchedulingRules
from booking_conflicts.schemas.booking_schema import SuggestedSlot
from booking_conflicts.utils import TimeWindow, format_time_slot, parse_time_slot

MAX_SUGGESTIONS = 3

WEEKDAY_NAMES: dict[str, tuple[str, ...]] = {
    "en": ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
    "ar": ("الإثنين", "الثلاثاء", "الأربعاء", "الخميس", "الجمعة", "السبت", "الأحد"),
}


def generate_time_slots(rules: SchedulingRules) -> list[str]:
    """Every slot start from opening time, skipping slots that touch a break.

    A slot is kept only if ``[start, start + slot_minutes)`` ends by closing
    time and does not intersect any break window.
    """
    opening = rules.working_hours.start_minutes
    closing = rules.working_hours.end_minutes
    breaks = [TimeWindow(b.start_minutes, b.end_minutes) for b in rules.break_times]

    slots = []
    for start in range(opening, closing, rules.slot_minutes):
        window = TimeWindow(start, start + rules.slot_minutes)
        if window.end > closing or any(window.overlaps(b) for b in breaks):
            continue
        slots.append(format_time_slot(start))
    return slots


def is_within_working_hours(time_slot: str, rules: SchedulingRules) -> bool:
    return rules.working_hours.contains(time_slot)


def is_during_break(time_slot: str, rules: SchedulingRules) -> bool:
    return any(window.contains(time_slot) for window in rules.break_times)


def is_date_blocked(date: dt.date, rules: SchedulingRules) -> bool:
    return any(blocked.date == date for blocked in rules.blocked_dates)


def blocked_reason(date: dt.date, rules: SchedulingRules) -> Optional[str]:
    for blocked in rules.blocked_dates:
        if blocked.date == date:
            return blocked.reason or "Date is closed for bookings"
    return None


def is_closed_weekday(date: dt.date, rules: SchedulingRules) -> bool:
    return date.weekday() in rules.closed_weekdays


def weekday_label(date: dt.date, rules: SchedulingRules) -> str:
    """Localized ``<weekday> <dd/mm/yyyy>`` label for an alternative date."""
    names = WEEKDAY_NAMES[rules.locale]
    return f"{names[date.weekday()]} {date.strftime('%d/%m/%Y')}"


def suggest_time_slots(
    date: dt.date,
    rules: SchedulingRules,
    conflicting_slots: Iterable[str],
    limit: int = MAX_SUGGESTIONS,
) -> list[SuggestedSlot]:
    """Calendar slots other than the known-conflicting ones.

    This is a cheap heuristic attached to individual conflicts; it does not
    re-check the suggested slots against the store.
    """
    excluded = {parse_time_slot(slot) for slot in conflicting_slots}
    suggestions = []
    for slot in generate_time_slots(rules):
        if parse_time_slot(slot) in excluded:
            continue
        suggestions.append(SuggestedSlot(date=date, time_slot=slot, reason="Time slot available"))
        if len(suggestions) >= limit:
            break
    return suggestions
