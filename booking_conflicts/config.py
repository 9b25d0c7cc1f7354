"""
Scheduling rules and engine settings with environment variable overrides.

Rules are plain immutable values. Nothing here is a process-wide singleton:
callers build a ``SchedulingRules`` (directly or via ``rules_from_env``) and
hand it to the ``ConflictAggregator`` they construct, so several rule sets
can live side by side.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from dotenv import load_dotenv

from booking_conflicts.utils import MINUTES_PER_DAY, parse_time_slot

load_dotenv()

logger = logging.getLogger(__name__)

SUPPORTED_LOCALES = ("en", "ar")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class TimeRange:
    """Half-open time-of-day range ``[start, end)`` in ``HH:MM``."""

    start: str
    end: str

    @property
    def start_minutes(self) -> int:
        return parse_time_slot(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_time_slot(self.end)

    def contains(self, time_slot: str) -> bool:
        return self.start_minutes <= parse_time_slot(time_slot) < self.end_minutes


@dataclass(frozen=True)
class BlockedDate:
    """A calendar date closed to all bookings."""

    date: date
    reason: str = ""


@dataclass(frozen=True)
class SchedulingRules:
    """Rule set applied by one ConflictAggregator."""

    max_concurrent_bookings: int = 3
    min_buffer_minutes: int = 15
    max_bookings_per_day: int = 20
    working_hours: TimeRange = TimeRange("08:00", "18:00")
    break_times: tuple[TimeRange, ...] = (TimeRange("13:00", "14:00"),)
    blocked_dates: tuple[BlockedDate, ...] = ()
    slot_minutes: int = 60
    default_duration_minutes: int = 60
    closed_weekdays: tuple[int, ...] = (5, 6)
    locale: str = "en"


@dataclass(frozen=True)
class EngineConfig:
    """Root configuration for an engine instance."""

    rules: SchedulingRules = field(default_factory=SchedulingRules)
    staff_headcount: int = 5
    strict_references: bool = False
    log_level: str = "INFO"


def _parse_time_range(env_var: str, raw: str) -> TimeRange:
    try:
        start, end = (part.strip() for part in raw.split("-"))
        parse_time_slot(start)
        parse_time_slot(end)
    except ValueError:
        raise ValueError(
            f"Invalid time range for {env_var}: {raw!r}, expected HH:MM-HH:MM"
        ) from None
    return TimeRange(start, end)


def _parse_time_ranges(env_var: str, raw: str) -> tuple[TimeRange, ...]:
    return tuple(
        _parse_time_range(env_var, chunk) for chunk in raw.split(",") if chunk.strip()
    )


def _parse_blocked_dates(env_var: str, raw: str) -> tuple[BlockedDate, ...]:
    """Parse ``YYYY-MM-DD=reason`` entries separated by semicolons."""
    blocked = []
    for chunk in raw.split(";"):
        if not chunk.strip():
            continue
        day, _, reason = chunk.partition("=")
        try:
            blocked.append(BlockedDate(date.fromisoformat(day.strip()), reason.strip()))
        except ValueError:
            raise ValueError(f"Invalid date in {env_var}: {day.strip()!r}") from None
    return tuple(blocked)


def _parse_weekdays(env_var: str, raw: str) -> tuple[int, ...]:
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        raise ValueError(f"Invalid weekday list for {env_var}: {raw!r}") from None


def _validate_rules(rules: SchedulingRules) -> None:
    """Validate rule values are within acceptable ranges."""
    if rules.max_concurrent_bookings < 1:
        raise ValueError(
            f"MAX_CONCURRENT_BOOKINGS must be >= 1, got {rules.max_concurrent_bookings}"
        )
    if rules.min_buffer_minutes < 0:
        raise ValueError(
            f"MIN_BUFFER_MINUTES must be >= 0, got {rules.min_buffer_minutes}"
        )
    if rules.max_bookings_per_day < 1:
        raise ValueError(
            f"MAX_BOOKINGS_PER_DAY must be >= 1, got {rules.max_bookings_per_day}"
        )
    if not 1 <= rules.slot_minutes <= MINUTES_PER_DAY:
        raise ValueError(f"SLOT_MINUTES must be between 1 and 1440, got {rules.slot_minutes}")
    if rules.default_duration_minutes < 1:
        raise ValueError(
            f"DEFAULT_DURATION_MINUTES must be >= 1, got {rules.default_duration_minutes}"
        )

    hours = rules.working_hours
    if hours.start_minutes >= hours.end_minutes:
        raise ValueError(
            f"WORKING_HOURS start must be before end, got {hours.start}-{hours.end}"
        )
    for window in rules.break_times:
        if window.start_minutes >= window.end_minutes:
            raise ValueError(
                f"BREAK_TIMES start must be before end, got {window.start}-{window.end}"
            )
        if window.start_minutes < hours.start_minutes or window.end_minutes > hours.end_minutes:
            raise ValueError(
                f"BREAK_TIMES {window.start}-{window.end} falls outside working hours"
            )

    for weekday in rules.closed_weekdays:
        if not 0 <= weekday <= 6:
            raise ValueError(f"CLOSED_WEEKDAYS must be between 0 and 6, got {weekday}")
    if rules.locale not in SUPPORTED_LOCALES:
        raise ValueError(
            f"CALENDAR_LOCALE must be one of {', '.join(SUPPORTED_LOCALES)}, got {rules.locale!r}"
        )


def _validate_config(config: EngineConfig) -> None:
    _validate_rules(config.rules)
    if config.staff_headcount < 0:
        raise ValueError(f"STAFF_HEADCOUNT must be >= 0, got {config.staff_headcount}")


def rules_from_env(defaults: Optional[SchedulingRules] = None) -> SchedulingRules:
    """Build and validate a rule set from environment variables.

    Unset variables fall back to ``defaults`` (or the built-in defaults).
    """
    base = defaults or SchedulingRules()
    working_hours = base.working_hours
    if os.getenv("WORKING_HOURS"):
        working_hours = _parse_time_range("WORKING_HOURS", os.environ["WORKING_HOURS"])
    break_times = base.break_times
    if os.getenv("BREAK_TIMES") is not None:
        break_times = _parse_time_ranges("BREAK_TIMES", os.environ["BREAK_TIMES"])
    blocked_dates = base.blocked_dates
    if os.getenv("BLOCKED_DATES"):
        blocked_dates = _parse_blocked_dates("BLOCKED_DATES", os.environ["BLOCKED_DATES"])
    closed_weekdays = base.closed_weekdays
    if os.getenv("CLOSED_WEEKDAYS") is not None:
        closed_weekdays = _parse_weekdays("CLOSED_WEEKDAYS", os.environ["CLOSED_WEEKDAYS"])

    rules = SchedulingRules(
        max_concurrent_bookings=_safe_int(
            "MAX_CONCURRENT_BOOKINGS", str(base.max_concurrent_bookings)
        ),
        min_buffer_minutes=_safe_int("MIN_BUFFER_MINUTES", str(base.min_buffer_minutes)),
        max_bookings_per_day=_safe_int("MAX_BOOKINGS_PER_DAY", str(base.max_bookings_per_day)),
        working_hours=working_hours,
        break_times=break_times,
        blocked_dates=blocked_dates,
        slot_minutes=_safe_int("SLOT_MINUTES", str(base.slot_minutes)),
        default_duration_minutes=_safe_int(
            "DEFAULT_DURATION_MINUTES", str(base.default_duration_minutes)
        ),
        closed_weekdays=closed_weekdays,
        locale=os.getenv("CALENDAR_LOCALE", base.locale),
    )
    _validate_rules(rules)
    return rules


def load_engine_config() -> EngineConfig:
    """Load and validate engine configuration, and set up logging."""
    config = EngineConfig(
        rules=rules_from_env(),
        staff_headcount=_safe_int("STAFF_HEADCOUNT", "5"),
        strict_references=_safe_bool("STRICT_REFERENCES", "false"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info(
        "Scheduling rules loaded: hours %s-%s, %d break(s), %d blocked date(s)",
        config.rules.working_hours.start,
        config.rules.working_hours.end,
        len(config.rules.break_times),
        len(config.rules.blocked_dates),
    )
    return config
