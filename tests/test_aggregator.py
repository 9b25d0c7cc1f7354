"""Tests for the conflict aggregator: check ordering, short circuits and results."""

import datetime as dt
import logging
from dataclasses import replace

import pytest
from pydantic import ValidationError

from booking_conflicts.aggregator import ConflictAggregator
from booking_conflicts.config import BlockedDate, EngineConfig, SchedulingRules
from booking_conflicts.errors import StoreError, StoreUnavailableError
from booking_conflicts.logging_context import NO_CHECK_ID, get_check_id, reset_check_id, set_check_id
from booking_conflicts.schemas.booking_schema import (
    AlternativeDay,
    ConflictEntry,
    ConflictResult,
    ConflictType,
    Severity,
)
from booking_conflicts.store.memory import InMemoryBookingStore
from tests.conftest import MONDAY, make_booking, make_request


class UnreachableStore(InMemoryBookingStore):
    """Store whose reads fail as if the database were down."""

    def get_vehicle(self, vehicle_id):
        raise StoreUnavailableError("connection refused")

    def count_bookings(self, date, exclude_booking_id=None):
        raise StoreUnavailableError("connection refused")


class TestCalendarShortCircuits:
    def test_blocked_date_offers_next_week(self, store):
        rules = replace(SchedulingRules(), blocked_dates=(BlockedDate(MONDAY, "Stocktake"),))
        aggregator = ConflictAggregator(store, rules)
        result = aggregator.check_conflicts(make_request("10:00", vehicle_id="V-SOLD"))

        assert result.has_conflicts is True
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.type == ConflictType.TIME_SLOT_FULL
        assert conflict.severity == Severity.HIGH
        assert "Stocktake" in conflict.message

    def test_blocked_date_alternatives_skip_weekend_and_cap_at_five(self, store):
        rules = replace(SchedulingRules(), blocked_dates=(BlockedDate(MONDAY, "Stocktake"),))
        aggregator = ConflictAggregator(store, rules)
        result = aggregator.check_conflicts(make_request("10:00"))
        assert [alt.date for alt in result.available_alternatives] == [
            MONDAY + dt.timedelta(days=d) for d in (1, 2, 3, 4, 7)
        ]
        assert result.available_alternatives[0].reason == "Tuesday 18/03/2025"
        assert all(alt.time_slots for alt in result.available_alternatives)

    def test_closing_time_rejected(self, aggregator):
        result = aggregator.check_conflicts(make_request("18:00", vehicle_id="V1"))
        assert [c.type for c in result.conflicts] == [ConflictType.TIME_SLOT_FULL]
        assert result.conflicts[0].severity == Severity.HIGH
        assert "outside working hours" in result.conflicts[0].message
        assert result.available_alternatives[0].date == MONDAY
        assert result.available_alternatives[0].reason == "Available same day"

    def test_before_opening_rejected(self, aggregator):
        result = aggregator.check_conflicts(make_request("07:00"))
        assert result.has_conflicts is True

    def test_opening_time_accepted(self, aggregator):
        result = aggregator.check_conflicts(make_request("08:00", vehicle_id="V1"))
        assert result.has_conflicts is False

    def test_break_rejected_with_neighbouring_slots(self, aggregator):
        result = aggregator.check_conflicts(make_request("13:30", vehicle_id="V1"))
        assert [c.type for c in result.conflicts] == [ConflictType.TIME_SLOT_FULL]
        assert result.conflicts[0].severity == Severity.MEDIUM
        same_day = result.available_alternatives[0].time_slots
        assert "12:00" in same_day
        assert "14:00" in same_day
        assert "13:00" not in same_day

    def test_short_circuit_skips_resource_checks(self, store):
        # A sold vehicle would add a conflict if the checkers ran.
        aggregator = ConflictAggregator(store)
        result = aggregator.check_conflicts(make_request("13:00", vehicle_id="V-SOLD"))
        assert [c.type for c in result.conflicts] == [ConflictType.TIME_SLOT_FULL]


class TestResourceConflicts:
    def test_clear_result(self, aggregator):
        result = aggregator.check_conflicts(
            make_request("10:00", vehicle_id="V1", service_type_ids=["OIL"])
        )
        assert result == ConflictResult(has_conflicts=False, conflicts=[], available_alternatives=[])

    def test_vehicle_clash_offers_same_day_then_next_days(self, store, aggregator):
        store.add_booking(make_booking("10:00", vehicle_id="V1"))
        result = aggregator.check_conflicts(make_request("10:30", vehicle_id="V1"))

        assert [c.type for c in result.conflicts] == [ConflictType.VEHICLE_UNAVAILABLE]
        first = result.available_alternatives[0]
        assert first.date == MONDAY
        assert first.time_slots == ["08:00", "12:00", "14:00", "15:00", "16:00", "17:00"]
        assert [alt.date for alt in result.available_alternatives[1:]] == [
            MONDAY + dt.timedelta(days=d) for d in (1, 2, 3)
        ]

    def test_conflicts_from_several_checkers_are_concatenated(self, store):
        rules = replace(SchedulingRules(), max_bookings_per_day=1)
        aggregator = ConflictAggregator(store, rules)
        store.add_booking(make_booking("10:00", vehicle_id="V1"))
        result = aggregator.check_conflicts(make_request("10:00", vehicle_id="V1"))

        assert [c.type for c in result.conflicts] == [
            ConflictType.VEHICLE_UNAVAILABLE,
            ConflictType.TIME_SLOT_FULL,
        ]
        # The day is full, so only later days are offered.
        assert all(alt.date > MONDAY for alt in result.available_alternatives)
        assert result.available_alternatives

    def test_suggestions_attached_on_full_check(self, store, aggregator):
        store.add_booking(make_booking("10:00", vehicle_id="V1"))
        result = aggregator.check_conflicts(make_request("10:00", vehicle_id="V1"))
        assert result.conflicts[0].suggested_alternatives

    def test_request_buffer_overrides_rule(self, store, aggregator):
        store.add_booking(make_booking("10:00", vehicle_id="V1"))
        assert aggregator.check_conflicts(
            make_request("11:00", vehicle_id="V1", buffer_minutes=0)
        ).has_conflicts is False
        assert aggregator.check_conflicts(
            make_request("11:00", vehicle_id="V1")
        ).has_conflicts is True

    def test_alternatives_on_every_conflict_when_reachable(self, store, aggregator):
        for slot in ("08:00", "10:00", "12:00", "14:00", "16:00"):
            store.add_booking(make_booking(slot, vehicle_id="V1"))
        result = aggregator.check_conflicts(make_request("09:00", vehicle_id="V1"))
        assert result.has_conflicts is True
        assert result.available_alternatives
        assert result.available_alternatives[0].date > MONDAY


class TestFaults:
    def test_store_failure_propagates_from_vehicle_read(self):
        aggregator = ConflictAggregator(UnreachableStore())
        with pytest.raises(StoreUnavailableError):
            aggregator.check_conflicts(make_request("10:00", vehicle_id="V1"))

    def test_store_failure_propagates_from_daily_count(self):
        aggregator = ConflictAggregator(UnreachableStore())
        with pytest.raises(StoreError):
            aggregator.check_conflicts(make_request("10:00"))

    def test_invalid_time_slot_rejected(self):
        with pytest.raises(ValidationError):
            make_request("quarter past ten")

    def test_time_slot_is_zero_padded(self):
        assert make_request("9:5").time_slot == "09:05"

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValidationError):
            make_request("10:00", duration_minutes=0)

    def test_negative_buffer_rejected(self):
        with pytest.raises(ValidationError):
            make_request("10:00", buffer_minutes=-5)


class TestCheckCorrelation:
    def test_check_id_assigned_and_restored(self, aggregator, caplog):
        caplog.set_level(logging.INFO, logger="booking_conflicts.aggregator")
        aggregator.check_conflicts(make_request("10:00"))
        assert get_check_id() == NO_CHECK_ID
        ids = {r.check_id for r in caplog.records if r.name == "booking_conflicts.aggregator"}
        assert len(ids) == 1
        assert ids.pop().startswith("CHK-")

    def test_existing_check_id_kept(self, aggregator, caplog):
        caplog.set_level(logging.INFO, logger="booking_conflicts.aggregator")
        token = set_check_id("REQ-42")
        try:
            aggregator.check_conflicts(make_request("10:00"))
        finally:
            reset_check_id(token)
        assert {
            r.check_id for r in caplog.records if r.name == "booking_conflicts.aggregator"
        } == {"REQ-42"}


class TestConflictResultInvariants:
    def _conflict(self):
        return ConflictEntry(
            type=ConflictType.TIME_SLOT_FULL, message="full", severity=Severity.HIGH
        )

    def test_flag_must_match_conflicts(self):
        with pytest.raises(ValidationError):
            ConflictResult(has_conflicts=True, conflicts=[])

    def test_no_alternatives_without_conflicts(self):
        with pytest.raises(ValidationError):
            ConflictResult(
                has_conflicts=False,
                available_alternatives=[
                    AlternativeDay(date=MONDAY, time_slots=["08:00"], reason="x")
                ],
            )

    def test_alternative_needs_slots(self):
        with pytest.raises(ValidationError):
            ConflictResult(
                has_conflicts=True,
                conflicts=[self._conflict()],
                available_alternatives=[AlternativeDay(date=MONDAY, time_slots=[], reason="x")],
            )

    def test_conflicting_truncates_to_five(self):
        days = [
            AlternativeDay(date=MONDAY + dt.timedelta(days=d), time_slots=["08:00"], reason="x")
            for d in range(1, 8)
        ]
        result = ConflictResult.conflicting([self._conflict()], days)
        assert len(result.available_alternatives) == 5
        assert result.messages == ["full"]


class TestFromConfig:
    def test_roster_headcount_from_config(self, store):
        config = EngineConfig(staff_headcount=0)
        aggregator = ConflictAggregator.from_config(store, config)
        result = aggregator.check_conflicts(make_request("10:00"))
        assert ConflictType.STAFF_UNAVAILABLE in [c.type for c in result.conflicts]

    def test_strict_references_from_config(self, store):
        aggregator = ConflictAggregator.from_config(store, EngineConfig(strict_references=True))
        assert aggregator.strict_references is True
        assert aggregator.vehicle.strict_references is True
