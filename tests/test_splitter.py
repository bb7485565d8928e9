"""Tests für flache Sicht, Gruppierung und Zerlegung nach Dauer."""

import pytest

from models.free_slot import FreeSlot
from timetable import (
    format_time_slot,
    get_all_free_slots,
    group_by_day,
    split_all_slots_by_duration,
    split_slot_by_duration,
)


def _slot(start: str, end: str, day: str = "MON", code=None) -> FreeSlot:
    return FreeSlot(day=day, start=start, end=end, code=code)


# ─── FLACHE SICHT ─────────────────────────────────────────────────────────────

class TestFreeIntervals:
    def test_flatten_keeps_day_order(self):
        schedule = {
            "MON": [_slot("08:00", "08:50"), _slot("10:00", "10:50")],
            "TUE": [],
            "WED": [_slot("09:00", "09:50", day="WED")],
        }
        flat = get_all_free_slots(schedule)
        assert [(s.day, s.start) for s in flat] == [
            ("MON", "08:00"), ("MON", "10:00"), ("WED", "09:00")]

    def test_flatten_stamps_day_from_key(self):
        """Der Tag kommt aus dem Schlüssel, nicht aus dem Slot."""
        flat = get_all_free_slots({"FRI": [_slot("08:00", "08:50", day="MON")]})
        assert flat[0].day == "FRI"

    def test_empty_schedule(self):
        assert get_all_free_slots({}) == []

    def test_group_by_day_inverse(self):
        schedule = {
            "MON": [_slot("08:00", "08:50")],
            "THU": [_slot("11:00", "11:50", day="THU"), _slot("12:00", "12:50", day="THU")],
        }
        assert group_by_day(get_all_free_slots(schedule)) == schedule

    def test_format_time_slot(self):
        assert format_time_slot(_slot("10:00", "10:50")) == "MON, 10:00 - 10:50"
        assert str(_slot("10:00", "10:50")) == "MON, 10:00 - 10:50"


# ─── ZERLEGUNG ────────────────────────────────────────────────────────────────

class TestSplitter:
    def test_exact_division(self):
        """90 Minuten / 30 → 3 Slots."""
        pieces = split_slot_by_duration(_slot("09:00", "10:30"), 30)
        assert [(p.start, p.end) for p in pieces] == [
            ("09:00", "09:30"), ("09:30", "10:00"), ("10:00", "10:30")]

    def test_remainder_dropped(self):
        """40 Minuten / 30 → 1 Slot, Rest verworfen."""
        pieces = split_slot_by_duration(_slot("10:00", "10:40"), 30)
        assert [(p.start, p.end) for p in pieces] == [("10:00", "10:30")]

    def test_interval_shorter_than_duration(self):
        assert split_slot_by_duration(_slot("10:00", "10:20"), 30) == []

    def test_day_and_code_propagated(self):
        pieces = split_slot_by_duration(_slot("14:00", "14:50", day="TUE", code="A2"), 15)
        assert len(pieces) == 3
        assert all(p.day == "TUE" and p.code == "A2" for p in pieces)

    def test_crossing_hour(self):
        pieces = split_slot_by_duration(_slot("09:50", "10:40"), 25)
        assert [(p.start, p.end) for p in pieces] == [("09:50", "10:15"), ("10:15", "10:40")]

    @pytest.mark.parametrize("duration", [0, -15])
    def test_non_positive_duration_rejected(self, duration):
        with pytest.raises(ValueError):
            split_slot_by_duration(_slot("09:00", "10:00"), duration)

    @pytest.mark.parametrize("duration", [15.0, "15", True])
    def test_non_integer_duration_rejected(self, duration):
        with pytest.raises(ValueError):
            split_slot_by_duration(_slot("09:00", "10:00"), duration)

    def test_split_all_keeps_order(self):
        slots = [_slot("08:00", "08:50"), _slot("10:00", "10:30", day="WED")]
        pieces = split_all_slots_by_duration(slots, 20)
        assert [(p.day, p.start) for p in pieces] == [
            ("MON", "08:00"), ("MON", "08:20"), ("WED", "10:00")]

    def test_split_all_validates_even_when_empty(self):
        with pytest.raises(ValueError):
            split_all_slots_by_duration([], 0)
