"""Stundenplan-Pipeline: Rohtext → freie Perioden → Review-Slot-Kandidaten."""

from .grid_parser import (
    GridSchema,
    ParseError,
    ParseErrorKind,
    TimetableGridParser,
    is_occupied_slot,
    is_time_in_lab_session,
    parse_timetable_slots,
)
from .free_intervals import format_time_slot, get_all_free_slots, group_by_day
from .splitter import split_all_slots_by_duration, split_slot_by_duration

__all__ = [
    "GridSchema",
    "ParseError",
    "ParseErrorKind",
    "TimetableGridParser",
    "is_occupied_slot",
    "is_time_in_lab_session",
    "parse_timetable_slots",
    "format_time_slot",
    "get_all_free_slots",
    "group_by_day",
    "split_all_slots_by_duration",
    "split_slot_by_duration",
]
