"""Tests für den Stundenplan-Parser (Rohtext → freie Perioden)."""

import pytest

from config.schema import ParserConfig
from data.demo_data import render_timetable
from models.timeslot import TimeSlotTiming
from timetable import (
    ParseError,
    ParseErrorKind,
    is_occupied_slot,
    is_time_in_lab_session,
    parse_timetable_slots,
)

DAYS = ParserConfig().day_codes

THEORY = [
    TimeSlotTiming("08:20", "09:10"),
    TimeSlotTiming("09:10", "10:00"),
    TimeSlotTiming("10:00", "10:50"),
    TimeSlotTiming("10:50", "11:40"),
    TimeSlotTiming("11:40", "12:30"),
]

# Laborperioden beginnen eine Minute nach der Vorperiode
LAB = [
    TimeSlotTiming("08:21", "09:10"),
    TimeSlotTiming("09:11", "10:00"),
    TimeSlotTiming("10:01", "10:50"),
    TimeSlotTiming("10:51", "11:40"),
    TimeSlotTiming("11:41", "12:30"),
]

LAB_CLASS = "L{}-EEE101-ELA-TT302-ALL"


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _free_week(theory=THEORY, lab=LAB) -> dict:
    return {
        d: (["-"] * len(theory), [f"L{i + 1}" for i in range(len(lab))])
        for d in DAYS
    }


def _timetable(overrides: dict = None, theory=THEORY, lab=LAB,
               lunch_before=None) -> str:
    days = _free_week(theory, lab)
    days.update(overrides or {})
    return render_timetable(theory, lab, days, lunch_before=lunch_before)


def _starts(slots) -> list[str]:
    return [s.start for s in slots]


# ─── ZELL-REGELN ──────────────────────────────────────────────────────────────

class TestOccupiedRule:
    @pytest.mark.parametrize("value", ["CS101", "-", "", None, "CS101-L1"])
    def test_free_values(self, value):
        """Ohne Bindestrich UND "-ALL" gilt eine Zelle als frei."""
        assert not is_occupied_slot(value)

    def test_occupied_value(self):
        assert is_occupied_slot("A1-CSE1001-ETH-SJT101-ALL")

    def test_custom_marker(self):
        """Die Raum-Markierung ist konfigurierbar."""
        assert is_occupied_slot("A1-CSE1001-X", marker="-X")
        assert not is_occupied_slot("A1-CSE1001-ALL", marker="-X")


class TestLabSession:
    def test_session_covers_two_periods(self):
        """Laborsitzung ab Periode 3 reicht bis zum Ende von Periode 4."""
        lab_classes = ["L1", "L2", "L3", LAB_CLASS.format(4), "L5"]
        assert is_time_in_lab_session("10:51", LAB, lab_classes)
        assert is_time_in_lab_session("12:30", LAB, lab_classes)
        assert not is_time_in_lab_session("10:50", LAB, lab_classes)

    def test_session_in_last_period(self):
        """In der letzten Periode belegt die Sitzung nur diese eine."""
        lab_classes = ["L1", "L2", "L3", "L4", LAB_CLASS.format(5)]
        assert is_time_in_lab_session("11:41", LAB, lab_classes)
        assert not is_time_in_lab_session("11:40", LAB, lab_classes)

    def test_no_occupied_lab(self):
        assert not is_time_in_lab_session("10:00", LAB, ["L1", "L2", "L3", "L4", "L5"])


# ─── PARSER ───────────────────────────────────────────────────────────────────

class TestParseTimetable:
    def test_all_free_week(self):
        """Leere Woche: alle Perioden an allen Tagen frei."""
        schedule = parse_timetable_slots(_timetable())
        assert list(schedule) == DAYS
        for day in DAYS:
            assert _starts(schedule[day]) == [t.start for t in THEORY]
            assert all(s.day == day for s in schedule[day])

    def test_monday_scenario_lab_suppresses_following_periods(self):
        """Montag: Periode 2 frei (10:00-10:50), Labor auf Perioden 3-4 sperrt diese."""
        lab_cells = ["L1", "L2", "L3", "EEE101-L1-ALL", "L5"]
        schedule = parse_timetable_slots(
            _timetable({"MON": (["-"] * 5, lab_cells)}))

        mon = schedule["MON"]
        assert _starts(mon) == ["08:20", "09:10", "10:00"]
        assert (mon[2].start, mon[2].end) == ("10:00", "10:50")
        # Andere Tage unberührt
        assert len(schedule["TUE"]) == 5

    def test_lab_in_last_period(self):
        """Labor in der letzten Periode sperrt nur diese."""
        lab_cells = ["L1", "L2", "L3", "L4", LAB_CLASS.format(5)]
        schedule = parse_timetable_slots(
            _timetable({"WED": (["-"] * 5, lab_cells)}))
        assert _starts(schedule["WED"]) == ["08:20", "09:10", "10:00", "10:50"]

    def test_occupied_theory_excluded(self):
        theory_cells = ["A1-CSE1001-ETH-SJT101-ALL", "F1", "-", "", "CS101-L1"]
        schedule = parse_timetable_slots(
            _timetable({"THU": (theory_cells, [f"L{i}" for i in range(1, 6)])}))
        assert _starts(schedule["THU"]) == ["09:10", "10:00", "10:50", "11:40"]

    def test_code_carried_for_display(self):
        """Kürzel bleibt erhalten; "-" und leere Zellen ergeben None."""
        theory_cells = ["A1", "-", "", "TB1", "TG1"]
        schedule = parse_timetable_slots(
            _timetable({"MON": (theory_cells, [f"L{i}" for i in range(1, 6)])}))
        assert [s.code for s in schedule["MON"]] == ["A1", None, None, "TB1", "TG1"]

    def test_lunch_period_excluded(self):
        """Perioden vollständig im Mittagsfenster (13:25-14:00) sind nie frei."""
        theory = [TimeSlotTiming("12:35", "13:25"), TimeSlotTiming("13:25", "14:00"),
                  TimeSlotTiming("14:00", "14:50")]
        lab = [TimeSlotTiming("12:36", "13:25"), TimeSlotTiming("13:26", "14:00"),
               TimeSlotTiming("14:01", "14:50")]
        schedule = parse_timetable_slots(_timetable(theory=theory, lab=lab))
        assert _starts(schedule["FRI"]) == ["12:35", "14:00"]

    def test_lunch_column_is_skipped(self):
        """Eine Mittagsspalte verschiebt die Zuordnung der Perioden nicht."""
        theory_cells = ["-", "-", "A1-CSE1001-ETH-SJT101-ALL", "-", "-"]
        text = _timetable({"MON": (theory_cells, [f"L{i}" for i in range(1, 6)])},
                          lunch_before=2)
        assert "Lunch" in text
        schedule = parse_timetable_slots(text)
        assert _starts(schedule["MON"]) == ["08:20", "09:10", "10:50", "11:40"]

    def test_times_normalized(self):
        """"8:20" wird zu "08:20"."""
        theory = [TimeSlotTiming("8:20", "9:10")] + THEORY[1:]
        schedule = parse_timetable_slots(_timetable(theory=theory))
        assert schedule["MON"][0].start == "08:20"
        assert schedule["MON"][0].end == "09:10"

    def test_slots_sorted_by_start(self):
        schedule = parse_timetable_slots(_timetable())
        for slots in schedule.values():
            assert _starts(slots) == sorted(_starts(slots))

    def test_trailing_tabs_and_blank_lines(self):
        """Leere Zeilen und Tabs am Zeilenende stören nicht."""
        text = "\n\n" + _timetable().replace("\n", "\t\t\n", 6) + "\n\n"
        schedule = parse_timetable_slots(text)
        assert len(schedule["MON"]) == 5

    def test_windows_line_endings(self):
        schedule = parse_timetable_slots(_timetable().replace("\n", "\r\n"))
        assert len(schedule["FRI"]) == 5


class TestParseErrors:
    def test_insufficient_lines(self):
        lines = _timetable().splitlines()
        with pytest.raises(ParseError) as exc:
            parse_timetable_slots("\n".join(lines[:-1]))
        assert exc.value.kind == ParseErrorKind.INSUFFICIENT_DATA

    def test_empty_input(self):
        with pytest.raises(ParseError) as exc:
            parse_timetable_slots("")
        assert exc.value.kind == ParseErrorKind.INSUFFICIENT_DATA

    def test_class_row_too_wide(self):
        """Eine Zeile mit zusätzlicher Zelle verschiebt nicht still, sondern schlägt fehl."""
        theory_cells = ["-"] * 5 + ["X1"]
        with pytest.raises(ParseError) as exc:
            parse_timetable_slots(
                _timetable({"TUE": (theory_cells, [f"L{i}" for i in range(1, 6)])}))
        assert exc.value.kind == ParseErrorKind.COLUMN_MISMATCH

    def test_class_row_too_short(self):
        with pytest.raises(ParseError) as exc:
            parse_timetable_slots(
                _timetable({"TUE": (["-"] * 4, [f"L{i}" for i in range(1, 6)])}))
        assert exc.value.kind == ParseErrorKind.COLUMN_MISMATCH

    def test_theory_lab_period_count_differs(self):
        with pytest.raises(ParseError) as exc:
            parse_timetable_slots(_timetable(lab=LAB[:4]))
        assert exc.value.kind == ParseErrorKind.COLUMN_MISMATCH

    def test_invalid_time(self):
        theory = [TimeSlotTiming("8h20", "09:10")] + THEORY[1:]
        with pytest.raises(ParseError) as exc:
            parse_timetable_slots(_timetable(theory=theory))
        assert exc.value.kind == ParseErrorKind.INVALID_TIME

    def test_no_partial_result(self):
        """Ein Fehler am Freitag liefert kein Teilergebnis für Montag."""
        with pytest.raises(ParseError):
            parse_timetable_slots(
                _timetable({"FRI": (["-"] * 6, [f"L{i}" for i in range(1, 6)])}))
