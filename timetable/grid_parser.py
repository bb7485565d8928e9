"""Parser für kopierte Wochen-Stundenpläne (tab-getrennter Text).

Aufbau des Rohtexts:
  Zeile 0   THEORY <Tab> Start <Tab> 08:00 <Tab> 08:55 ... Lunch ...
  Zeile 1   End <Tab> 08:50 <Tab> 09:45 ... Lunch ...
  Zeile 2   LAB <Tab> Start <Tab> 08:00 ...
  Zeile 3   End <Tab> 08:50 ...
  danach    je Wochentag eine Theorie-Zeile und eine Labor-Zeile

Spaltenzuordnung über ein explizites Spaltenschema (GridSchema): Die
Beginn-Zeile legt fest, an welchen Positionen Mittagsspalten stehen. Alle
weiteren Zeilen des Blocks müssen exakt diese Breite haben; Mittagsspalten
werden positionsgenau entfernt. Abweichungen führen sofort zu ParseError
statt zu einer stillen Verschiebung.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config.schema import ParserConfig
from models.free_slot import FreeSlot, Schedule
from models.timeslot import TimeSlotTiming, normalize_time

logger = logging.getLogger(__name__)

_EMPTY_CELL = "-"


class ParseErrorKind(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    COLUMN_MISMATCH = "column_mismatch"
    INVALID_TIME = "invalid_time"
    MALFORMED = "malformed"


class ParseError(Exception):
    """Stundenplan-Text ist strukturell ungültig. Es gibt nie ein Teilergebnis."""

    def __init__(self, message: str,
                 kind: ParseErrorKind = ParseErrorKind.MALFORMED) -> None:
        super().__init__(message)
        self.kind = kind


# ─── Zell-Regeln ──────────────────────────────────────────────────────────────

def is_occupied_slot(value: Optional[str], marker: str = "-ALL") -> bool:
    """Belegt nur mit Bindestrich UND Raum-Markierung, z.B. "A1-CSE1001-ETH-SJT101-ALL".

    "CS101", "-", "" und "CS101-L1" gelten als frei.
    """
    return bool(value) and "-" in value and marker in value


def lab_window(lab_slots: list[TimeSlotTiming], index: int) -> TimeSlotTiming:
    """Zeitfenster einer Laborsitzung ab Periode `index`.

    Eine Laborsitzung belegt zwei aufeinanderfolgende Perioden; in der
    letzten Periode nur diese eine.
    """
    start = lab_slots[index].start
    if index + 1 < len(lab_slots):
        return TimeSlotTiming(start=start, end=lab_slots[index + 1].end)
    return TimeSlotTiming(start=start, end=lab_slots[index].end)


def is_time_in_lab_session(time: str, lab_slots: list[TimeSlotTiming],
                           lab_classes: list[str], marker: str = "-ALL") -> bool:
    """True wenn `time` (inklusiv) in einer belegten Laborsitzung liegt."""
    for i, lab_class in enumerate(lab_classes):
        if i >= len(lab_slots) or not is_occupied_slot(lab_class, marker):
            continue
        if lab_window(lab_slots, i).contains(time):
            return True
    return False


# ─── Spaltenschema ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GridSchema:
    """Rohspalten eines Blocks (Theorie oder Labor) nach den Kopffeldern.

    width: Anzahl Rohspalten inkl. Mittagsspalten
    lunch_positions: Positionen der Mittagsspalten (tragen keine Periode)
    """

    label: str
    width: int
    lunch_positions: frozenset[int]

    @property
    def period_count(self) -> int:
        return self.width - len(self.lunch_positions)

    def periods(self, cells: list[str]) -> list[str]:
        """Entfernt die Mittagsspalten positionsgenau."""
        return [c for i, c in enumerate(cells) if i not in self.lunch_positions]

    def check_width(self, cells: list[str], row_name: str) -> None:
        if len(cells) != self.width:
            raise ParseError(
                f"{row_name}: {len(cells)} Spalten, erwartet {self.width} "
                f"(Spaltenschema {self.label})",
                ParseErrorKind.COLUMN_MISMATCH,
            )


# ─── Parser ───────────────────────────────────────────────────────────────────

class TimetableGridParser:
    """Wandelt Rohtext in einen Schedule (Wochentag → freie Perioden).

    Verwendung:
        schedule = TimetableGridParser(config).parse(raw_text)
    """

    def __init__(self, config: Optional[ParserConfig] = None) -> None:
        self.config = config or ParserConfig()

    def parse(self, raw_text: str) -> Schedule:
        try:
            return self._parse(raw_text)
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(
                f"Fehler beim Parsen des Stundenplans: {e}"
            ) from e

    def _parse(self, raw_text: str) -> Schedule:
        cfg = self.config
        lines = self._split_lines(raw_text)
        if len(lines) < cfg.min_lines:
            raise ParseError(
                f"Ungültiges Stundenplan-Format: zu wenige Daten "
                f"({len(lines)} Zeilen, mindestens {cfg.min_lines} nötig)",
                ParseErrorKind.INSUFFICIENT_DATA,
            )

        theory_schema, theory_slots = self._read_timing_block(
            lines[0], lines[1], "THEORY")
        lab_schema, lab_slots = self._read_timing_block(
            lines[2], lines[3], "LAB")
        if theory_schema.period_count != lab_schema.period_count:
            raise ParseError(
                f"Theorie ({theory_schema.period_count}) und Labor "
                f"({lab_schema.period_count}) haben unterschiedlich viele Perioden",
                ParseErrorKind.COLUMN_MISMATCH,
            )

        schedule: Schedule = {}
        current = cfg.timing_lines
        for day in cfg.day_codes:
            theory_cells = self._read_class_row(
                lines[current], theory_schema, f"{day} Theorie")
            lab_cells = self._read_class_row(
                lines[current + 1], lab_schema, f"{day} Labor")
            schedule[day] = self._free_slots_for_day(
                day, theory_cells, lab_cells, theory_slots, lab_slots)
            current += 2

        logger.debug(
            f"Stundenplan geparst: {theory_schema.period_count} Perioden, "
            f"{sum(len(s) for s in schedule.values())} freie Slots"
        )
        return schedule

    # ─── Zeilen ───

    @staticmethod
    def _split_lines(raw_text: str) -> list[str]:
        """Nicht-leere Zeilen; Tabs am Zeilenende bleiben erhalten (leere Zellen)."""
        result = []
        for line in raw_text.splitlines():
            cleaned = line.lstrip().rstrip("\r\n ")
            if cleaned.strip():
                result.append(cleaned)
        return result

    @staticmethod
    def _fields(line: str, header_fields: int) -> list[str]:
        return [c.strip() for c in line.split("\t")[header_fields:]]

    def _read_timing_block(self, start_line: str, end_line: str,
                           label: str) -> tuple[GridSchema, list[TimeSlotTiming]]:
        cfg = self.config
        starts = self._trim_trailing(self._fields(start_line, cfg.start_row_header_fields))
        ends = self._trim_trailing(self._fields(end_line, cfg.end_row_header_fields))

        schema = GridSchema(
            label=label,
            width=len(starts),
            lunch_positions=frozenset(
                i for i, v in enumerate(starts) if v == cfg.lunch_label),
        )
        if schema.period_count == 0:
            raise ParseError(f"{label}: keine Perioden-Uhrzeiten gefunden",
                             ParseErrorKind.MALFORMED)
        schema.check_width(ends, f"{label} Ende")
        end_lunch = frozenset(i for i, v in enumerate(ends) if v == cfg.lunch_label)
        if end_lunch != schema.lunch_positions:
            raise ParseError(
                f"{label}: Mittagsspalte in Beginn- und Ende-Zeile an "
                f"unterschiedlichen Positionen",
                ParseErrorKind.COLUMN_MISMATCH,
            )

        try:
            slots = [
                TimeSlotTiming(start=normalize_time(s), end=normalize_time(e))
                for s, e in zip(schema.periods(starts), schema.periods(ends))
            ]
        except ValueError as e:
            raise ParseError(f"{label}: {e}", ParseErrorKind.INVALID_TIME) from e
        return schema, slots

    def _read_class_row(self, line: str, schema: GridSchema, row_name: str) -> list[str]:
        cells = self._fields(line, self.config.class_row_header_fields)
        # Überzählige leere Zellen am Ende (Tabs) sind unkritisch
        while len(cells) > schema.width and not cells[-1]:
            cells.pop()
        schema.check_width(cells, row_name)
        return schema.periods(cells)

    @staticmethod
    def _trim_trailing(fields: list[str]) -> list[str]:
        while fields and not fields[-1]:
            fields.pop()
        return fields

    # ─── Freie Perioden ───

    def _free_slots_for_day(self, day: str, theory_cells: list[str],
                            lab_cells: list[str],
                            theory_slots: list[TimeSlotTiming],
                            lab_slots: list[TimeSlotTiming]) -> list[FreeSlot]:
        cfg = self.config
        marker = cfg.occupied_marker
        free: list[FreeSlot] = []
        for i, timing in enumerate(theory_slots):
            cell = theory_cells[i]

            # Mittagsfenster
            if timing.start >= cfg.lunch_start and timing.end <= cfg.lunch_end:
                continue
            # Laborsitzung über zwei Perioden
            if (is_time_in_lab_session(timing.start, lab_slots, lab_cells, marker)
                    or is_time_in_lab_session(timing.end, lab_slots, lab_cells, marker)):
                continue
            if is_occupied_slot(cell, marker):
                continue

            free.append(FreeSlot(
                day=day,
                start=timing.start,
                end=timing.end,
                code=cell if cell and cell != _EMPTY_CELL else None,
            ))

        free.sort(key=lambda s: s.start)
        return free


def parse_timetable_slots(raw_text: str,
                          config: Optional[ParserConfig] = None) -> Schedule:
    """Parst Rohtext zu einem Schedule. Wirft ParseError bei ungültigem Format."""
    return TimetableGridParser(config).parse(raw_text)
