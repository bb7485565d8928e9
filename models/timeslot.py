"""Datenmodell für eine Periodengrenze im Wochenraster + Uhrzeit-Hilfen."""

import re
from dataclasses import dataclass

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_time(value: str) -> str:
    """Normalisiert "9:05" → "09:05". Wirft ValueError bei ungültiger Uhrzeit.

    Alle Vergleiche im Projekt sind String-Vergleiche auf "HH:MM" und
    setzen daher führende Nullen voraus.
    """
    m = _TIME_RE.match(value.strip())
    if not m:
        raise ValueError(f"Ungültige Uhrzeit: {value!r} (erwartet HH:MM)")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Ungültige Uhrzeit: {value!r}")
    return f"{hours:02d}:{minutes:02d}"


def to_minutes(value: str) -> int:
    """"10:50" → 650 (Minuten seit Mitternacht)."""
    hours, minutes = normalize_time(value).split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(total: int) -> str:
    """650 → "10:50"."""
    return f"{total // 60:02d}:{total % 60:02d}"


@dataclass(frozen=True)
class TimeSlotTiming:
    """Beginn und Ende einer Theorie- oder Laborperiode.

    Immutable (frozen=True); indiziert über die Periodenposition im Raster.
    """

    start: str
    end: str

    @property
    def duration_minutes(self) -> int:
        return to_minutes(self.end) - to_minutes(self.start)

    def contains(self, time: str) -> bool:
        """Inklusiver Test start <= time <= end."""
        return self.start <= time <= self.end

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"
