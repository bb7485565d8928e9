"""Datenmodell für ein freies Zeitfenster (Pydantic v2)."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class FreeSlot(BaseModel):
    """Ein zusammenhängendes, buchbares Kandidaten-Intervall.

    Entsteht beim Parsen (eine freie Periode) oder beim Zerlegen nach Dauer.
    `code` trägt das ursprüngliche Theorie-Kürzel, nur zur Anzeige.
    """

    model_config = ConfigDict(frozen=True)

    day: str                    # "MON" .. "FRI"
    start: str                  # "HH:MM"
    end: str                    # "HH:MM"
    code: Optional[str] = None  # z.B. "A1" oder None

    def __str__(self) -> str:
        return f"{self.day}, {self.start} - {self.end}"


# Wochentag → freie Slots, aufsteigend nach Beginn
Schedule = dict[str, list[FreeSlot]]


class TimetableRecord(BaseModel):
    """Gespeicherter Stundenplan einer Lehrperson (Rohtext + geparste Sicht)."""

    id: int
    faculty_id: int
    raw_text: str
    schedule: dict[str, list[FreeSlot]]
    created_at: datetime
