"""Datenmodelle für veröffentlichte Review-Slots und Buchungen (Pydantic v2)."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SlotStatus(str, Enum):
    AVAILABLE = "Available"      # offen, keine Buchung
    BOOKED = "Booked"            # bestätigte Buchung vorhanden
    UNAVAILABLE = "Unavailable"  # geschlossen ohne Buchung


class Slot(BaseModel):
    """Ein persistierter, buchbarer Review-Slot.

    Kapazität 1: `is_available` wird False, sobald eine Buchung existiert.
    """

    id: int
    classroom_id: int
    day: str
    start_time: str
    end_time: str
    duration_minutes: int
    review_stage: str
    is_available: bool = True
    booking_deadline: datetime
    created_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        return f"{self.day}, {self.start_time} - {self.end_time}"

    def is_open_at(self, now: datetime) -> bool:
        """True wenn der Slot zum Zeitpunkt `now` noch buchbar wäre."""
        return self.is_available and now < self.booking_deadline


class Booking(BaseModel):
    """Buchung eines Slots durch genau ein Team."""

    id: int
    slot_id: int
    team_id: int
    is_confirmed: bool = True
    created_at: Optional[datetime] = None
