"""Zerlegung freier Intervalle in Review-Slots fester Dauer."""

from models.free_slot import FreeSlot
from models.timeslot import format_minutes, to_minutes


def _check_duration(duration_minutes: int) -> None:
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise ValueError(f"Slotdauer muss eine ganze Zahl sein: {duration_minutes!r}")
    if duration_minutes <= 0:
        raise ValueError(f"Slotdauer muss > 0 Minuten sein: {duration_minutes}")


def split_slot_by_duration(slot: FreeSlot, duration_minutes: int) -> list[FreeSlot]:
    """Teilt ein Intervall ab Beginn in Stücke à `duration_minutes`.

    Ein Rest kürzer als die Dauer wird verworfen (90 min / 30 → 3 Slots,
    40 min / 30 → 1 Slot). `day` und `code` werden übernommen.
    """
    _check_duration(duration_minutes)
    start = to_minutes(slot.start)
    end = to_minutes(slot.end)

    pieces: list[FreeSlot] = []
    current = start
    while current + duration_minutes <= end:
        pieces.append(FreeSlot(
            day=slot.day,
            start=format_minutes(current),
            end=format_minutes(current + duration_minutes),
            code=slot.code,
        ))
        current += duration_minutes
    return pieces


def split_all_slots_by_duration(slots: list[FreeSlot],
                                duration_minutes: int) -> list[FreeSlot]:
    """Wendet split_slot_by_duration auf alle Slots an (Reihenfolge bleibt)."""
    _check_duration(duration_minutes)
    result: list[FreeSlot] = []
    for slot in slots:
        result.extend(split_slot_by_duration(slot, duration_minutes))
    return result
