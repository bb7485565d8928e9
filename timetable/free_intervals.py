"""Flache und gruppierte Sicht auf freie Zeitfenster."""

from collections import defaultdict

from models.free_slot import FreeSlot, Schedule


def get_all_free_slots(schedule: Schedule) -> list[FreeSlot]:
    """Alle freien Slots in Tagesreihenfolge als flache Liste.

    Der Tag wird aus dem Schlüssel des Schedules gesetzt, auch wenn der Slot
    selbst bereits einen (abweichenden) Tag trägt.
    """
    all_slots: list[FreeSlot] = []
    for day, slots in schedule.items():
        all_slots.extend(
            s if s.day == day else s.model_copy(update={"day": day})
            for s in slots
        )
    return all_slots


def group_by_day(slots: list[FreeSlot]) -> Schedule:
    """Umkehrung von get_all_free_slots (Reihenfolge bleibt erhalten)."""
    grouped: dict[str, list[FreeSlot]] = defaultdict(list)
    for s in slots:
        grouped[s.day].append(s)
    return dict(grouped)


def format_time_slot(slot: FreeSlot) -> str:
    """"MON, 10:00 - 10:50"."""
    return f"{slot.day}, {slot.start} - {slot.end}"
