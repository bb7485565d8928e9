"""Slot-Übersicht für Lehrende: Status, Buchung und Team je Slot."""

from collections import Counter
from typing import Optional

from pydantic import BaseModel

from models.slot import Booking, Slot, SlotStatus
from booking.store import SlotStore


class SlotOverviewEntry(BaseModel):
    """Ein Slot mit abgeleitetem Status."""

    slot: Slot
    booking: Optional[Booking] = None
    team_name: Optional[str] = None

    @property
    def status(self) -> SlotStatus:
        if self.booking is not None:
            return SlotStatus.BOOKED
        if not self.slot.is_available:
            return SlotStatus.UNAVAILABLE
        return SlotStatus.AVAILABLE

    @property
    def bookings_count(self) -> int:
        return 1 if self.booking is not None else 0


class SlotOverview(BaseModel):
    """Alle Slots eines (oder aller) Kursräume."""

    entries: list[SlotOverviewEntry]

    @classmethod
    def load(cls, store: SlotStore, classroom_id: Optional[int] = None) -> "SlotOverview":
        rows = store.overview_rows(classroom_id)
        return cls(entries=[
            SlotOverviewEntry(slot=slot, booking=booking, team_name=team_name)
            for slot, booking, team_name in rows
        ])

    def filter(self, review_stage: Optional[str] = None,
               status: Optional[SlotStatus] = None) -> "SlotOverview":
        entries = [
            e for e in self.entries
            if (review_stage is None or e.slot.review_stage == review_stage)
            and (status is None or e.status == status)
        ]
        return SlotOverview(entries=entries)

    def status_counts(self) -> dict[SlotStatus, int]:
        counts = Counter(e.status for e in self.entries)
        return {s: counts.get(s, 0) for s in SlotStatus}

    def print_rich(self) -> None:
        """Gibt die Übersicht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        counts = self.status_counts()
        console.print(Panel(
            f"Slots: {len(self.entries)} | "
            f"[green]frei: {counts[SlotStatus.AVAILABLE]}[/green] | "
            f"[cyan]gebucht: {counts[SlotStatus.BOOKED]}[/cyan] | "
            f"[dim]geschlossen: {counts[SlotStatus.UNAVAILABLE]}[/dim]",
            title="Review-Slots",
            border_style="cyan",
        ))
        if not self.entries:
            console.print("[dim]Keine Slots vorhanden.[/dim]")
            return

        colors = {
            SlotStatus.AVAILABLE: "green",
            SlotStatus.BOOKED: "cyan",
            SlotStatus.UNAVAILABLE: "dim",
        }
        table = Table(box=box.ROUNDED)
        table.add_column("ID", justify="right")
        table.add_column("Tag")
        table.add_column("Zeit")
        table.add_column("Min.", justify="right")
        table.add_column("Phase")
        table.add_column("Frist")
        table.add_column("Status")
        table.add_column("Team")
        for e in self.entries:
            color = colors[e.status]
            table.add_row(
                str(e.slot.id),
                e.slot.day,
                f"{e.slot.start_time} - {e.slot.end_time}",
                str(e.slot.duration_minutes),
                e.slot.review_stage,
                f"{e.slot.booking_deadline:%d.%m.%Y %H:%M}",
                f"[{color}]{e.status.value}[/{color}]",
                e.team_name or "",
            )
        console.print(table)
