"""Veröffentlichung von Review-Slots und Buchungs-Lebenszyklus.

Zustände je Slot:
  Open       is_available=True, keine Buchung
  Booked     is_available=False, genau eine bestätigte Buchung
  Cancelled  Slot gelöscht (Buchungen werden vorher entfernt)

Open → Booked (book) setzt voraus, dass der Aufrufer Teamleitung ist, das
Team in dieser Review-Phase noch nichts gebucht hat, die Frist nicht
abgelaufen ist und der Slot noch offen ist. Alle Prüfungen und das bedingte
Schreiben laufen in einer einzigen Transaktion.
"""

import logging
from datetime import date, datetime, time
from typing import Callable, Optional, Union

from config.schema import AppConfig
from models.free_slot import FreeSlot
from models.identity import Identity
from models.slot import Booking, Slot
from models.team import Classroom, MemberRole
from models.timeslot import normalize_time, to_minutes
from booking.errors import (
    BookingNotFoundError,
    DeadlineExpiredError,
    DuplicateStageBookingError,
    NotFacultyError,
    NotTeamLeaderError,
    PublishError,
    SlotNotFoundError,
    SlotUnavailableError,
    TeamNotInClassroomError,
)
from booking.store import SlotStore, StoreSession

logger = logging.getLogger(__name__)

Deadline = Union[date, datetime]


def normalize_deadline(value: Deadline) -> datetime:
    """Ein reines Datum gilt bis zum Ende dieses Tages (23:59:59)."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time(23, 59, 59))


class BookingEngine:
    """Veröffentlichen, Buchen, Freigeben und Absagen von Review-Slots.

    Verwendung:
        engine = BookingEngine(store, config)
        slots = engine.publish(faculty, classroom_id, candidates, "Review 1", date(...))
        booking = engine.book(leader, slots[0].id, team_id)
    """

    def __init__(self, store: SlotStore, config: Optional[AppConfig] = None,
                 clock: Callable[[], datetime] = datetime.now) -> None:
        self.store = store
        self.config = config or AppConfig()
        self.clock = clock

    # ─── Veröffentlichen ──────────────────────────────────────────────────────

    def publish(self, identity: Identity, classroom_id: int,
                candidates: list[FreeSlot], review_stage: str,
                booking_deadline: Optional[Deadline] = None) -> list[Slot]:
        """Legt je ausgewähltem Kandidaten einen offenen Slot an (alles oder nichts).

        Überschneidungen mit bereits veröffentlichten Slots werden nicht geprüft.
        """
        if not identity.is_faculty:
            raise NotFacultyError("Nur Lehrende dürfen Review-Slots veröffentlichen.")
        stage = review_stage.strip()
        if not stage:
            raise PublishError("Review-Phase darf nicht leer sein.")
        if not candidates:
            raise PublishError("Keine Slots zum Veröffentlichen ausgewählt.")

        now = self.clock()
        with self.store.transaction() as s:
            classroom = self._owned_classroom(s, identity, classroom_id)
            deadline = self._resolve_deadline(classroom, stage, booking_deadline)
            if deadline <= now:
                raise PublishError(
                    f"Buchungsfrist {deadline:%d.%m.%Y %H:%M} liegt in der Vergangenheit.")
            rows = [self._slot_row(classroom.id, c, stage, deadline, now)
                    for c in candidates]
            created = s.insert_slots(rows)

        logger.info(
            f"{len(created)} Slots für '{stage}' in Kursraum {classroom_id} veröffentlicht "
            f"(Frist {deadline:%d.%m.%Y %H:%M})"
        )
        return created

    def _resolve_deadline(self, classroom: Classroom, stage: str,
                          explicit: Optional[Deadline]) -> datetime:
        if explicit is not None:
            return normalize_deadline(explicit)
        if stage in classroom.review_deadlines:
            return normalize_deadline(classroom.review_deadlines[stage])
        raise PublishError(
            f"Keine Buchungsfrist für '{stage}' angegeben und im Kursraum "
            f"'{classroom.name}' keine hinterlegt."
        )

    def _slot_row(self, classroom_id: int, candidate: FreeSlot, stage: str,
                  deadline: datetime, now: datetime) -> dict:
        if candidate.day not in self.config.parser.day_codes:
            raise PublishError(f"Unbekannter Wochentag: {candidate.day}")
        try:
            start = normalize_time(candidate.start)
            end = normalize_time(candidate.end)
        except ValueError as e:
            raise PublishError(str(e)) from e
        duration = to_minutes(end) - to_minutes(start)
        if duration <= 0:
            raise PublishError(f"Slot {candidate} endet nicht nach seinem Beginn.")
        return {
            "classroom_id": classroom_id,
            "day": candidate.day,
            "start_time": start,
            "end_time": end,
            "duration_minutes": duration,
            "review_stage": stage,
            "is_available": True,
            "booking_deadline": deadline,
            "created_at": now,
        }

    # ─── Buchen ───────────────────────────────────────────────────────────────

    def book(self, identity: Identity, slot_id: int, team_id: int) -> Booking:
        """Open → Booked. Wirft einen BookingError, wenn eine Bedingung fehlt."""
        now = self.clock()
        with self.store.transaction() as s:
            slot = s.get_slot(slot_id)
            if slot is None:
                raise SlotNotFoundError(slot_id)
            team = s.get_team(team_id, for_update=True)
            if team is None or team.classroom_id != slot.classroom_id:
                raise TeamNotInClassroomError(team_id, slot.classroom_id)

            # 1. Nur die Teamleitung bucht
            self._require_leader(s, identity, team_id)
            # 2. Eine Buchung je Team und Review-Phase
            if s.bookings_for_team_stage(team_id, slot.review_stage):
                raise DuplicateStageBookingError(team_id, slot.review_stage)
            # 3. Frist
            if now >= slot.booking_deadline:
                raise DeadlineExpiredError(slot_id, slot.booking_deadline)
            # 4. Verfügbarkeit, bedingt geschrieben
            if not s.claim_slot(slot_id):
                raise SlotUnavailableError(slot_id)
            booking = s.insert_booking(slot_id, team_id, now)

        logger.info(f"Slot {slot_id} ({slot.label}, {slot.review_stage}) "
                    f"von Team {team_id} gebucht")
        return booking

    def unbook(self, identity: Identity, booking_id: int) -> Slot:
        """Booked → Open durch die Teamleitung. Gibt den wieder offenen Slot zurück."""
        with self.store.transaction() as s:
            booking = s.get_booking(booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_id)
            self._require_leader(s, identity, booking.team_id)
            s.release_booking(booking)
            slot = s.get_slot(booking.slot_id)

        logger.info(f"Buchung {booking_id} freigegeben, Slot {booking.slot_id} wieder offen")
        return slot

    def release_team(self, team_id: int) -> int:
        """Team verlässt den Kurs oder löst sich auf: alle Buchungen freigeben."""
        with self.store.transaction() as s:
            team_bookings = s.bookings_for_team(team_id)
            for booking in team_bookings:
                s.release_booking(booking)

        if team_bookings:
            logger.info(f"{len(team_bookings)} Buchungen von Team {team_id} freigegeben")
        return len(team_bookings)

    # ─── Absagen ──────────────────────────────────────────────────────────────

    def cancel_slot(self, identity: Identity, slot_id: int) -> int:
        """Löscht einen Slot samt Buchung. Gibt Anzahl entfernter Buchungen zurück."""
        if not identity.is_faculty:
            raise NotFacultyError("Nur Lehrende dürfen Slots absagen.")
        with self.store.transaction() as s:
            slot = s.get_slot(slot_id)
            if slot is None:
                raise SlotNotFoundError(slot_id)
            self._owned_classroom(s, identity, slot.classroom_id)
            removed = s.delete_slot(slot_id)

        logger.info(f"Slot {slot_id} abgesagt ({removed} Buchung(en) entfernt)")
        return removed

    # ─── Prüfungen ────────────────────────────────────────────────────────────

    @staticmethod
    def _require_leader(s: StoreSession, identity: Identity, team_id: int) -> None:
        if s.team_member_role(team_id, identity.internal_user_id) != MemberRole.LEADER:
            raise NotTeamLeaderError(identity.internal_user_id, team_id)

    @staticmethod
    def _owned_classroom(s: StoreSession, identity: Identity,
                         classroom_id: int) -> Classroom:
        classroom = s.get_classroom(classroom_id)
        if classroom is None:
            raise PublishError(f"Kursraum {classroom_id} existiert nicht.")
        if classroom.faculty_id != identity.internal_user_id:
            raise NotFacultyError(
                f"Kursraum {classroom_id} gehört nicht zu Nutzer "
                f"{identity.internal_user_id}."
            )
        return classroom
