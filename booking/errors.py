"""Fehlerklassen für Veröffentlichung und Buchung von Review-Slots.

Jeder Fehler bricht nur den einen Vorgang ab; andere Slots und Buchungen
bleiben unberührt. Datenbankfehler (SQLAlchemyError) werden nicht hier
abgebildet, sondern unverändert weitergereicht.
"""


class BookingError(Exception):
    """Basisklasse aller fachlichen Buchungsfehler."""


class NotTeamLeaderError(BookingError, PermissionError):
    """Nur die Teamleitung darf für ein Team buchen."""

    def __init__(self, user_id: int, team_id: int) -> None:
        super().__init__(
            f"Nur die Teamleitung darf Slots buchen "
            f"(Nutzer {user_id} ist nicht Leitung von Team {team_id})."
        )
        self.user_id = user_id
        self.team_id = team_id


class NotFacultyError(BookingError, PermissionError):
    """Aktion ist Lehrenden vorbehalten (bzw. dem Besitzer des Kursraums)."""


class DuplicateStageBookingError(BookingError):
    def __init__(self, team_id: int, review_stage: str) -> None:
        super().__init__(
            f"Team {team_id} hat für '{review_stage}' bereits einen Slot gebucht."
        )
        self.team_id = team_id
        self.review_stage = review_stage


class DeadlineExpiredError(BookingError):
    def __init__(self, slot_id: int, deadline) -> None:
        super().__init__(
            f"Buchungsfrist für Slot {slot_id} ist abgelaufen "
            f"({deadline:%d.%m.%Y %H:%M})."
        )
        self.slot_id = slot_id
        self.deadline = deadline


class SlotUnavailableError(BookingError):
    def __init__(self, slot_id: int) -> None:
        super().__init__(f"Slot {slot_id} ist nicht mehr verfügbar.")
        self.slot_id = slot_id


class SlotNotFoundError(BookingError):
    def __init__(self, slot_id: int) -> None:
        super().__init__(f"Slot {slot_id} existiert nicht.")
        self.slot_id = slot_id


class BookingNotFoundError(BookingError):
    def __init__(self, booking_id: int) -> None:
        super().__init__(f"Buchung {booking_id} existiert nicht.")
        self.booking_id = booking_id


class TeamNotInClassroomError(BookingError):
    def __init__(self, team_id: int, classroom_id: int) -> None:
        super().__init__(
            f"Team {team_id} gehört nicht zu Kursraum {classroom_id}."
        )
        self.team_id = team_id
        self.classroom_id = classroom_id


class PublishError(BookingError):
    """Veröffentlichung ungültig; es wurde nichts gespeichert."""


class UnknownUserError(BookingError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"Nutzer {user_id} ist unbekannt.")
        self.user_id = user_id
