"""Review-Slots: Veröffentlichung, Buchung und Persistenz (SQLAlchemy)."""

from .errors import (
    BookingError,
    BookingNotFoundError,
    DeadlineExpiredError,
    DuplicateStageBookingError,
    NotFacultyError,
    NotTeamLeaderError,
    PublishError,
    SlotNotFoundError,
    SlotUnavailableError,
    TeamNotInClassroomError,
    UnknownUserError,
)
from .store import SlotStore, StoreSession, create_store_engine
from .engine import BookingEngine, normalize_deadline
from .overview import SlotOverview, SlotOverviewEntry

__all__ = [
    "BookingError",
    "BookingNotFoundError",
    "DeadlineExpiredError",
    "DuplicateStageBookingError",
    "NotFacultyError",
    "NotTeamLeaderError",
    "PublishError",
    "SlotNotFoundError",
    "SlotUnavailableError",
    "TeamNotInClassroomError",
    "UnknownUserError",
    "SlotStore",
    "StoreSession",
    "create_store_engine",
    "BookingEngine",
    "normalize_deadline",
    "SlotOverview",
    "SlotOverviewEntry",
]
