from models.timeslot import TimeSlotTiming
from models.free_slot import FreeSlot, Schedule, TimetableRecord
from models.identity import Identity, Role, User
from models.team import Classroom, MemberRole, Team, TeamMember
from models.slot import Booking, Slot, SlotStatus

__all__ = [
    "TimeSlotTiming",
    "FreeSlot",
    "Schedule",
    "TimetableRecord",
    "Identity",
    "Role",
    "User",
    "Classroom",
    "MemberRole",
    "Team",
    "TeamMember",
    "Booking",
    "Slot",
    "SlotStatus",
]
