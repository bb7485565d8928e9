"""Datenmodelle für Kurs-Räume, Teams und Team-Mitglieder (Pydantic v2)."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MemberRole(str, Enum):
    LEADER = "leader"
    MEMBER = "member"


class Classroom(BaseModel):
    """Ein virtueller Kursraum einer Lehrperson.

    `review_deadlines` ordnet Review-Phasen ihre Standard-Buchungsfrist zu
    (z.B. {"Review 1": 2026-11-02}); wird beim Veröffentlichen genutzt,
    wenn keine explizite Frist angegeben ist.
    """

    id: int
    name: str
    faculty_id: int
    link_code: str
    review_deadlines: dict[str, date] = {}


class Team(BaseModel):
    """Ein Projektteam innerhalb eines Kursraums."""

    id: int
    classroom_id: int
    name: str
    project_title: Optional[str] = None


class TeamMember(BaseModel):
    team_id: int
    user_id: int
    role: MemberRole = MemberRole.MEMBER
