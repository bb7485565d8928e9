"""Demo-Daten für den Review-Slot-Planer.

Erzeugt einen realistischen Wochen-Stundenplan im kopierbaren Tab-Format
sowie Lehrperson, Kursraum und Teams in der Datenbank.

Absichtliche Besonderheiten im Stundenplan:
  1. Labor-Doppelsitzungen (belegen zwei Perioden)
  2. Theorie-Kürzel ohne Raumbuchung ("A1") gelten als frei
  3. Eine Mittagsspalte ohne Uhrzeit zwischen Vor- und Nachmittag
"""

import random
from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel

from config.defaults import DEFAULT_REVIEW_STAGES
from config.schema import ParserConfig
from models.identity import Role, User
from models.team import Classroom, MemberRole, Team
from models.timeslot import TimeSlotTiming
from booking.store import SlotStore, StoreSession

# ─── Zeitraster ───────────────────────────────────────────────────────────────

THEORY_PERIODS = [
    TimeSlotTiming("08:00", "08:50"), TimeSlotTiming("08:55", "09:45"),
    TimeSlotTiming("09:50", "10:40"), TimeSlotTiming("10:45", "11:35"),
    TimeSlotTiming("11:40", "12:30"), TimeSlotTiming("12:35", "13:25"),
    TimeSlotTiming("14:00", "14:50"), TimeSlotTiming("14:55", "15:45"),
    TimeSlotTiming("15:50", "16:40"), TimeSlotTiming("16:45", "17:35"),
    TimeSlotTiming("17:40", "18:30"), TimeSlotTiming("18:35", "19:25"),
]

# Laborperioden beginnen jeweils eine Minute nach der Vorperiode
LAB_PERIODS = [
    TimeSlotTiming("08:00", "08:50"), TimeSlotTiming("08:51", "09:40"),
    TimeSlotTiming("09:50", "10:40"), TimeSlotTiming("10:41", "11:30"),
    TimeSlotTiming("11:40", "12:30"), TimeSlotTiming("12:31", "13:20"),
    TimeSlotTiming("14:00", "14:50"), TimeSlotTiming("14:51", "15:40"),
    TimeSlotTiming("15:50", "16:40"), TimeSlotTiming("16:41", "17:30"),
    TimeSlotTiming("17:40", "18:30"), TimeSlotTiming("18:31", "19:20"),
]

# Mittagsspalte steht vor dieser Periode
LUNCH_BEFORE = 6

_THEORY_SLOTS = ["A1", "F1", "D1", "TB1", "TG1", "S11", "A2", "F2", "D2", "TB2", "TG2", "S3"]
_COURSES = ["CSE1001", "MAT2002", "EEE1001", "PHY1701", "HUM1021", "CSE2004"]
_ROOMS = ["SJT101", "SJT204", "TT302", "SMV118", "MB213"]
_TEAM_NAMES = ["Team Alpha", "Team Beta", "Team Gamma", "Team Delta"]


def _with_lunch(cells: list[str], lunch_before: Optional[int],
                lunch_label: str) -> list[str]:
    if lunch_before is None:
        return list(cells)
    return cells[:lunch_before] + [lunch_label] + cells[lunch_before:]


def render_timetable(theory: list[TimeSlotTiming], lab: list[TimeSlotTiming],
                     days: dict[str, tuple[list[str], list[str]]],
                     lunch_before: Optional[int] = LUNCH_BEFORE,
                     lunch_label: str = "Lunch") -> str:
    """Baut den Rohtext eines Stundenplans wie beim Kopieren aus dem Portal.

    days: Tageskürzel → (Theorie-Zellen, Labor-Zellen), je eine Zelle pro Periode.
    """
    def row(prefix: list[str], cells: list[str]) -> str:
        return "\t".join(prefix + _with_lunch(cells, lunch_before, lunch_label))

    lines = [
        row(["THEORY", "Start"], [t.start for t in theory]),
        row(["End"], [t.end for t in theory]),
        row(["LAB", "Start"], [t.start for t in lab]),
        row(["End"], [t.end for t in lab]),
    ]
    for day, (theory_cells, lab_cells) in days.items():
        lines.append(row([day, "THEORY"], theory_cells))
        lines.append(row([day, "LAB"], lab_cells))
    return "\n".join(lines) + "\n"


class DemoData(BaseModel):
    """Ergebnis von DemoDataGenerator.seed()."""

    faculty: User
    classroom: Classroom
    teams: list[Team]
    leaders: list[User]
    members: list[User]


class DemoDataGenerator:
    """Zufällige, aber reproduzierbare Demo-Daten (Seed)."""

    def __init__(self, seed: int = 42, parser_config: Optional[ParserConfig] = None) -> None:
        self.rng = random.Random(seed)
        self.parser_config = parser_config or ParserConfig()

    # ─── Stundenplan ───

    def timetable_text(self, theory_load: float = 0.35, labs_per_week: int = 4) -> str:
        """Stundenplan mit zufällig belegten Theorie-Perioden und Labor-Doppelsitzungen."""
        n = len(THEORY_PERIODS)
        days: dict[str, tuple[list[str], list[str]]] = {}
        lab_days = self.rng.sample(self.parser_config.day_codes,
                                   k=min(labs_per_week, len(self.parser_config.day_codes)))
        for day in self.parser_config.day_codes:
            theory_cells = []
            for i in range(n):
                slot = _THEORY_SLOTS[i % len(_THEORY_SLOTS)]
                if self.rng.random() < theory_load:
                    course = self.rng.choice(_COURSES)
                    room = self.rng.choice(_ROOMS)
                    theory_cells.append(f"{slot}-{course}-ETH-{room}-ALL")
                else:
                    theory_cells.append(self.rng.choice([slot, "-"]))

            lab_cells = [f"L{i + 1}" for i in range(n)]
            if day in lab_days:
                # Doppelsitzung beginnt auf gerader Periode (LUNCH_BEFORE ist gerade)
                first = self.rng.choice(range(0, n - 1, 2))
                course = self.rng.choice(_COURSES)
                room = self.rng.choice(_ROOMS)
                lab_cells[first] = f"L{first + 1}-{course}-ELA-{room}-ALL"
                lab_cells[first + 1] = f"L{first + 2}-{course}-ELA-{room}-ALL"
            days[day] = (theory_cells, lab_cells)

        return render_timetable(THEORY_PERIODS, LAB_PERIODS, days,
                                lunch_label=self.parser_config.lunch_label)

    # ─── Datenbank ───

    def seed(self, store: SlotStore, num_teams: int = 3, team_size: int = 3,
             today: Optional[date] = None) -> DemoData:
        """Legt Lehrperson, Kursraum (mit Review-Fristen) und Teams an."""
        today = today or date.today()
        deadlines = {
            stage: today + timedelta(weeks=2 * (i + 1))
            for i, stage in enumerate(DEFAULT_REVIEW_STAGES)
        }

        teams: list[Team] = []
        leaders: list[User] = []
        members: list[User] = []
        with store.transaction() as s:
            suffix = self._free_suffix(s)
            faculty = s.add_user("Prof. Demo", f"faculty{suffix}@uni.example", Role.FACULTY)
            classroom = s.add_classroom(
                "Software Engineering Projekt", faculty.id,
                link_code=f"SE{suffix}", review_deadlines=deadlines,
            )
            for t in range(num_teams):
                team = s.add_team(classroom.id, _TEAM_NAMES[t % len(_TEAM_NAMES)],
                                  project_title=f"Projekt {t + 1}")
                teams.append(team)
                for m in range(team_size):
                    user = s.add_user(
                        f"Student {t + 1}.{m + 1}",
                        f"student{suffix}_{t + 1}_{m + 1}@uni.example",
                        Role.STUDENT,
                    )
                    role = MemberRole.LEADER if m == 0 else MemberRole.MEMBER
                    s.add_team_member(team.id, user.id, role)
                    (leaders if m == 0 else members).append(user)

        return DemoData(faculty=faculty, classroom=classroom, teams=teams,
                        leaders=leaders, members=members)

    def _free_suffix(self, s: StoreSession) -> int:
        """Kürzel für E-Mails und Kurscode, das in der Datenbank noch frei ist.

        Mit gleichem Seed wiederholt sich die Zufallsfolge; bei einem erneuten
        Lauf gegen dieselbe Datenbank wird daher weitergezogen.
        """
        while True:
            suffix = self.rng.randrange(1000, 9999)
            if (s.user_by_email(f"faculty{suffix}@uni.example") is None
                    and s.classroom_by_link_code(f"SE{suffix}") is None):
                return suffix
