"""Persistenz-Schicht (SQLAlchemy Core) für Slots, Buchungen und Stammdaten.

Jede Schreiboperation läuft in genau einer Transaktion. Bei SQLite wird jede
Transaktion mit BEGIN IMMEDIATE geöffnet: konkurrierende Schreiber warten
(busy timeout) statt sich gegenseitig zu überholen. Die eigentliche Sperre
gegen Doppelbuchungen ist das bedingte UPDATE in `claim_slot` zusammen mit
dem UNIQUE-Constraint auf bookings.slot_id.

Datenbankfehler (SQLAlchemyError) werden unverändert weitergereicht, es gibt
keine automatischen Wiederholungen.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, Optional

import sqlalchemy
from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from config.schema import DatabaseConfig
from models.free_slot import FreeSlot, Schedule, TimetableRecord
from models.identity import Identity, Role, User
from models.slot import Booking, Slot
from models.team import Classroom, MemberRole, Team
from booking.errors import SlotUnavailableError, UnknownUserError
from booking.tables import (
    bookings, classrooms, metadata, slots, team_members, teams, timetables, users,
)

logger = logging.getLogger(__name__)


# ─── Engine ───────────────────────────────────────────────────────────────────

def _install_sqlite_hooks(engine: Engine) -> None:
    """Fremdschlüssel aktivieren und Transaktionen als BEGIN IMMEDIATE starten."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # pysqlite soll kein eigenes BEGIN senden, das kommt aus _on_begin
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_store_engine(db: DatabaseConfig) -> Engine:
    """Erzeugt die SQLAlchemy-Engine gemäß DatabaseConfig."""
    url = sqlalchemy.make_url(db.url)
    if url.get_backend_name() == "sqlite":
        engine = sqlalchemy.create_engine(
            url,
            echo=db.echo,
            connect_args={"timeout": db.busy_timeout_seconds,
                          "check_same_thread": False},
        )
        _install_sqlite_hooks(engine)
        return engine
    return sqlalchemy.create_engine(url, echo=db.echo, pool_pre_ping=True)


def _model(cls, row):
    return cls.model_validate(dict(row._mapping)) if row is not None else None


# ─── Transaktions-Sitzung ─────────────────────────────────────────────────────

class StoreSession:
    """Alle Abfragen innerhalb einer offenen Transaktion."""

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    # ─── Stammdaten ───

    def add_user(self, name: str, email: str, role: Role) -> User:
        result = self.conn.execute(
            users.insert().values(name=name, email=email, role=Role(role).value))
        return User(id=result.inserted_primary_key[0], name=name,
                    email=email, role=role)

    def get_user(self, user_id: int) -> Optional[User]:
        row = self.conn.execute(
            users.select().where(users.c.id == user_id)).first()
        return _model(User, row)

    def user_by_email(self, email: str) -> Optional[User]:
        row = self.conn.execute(
            users.select().where(users.c.email == email)).first()
        return _model(User, row)

    def add_classroom(self, name: str, faculty_id: int, link_code: str,
                      review_deadlines: Optional[dict[str, date]] = None) -> Classroom:
        deadlines = {k: v.isoformat() for k, v in (review_deadlines or {}).items()}
        result = self.conn.execute(classrooms.insert().values(
            name=name, faculty_id=faculty_id, link_code=link_code,
            review_deadlines=deadlines,
        ))
        return Classroom(id=result.inserted_primary_key[0], name=name,
                         faculty_id=faculty_id, link_code=link_code,
                         review_deadlines=review_deadlines or {})

    def get_classroom(self, classroom_id: int) -> Optional[Classroom]:
        row = self.conn.execute(
            classrooms.select().where(classrooms.c.id == classroom_id)).first()
        return _model(Classroom, row)

    def classroom_by_link_code(self, link_code: str) -> Optional[Classroom]:
        row = self.conn.execute(
            classrooms.select().where(classrooms.c.link_code == link_code)).first()
        return _model(Classroom, row)

    def add_team(self, classroom_id: int, name: str,
                 project_title: Optional[str] = None) -> Team:
        result = self.conn.execute(teams.insert().values(
            classroom_id=classroom_id, name=name, project_title=project_title))
        return Team(id=result.inserted_primary_key[0], classroom_id=classroom_id,
                    name=name, project_title=project_title)

    def get_team(self, team_id: int, for_update: bool = False) -> Optional[Team]:
        query = teams.select().where(teams.c.id == team_id)
        if for_update:
            # Serialisiert parallele Buchungen desselben Teams (PostgreSQL);
            # SQLite ist durch BEGIN IMMEDIATE bereits serialisiert.
            query = query.with_for_update()
        return _model(Team, self.conn.execute(query).first())

    def add_team_member(self, team_id: int, user_id: int,
                        role: MemberRole = MemberRole.MEMBER) -> None:
        self.conn.execute(team_members.insert().values(
            team_id=team_id, user_id=user_id, role=MemberRole(role).value))

    def team_member_role(self, team_id: int, user_id: int) -> Optional[MemberRole]:
        role = self.conn.execute(
            sqlalchemy.select(team_members.c.role).where(
                team_members.c.team_id == team_id,
                team_members.c.user_id == user_id,
            )
        ).scalar()
        return MemberRole(role) if role is not None else None

    # ─── Stundenpläne ───

    def save_timetable(self, faculty_id: int, raw_text: str, schedule: Schedule,
                       created_at: datetime) -> TimetableRecord:
        data = {day: [s.model_dump() for s in day_slots]
                for day, day_slots in schedule.items()}
        result = self.conn.execute(timetables.insert().values(
            faculty_id=faculty_id, raw_text=raw_text, data=data,
            created_at=created_at,
        ))
        return TimetableRecord(id=result.inserted_primary_key[0],
                               faculty_id=faculty_id, raw_text=raw_text,
                               schedule=schedule, created_at=created_at)

    def latest_timetable(self, faculty_id: int) -> Optional[TimetableRecord]:
        row = self.conn.execute(
            timetables.select()
            .where(timetables.c.faculty_id == faculty_id)
            .order_by(timetables.c.created_at.desc(), timetables.c.id.desc())
        ).first()
        if row is None:
            return None
        schedule = {day: [FreeSlot.model_validate(s) for s in day_slots]
                    for day, day_slots in row.data.items()}
        return TimetableRecord(id=row.id, faculty_id=row.faculty_id,
                               raw_text=row.raw_text, schedule=schedule,
                               created_at=row.created_at)

    # ─── Slots ───

    def insert_slots(self, rows: list[dict]) -> list[Slot]:
        """Fügt alle Zeilen in der laufenden Transaktion ein (alles oder nichts)."""
        created: list[Slot] = []
        for values in rows:
            result = self.conn.execute(slots.insert().values(**values))
            created.append(Slot(id=result.inserted_primary_key[0], **values))
        return created

    def get_slot(self, slot_id: int) -> Optional[Slot]:
        row = self.conn.execute(slots.select().where(slots.c.id == slot_id)).first()
        return _model(Slot, row)

    def list_slots(self, classroom_id: Optional[int] = None,
                   available_only: bool = False) -> list[Slot]:
        query = slots.select()
        if classroom_id is not None:
            query = query.where(slots.c.classroom_id == classroom_id)
        if available_only:
            query = query.where(slots.c.is_available.is_(True))
        query = query.order_by(slots.c.day, slots.c.start_time, slots.c.id)
        return [_model(Slot, r) for r in self.conn.execute(query)]

    def claim_slot(self, slot_id: int) -> bool:
        """Bedingtes Schreiben: Open → Booked nur wenn der Slot noch offen ist."""
        result = self.conn.execute(
            slots.update()
            .where(slots.c.id == slot_id, slots.c.is_available.is_(True))
            .values(is_available=False)
        )
        return result.rowcount == 1

    def reopen_slot(self, slot_id: int) -> None:
        self.conn.execute(
            slots.update().where(slots.c.id == slot_id).values(is_available=True))

    def delete_slot(self, slot_id: int) -> int:
        """Löscht abhängige Buchungen, dann den Slot. Gibt Anzahl Buchungen zurück."""
        removed = self.conn.execute(
            bookings.delete().where(bookings.c.slot_id == slot_id)).rowcount
        self.conn.execute(slots.delete().where(slots.c.id == slot_id))
        return removed

    # ─── Buchungen ───

    def insert_booking(self, slot_id: int, team_id: int,
                       created_at: datetime) -> Booking:
        try:
            result = self.conn.execute(bookings.insert().values(
                slot_id=slot_id, team_id=team_id, is_confirmed=True,
                created_at=created_at,
            ))
        except IntegrityError as e:
            raise SlotUnavailableError(slot_id) from e
        return Booking(id=result.inserted_primary_key[0], slot_id=slot_id,
                       team_id=team_id, is_confirmed=True, created_at=created_at)

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        row = self.conn.execute(
            bookings.select().where(bookings.c.id == booking_id)).first()
        return _model(Booking, row)

    def bookings_for_team(self, team_id: int) -> list[Booking]:
        rows = self.conn.execute(
            bookings.select().where(bookings.c.team_id == team_id)
            .order_by(bookings.c.id))
        return [_model(Booking, r) for r in rows]

    def bookings_for_team_stage(self, team_id: int, review_stage: str) -> list[Booking]:
        """Buchungen eines Teams, deren Slot zur gegebenen Review-Phase gehört."""
        query = (
            sqlalchemy.select(bookings)
            .join(slots, slots.c.id == bookings.c.slot_id)
            .where(bookings.c.team_id == team_id,
                   slots.c.review_stage == review_stage)
        )
        return [_model(Booking, r) for r in self.conn.execute(query)]

    def release_booking(self, booking: Booking) -> None:
        """Buchung löschen und Slot wieder öffnen (Booked → Open)."""
        self.conn.execute(bookings.delete().where(bookings.c.id == booking.id))
        self.reopen_slot(booking.slot_id)

    def overview_rows(self, classroom_id: Optional[int] = None) -> list[tuple]:
        """(Slot, Booking | None, Teamname | None) je Slot."""
        query = (
            sqlalchemy.select(
                slots,
                bookings.c.id.label("booking_id"),
                bookings.c.team_id,
                bookings.c.is_confirmed,
                bookings.c.created_at.label("booked_at"),
                teams.c.name.label("team_name"),
            )
            .select_from(
                slots.outerjoin(bookings, bookings.c.slot_id == slots.c.id)
                .outerjoin(teams, teams.c.id == bookings.c.team_id)
            )
            .order_by(slots.c.day, slots.c.start_time, slots.c.id)
        )
        if classroom_id is not None:
            query = query.where(slots.c.classroom_id == classroom_id)

        result = []
        for row in self.conn.execute(query):
            m = row._mapping
            slot = Slot.model_validate({c.name: m[c.name] for c in slots.columns})
            booking = None
            if m["booking_id"] is not None:
                booking = Booking(id=m["booking_id"], slot_id=slot.id,
                                  team_id=m["team_id"],
                                  is_confirmed=m["is_confirmed"],
                                  created_at=m["booked_at"])
            result.append((slot, booking, m["team_name"]))
        return result


# ─── Store ────────────────────────────────────────────────────────────────────

class SlotStore:
    """Zugriff auf die Datenbank; Schreibzugriffe über transaction().

    Verwendung:
        store = SlotStore.from_config(config.database)
        with store.transaction() as s:
            slot = s.get_slot(1)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def from_config(cls, db: DatabaseConfig) -> "SlotStore":
        return cls(create_store_engine(db))

    def create_schema(self) -> None:
        metadata.create_all(self.engine)

    @contextmanager
    def transaction(self) -> Iterator[StoreSession]:
        """Commit bei Erfolg, Rollback bei jeder Ausnahme."""
        with self.engine.begin() as conn:
            yield StoreSession(conn)

    # ─── Identität ───

    def resolve_identity(self, user_id: int) -> Identity:
        with self.transaction() as s:
            user = s.get_user(user_id)
        if user is None:
            raise UnknownUserError(user_id)
        return user.to_identity()

    # ─── Lesende Listen (weich degradierend) ───

    def _has_table(self, name: str) -> bool:
        return sqlalchemy.inspect(self.engine).has_table(name)

    def list_slots(self, classroom_id: Optional[int] = None,
                   available_only: bool = False) -> list[Slot]:
        """Slots auflisten; fehlt die Tabelle noch, gibt es eine leere Liste."""
        if not self._has_table(slots.name):
            logger.warning("Tabelle 'slots' fehlt – leere Slot-Liste (db init ausführen)")
            return []
        with self.transaction() as s:
            return s.list_slots(classroom_id, available_only)

    def overview_rows(self, classroom_id: Optional[int] = None) -> list[tuple]:
        if not self._has_table(slots.name):
            logger.warning("Tabelle 'slots' fehlt – leere Übersicht (db init ausführen)")
            return []
        with self.transaction() as s:
            return s.overview_rows(classroom_id)

    def get_slot(self, slot_id: int) -> Optional[Slot]:
        with self.transaction() as s:
            return s.get_slot(slot_id)
