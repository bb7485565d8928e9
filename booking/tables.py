"""Tabellendefinitionen (SQLAlchemy Core) des Review-Slot-Planers."""

import sqlalchemy

metadata = sqlalchemy.MetaData()

users = sqlalchemy.Table(
    "users",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("email", sqlalchemy.String, unique=True, index=True),
    sqlalchemy.Column("role", sqlalchemy.String, nullable=False, default="student"),
)

classrooms = sqlalchemy.Table(
    "classrooms",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("faculty_id", sqlalchemy.Integer,
                      sqlalchemy.ForeignKey("users.id"), nullable=False),
    sqlalchemy.Column("link_code", sqlalchemy.String, unique=True),
    # Review-Phase → ISO-Datum der Standard-Buchungsfrist
    sqlalchemy.Column("review_deadlines", sqlalchemy.JSON, nullable=False),
)

teams = sqlalchemy.Table(
    "teams",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("classroom_id", sqlalchemy.Integer,
                      sqlalchemy.ForeignKey("classrooms.id"), nullable=False),
    sqlalchemy.Column("name", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("project_title", sqlalchemy.String, nullable=True),
)

team_members = sqlalchemy.Table(
    "team_members",
    metadata,
    sqlalchemy.Column("team_id", sqlalchemy.Integer,
                      sqlalchemy.ForeignKey("teams.id"), primary_key=True),
    sqlalchemy.Column("user_id", sqlalchemy.Integer,
                      sqlalchemy.ForeignKey("users.id"), primary_key=True),
    sqlalchemy.Column("role", sqlalchemy.String, nullable=False, default="member"),
)

timetables = sqlalchemy.Table(
    "timetables",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("faculty_id", sqlalchemy.Integer,
                      sqlalchemy.ForeignKey("users.id"), nullable=False),
    sqlalchemy.Column("raw_text", sqlalchemy.Text, nullable=False),
    sqlalchemy.Column("data", sqlalchemy.JSON, nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False),
)

slots = sqlalchemy.Table(
    "slots",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("classroom_id", sqlalchemy.Integer,
                      sqlalchemy.ForeignKey("classrooms.id"), nullable=False),
    sqlalchemy.Column("day", sqlalchemy.String(3), nullable=False),
    sqlalchemy.Column("start_time", sqlalchemy.String(5), nullable=False),
    sqlalchemy.Column("end_time", sqlalchemy.String(5), nullable=False),
    sqlalchemy.Column("duration_minutes", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("review_stage", sqlalchemy.String, nullable=False, index=True),
    sqlalchemy.Column("is_available", sqlalchemy.Boolean, nullable=False, default=True),
    sqlalchemy.Column("booking_deadline", sqlalchemy.DateTime, nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False),
)

bookings = sqlalchemy.Table(
    "bookings",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    # Kapazität 1: höchstens eine Buchung pro Slot
    sqlalchemy.Column("slot_id", sqlalchemy.Integer,
                      sqlalchemy.ForeignKey("slots.id"), nullable=False, unique=True),
    sqlalchemy.Column("team_id", sqlalchemy.Integer,
                      sqlalchemy.ForeignKey("teams.id"), nullable=False, index=True),
    sqlalchemy.Column("is_confirmed", sqlalchemy.Boolean, nullable=False, default=True),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False),
)
