from pydantic import BaseModel, Field, field_validator, model_validator

from models.timeslot import normalize_time


# ─── STUNDENPLAN-PARSER ───

class ParserConfig(BaseModel):
    """Regeln für das Einlesen eines kopierten Wochen-Stundenplans.

    Das Rohformat ist tab-getrennter Text:
    - Zeilen 0/1: Theorie-Beginn / Theorie-Ende
    - Zeilen 2/3: Labor-Beginn / Labor-Ende
    - danach pro Wochentag eine Theorie- und eine Labor-Zeile
    """
    # Wochentage in Reihenfolge des Rohtexts
    day_codes: list[str] = Field(
        default=["MON", "TUE", "WED", "THU", "FRI"],
        description="Tageskürzel in Reihenfolge des Stundenplans")
    # Bezeichnung der Mittagsspalte (trägt keine Uhrzeit)
    lunch_label: str = Field("Lunch",
        description="Wert der Mittagsspalte im Raster")
    # Mittagsfenster: Perioden komplett darin werden nie frei gemeldet
    lunch_start: str = Field("13:25", description="Beginn Mittagsfenster (HH:MM)")
    lunch_end: str = Field("14:00", description="Ende Mittagsfenster (HH:MM)")
    # Markierung einer raumgebuchten Veranstaltung ("CSE1001-ETH-SJT101-ALL")
    occupied_marker: str = Field("-ALL",
        description="Teilstring einer belegten Zelle")
    # Anzahl Kopffelder vor den Werten
    start_row_header_fields: int = Field(2, ge=0,
        description="Kopffelder der Beginn-Zeilen (z.B. 'THEORY', 'Start')")
    end_row_header_fields: int = Field(1, ge=0,
        description="Kopffelder der Ende-Zeilen (z.B. 'End')")
    class_row_header_fields: int = Field(2, ge=0,
        description="Kopffelder der Tageszeilen (z.B. 'MON', 'THEORY')")

    @property
    def timing_lines(self) -> int:
        return 4

    @property
    def min_lines(self) -> int:
        """4 Zeilen Zeitraster + 2 Zeilen je Wochentag."""
        return self.timing_lines + 2 * len(self.day_codes)

    @field_validator("lunch_start", "lunch_end")
    @classmethod
    def _check_hhmm(cls, v: str) -> str:
        return normalize_time(v)

    @model_validator(mode='after')
    def _check_lunch_window(self):
        if self.lunch_start > self.lunch_end:
            raise ValueError(
                f"Mittagsfenster ungültig: {self.lunch_start} liegt nach {self.lunch_end}")
        if not self.day_codes:
            raise ValueError("Mindestens ein Wochentag muss konfiguriert sein.")
        if "-" not in self.occupied_marker:
            raise ValueError("occupied_marker muss einen Bindestrich enthalten.")
        return self


# ─── BUCHUNG ───

class BookingConfig(BaseModel):
    """Review-Phasen und Slot-Dauern."""
    # Bekannte Review-Phasen (Vorschlagsliste, freie Namen bleiben erlaubt)
    review_stages: list[str] = Field(
        default=["Review 1", "Review 2", "Review 3"],
        description="Review-Phasen")
    # Standard-Dauer eines Review-Slots in Minuten
    default_duration_minutes: int = Field(15, gt=0,
        description="Standard-Slotdauer (Minuten)")
    # Angebotene Dauern in der CLI
    duration_choices: list[int] = Field(
        default=[10, 15, 20, 30, 45, 60],
        description="Wählbare Slotdauern (Minuten)")

    @model_validator(mode='after')
    def _check_durations(self):
        if any(d <= 0 for d in self.duration_choices):
            raise ValueError("Slotdauern müssen > 0 Minuten sein.")
        if self.default_duration_minutes not in self.duration_choices:
            raise ValueError(
                f"Standard-Dauer {self.default_duration_minutes} min fehlt in duration_choices.")
        return self


# ─── DATENBANK ───

class DatabaseConfig(BaseModel):
    """Verbindung zur relationalen Datenbank (SQLAlchemy-URL)."""
    # SQLAlchemy-URL, z.B. "sqlite:///review_slots.db" oder PostgreSQL
    url: str = Field("sqlite:///review_slots.db",
        description="SQLAlchemy-Datenbank-URL")
    # Wartezeit auf Schreibsperren pro Anfrage (Sekunden)
    busy_timeout_seconds: float = Field(30.0, gt=0,
        description="Timeout für gesperrte Datenbank (Sekunden)")
    # SQL-Ausgabe für Debugging
    echo: bool = Field(False, description="SQL-Statements loggen")


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration des Review-Slot-Planers."""
    # Name der Einrichtung (nur Anzeige)
    institution_name: str = Field("Muster-Universität",
        description="Name der Einrichtung")
    # Regeln für den Stundenplan-Parser
    parser: ParserConfig = Field(default_factory=ParserConfig)
    # Review-Phasen und Dauern
    booking: BookingConfig = Field(default_factory=BookingConfig)
    # Datenbankverbindung
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
