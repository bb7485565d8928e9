"""Standardwerte für den Review-Slot-Planer."""

from config.schema import AppConfig, BookingConfig, DatabaseConfig, ParserConfig

# Anzeigenamen der Tageskürzel im Stundenplan
DAY_NAMES: dict[str, str] = {
    "MON": "Montag",
    "TUE": "Dienstag",
    "WED": "Mittwoch",
    "THU": "Donnerstag",
    "FRI": "Freitag",
    "SAT": "Samstag",
    "SUN": "Sonntag",
}

DEFAULT_REVIEW_STAGES = ["Review 1", "Review 2", "Review 3"]


def day_name(code: str) -> str:
    """"MON" → "Montag"; unbekannte Kürzel bleiben unverändert."""
    return DAY_NAMES.get(code, code)


def default_parser_config() -> ParserConfig:
    return ParserConfig()


def default_booking_config() -> BookingConfig:
    return BookingConfig(review_stages=list(DEFAULT_REVIEW_STAGES))


def default_app_config() -> AppConfig:
    """Vollständige Default-Konfiguration (SQLite-Datei im Arbeitsverzeichnis)."""
    return AppConfig(
        institution_name="Muster-Universität",
        parser=default_parser_config(),
        booking=default_booking_config(),
        database=DatabaseConfig(),
    )
