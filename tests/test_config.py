"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest

from config.schema import AppConfig, BookingConfig, DatabaseConfig, ParserConfig
from config.defaults import DEFAULT_REVIEW_STAGES, day_name, default_app_config
from config.manager import ConfigManager


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_parser_config(self):
        """Standard-Parser: 5 Wochentage, Mittag 13:25-14:00, Markierung -ALL."""
        p = ParserConfig()
        assert p.day_codes == ["MON", "TUE", "WED", "THU", "FRI"]
        assert (p.lunch_start, p.lunch_end) == ("13:25", "14:00")
        assert p.occupied_marker == "-ALL"
        assert p.min_lines == 14

    def test_default_app_config_valid(self):
        config = default_app_config()
        assert config.booking.review_stages == DEFAULT_REVIEW_STAGES
        assert config.booking.default_duration_minutes == 15
        assert config.database.url.startswith("sqlite:///")

    def test_min_lines_follows_day_count(self):
        p = ParserConfig(day_codes=["MON", "TUE", "WED", "THU", "FRI", "SAT"])
        assert p.min_lines == 16

    def test_day_name(self):
        assert day_name("WED") == "Mittwoch"
        assert day_name("XYZ") == "XYZ"


# ─── VALIDIERUNG ──────────────────────────────────────────────────────────────

class TestValidation:
    def test_lunch_times_normalized(self):
        p = ParserConfig(lunch_start="9:05", lunch_end="9:40")
        assert p.lunch_start == "09:05"

    def test_invalid_lunch_time(self):
        with pytest.raises(Exception):
            ParserConfig(lunch_start="25:00")

    def test_lunch_window_order(self):
        with pytest.raises(Exception):
            ParserConfig(lunch_start="14:00", lunch_end="13:00")

    def test_empty_days_rejected(self):
        with pytest.raises(Exception):
            ParserConfig(day_codes=[])

    def test_marker_without_dash_rejected(self):
        with pytest.raises(Exception):
            ParserConfig(occupied_marker="ALL")

    def test_non_positive_duration_rejected(self):
        with pytest.raises(Exception):
            BookingConfig(default_duration_minutes=0)
        with pytest.raises(Exception):
            BookingConfig(duration_choices=[15, -5])

    def test_default_duration_must_be_a_choice(self):
        with pytest.raises(Exception):
            BookingConfig(default_duration_minutes=25, duration_choices=[15, 30])
        assert BookingConfig(default_duration_minutes=30,
                             duration_choices=[15, 30]).default_duration_minutes == 30

    def test_busy_timeout_positive(self):
        with pytest.raises(Exception):
            DatabaseConfig(busy_timeout_seconds=0)


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path):
        """Gespeicherte Config lässt sich identisch wieder laden."""
        mgr = ConfigManager()
        path = tmp_path / "review_config.yaml"
        config = default_app_config()
        config.database.url = f"sqlite:///{tmp_path / 'x.db'}"

        mgr.save(config, path)
        loaded = mgr.load(path)
        assert loaded == config

    def test_saved_yaml_has_comments(self, tmp_path):
        mgr = ConfigManager()
        path = tmp_path / "review_config.yaml"
        mgr.save(default_app_config(), path)
        text = path.read_text(encoding="utf-8")
        assert "Review-Slot-Planer" in text
        assert "─── Stundenplan-Parser ───" in text
        assert "HH:MM" in text

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(tmp_path / "fehlt.yaml")

    def test_load_invalid_file(self, tmp_path):
        path = tmp_path / "kaputt.yaml"
        path.write_text("booking:\n  default_duration_minutes: 0\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager().load(path)

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "teil.yaml"
        path.write_text("institution_name: Test-Hochschule\n", encoding="utf-8")
        config = ConfigManager().load(path)
        assert config.institution_name == "Test-Hochschule"
        assert config.parser == ParserConfig()

    def test_load_or_default_without_file(self, tmp_path):
        config = ConfigManager().load_or_default(tmp_path / "fehlt.yaml")
        assert isinstance(config, AppConfig)
        assert config.booking.review_stages == DEFAULT_REVIEW_STAGES

    def test_first_run_check(self, tmp_path, monkeypatch):
        monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG", tmp_path / "cfg.yaml")
        mgr = ConfigManager()
        assert mgr.first_run_check()
        mgr.save(default_app_config())
        assert not mgr.first_run_check()
        assert Path(tmp_path / "cfg.yaml").exists()
