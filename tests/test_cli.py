"""Tests für die Kommandozeile (click CliRunner)."""

from datetime import date, datetime

import pytest
from click.testing import CliRunner

from booking import SlotStore
from config.defaults import default_app_config
from config.manager import ConfigManager
from config.schema import DatabaseConfig
from data.demo_data import LAB_PERIODS, THEORY_PERIODS, DemoDataGenerator, render_timetable
from main import cli


# ─── Fixtures ─────────────────────────────────────────────────────────────────

@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture
def cfg_path(tmp_path, db_url):
    config = default_app_config()
    config.database.url = db_url
    path = tmp_path / "review_config.yaml"
    ConfigManager().save(config, path)
    return path


@pytest.fixture
def store(db_url):
    store = SlotStore.from_config(DatabaseConfig(url=db_url))
    store.create_schema()
    return store


@pytest.fixture
def demo(store):
    return DemoDataGenerator(seed=42).seed(store, num_teams=2, team_size=2)


@pytest.fixture
def free_week(tmp_path):
    """Stundenplan ohne belegte Perioden: jede Periode an jedem Tag frei."""
    n = len(THEORY_PERIODS)
    days = {d: (["-"] * n, [f"L{i + 1}" for i in range(n)])
            for d in ["MON", "TUE", "WED", "THU", "FRI"]}
    path = tmp_path / "frei.txt"
    path.write_text(render_timetable(THEORY_PERIODS, LAB_PERIODS, days), encoding="utf-8")
    return path


def _run(cfg_path, *args):
    return CliRunner().invoke(cli, ["--config", str(cfg_path), *args], obj={})


# ─── PARSE / SPLIT ────────────────────────────────────────────────────────────

class TestParseSplit:
    def test_parse_prints_days(self, cfg_path, free_week):
        result = _run(cfg_path, "parse", str(free_week))
        assert result.exit_code == 0, result.output
        assert "Montag" in result.output
        assert "Freitag" in result.output

    def test_parse_invalid_timetable(self, cfg_path, tmp_path):
        path = tmp_path / "kaputt.txt"
        path.write_text("THEORY\tStart\t08:00\n", encoding="utf-8")
        result = _run(cfg_path, "parse", str(path))
        assert result.exit_code == 1
        assert "Stundenplan ungültig" in result.output

    def test_split_with_duration(self, cfg_path, free_week):
        result = _run(cfg_path, "split", str(free_week), "--duration", "30")
        assert result.exit_code == 0, result.output
        assert "08:30" in result.output

    @pytest.mark.parametrize("duration", ["0", "7", "90"])
    def test_split_rejects_invalid_duration(self, cfg_path, free_week, duration):
        """0 und nicht konfigurierte Dauern brechen mit Fehler ab."""
        result = _run(cfg_path, "split", str(free_week), "--duration", duration)
        assert result.exit_code == 1
        assert "Ungültige Dauer" in result.output


# ─── PUBLISH ──────────────────────────────────────────────────────────────────

class TestPublish:
    def test_publish_selection(self, cfg_path, free_week, store, demo):
        """--select 1,3-4 veröffentlicht genau die Kandidaten 1, 3 und 4."""
        result = _run(cfg_path, "publish", str(free_week),
                      "--user", str(demo.faculty.id),
                      "--classroom", str(demo.classroom.id),
                      "--stage", "Review 1", "--duration", "15",
                      "--select", "1,3-4")
        assert result.exit_code == 0, result.output
        slots = store.list_slots(demo.classroom.id)
        # Periode 1 08:00-08:50 → 08:00, 08:15, 08:30; Periode 2 beginnt 08:55
        assert [s.start_time for s in slots] == ["08:00", "08:30", "08:55"]
        assert all(s.day == "MON" and s.duration_minutes == 15 for s in slots)

    def test_publish_zero_duration_stores_nothing(self, cfg_path, free_week, store, demo):
        result = _run(cfg_path, "publish", str(free_week),
                      "--user", str(demo.faculty.id),
                      "--classroom", str(demo.classroom.id),
                      "--stage", "Review 1", "--duration", "0")
        assert result.exit_code == 1
        assert store.list_slots() == []

    def test_publish_selection_out_of_range(self, cfg_path, free_week, store, demo):
        result = _run(cfg_path, "publish", str(free_week),
                      "--user", str(demo.faculty.id),
                      "--classroom", str(demo.classroom.id),
                      "--stage", "Review 1", "--select", "9999")
        assert result.exit_code == 2
        assert store.list_slots() == []

    @pytest.mark.parametrize("deadline, expected", [
        ("2099-11-02", datetime(2099, 11, 2, 23, 59, 59)),
        ("2099-11-02 00:00", datetime(2099, 11, 2, 0, 0)),
        ("2099-11-02 18:30", datetime(2099, 11, 2, 18, 30)),
    ])
    def test_deadline_formats(self, cfg_path, free_week, store, demo, deadline, expected):
        """Nur ein reines Datum gilt bis Tagesende; 00:00 bleibt Mitternacht."""
        result = _run(cfg_path, "publish", str(free_week),
                      "--user", str(demo.faculty.id),
                      "--classroom", str(demo.classroom.id),
                      "--stage", "Review 1", "--select", "1",
                      "--deadline", deadline)
        assert result.exit_code == 0, result.output
        assert store.list_slots()[0].booking_deadline == expected

    def test_invalid_deadline_format(self, cfg_path, free_week, demo):
        result = _run(cfg_path, "publish", str(free_week),
                      "--user", str(demo.faculty.id),
                      "--classroom", str(demo.classroom.id),
                      "--stage", "Review 1", "--deadline", "02.11.2099")
        assert result.exit_code == 2

    def test_student_cannot_publish(self, cfg_path, free_week, store, demo):
        result = _run(cfg_path, "publish", str(free_week),
                      "--user", str(demo.leaders[0].id),
                      "--classroom", str(demo.classroom.id),
                      "--stage", "Review 1", "--select", "1")
        assert result.exit_code == 1
        assert "Veröffentlichung fehlgeschlagen" in result.output
        assert store.list_slots() == []


# ─── BOOK ─────────────────────────────────────────────────────────────────────

class TestBook:
    @pytest.fixture
    def slot_id(self, cfg_path, free_week, store, demo):
        result = _run(cfg_path, "publish", str(free_week),
                      "--user", str(demo.faculty.id),
                      "--classroom", str(demo.classroom.id),
                      "--stage", "Review 1", "--select", "1")
        assert result.exit_code == 0, result.output
        return store.list_slots()[0].id

    def test_leader_books(self, cfg_path, store, demo, slot_id):
        result = _run(cfg_path, "book", str(slot_id),
                      "--team", str(demo.teams[0].id), "--user", str(demo.leaders[0].id))
        assert result.exit_code == 0, result.output
        assert store.get_slot(slot_id).is_available is False

    def test_member_gets_error(self, cfg_path, store, demo, slot_id):
        result = _run(cfg_path, "book", str(slot_id),
                      "--team", str(demo.teams[0].id), "--user", str(demo.members[0].id))
        assert result.exit_code == 1
        assert "Buchung fehlgeschlagen" in result.output
        assert store.get_slot(slot_id).is_available

    def test_taken_slot_gets_error(self, cfg_path, demo, slot_id):
        first = _run(cfg_path, "book", str(slot_id),
                     "--team", str(demo.teams[0].id), "--user", str(demo.leaders[0].id))
        assert first.exit_code == 0, first.output
        second = _run(cfg_path, "book", str(slot_id),
                      "--team", str(demo.teams[1].id), "--user", str(demo.leaders[1].id))
        assert second.exit_code == 1
        assert "Buchung fehlgeschlagen" in second.output

    def test_unknown_user(self, cfg_path, demo, slot_id):
        result = _run(cfg_path, "book", str(slot_id),
                      "--team", str(demo.teams[0].id), "--user", "4711")
        assert result.exit_code == 1


# ─── DEMO / CONFIG ────────────────────────────────────────────────────────────

class TestDemoAndConfig:
    def test_demo_twice_on_same_database(self, cfg_path, tmp_path, db_url):
        """Ein zweiter Demo-Lauf legt einen weiteren Kursraum an statt abzustürzen."""
        out = tmp_path / "demo_timetable.txt"
        for _ in range(2):
            result = _run(cfg_path, "demo", "--timetable-out", str(out))
            assert result.exit_code == 0, result.output
        assert out.exists()

        store = SlotStore.from_config(DatabaseConfig(url=db_url))
        with store.transaction() as s:
            first = s.get_classroom(1)
            second = s.get_classroom(2)
        assert first is not None and second is not None
        assert first.link_code != second.link_code

    def test_first_run_hint(self, tmp_path, monkeypatch):
        """Ohne Konfigurationsdatei: Hinweis auf 'config init', Standardwerte gelten."""
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["config", "show"], obj={})
        assert result.exit_code == 0, result.output
        assert "Standardwerte" in result.output

    def test_no_hint_with_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        ConfigManager().save(default_app_config())
        result = CliRunner().invoke(cli, ["config", "show"], obj={})
        assert result.exit_code == 0, result.output
        assert "Standardwerte" not in result.output

    def test_demo_deadlines_in_future(self, demo):
        assert demo.classroom.review_deadlines["Review 1"] > date.today()
