"""Review-Slot-Planer — Haupt-CLI.

Verwendung:
  python main.py config init                       Konfiguration anlegen
  python main.py config show                       Konfiguration anzeigen
  python main.py db init                           Datenbank-Tabellen anlegen
  python main.py demo                              Demo-Daten + Beispiel-Stundenplan
  python main.py parse <datei>                     Freie Perioden anzeigen
  python main.py split <datei> --duration 15       Review-Slot-Kandidaten anzeigen
  python main.py publish <datei> --user 1 ...      Kandidaten veröffentlichen
  python main.py slots                             Slot-Übersicht (optional Excel)
  python main.py book <slot> --team 1 --user 2     Slot für ein Team buchen
  python main.py unbook <buchung> --user 2         Buchung freigeben
  python main.py cancel <slot> --user 1            Slot absagen
  python main.py release-team <team>               Alle Buchungen eines Teams lösen
"""

import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfad für den Beispiel-Stundenplan
DEFAULT_TIMETABLE_TXT = Path("output/demo_timetable.txt")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_config(ctx: click.Context):
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if ctx.obj.get("config_path") is None and mgr.first_run_check():
        console.print(
            f"[dim]Keine Konfiguration unter {mgr.DEFAULT_CONFIG}, verwende Standardwerte. "
            f"Anlegen mit: python main.py config init[/dim]"
        )
    try:
        return mgr.load_or_default(ctx.obj.get("config_path"))
    except ValueError as e:
        console.print(f"[red bold]Konfiguration ungültig:[/red bold]\n{e}")
        sys.exit(1)


def _open_store(config):
    from booking.store import SlotStore
    return SlotStore.from_config(config.database)


def _abort(title: str, error) -> None:
    console.print(f"[red bold]{title}:[/red bold] {error}")
    sys.exit(1)


def _read_schedule(datei: Path, config):
    from timetable import ParseError, parse_timetable_slots
    try:
        return parse_timetable_slots(datei.read_text(encoding="utf-8"), config.parser)
    except ParseError as e:
        _abort("Stundenplan ungültig", e)


def _resolve_duration(duration: Optional[int], config) -> int:
    """Ohne Angabe gilt die Standard-Dauer; sonst nur die konfigurierten Dauern."""
    if duration is None:
        return config.booking.default_duration_minutes
    choices = config.booking.duration_choices
    if duration not in choices:
        _abort("Ungültige Dauer",
               f"{duration} min (erlaubt: {', '.join(str(d) for d in choices)})")
    return duration


class DeadlineParam(click.ParamType):
    """Frist: JJJJ-MM-TT → date (Tagesende), JJJJ-MM-TT HH:MM → datetime (exakt)."""

    name = "frist"

    def convert(self, value, param, ctx):
        if isinstance(value, date):
            return value
        text = value.strip()
        try:
            return datetime.strptime(text, "%Y-%m-%d %H:%M")
        except ValueError:
            pass
        try:
            return datetime.strptime(text, "%Y-%m-%d").date()
        except ValueError:
            self.fail(f"{value!r} ist keine Frist (JJJJ-MM-TT oder 'JJJJ-MM-TT HH:MM')",
                      param, ctx)


def _print_candidates(slots, title: str) -> None:
    from config.defaults import day_name
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Nr.", justify="right")
    table.add_column("Tag")
    table.add_column("Beginn")
    table.add_column("Ende")
    table.add_column("Kürzel", style="dim")
    for i, s in enumerate(slots, 1):
        table.add_row(str(i), day_name(s.day), s.start, s.end, s.code or "")
    console.print(table)


def _parse_selection(raw: Optional[str], count: int) -> list[int]:
    """"1,3,5-7" → [0, 2, 4, 5, 6] (0-basiert). Ohne Angabe: alle."""
    if not raw:
        return list(range(count))
    picked: list[int] = []
    for token in raw.replace(";", ",").split(","):
        token = token.strip()
        if not token:
            continue
        first, _, last = token.partition("-")
        try:
            lo, hi = int(first), int(last or first)
        except ValueError:
            raise click.BadParameter(f"Ungültige Auswahl: {token!r}", param_hint="--select")
        for n in range(lo, hi + 1):
            if not 1 <= n <= count:
                raise click.BadParameter(f"Nr. {n} existiert nicht (1–{count})",
                                         param_hint="--select")
            if n - 1 not in picked:
                picked.append(n - 1)
    return picked


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anlegen oder anzeigen."""


@cmd_config.command("init")
@click.pass_context
def config_init(ctx: click.Context):
    """Schreibt die Standard-Konfiguration als YAML."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    target = ctx.obj.get("config_path") or mgr.DEFAULT_CONFIG
    if target.exists() and not click.confirm(
            f"{target} existiert bereits. Überschreiben?", default=False):
        return
    mgr.save(default_app_config(), target)


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    config = _load_config(ctx)
    p = config.parser
    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]  |  Datenbank: {config.database.url}",
        title="Konfiguration",
        border_style="cyan",
    ))
    table = Table(title="Stundenplan-Parser", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("Wochentage", ", ".join(p.day_codes))
    table.add_row("Mittagsspalte", p.lunch_label)
    table.add_row("Mittagsfenster", f"{p.lunch_start} – {p.lunch_end}")
    table.add_row("Belegt-Markierung", p.occupied_marker)
    table.add_row("Mindestzeilen", str(p.min_lines))
    console.print(table)

    b = config.booking
    console.print(
        f"\n[bold]Review-Phasen:[/bold] {', '.join(b.review_stages)} | "
        f"Standard-Dauer: {b.default_duration_minutes} min | "
        f"Dauern: {', '.join(str(d) for d in b.duration_choices)}"
    )


# ─── DB ───────────────────────────────────────────────────────────────────────

@click.group("db")
def cmd_db():
    """Datenbank verwalten."""


@cmd_db.command("init")
@click.pass_context
def db_init(ctx: click.Context):
    """Legt alle Tabellen an (bestehende bleiben erhalten)."""
    config = _load_config(ctx)
    store = _open_store(config)
    store.create_schema()
    console.print(f"[green]✓[/green] Tabellen angelegt: {config.database.url}")


# ─── DEMO ─────────────────────────────────────────────────────────────────────

@click.command("demo")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--teams", "num_teams", default=3, help="Anzahl Teams.")
@click.option("--timetable-out", default=str(DEFAULT_TIMETABLE_TXT),
              help="Pfad für den Beispiel-Stundenplan.")
@click.pass_context
def cmd_demo(ctx: click.Context, seed: int, num_teams: int, timetable_out: str):
    """Erzeugt Demo-Nutzer, Kursraum, Teams und einen Beispiel-Stundenplan."""
    config = _load_config(ctx)
    from data.demo_data import DemoDataGenerator

    store = _open_store(config)
    store.create_schema()
    gen = DemoDataGenerator(seed=seed, parser_config=config.parser)
    demo = gen.seed(store, num_teams=num_teams)

    out_path = Path(timetable_out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(gen.timetable_text(), encoding="utf-8")

    table = Table(title="Demo-Daten", box=box.ROUNDED)
    table.add_column("Rolle", style="bold")
    table.add_column("Nutzer-ID", justify="right")
    table.add_column("Name")
    table.add_column("Team")
    table.add_row("Lehrperson", str(demo.faculty.id), demo.faculty.name, "")
    for team, leader in zip(demo.teams, demo.leaders):
        table.add_row("Teamleitung", str(leader.id), leader.name,
                      f"{team.name} (ID {team.id})")
    console.print(table)
    deadlines = ", ".join(f"{k}: {v:%d.%m.%Y}"
                          for k, v in demo.classroom.review_deadlines.items())
    console.print(f"Kursraum [bold]{demo.classroom.name}[/bold] "
                  f"(ID {demo.classroom.id}) | Fristen: {deadlines}")
    console.print(f"[green]✓[/green] Stundenplan gespeichert: {out_path}")


# ─── PARSE / SPLIT ────────────────────────────────────────────────────────────

@click.command("parse")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--flat", is_flag=True, default=False,
              help="Flache Liste statt Gruppierung nach Tagen.")
@click.option("--save-for", "save_for", type=int, default=None,
              help="Stundenplan für diese Lehrperson (Nutzer-ID) speichern.")
@click.pass_context
def cmd_parse(ctx: click.Context, datei: Path, flat: bool, save_for: Optional[int]):
    """Liest einen kopierten Stundenplan und zeigt die freien Perioden."""
    from config.defaults import day_name
    from timetable import get_all_free_slots

    config = _load_config(ctx)
    schedule = _read_schedule(datei, config)

    if flat:
        _print_candidates(get_all_free_slots(schedule), "Freie Perioden")
    else:
        for day, slots in schedule.items():
            times = ", ".join(f"{s.start}-{s.end}" for s in slots) or "[dim]–[/dim]"
            console.print(f"[bold]{day_name(day):11s}[/bold] {times}")

    if save_for is not None:
        from booking import BookingError
        store = _open_store(config)
        try:
            identity = store.resolve_identity(save_for)
        except BookingError as e:
            _abort("Speichern fehlgeschlagen", e)
        if not identity.is_faculty:
            _abort("Speichern fehlgeschlagen",
                   "Nur Lehrende können Stundenpläne hinterlegen.")
        with store.transaction() as s:
            record = s.save_timetable(save_for, datei.read_text(encoding="utf-8"),
                                      schedule, datetime.now())
        console.print(f"[green]✓[/green] Stundenplan #{record.id} gespeichert.")


@click.command("split")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--duration", "-d", type=int, default=None,
              help="Slotdauer in Minuten (Standard aus Config).")
@click.pass_context
def cmd_split(ctx: click.Context, datei: Path, duration: Optional[int]):
    """Zerlegt die freien Perioden in Review-Slots fester Dauer."""
    from timetable import get_all_free_slots, split_all_slots_by_duration

    config = _load_config(ctx)
    duration = _resolve_duration(duration, config)
    schedule = _read_schedule(datei, config)
    try:
        candidates = split_all_slots_by_duration(get_all_free_slots(schedule), duration)
    except ValueError as e:
        _abort("Ungültige Dauer", e)
    _print_candidates(candidates, f"Review-Slot-Kandidaten à {duration} min")


# ─── PUBLISH ──────────────────────────────────────────────────────────────────

@click.command("publish")
@click.argument("datei", required=False, type=click.Path(exists=True, path_type=Path))
@click.option("--user", "user_id", type=int, required=True, help="Nutzer-ID der Lehrperson.")
@click.option("--classroom", "classroom_id", type=int, required=True, help="Kursraum-ID.")
@click.option("--stage", required=True, help='Review-Phase, z.B. "Review 1".')
@click.option("--duration", "-d", type=int, default=None,
              help="Slotdauer in Minuten (Standard aus Config).")
@click.option("--deadline", type=DeadlineParam(),
              default=None, help="Buchungsfrist (sonst Frist des Kursraums).")
@click.option("--select", "selection", default=None,
              help='Nummern aus "split", z.B. "1,3,5-7" (Standard: alle).')
@click.pass_context
def cmd_publish(ctx: click.Context, datei: Optional[Path], user_id: int,
                classroom_id: int, stage: str, duration: Optional[int],
                deadline: Optional[Union[date, datetime]], selection: Optional[str]):
    """Veröffentlicht ausgewählte Kandidaten als buchbare Review-Slots.

    Ohne DATEI wird der zuletzt gespeicherte Stundenplan der Lehrperson genutzt.
    """
    from booking import BookingEngine, BookingError
    from timetable import get_all_free_slots, split_all_slots_by_duration

    config = _load_config(ctx)
    duration = _resolve_duration(duration, config)
    store = _open_store(config)

    if datei is not None:
        schedule = _read_schedule(datei, config)
    else:
        with store.transaction() as s:
            record = s.latest_timetable(user_id)
        if record is None:
            _abort("Kein Stundenplan",
                   "Datei angeben oder zuerst 'parse --save-for' ausführen.")
        schedule = record.schedule

    try:
        candidates = split_all_slots_by_duration(get_all_free_slots(schedule), duration)
    except ValueError as e:
        _abort("Ungültige Dauer", e)
    chosen = [candidates[i] for i in _parse_selection(selection, len(candidates))]

    try:
        identity = store.resolve_identity(user_id)
        engine = BookingEngine(store, config)
        created = engine.publish(identity, classroom_id, chosen, stage, deadline)
    except BookingError as e:
        _abort("Veröffentlichung fehlgeschlagen", e)

    console.print(f"[green]✓[/green] {len(created)} Slots für '{stage}' veröffentlicht "
                  f"(Frist {created[0].booking_deadline:%d.%m.%Y %H:%M}).")


# ─── SLOTS ────────────────────────────────────────────────────────────────────

@click.command("slots")
@click.option("--classroom", "classroom_id", type=int, default=None, help="Nur dieser Kursraum.")
@click.option("--stage", default=None, help="Nur diese Review-Phase.")
@click.option("--available", is_flag=True, default=False, help="Nur offene Slots.")
@click.option("--excel", "excel_path", type=click.Path(path_type=Path), default=None,
              help="Übersicht zusätzlich als Excel-Datei speichern.")
@click.pass_context
def cmd_slots(ctx: click.Context, classroom_id: Optional[int], stage: Optional[str],
              available: bool, excel_path: Optional[Path]):
    """Zeigt die Slot-Übersicht (Status, Frist, gebuchtes Team)."""
    from booking import SlotOverview
    from models.slot import SlotStatus

    config = _load_config(ctx)
    store = _open_store(config)
    overview = SlotOverview.load(store, classroom_id).filter(
        review_stage=stage,
        status=SlotStatus.AVAILABLE if available else None,
    )
    overview.print_rich()

    if excel_path is not None:
        from export.excel_export import SlotExcelExporter
        SlotExcelExporter(overview).export(excel_path)
        console.print(f"[green]✓[/green] Excel gespeichert: {excel_path}")


# ─── BOOK / UNBOOK / CANCEL ───────────────────────────────────────────────────

@click.command("book")
@click.argument("slot_id", type=int)
@click.option("--team", "team_id", type=int, required=True, help="Team-ID.")
@click.option("--user", "user_id", type=int, required=True, help="Nutzer-ID der Teamleitung.")
@click.pass_context
def cmd_book(ctx: click.Context, slot_id: int, team_id: int, user_id: int):
    """Bucht einen Slot für ein Team (nur Teamleitung)."""
    from booking import BookingEngine, BookingError

    config = _load_config(ctx)
    store = _open_store(config)
    try:
        identity = store.resolve_identity(user_id)
        booking = BookingEngine(store, config).book(identity, slot_id, team_id)
    except BookingError as e:
        _abort("Buchung fehlgeschlagen", e)
    console.print(f"[green]✓[/green] Slot {slot_id} gebucht (Buchung #{booking.id}).")


@click.command("unbook")
@click.argument("booking_id", type=int)
@click.option("--user", "user_id", type=int, required=True, help="Nutzer-ID der Teamleitung.")
@click.pass_context
def cmd_unbook(ctx: click.Context, booking_id: int, user_id: int):
    """Gibt eine Buchung wieder frei (nur Teamleitung)."""
    from booking import BookingEngine, BookingError

    config = _load_config(ctx)
    store = _open_store(config)
    try:
        identity = store.resolve_identity(user_id)
        slot = BookingEngine(store, config).unbook(identity, booking_id)
    except BookingError as e:
        _abort("Freigabe fehlgeschlagen", e)
    console.print(f"[green]✓[/green] Slot {slot.id} ({slot.label}) ist wieder frei.")


@click.command("cancel")
@click.argument("slot_id", type=int)
@click.option("--user", "user_id", type=int, required=True, help="Nutzer-ID der Lehrperson.")
@click.pass_context
def cmd_cancel(ctx: click.Context, slot_id: int, user_id: int):
    """Sagt einen Slot ab (löscht auch eine bestehende Buchung)."""
    from booking import BookingEngine, BookingError

    config = _load_config(ctx)
    store = _open_store(config)
    try:
        identity = store.resolve_identity(user_id)
        removed = BookingEngine(store, config).cancel_slot(identity, slot_id)
    except BookingError as e:
        _abort("Absage fehlgeschlagen", e)
    suffix = f" – {removed} Buchung entfernt" if removed else ""
    console.print(f"[green]✓[/green] Slot {slot_id} abgesagt{suffix}.")


@click.command("release-team")
@click.argument("team_id", type=int)
@click.pass_context
def cmd_release_team(ctx: click.Context, team_id: int):
    """Löst alle Buchungen eines Teams (Team verlässt den Kurs)."""
    from booking import BookingEngine

    config = _load_config(ctx)
    store = _open_store(config)
    released = BookingEngine(store, config).release_team(team_id)
    console.print(f"[green]✓[/green] {released} Buchung(en) von Team {team_id} freigegeben.")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Pfad zur YAML-Konfiguration.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgaben.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Review-Slot-Planer: freie Zeiten aus dem Stundenplan als Review-Slots anbieten.

    Starten Sie mit: python main.py demo
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_db)
cli.add_command(cmd_demo)
cli.add_command(cmd_parse)
cli.add_command(cmd_split)
cli.add_command(cmd_publish)
cli.add_command(cmd_slots)
cli.add_command(cmd_book)
cli.add_command(cmd_unbook)
cli.add_command(cmd_cancel)
cli.add_command(cmd_release_team)


if __name__ == "__main__":
    main()
