"""Kurswahl — Haupt-CLI.

Verwendung:
  python main.py config init              Default-Konfiguration anlegen
  python main.py config show              Konfiguration anzeigen
  python main.py catalog show             Kurskatalog anzeigen
  python main.py catalog export <datei>   Kurskatalog als YAML/JSON speichern
  python main.py rules list               Geladene Regeln auflisten
  python main.py check <wahl.yaml>        Kurswahl einlesen und Regeln prüfen
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config_or_abort(config_path: Optional[str]):
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager, ConfigError
    mgr = ConfigManager()
    try:
        config = mgr.load(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    return mgr, config


def _load_catalog_or_abort(mgr, config, catalog_path: Optional[str]):
    from config.manager import ConfigError
    from models.errors import CatalogError
    try:
        return mgr.load_catalog(config, Path(catalog_path) if catalog_path else None)
    except (ConfigError, CatalogError) as e:
        console.print(f"[red bold]Katalog nicht nutzbar:[/red bold]\n{e}")
        sys.exit(1)


def _load_rules_or_abort(mgr, config, rules_path: Optional[str], selection=None):
    from config.manager import ConfigError
    from rules import RuleHost, RuleLoadError
    try:
        source, name = mgr.load_rules_source(config, Path(rules_path) if rules_path else None)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    host = RuleHost(selection, config.rule_host)
    try:
        host.load(source, chunkname=name)
    except RuleLoadError as e:
        console.print(f"[red bold]Regeln nicht ladbar ({name}):[/red bold]\n{e}")
        sys.exit(1)
    return host


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anlegen oder anzeigen."""


@cmd_config.command("init")
def config_init():
    """Legt die Default-Konfiguration an."""
    from config.manager import ConfigManager
    from config.defaults import default_app_config

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Überschreiben?", default=False):
            return
    mgr.save(default_app_config())


@cmd_config.command("show")
@click.pass_context
def config_show(ctx):
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort(ctx.obj["config_path"])

    table = Table(title="Konfiguration", box=box.ROUNDED)
    table.add_column("Parameter", style="bold")
    table.add_column("Wert")
    table.add_row("Kurskatalog", config.catalog_path or "[dim]eingebaut[/dim]")
    table.add_row("Regeln", config.rules_path or "[dim]eingebaut[/dim]")
    table.add_row("Anweisungslimit", str(config.rule_host.instruction_limit))
    table.add_row(
        "Speichergrenze",
        f"{config.rule_host.memory_limit_mb} MB" if config.rule_host.memory_limit_mb else "—",
    )
    table.add_row("Log-Level", config.log_level.value)
    console.print(table)


# ─── CATALOG ──────────────────────────────────────────────────────────────────

@click.group("catalog")
def cmd_catalog():
    """Kurskatalog anzeigen oder exportieren."""


@cmd_catalog.command("show")
@click.option("--catalog", "catalog_path", default=None, help="Katalogdatei (YAML/JSON).")
@click.pass_context
def catalog_show(ctx, catalog_path: Optional[str]):
    """Zeigt alle Felder und Kurse des Katalogs."""
    from models.course import eligible_window

    mgr, config = _load_config_or_abort(ctx.obj["config_path"])
    catalog = _load_catalog_or_abort(mgr, config, catalog_path)

    console.print(Panel(catalog.summary(), title="Kurskatalog", border_style="cyan"))
    for field in catalog.fields:
        title = field.name
        if field.max_usable is not None:
            title += f"  (max. {field.max_usable} Semester einbringbar)"
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("ID", style="bold")
        table.add_column("Kurs")
        table.add_column("Semester")
        table.add_column("Tags")
        for course in field.courses:
            start, end = eligible_window(course, catalog.num_semesters)
            table.add_row(
                course.id, course.name, f"{start + 1}–{end}",
                ", ".join(sorted(course.tags)),
            )
        console.print(table)


@cmd_catalog.command("export")
@click.argument("datei", type=click.Path(path_type=Path))
@click.option("--catalog", "catalog_path", default=None, help="Katalogdatei (YAML/JSON).")
@click.pass_context
def catalog_export(ctx, datei: Path, catalog_path: Optional[str]):
    """Speichert den Katalog als YAML oder JSON."""
    mgr, config = _load_config_or_abort(ctx.obj["config_path"])
    catalog = _load_catalog_or_abort(mgr, config, catalog_path)
    mgr.save_catalog(catalog, datei)
    console.print(f"[green]✓[/green] Katalog gespeichert: {datei}")


# ─── RULES ────────────────────────────────────────────────────────────────────

@click.group("rules")
def cmd_rules():
    """Regeln verwalten."""


@cmd_rules.command("list")
@click.option("--rules", "rules_path", default=None, help="Lua-Regeldatei.")
@click.pass_context
def rules_list(ctx, rules_path: Optional[str]):
    """Lädt die Regeln und listet sie in Auswertungsreihenfolge auf."""
    mgr, config = _load_config_or_abort(ctx.obj["config_path"])
    with _load_rules_or_abort(mgr, config, rules_path) as host:
        table = Table(title="Verpflichtungen", box=box.ROUNDED)
        table.add_column("#", justify="right")
        table.add_column("Regel")
        table.add_column("Optional")
        for i, (name, optional) in enumerate(host.rules, 1):
            table.add_row(str(i), name, "ja" if optional else "")
        console.print(table)


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.argument("wahl", type=click.Path(exists=True, path_type=Path))
@click.option("--catalog", "catalog_path", default=None, help="Katalogdatei (YAML/JSON).")
@click.option("--rules", "rules_path", default=None, help="Lua-Regeldatei.")
@click.pass_context
def cmd_check(ctx, wahl: Path, catalog_path: Optional[str], rules_path: Optional[str]):
    """Liest eine Kurswahl ein und prüft sie gegen alle Regeln."""
    from data.choices_import import ChoicesImportError, apply_choices, load_choices
    from rules import EvaluationReport

    mgr, config = _load_config_or_abort(ctx.obj["config_path"])
    catalog = _load_catalog_or_abort(mgr, config, catalog_path)
    selection = catalog.instantiate()

    try:
        choices = load_choices(wahl)
    except ChoicesImportError as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)
    import_report = apply_choices(selection, choices)
    import_report.print_rich()

    _print_selection(selection)

    with _load_rules_or_abort(mgr, config, rules_path, selection) as host:
        report = EvaluationReport(results=host.evaluate())
    report.print_rich()

    sys.exit(0 if report.all_required_passed else 1)


def _print_selection(selection) -> None:
    """Kompakte Übersicht der Kurswahl (nur gewählte Kurse)."""
    table = Table(title="Kurswahl", box=box.ROUNDED)
    table.add_column("Kurs")
    table.add_column("PrF")
    for i in range(selection.num_semesters):
        table.add_column(f"{i + 1}. Sem.", justify="center")
    for field in selection.fields:
        for inst in field.courses:
            if not inst.num_selected and inst.exam is None:
                continue
            table.add_row(
                inst.course.name,
                inst.exam.label if inst.exam else "",
                *["x" if s else "" for s in inst.semesters],
            )
    console.print(table)

    usable = Table(title="Einbringbare Semester", box=box.SIMPLE)
    usable.add_column("Feld")
    usable.add_column("Gewählt", justify="right")
    usable.add_column("Einbringbar", justify="right")
    for field in selection.fields:
        usable.add_row(field.name, str(field.selected_semesters()),
                       str(field.usable_semesters()))
    console.print(usable)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", default=None,
              help="Pfad zur Konfigurationsdatei (YAML).")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliche Log-Ausgabe.")
@click.pass_context
def cli(ctx, config_path: Optional[str], verbose: bool):
    """Kurswahl-Planer für die gymnasiale Oberstufe.

    Starten Sie mit: python main.py catalog show
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    _, config = _load_config_or_abort(config_path)
    _setup_logging("DEBUG" if verbose else config.log_level.value)


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_catalog)
cli.add_command(cmd_rules)
cli.add_command(cmd_check)


if __name__ == "__main__":
    main()
