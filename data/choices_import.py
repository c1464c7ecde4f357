"""Import einer Kurswahl aus YAML/JSON.

Format (Semester 1-basiert):

    de: all                 # ganzes Fenster wählen
    mat:
      semesters: [1, 2, 3, 4]
      exam: LF1             # oder "1. LF"
    ski:
      semesters: [2]

Die Wahl wird ausschließlich über die Bearbeitungsoperationen der Kurswahl
angewendet. Abgelehnte Bearbeitungen landen als Fehler im ImportReport,
die Kurswahl bleibt dabei für den betroffenen Schritt unverändert.
Ein Prüfungsfach wird nie an zwei Kurse vergeben.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from ruamel.yaml import YAML

from models.errors import IneligibleSlot, OutOfWindow
from models.exam import Exam
from models.selection import SelectionModel

logger = logging.getLogger(__name__)


class ChoicesImportError(Exception):
    """Fehler beim Lesen der Wahldatei."""


class ImportReport(BaseModel):
    """Ergebnis eines Imports."""

    applied: int = 0
    errors: list[str] = []
    warnings: list[str] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        status = (
            "[bold green]✓ WAHL ÜBERNOMMEN[/bold green]"
            if self.ok
            else "[bold yellow]⚠ WAHL TEILWEISE ÜBERNOMMEN[/bold yellow]"
        )
        lines = [status, f"Kurse übernommen: {self.applied}"]
        if self.errors:
            lines.append("\n[red bold]Abgelehnt:[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Hinweise:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        console.print(Panel("\n".join(lines), title="Kurswahl-Import", border_style="cyan"))


def load_choices(path: Path) -> dict[str, Any]:
    """Liest eine Wahldatei (.yaml/.yml/.json) als Mapping Kurs-ID → Wahl."""
    path = Path(path)
    if not path.exists():
        raise ChoicesImportError(f"Wahldatei nicht gefunden: {path}")
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ChoicesImportError(f"Ungültiges JSON in {path}: {e}") from e
        else:
            raw = YAML(typ="safe").load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ChoicesImportError(
            f"Wahldatei {path}: erwartet eine Zuordnung Kurs-ID → Wahl"
        )
    return {str(k): v for k, v in raw.items()}


def apply_choices(model: SelectionModel, choices: dict[str, Any]) -> ImportReport:
    """Wendet eine Wahl auf die Kurswahl an und sammelt abgelehnte Schritte."""
    report = ImportReport()

    for course_id, choice in choices.items():
        inst = model.find_by_id(course_id)
        if inst is None:
            report.errors.append(f"Unbekannter Kurs '{course_id}'")
            continue

        if choice == "all":
            if any(inst.semesters):
                model.toggle_all_semesters(course_id)
            model.toggle_all_semesters(course_id)
            report.applied += 1
            continue

        if not isinstance(choice, dict):
            report.errors.append(
                f"Kurs '{course_id}': Wahl muss 'all' oder eine Zuordnung sein"
            )
            continue

        semesters = choice.get("semesters") or []
        if not isinstance(semesters, list):
            report.errors.append(
                f"Kurs '{course_id}': 'semesters' muss eine Liste sein, nicht '{semesters}'"
            )
            semesters = []
        for sem in semesters:
            if isinstance(sem, bool) or not isinstance(sem, int):
                report.errors.append(f"Kurs '{course_id}': Semester '{sem}' ist keine Zahl")
                continue
            try:
                model.set_semester(course_id, sem - 1, True)
            except OutOfWindow as e:
                report.errors.append(str(e))
            except IndexError:
                report.errors.append(
                    f"Kurs '{course_id}': Semester {sem} existiert nicht "
                    f"(Programm hat {model.num_semesters})"
                )

        exam_raw = choice.get("exam")
        if exam_raw is not None:
            _apply_exam(model, course_id, exam_raw, report)

        report.applied += 1

    for exam, course_id in model.exam_assignments().items():
        if model.selected_semester_count(course_id) == 0:
            report.warnings.append(
                f"{exam.label} '{course_id}' ist in keinem Semester gewählt"
            )

    logger.info(
        f"Kurswahl-Import: {report.applied} Kurse, "
        f"{len(report.errors)} Fehler, {len(report.warnings)} Hinweise"
    )
    return report


def _apply_exam(model: SelectionModel, course_id: str, raw: Any,
                report: ImportReport) -> None:
    exam = Exam.parse(raw) if isinstance(raw, str) else None
    if exam is None:
        report.errors.append(f"Kurs '{course_id}': unbekanntes Prüfungsfach '{raw}'")
        return
    holder = model.exam_holder(exam)
    if holder is not None and holder != course_id:
        report.errors.append(
            f"Kurs '{course_id}': {exam.label} ist bereits an '{holder}' vergeben"
        )
        return
    try:
        model.assign_exam(course_id, exam)
    except IneligibleSlot as e:
        report.errors.append(str(e))
