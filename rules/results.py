"""Ergebnisse eines Auswertungsdurchlaufs."""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from rules.errors import RuleRuntimeError

Outcome = Union[bool, int, float, str, None, RuleRuntimeError]


class RuleResult(BaseModel):
    """Ergebnis einer Regel: (Name, optional, Ergebnis)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    optional: bool
    outcome: Outcome

    @property
    def status(self) -> Literal["passed", "failed", "error", "info"]:
        if isinstance(self.outcome, RuleRuntimeError):
            return "error"
        if self.outcome is True:
            return "passed"
        if self.outcome is False:
            return "failed"
        return "info"

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    def as_tuple(self) -> tuple[str, bool, Outcome]:
        return (self.name, self.optional, self.outcome)


class EvaluationReport(BaseModel):
    """Alle Ergebnisse eines Durchlaufs in Registrierungsreihenfolge."""

    results: list[RuleResult]

    @property
    def errors(self) -> list[RuleResult]:
        return [r for r in self.results if r.status == "error"]

    @property
    def failed(self) -> list[RuleResult]:
        return [r for r in self.results if r.status == "failed"]

    @property
    def all_required_passed(self) -> bool:
        """True wenn keine Pflichtregel fehlgeschlagen oder abgebrochen ist."""
        return not any(
            r.status in ("failed", "error") for r in self.results if not r.optional
        )

    def print_rich(self) -> None:
        """Gibt die Verpflichtungen formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ ALLE VERPFLICHTUNGEN ERFÜLLT[/bold green]"
            if self.all_required_passed
            else "[bold red]✗ VERPFLICHTUNGEN NICHT ERFÜLLT[/bold red]"
        )
        lines = [
            status,
            f"Regeln: {len(self.results)} | Nicht erfüllt: {len(self.failed)} | "
            f"Fehler: {len(self.errors)}",
        ]
        console.print(Panel("\n".join(lines), title="Verpflichtungen", border_style="cyan"))

        if not self.results:
            console.print("[dim]Keine Regeln geladen.[/dim]")
            return

        table = Table(box=box.ROUNDED)
        table.add_column("", width=2)
        table.add_column("Regel")
        table.add_column("Ergebnis")

        symbols = {
            "passed": "[green]✓[/green]",
            "failed": "[red]✗[/red]",
            "error": "[red]![/red]",
            "info": "[cyan]ℹ[/cyan]",
        }
        for r in self.results:
            name = f"[dim](Optional)[/dim] {r.name}" if r.optional else r.name
            if isinstance(r.outcome, RuleRuntimeError):
                detail = f"[red]{r.outcome.message}[/red]"
            elif isinstance(r.outcome, bool):
                detail = "erfüllt" if r.outcome else "nicht erfüllt"
            elif r.outcome is None:
                detail = "—"
            else:
                detail = str(r.outcome)
            table.add_row(symbols[r.status], name, detail)
        console.print(table)
