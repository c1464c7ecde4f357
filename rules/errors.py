"""Fehlerklassen des Regel-Hosts."""


class RuleLoadError(Exception):
    """Regelquelle konnte nicht geladen werden (Syntaxfehler, Laufzeitfehler, falscher rule()-Aufruf).

    Nach diesem Fehler hat der Host keine nutzbaren Regeln.
    """


class RuleRuntimeError(Exception):
    """Eine einzelne Regel ist bei der Auswertung fehlgeschlagen.

    Wird nicht geworfen, sondern als Ergebnis der Regel gespeichert.
    """

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        self.message = message
        super().__init__(f"Regel '{name}': {message}")

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, RuleRuntimeError)
            and other.name == self.name
            and other.message == self.message
        )

    def __hash__(self) -> int:
        return hash((self.name, self.message))

    def __repr__(self) -> str:
        return f"RuleRuntimeError({self.name!r}, {self.message!r})"
