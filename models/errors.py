"""Fehlerklassen für Kurskatalog und Kurswahl."""

from typing import Optional


class CatalogError(Exception):
    """Ein Kurs im Katalog verletzt die Semester-Invarianten.

    Wird beim Aufbau des Katalogs ausgelöst, der Katalog ist danach nicht nutzbar.
    ``course_id`` ist None, wenn der Katalog als Ganzes ungültig ist.
    """

    def __init__(self, course_id: Optional[str], message: str) -> None:
        self.course_id = course_id
        if course_id is None:
            super().__init__(f"Katalog: {message}")
        else:
            super().__init__(f"Kurs '{course_id}': {message}")


class SelectionError(Exception):
    """Basisklasse für abgelehnte Bearbeitungen der Kurswahl (Modell bleibt unverändert)."""


class UnknownCourse(SelectionError, KeyError):
    """Kurs-ID existiert nicht in der Kurswahl."""

    def __init__(self, course_id: str) -> None:
        self.course_id = course_id
        super().__init__(course_id)

    def __str__(self) -> str:
        return f"Unbekannter Kurs: '{self.course_id}'"


class OutOfWindow(SelectionError):
    """Semester liegt im Programm, aber außerhalb des wählbaren Fensters des Kurses."""

    def __init__(self, course_id: str, index: int, window: tuple[int, int]) -> None:
        self.course_id = course_id
        self.index = index
        self.window = window
        start, end = window
        super().__init__(
            f"Kurs '{course_id}': Semester {index + 1} nicht wählbar "
            f"(erlaubt: {start + 1}–{end})"
        )


class IneligibleSlot(SelectionError):
    """Prüfungsfach-Rolle verlangt ein Tag, das der Kurs nicht trägt."""

    def __init__(self, course_id: str, slot) -> None:
        self.course_id = course_id
        self.slot = slot
        super().__init__(
            f"Kurs '{course_id}' kann nicht {slot} werden (kein Leistungskursfach)"
        )
