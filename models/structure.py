"""Generische Katalog-Struktur: Aufgabenfelder mit Kursen (Pydantic v2).

Dieselbe Form trägt den Kurskatalog (``Structure[Course]``) und die
Kurswahl eines Schülers (``Structure[CourseInstance]``).
"""

from typing import Generic, Iterator, Optional, TypeVar

from pydantic import BaseModel, field_validator

T = TypeVar("T")


class Field(BaseModel, Generic[T]):
    """Aufgabenfeld bzw. Kursgruppe, z.B. "1. AF" oder "Zusatzkurse"."""

    name: str
    courses: list[T]
    max_usable: Optional[int] = None   # max. einbringbare Semester, None = alle

    @field_validator("max_usable")
    @classmethod
    def _non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("max_usable darf nicht negativ sein.")
        return v


class Structure(BaseModel, Generic[T]):
    """Aufgabenfelder in fester Reihenfolge plus Programmdaten."""

    fields: list[Field[T]]
    num_semesters: int      # Gesamtzahl Semester des Programms (Q1–Q4 = 4)
    school: str
    version: str

    def _iter_items(self) -> Iterator[T]:
        for field in self.fields:
            yield from field.courses
