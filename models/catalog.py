"""Kurskatalog: unveränderliche Definition aller Felder und Kurse."""

from typing import Optional

from pydantic import ConfigDict, field_validator, model_validator

from models.course import Course, eligible_window
from models.errors import CatalogError
from models.selection import CourseInstance, SelectionField, SelectionModel
from models.structure import Field, Structure


class CatalogField(Field[Course]):
    """Aufgabenfeld des Katalogs: Kurse als Tupel, nach dem Aufbau unveränderlich."""

    model_config = ConfigDict(frozen=True)

    courses: tuple[Course, ...]


class Catalog(Structure[Course]):
    """Kurskatalog einer Schule (``Structure[Course]``).

    Invarianten (beim Aufbau geprüft, Verstoß → CatalogError):
    - offset + Dauer ≤ Semesterzahl für Kurse mit fester Dauer
    - offset ≤ Semesterzahl für alle übrigen Kurse
    - Kurs-IDs sind eindeutig
    """

    model_config = ConfigDict(frozen=True)

    fields: tuple[CatalogField, ...]

    @field_validator("fields", mode="before")
    @classmethod
    def _plain_fields(cls, v):
        # Field(...) ohne Typparameter wird über seine Daten neu validiert
        return [
            f.model_dump() if isinstance(f, Field) and not isinstance(f, CatalogField) else f
            for f in v
        ]

    @model_validator(mode="after")
    def _check_courses(self):
        if self.num_semesters < 1:
            raise CatalogError(
                None, f"Semesterzahl muss ≥ 1 sein (ist {self.num_semesters})"
            )
        seen: set[str] = set()
        for course in self._iter_items():
            if course.id in seen:
                raise CatalogError(course.id, "Kurs-ID ist nicht eindeutig")
            seen.add(course.id)
            start, end = eligible_window(course, self.num_semesters)
            if end > self.num_semesters or start > self.num_semesters:
                raise CatalogError(
                    course.id,
                    f"Offset {course.semester_offset} + Dauer "
                    f"{course.num_semesters or 0} überschreitet "
                    f"{self.num_semesters} Semester",
                )
        return self

    @classmethod
    def build(
        cls,
        fields: list[Field[Course]],
        total_semesters: int,
        school: str,
        version: str,
    ) -> "Catalog":
        """Baut und validiert einen Katalog."""
        return cls(
            fields=fields,
            num_semesters=total_semesters,
            school=school,
            version=version,
        )

    # ─── Lesezugriff ───

    def iter_courses(self) -> tuple[Course, ...]:
        """Alle Kurse flach, in Feld- und dann Kursreihenfolge."""
        return tuple(self._iter_items())

    def find_course(self, course_id: str) -> Optional[Course]:
        return next((c for c in self._iter_items() if c.id == course_id), None)

    def summary(self) -> str:
        """Kurze Übersicht über den Katalog."""
        courses = self.iter_courses()
        capped = [f for f in self.fields if f.max_usable is not None]
        lk = sum(1 for c in courses if "lk" in c.tags)
        lines = [
            f"Schule: {self.school} (Katalog v{self.version})",
            f"Semester: {self.num_semesters}",
            f"Felder: {len(self.fields)} ({len(capped)} mit Einbringungsgrenze)",
            f"Kurse: {len(courses)} ({lk} mögliche Leistungskurse)",
        ]
        return "\n".join(lines)

    # ─── Kurswahl ableiten ───

    def instantiate(self) -> SelectionModel:
        """Leitet eine frische Kurswahl ab: nichts gewählt, keine Prüfungsfächer."""
        fields = [
            SelectionField(
                name=f.name,
                max_usable=f.max_usable,
                courses=[
                    CourseInstance(course=c, semesters=(False,) * self.num_semesters)
                    for c in f.courses
                ],
            )
            for f in self.fields
        ]
        return SelectionModel(
            fields=fields,
            num_semesters=self.num_semesters,
            school=self.school,
            version=self.version,
        )
