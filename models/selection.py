"""Kurswahl eines Schülers: Semesterbelegung und Prüfungsfächer pro Kurs.

Die Kurswahl wird einmal aus dem Katalog abgeleitet und danach nur noch über
die Bearbeitungsoperationen dieses Moduls verändert. Jede abgelehnte
Bearbeitung lässt das Modell unverändert.
"""

import logging
from typing import Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator, model_validator
from pydantic import Field as ModelField

from models.course import Course, eligible_window
from models.errors import IneligibleSlot, OutOfWindow, UnknownCourse
from models.exam import ADVANCED_TAG, Exam
from models.structure import Field, Structure

logger = logging.getLogger(__name__)


class CourseInstance(BaseModel):
    """Konkrete Wahl eines Kurses: gewählte Semester + optionales Prüfungsfach.

    Semester und Prüfungsfach werden bei jeder Zuweisung geprüft; eine
    abgelehnte Zuweisung lässt den alten Wert stehen.
    """

    model_config = ConfigDict(validate_assignment=True)

    course: Course = ModelField(frozen=True)
    semesters: tuple[bool, ...]  # Länge = Semesterzahl des Programms
    exam: Optional[Exam] = None

    @field_validator("semesters")
    @classmethod
    def _check_window(cls, v: tuple[bool, ...], info: ValidationInfo) -> tuple[bool, ...]:
        course = info.data.get("course")
        if course is None:
            return v
        start, end = eligible_window(course, len(v))
        for i, selected in enumerate(v):
            if selected and not (start <= i < end):
                raise ValueError(
                    f"Kurs '{course.id}': Semester {i + 1} außerhalb "
                    f"des Fensters {start + 1}–{end} gewählt"
                )
        return v

    @field_validator("exam")
    @classmethod
    def _check_exam(cls, v: Optional[Exam], info: ValidationInfo) -> Optional[Exam]:
        course = info.data.get("course")
        if v is not None and course is not None and not v.allowed_for(course.tags):
            raise ValueError(f"Kurs '{course.id}' kann nicht {v.label} sein")
        return v

    @property
    def id(self) -> str:
        return self.course.id

    @property
    def window(self) -> tuple[int, int]:
        """Wählbares Semesterfenster [start, end) dieses Kurses."""
        return eligible_window(self.course, len(self.semesters))

    @property
    def num_selected(self) -> int:
        """Anzahl gewählter Semester."""
        return sum(1 for s in self.semesters if s)

    @property
    def is_lk(self) -> bool:
        """True wenn der Kurs als Leistungsfach (1. oder 2. LF) gewählt ist."""
        return self.exam is not None and self.exam.requires_advanced

    def has_block(self, min_len: int) -> bool:
        """True wenn mindestens ``min_len`` aufeinanderfolgende Semester gewählt sind.

        Längen über der Semesterzahl werden auf die Semesterzahl gekürzt.
        """
        min_len = min(max(min_len, 1), len(self.semesters))
        run = 0
        for selected in self.semesters:
            run = run + 1 if selected else 0
            if run >= min_len:
                return True
        return False


class SelectionField(Field[CourseInstance]):
    """Aufgabenfeld der Kurswahl mit Semester-Aggregaten."""

    def selected_semesters(self) -> int:
        """Summe gewählter Semester aller Kurse (ungedeckelt)."""
        return sum(c.num_selected for c in self.courses)

    def usable_semesters(self) -> int:
        """Einbringbare Semester: Summe, gedeckelt auf ``max_usable``."""
        total = self.selected_semesters()
        if self.max_usable is None:
            return total
        return min(total, self.max_usable)


class SelectionModel(Structure[CourseInstance]):
    """Kurswahl (``Structure[CourseInstance]``), entsteht über ``Catalog.instantiate()``."""

    fields: list[SelectionField]

    @model_validator(mode="after")
    def _check_shape(self):
        seen: set[str] = set()
        for inst in self._iter_items():
            if len(inst.semesters) != self.num_semesters:
                raise ValueError(
                    f"Kurs '{inst.id}': {len(inst.semesters)} Semester-Einträge, "
                    f"erwartet {self.num_semesters}"
                )
            if inst.id in seen:
                raise ValueError(f"Kurs-ID '{inst.id}' ist nicht eindeutig")
            seen.add(inst.id)
        return self

    # ─── Abfragen ───

    def iter_instances(self) -> Iterator[CourseInstance]:
        """Alle Kurse in Katalogreihenfolge."""
        return self._iter_items()

    def find_by_id(self, course_id: str) -> Optional[CourseInstance]:
        return next((c for c in self._iter_items() if c.id == course_id), None)

    def find_by_tag(self, tag: str) -> list[CourseInstance]:
        """Alle Kurse mit diesem Tag, in Katalogreihenfolge."""
        return [c for c in self._iter_items() if tag in c.course.tags]

    def fields_named(self, name: str) -> list[SelectionField]:
        """Alle Felder mit diesem Namen (Namen müssen nicht eindeutig sein)."""
        return [f for f in self.fields if f.name == name]

    def selected_semester_count(self, course_id: str) -> int:
        return self._require(course_id).num_selected

    def field_usable_semesters(self, field: Union[SelectionField, int]) -> int:
        """Einbringbare Semester eines Feldes (Objekt oder Position)."""
        if isinstance(field, int):
            field = self.fields[field]
        return field.usable_semesters()

    def exam_holder(self, slot: Exam) -> Optional[str]:
        """Kurs-ID, die dieses Prüfungsfach hält, oder None."""
        return next((c.id for c in self._iter_items() if c.exam == slot), None)

    def exam_assignments(self) -> dict[Exam, str]:
        """Alle vergebenen Prüfungsfächer in fester Rollenreihenfolge."""
        held = {c.exam: c.id for c in self._iter_items() if c.exam is not None}
        return {e: held[e] for e in Exam if e in held}

    def exam_options(self, course_id: str) -> list[Optional[Exam]]:
        """Auswahlmöglichkeiten für das Prüfungsfach: None plus alle erlaubten Rollen."""
        inst = self._require(course_id)
        return [None, *Exam.filtered(inst.course.tags)]

    # ─── Bearbeitung ───

    def toggle_all_semesters(self, course_id: str) -> None:
        """Wählt das ganze Fenster oder leert es, falls schon etwas gewählt ist."""
        inst = self._require(course_id)
        start, end = inst.window
        value = not any(inst.semesters[start:end])
        inst.semesters = tuple(
            value if start <= i < end else s for i, s in enumerate(inst.semesters)
        )
        logger.debug(f"Kurs {course_id}: Semester {start + 1}–{end} → {value}")

    def set_semester(self, course_id: str, index: int, value: bool) -> None:
        """Setzt ein einzelnes Semester.

        IndexError: Index liegt außerhalb des Programms.
        OutOfWindow: Index liegt im Programm, aber nicht im Kursfenster.
        """
        inst = self._require(course_id)
        if not 0 <= index < self.num_semesters:
            raise IndexError(
                f"Semesterindex {index} außerhalb von 0..{self.num_semesters - 1}"
            )
        start, end = inst.window
        if not start <= index < end:
            raise OutOfWindow(course_id, index, (start, end))
        semesters = list(inst.semesters)
        semesters[index] = bool(value)
        inst.semesters = tuple(semesters)

    def assign_exam(self, course_id: str, slot: Optional[Exam]) -> None:
        """Setzt oder entfernt (None) das Prüfungsfach eines Kurses.

        Die Eindeutigkeit über alle Kurse prüft der Aufrufer mit ``exam_holder``.
        """
        inst = self._require(course_id)
        if slot is not None and slot.requires_advanced and ADVANCED_TAG not in inst.course.tags:
            raise IneligibleSlot(course_id, slot)
        inst.exam = slot

    # ─── Intern ───

    def _require(self, course_id: str) -> CourseInstance:
        inst = self.find_by_id(course_id)
        if inst is None:
            raise UnknownCourse(course_id)
        return inst
