"""Lesende Projektion der Kurswahl für Regelcode.

Regeln sehen nie die Python-Objekte der Kurswahl, sondern nur Kopien
(Dicts/Listen, in Lua als Tabellen) und Abfragefunktionen. Bearbeitende
Operationen gibt es in der Projektion nicht.
"""

from typing import Any, Optional, Union

from models.exam import Exam
from models.selection import CourseInstance, SelectionModel


def course_snapshot(inst: CourseInstance) -> dict[str, Any]:
    """Kopie eines Kurses mit Wahl, wie sie Regeln als Tabelle erhalten."""
    course = inst.course
    tags = sorted(course.tags)
    return {
        "id": course.id,
        "name": course.name,
        "tags": tags,
        "tag_set": {t: True for t in tags},
        "semesters": list(inst.semesters),
        "selected": inst.num_selected,
        "offset": course.semester_offset,
        "duration": course.num_semesters,
        "lessons_per_week": course.lessons_per_week,
        "exam": inst.exam.value if inst.exam is not None else None,
        "is_lk": inst.is_lk,
    }


class SelectionView:
    """Nur-Lese-Sicht auf eine Kurswahl.

    Alle Methoden akzeptieren beliebige Argumente aus Lua und liefern bei
    unpassenden Typen ``None`` bzw. neutrale Werte statt Fehlern.
    """

    def __init__(self, model: SelectionModel) -> None:
        self._model = model

    # ─── Kurse ───

    def course(self, course_id: Any = None) -> Optional[dict[str, Any]]:
        if not isinstance(course_id, str):
            return None
        inst = self._model.find_by_id(course_id)
        return course_snapshot(inst) if inst is not None else None

    def by_tag(self, tag: Any = None) -> list[dict[str, Any]]:
        if not isinstance(tag, str):
            return []
        return [course_snapshot(c) for c in self._model.find_by_tag(tag)]

    def count_tag(self, tag: Any = None) -> int:
        """Anzahl der Kurse mit diesem Tag, die in mindestens einem Semester gewählt sind."""
        if not isinstance(tag, str):
            return 0
        return sum(1 for c in self._model.find_by_tag(tag) if c.num_selected > 0)

    def semesters(self, course_id: Any = None) -> int:
        if not isinstance(course_id, str):
            return 0
        inst = self._model.find_by_id(course_id)
        return inst.num_selected if inst is not None else 0

    def has_block(self, course_id: Any = None, min_len: Any = None) -> bool:
        if not isinstance(course_id, str) or not isinstance(min_len, (int, float)):
            return False
        inst = self._model.find_by_id(course_id)
        return inst is not None and inst.has_block(int(min_len))

    # ─── Felder ───

    def usable(self, field: Any = None) -> int:
        """Einbringbare Semester: Feldname (Summe über gleichnamige Felder) oder 1-basierte Position."""
        if isinstance(field, bool):
            return 0
        if isinstance(field, (int, float)):
            index = int(field) - 1
            if 0 <= index < len(self._model.fields):
                return self._model.field_usable_semesters(index)
            return 0
        if isinstance(field, str):
            return sum(f.usable_semesters() for f in self._model.fields_named(field))
        return 0

    def fields(self) -> list[dict[str, Any]]:
        return [
            {
                "name": f.name,
                "max_usable": f.max_usable,
                "semesters": f.selected_semesters(),
                "usable": f.usable_semesters(),
                "courses": [c.id for c in f.courses],
            }
            for f in self._model.fields
        ]

    # ─── Prüfungsfächer ───

    def exam_holder(self, slot: Any = None) -> Optional[str]:
        exam = Exam.parse(slot) if isinstance(slot, str) else None
        if exam is None:
            return None
        return self._model.exam_holder(exam)

    def exams(self) -> dict[str, str]:
        return {e.value: cid for e, cid in self._model.exam_assignments().items()}

    # ─── Export als Lua-Tabelle ───

    def as_table_data(self) -> dict[str, Union[str, int, Any]]:
        """Daten + Funktionen für die Sandbox (wird dort in eine Tabelle umgewandelt)."""
        return {
            "school": self._model.school,
            "version": self._model.version,
            "total_semesters": self._model.num_semesters,
            "course": self.course,
            "by_tag": self.by_tag,
            "count_tag": self.count_tag,
            "semesters": self.semesters,
            "has_block": self.has_block,
            "usable": self.usable,
            "fields": self.fields,
            "exam_holder": self.exam_holder,
            "exams": self.exams,
        }
