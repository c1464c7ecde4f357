"""Datenmodell für einen Kurs im Kurskatalog (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Course(BaseModel):
    """Ein Kursangebot der Oberstufe. Nach dem Aufbau unveränderlich."""

    model_config = ConfigDict(frozen=True)

    name: str                                  # "Deutsch"
    id: str                                    # "de"
    tags: frozenset[str] = frozenset()         # "lk", "nawi", "lang", ...
    num_semesters: Optional[int] = Field(None, ge=1)  # feste Dauer, None = bis Programmende
    semester_offset: int = Field(0, ge=0)      # erstes wählbares Semester (0-basiert)
    lessons_per_week: Optional[int] = Field(None, ge=1)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, v):
        if isinstance(v, str):
            return frozenset([v])
        return frozenset(v)

    @field_serializer("tags")
    def _sorted_tags(self, tags: frozenset[str]) -> list[str]:
        return sorted(tags)

    @classmethod
    def new(cls, name: str, id: str, tags: Optional[list[str]] = None) -> "Course":
        return cls(name=name, id=id, tags=frozenset(tags or []))

    def with_semesters(self, num_semesters: int) -> "Course":
        return self.model_copy(update={"num_semesters": num_semesters})

    def with_offset(self, offset: int) -> "Course":
        return self.model_copy(update={"semester_offset": offset})

    def with_lessons_per_week(self, lessons: int) -> "Course":
        return self.model_copy(update={"lessons_per_week": lessons})

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


def eligible_window(course: Course, total_semesters: int) -> tuple[int, int]:
    """Halboffenes Fenster [start, end) der wählbaren Semester eines Kurses.

    Mit fester Dauer: ``num_semesters`` Semester ab ``semester_offset``,
    sonst der Rest des Programms ab ``semester_offset``.
    """
    start = course.semester_offset
    if course.num_semesters is None:
        end = total_semesters
    else:
        end = start + course.num_semesters
    return start, end
