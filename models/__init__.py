from models.course import Course, eligible_window
from models.exam import ADVANCED_TAG, Exam
from models.errors import (
    CatalogError,
    IneligibleSlot,
    OutOfWindow,
    SelectionError,
    UnknownCourse,
)
from models.structure import Field, Structure
from models.selection import CourseInstance, SelectionField, SelectionModel
from models.catalog import Catalog, CatalogField

__all__ = [
    "Course",
    "eligible_window",
    "ADVANCED_TAG",
    "Exam",
    "CatalogError",
    "IneligibleSlot",
    "OutOfWindow",
    "SelectionError",
    "UnknownCourse",
    "Field",
    "Structure",
    "CourseInstance",
    "SelectionField",
    "SelectionModel",
    "Catalog",
    "CatalogField",
]
