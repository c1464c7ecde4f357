"""Prüfungsfächer des Abiturs (1.–2. Leistungsfach, 3.–4. Prüfungsfach, 5. PK)."""

from enum import Enum
from typing import Iterable, Optional

# Tag, das einen Kurs als mögliches Leistungskursfach kennzeichnet
ADVANCED_TAG = "lk"


class Exam(str, Enum):
    LF1 = "LF1"
    LF2 = "LF2"
    PRF3 = "PRF3"
    PRF4 = "PRF4"
    PK5 = "PK5"

    @property
    def label(self) -> str:
        """Anzeigename, z.B. "1. LF"."""
        return _LABELS[self]

    @property
    def requires_advanced(self) -> bool:
        """True für die beiden Leistungsfach-Rollen."""
        return self in (Exam.LF1, Exam.LF2)

    def allowed_for(self, tags: Iterable[str]) -> bool:
        """Prüft, ob ein Kurs mit diesen Tags die Rolle übernehmen darf."""
        return not self.requires_advanced or ADVANCED_TAG in set(tags)

    @classmethod
    def filtered(cls, tags: Iterable[str]) -> list["Exam"]:
        """Alle Rollen, die ein Kurs mit diesen Tags übernehmen darf (Reihenfolge fix)."""
        tags = set(tags)
        return [e for e in cls if e.allowed_for(tags)]

    @classmethod
    def parse(cls, value: str) -> Optional["Exam"]:
        """Akzeptiert Code ("LF1") oder Anzeigename ("1. LF"); None bei Unbekanntem."""
        if not isinstance(value, str):
            return None
        key = value.strip()
        for exam in cls:
            if key.upper() == exam.value or key == exam.label:
                return exam
        return None

    def __str__(self) -> str:
        return self.label


_LABELS = {
    Exam.LF1: "1. LF",
    Exam.LF2: "2. LF",
    Exam.PRF3: "3. PrF",
    Exam.PRF4: "4. PrF",
    Exam.PK5: "5. PK",
}
