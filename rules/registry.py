"""Regel-Registry in zwei Phasen: RuleLoader (nur anhängen) → RuleRegistry (eingefroren)."""

from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict


class RuleOptions(BaseModel):
    """Optionen eines rule()-Aufrufs. Einzige Option: ``optional``."""

    model_config = ConfigDict(frozen=True)

    optional: bool = False

    @classmethod
    def parse(cls, raw: Any) -> "RuleOptions":
        """Liest ``{optional = true}``; jede andere Form ergibt die Defaults."""
        if not isinstance(raw, Mapping):
            return cls()
        value = raw.get("optional")
        if isinstance(value, bool):
            return cls(optional=value)
        return cls()


@dataclass(frozen=True)
class Rule:
    """Registrierte Regel: Name, aufrufbarer Rumpf, optional-Flag."""

    name: str
    body: Any        # Lua-Funktion aus der Sandbox
    optional: bool = False

    def __repr__(self) -> str:
        flag = ", optional" if self.optional else ""
        return f"Rule({self.name!r}{flag})"


class RuleRegistry:
    """Eingefrorene, geordnete Regelmenge. Reihenfolge = Registrierungsreihenfolge."""

    def __init__(self, rules: tuple[Rule, ...]) -> None:
        self._rules = tuple(rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> Rule:
        return self._rules[index]

    @property
    def names(self) -> list[str]:
        return [r.name for r in self._rules]

    def __repr__(self) -> str:
        return f"RuleRegistry({len(self._rules)} Regeln)"


class RuleLoader:
    """Sammelt Regeln während des Ladens. Nach ``freeze()`` nimmt er keine mehr an."""

    def __init__(self) -> None:
        self._rules: list[Rule] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def append(self, name: str, body: Any, options: RuleOptions) -> None:
        if self._frozen:
            raise RuntimeError("rule() ist nur während des Ladens der Regeln erlaubt")
        self._rules.append(Rule(name=name, body=body, optional=options.optional))

    def freeze(self) -> RuleRegistry:
        self._frozen = True
        return RuleRegistry(tuple(self._rules))

    def __len__(self) -> int:
        return len(self._rules)
