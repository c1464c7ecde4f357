"""Regel-Host: lädt Lua-Regeln und wertet sie gegen die aktuelle Kurswahl aus.

Ablauf Laden:
  1. frische Sandbox erzeugen
  2. ``rule(name, body, options?)`` als einzigen schreibenden Einstieg installieren
  3. Regelquelle von oben nach unten ausführen
  4. bei Erfolg die gesammelten Regeln einfrieren (RuleRegistry)

Ablauf Auswertung: jede Regel in Registrierungsreihenfolge mit einer frischen
Nur-Lese-Projektion der Kurswahl aufrufen. Fehler einer Regel werden als
RuleRuntimeError-Ergebnis festgehalten, der Durchlauf läuft weiter.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Any, Optional

from config.schema import RuleHostConfig
from models.selection import SelectionModel
from rules.errors import RuleLoadError, RuleRuntimeError
from rules.projection import SelectionView
from rules.registry import RuleLoader, RuleOptions, RuleRegistry
from rules.results import EvaluationReport, Outcome, RuleResult
from rules.sandbox import LuaSandbox, SandboxError, lua_type

logger = logging.getLogger(__name__)


class RuleHost:
    """Besitzt genau eine Sandbox und die daraus geladene Regelmenge.

    Nicht threadsicher: alle Aufrufe müssen aus dem erzeugenden Thread kommen.
    """

    def __init__(self, selection: Optional[SelectionModel] = None,
                 config: Optional[RuleHostConfig] = None) -> None:
        self.selection = selection
        self.config = config or RuleHostConfig()
        self._sandbox: Optional[LuaSandbox] = None
        self._loader: Optional[RuleLoader] = None
        self._registry: Optional[RuleRegistry] = None
        self._owner = threading.get_ident()

    # ─── Laden ───

    def load(self, source: str, chunkname: str = "regeln") -> RuleRegistry:
        """Lädt eine Regelquelle. Ersetzt eine bereits geladene Regelmenge vollständig."""
        self._check_thread()
        self.close()

        sandbox = LuaSandbox(
            instruction_limit=self.config.instruction_limit,
            max_memory=self.config.max_memory_bytes,
        )
        loader = RuleLoader()
        self._sandbox, self._loader = sandbox, loader
        sandbox.install_function("rule", self._register)

        start = time.time()
        try:
            sandbox.execute(source, chunkname)
        except SandboxError as e:
            self.close()
            logger.error(f"Regelquelle '{chunkname}' nicht ladbar: {e}")
            raise RuleLoadError(str(e)) from e

        self._registry = loader.freeze()
        logger.info(
            f"{len(self._registry)} Regeln aus '{chunkname}' geladen "
            f"({time.time() - start:.3f}s)"
        )
        return self._registry

    def load_file(self, path: Path) -> RuleRegistry:
        """Lädt eine Regelquelle aus einer Datei."""
        path = Path(path)
        if not path.exists():
            raise RuleLoadError(f"Regeldatei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
        return self.load(source, chunkname=path.name)

    def reload(self, source: str, chunkname: str = "regeln") -> RuleRegistry:
        """Verwirft Sandbox und Regeln und lädt neu. Bei Fehler bleibt der Host leer."""
        logger.info("Regeln werden neu geladen")
        return self.load(source, chunkname)

    def _register(self, count: int, name: Any = None, body: Any = None,
                  options: Any = None, *_rest: Any) -> Optional[str]:
        """Implementierung von ``rule()``; gibt im Fehlerfall die Lua-Fehlermeldung zurück."""
        if count < 2:
            return f"rule(): mindestens 2 Argumente erwartet, {count} erhalten"
        if lua_type(body) != "function":
            return "rule(): zweites Argument muss eine Funktion sein"
        loader = self._loader
        if loader is None or loader.frozen:
            return "rule() ist nur während des Ladens der Regeln erlaubt"
        raw_options = self._sandbox.table_to_dict(options) if lua_type(options) == "table" else options
        loader.append(_lua_str(name), body, RuleOptions.parse(raw_options))
        logger.debug(f"Regel registriert: {_lua_str(name)}")
        return None

    # ─── Auswertung ───

    def evaluate(self, selection: Optional[SelectionModel] = None) -> list[RuleResult]:
        """Wertet alle Regeln gegen den aktuellen Stand der Kurswahl aus."""
        self._check_thread()
        if self._registry is None or self._sandbox is None:
            raise RuleLoadError("Keine gültigen Regeln geladen")
        model = selection if selection is not None else self.selection
        if model is None:
            raise ValueError("Keine Kurswahl zum Auswerten angegeben")

        results: list[RuleResult] = []
        for rule in self._registry:
            outcome = self._run_rule(rule.name, rule.body, model)
            results.append(RuleResult(name=rule.name, optional=rule.optional, outcome=outcome))
        logger.debug(f"Auswertung: {len(results)} Regeln")
        return results

    def evaluate_report(self, selection: Optional[SelectionModel] = None) -> EvaluationReport:
        return EvaluationReport(results=self.evaluate(selection))

    def _run_rule(self, name: str, body: Any, model: SelectionModel) -> Outcome:
        sandbox = self._sandbox
        view = sandbox.to_lua(SelectionView(model).as_table_data())
        sandbox.env["selection"] = view
        try:
            value = sandbox.call(body, view)
        except SandboxError as e:
            logger.warning(f"Regel '{name}' fehlgeschlagen: {e}")
            return RuleRuntimeError(name, str(e))
        except Exception as e:
            # Python-Ausnahmen aus Host-Funktionen, die Lua durchlaufen haben
            logger.warning(f"Regel '{name}' fehlgeschlagen: {type(e).__name__}: {e}")
            return RuleRuntimeError(name, f"{type(e).__name__}: {e}")
        finally:
            sandbox.env["selection"] = None
        return _to_outcome(name, value)

    # ─── Zustand ───

    @property
    def is_loaded(self) -> bool:
        return self._registry is not None

    @property
    def rules(self) -> list[tuple[str, bool]]:
        """(Name, optional) aller Regeln in Registrierungsreihenfolge."""
        if self._registry is None:
            return []
        return [(r.name, r.optional) for r in self._registry]

    def close(self) -> None:
        """Gibt Sandbox und Regeln gemeinsam frei."""
        self._check_thread()
        self._registry = None
        self._loader = None
        if self._sandbox is not None:
            self._sandbox.close()
            self._sandbox = None

    def __enter__(self) -> "RuleHost":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        state = f"{len(self._registry)} Regeln" if self._registry is not None else "leer"
        return f"RuleHost({state})"

    def _check_thread(self) -> None:
        if threading.get_ident() != self._owner:
            raise RuntimeError("RuleHost darf nur aus dem erzeugenden Thread benutzt werden")


def _lua_str(value: Any) -> str:
    """Entspricht Luas tostring() für einfache Werte."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _to_outcome(name: str, value: Any) -> Outcome:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    kind = lua_type(value) or type(value).__name__
    return RuleRuntimeError(name, f"Rückgabewert vom Typ '{kind}' wird nicht unterstützt")
