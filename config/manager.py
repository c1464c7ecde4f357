"""Konfigurationsmanager: Laden und Speichern von App-Config, Kurskatalog und Regeln.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import DEFAULT_RULES, default_app_config, default_catalog
from config.schema import AppConfig
from models.catalog import Catalog
from models.errors import CatalogError

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


class ConfigError(Exception):
    """Konfigurations- oder Katalogdatei fehlt oder ist ungültig."""


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Kurswahl — Konfiguration
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "catalog_path": (
        "Kurskatalog",
        "YAML- oder JSON-Datei. Leer = eingebauter Katalog.",
    ),
    "rules_path": (
        "Regeln",
        "Lua-Datei mit rule(...)-Aufrufen. Leer = eingebaute Regeln.",
    ),
    "rule_host": (
        "Sandbox",
        "Anweisungslimit pro Regel und optionale Speichergrenze.",
    ),
    "log_level": (
        "Logging",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "kurswahl.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── App-Konfiguration ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Lade Config aus YAML. Ohne Datei: Default-Konfiguration."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            if path is not None:
                raise ConfigError(f"Konfigurationsdatei nicht gefunden: {target}")
            return default_app_config()
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return AppConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ConfigError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def save(self, config: AppConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )
        return cm

    # ─── Kurskatalog ───

    def load_catalog(self, config: Optional[AppConfig] = None,
                     path: Optional[Path] = None) -> Catalog:
        """Lädt den Katalog aus ``path``, sonst aus der Config, sonst den eingebauten."""
        if path is None and config is not None and config.catalog_path:
            path = Path(config.catalog_path)
        if path is None:
            return default_catalog()

        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Katalogdatei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                raw = json.load(f)
            else:
                raw = yaml.load(f)
        try:
            return Catalog.model_validate(_plain(raw))
        except CatalogError:
            raise
        except Exception as e:
            raise ConfigError(f"Katalogdatei ungültig: {path}\n{e}") from e

    def save_catalog(self, catalog: Catalog, path: Path) -> None:
        """Speichert den Katalog als YAML oder JSON (nach Dateiendung)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        raw = json.loads(catalog.model_dump_json())
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                json.dump(raw, f, indent=2, ensure_ascii=False)
            else:
                f.write(f"# Kurskatalog {catalog.school} v{catalog.version}\n")
                yaml.dump(raw, f)

    # ─── Regeln ───

    def load_rules_source(self, config: Optional[AppConfig] = None,
                          path: Optional[Path] = None) -> tuple[str, str]:
        """Gibt (Quelltext, Name) der Regelquelle zurück."""
        if path is None and config is not None and config.rules_path:
            path = Path(config.rules_path)
        if path is None:
            return DEFAULT_RULES, "eingebaut"
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Regeldatei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return f.read(), path.name


def _plain(value):
    """ruamel-Container → einfache dicts/lists (für Pydantic)."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
