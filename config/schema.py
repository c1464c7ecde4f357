from pydantic import BaseModel, Field, field_validator
from typing import Optional
from enum import Enum


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ─── REGEL-HOST ───

class RuleHostConfig(BaseModel):
    """Grenzen der Lua-Sandbox für Regeln."""
    # Max. Lua-Anweisungen pro Regelaufruf (bzw. für das Laden der Quelle).
    # Überschreitung → RuleRuntimeError (Regel) bzw. RuleLoadError (Laden).
    instruction_limit: int = Field(1_000_000, ge=0,
        description="Max. Lua-Anweisungen pro Aufruf (0 = kein Limit)")
    # Speichergrenze der Lua-Runtime in MB (None = keine Grenze).
    # Greift auch dort, wo eine einzelne Anweisung sehr viel Speicher anfordert.
    memory_limit_mb: Optional[int] = Field(64, ge=1,
        description="Speichergrenze der Lua-Runtime in MB")

    @property
    def max_memory_bytes(self) -> Optional[int]:
        if self.memory_limit_mb is None:
            return None
        return self.memory_limit_mb * 1024 * 1024


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration der Kurswahl-Anwendung."""
    # Kurskatalog als YAML/JSON (None = eingebauter Katalog)
    catalog_path: Optional[str] = Field(None,
        description="Pfad zum Kurskatalog (None = eingebauter Katalog)")
    # Regelquelle in Lua (None = eingebaute Regeln)
    rules_path: Optional[str] = Field(None,
        description="Pfad zur Lua-Regelquelle (None = eingebaute Regeln)")
    # Sandbox-Grenzen
    rule_host: RuleHostConfig = Field(default_factory=RuleHostConfig)
    # Log-Level für die Konsole
    log_level: LogLevel = Field(LogLevel.WARNING)

    @field_validator("catalog_path", "rules_path")
    @classmethod
    def _empty_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v
