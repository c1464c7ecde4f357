"""Lua-Sandbox für Regelquellen (lupa).

Jede Sandbox besitzt eine eigene ``LuaRuntime``. Regelcode läuft in einer
separaten Umgebungstabelle, die nur reine Basisfunktionen, Kopien der
Bibliotheken ``string``/``table``/``math``/``utf8`` und die vom Host
installierten Einträge enthält. Kein ``io``, ``os``, ``debug``, ``load``,
``require``, ``pcall`` und kein Zugriff auf das ``python``-Modul.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

import lupa
from lupa import LuaRuntime

logger = logging.getLogger(__name__)

_SAFE_GLOBALS = (
    "assert", "error", "ipairs", "next", "pairs", "select",
    "tonumber", "tostring", "type", "rawequal", "rawlen",
)
_SAFE_LIBRARIES = ("string", "table", "math", "utf8")
DEFAULT_MAX_MEMORY = 64 * 1024 * 1024

# Lua-Funktionen, die beim Start der Runtime kompiliert werden
_COPY_TABLE = """
function(t)
    local c = {}
    for k, v in pairs(t) do c[k] = v end
    return c
end
"""

_LIMIT_HOOK = """
function()
    error("Anweisungslimit überschritten", 2)
end
"""

_VARARG_WRAPPER = """
function(callback)
    return function(...)
        local err = callback(select("#", ...), ...)
        if err ~= nil then error(err, 2) end
    end
end
"""


class SandboxError(Exception):
    """Fehler beim Kompilieren oder Ausführen von Code in der Sandbox."""


def _deny_attributes(obj, attr_name, is_setting):
    raise AttributeError(f"Zugriff auf Python-Attribut '{attr_name}' nicht erlaubt")


def lua_type(value: Any) -> Optional[str]:
    """Lua-Typname eines Werts aus der Runtime ("table", "function", ...), sonst None."""
    return lupa.lua_type(value)


class LuaSandbox:
    """Abgeschottete Lua-Ausführungsumgebung mit Anweisungslimit."""

    def __init__(self, instruction_limit: int = 1_000_000,
                 max_memory: Optional[int] = DEFAULT_MAX_MEMORY) -> None:
        kwargs = {}
        if max_memory:
            kwargs["max_memory"] = max_memory
        self._lua = LuaRuntime(
            register_eval=False,
            register_builtins=False,
            unpack_returned_tuples=True,
            attribute_filter=_deny_attributes,
            **kwargs,
        )
        self.instruction_limit = instruction_limit
        g = self._lua.globals()
        self._load = g["load"]
        self._sethook = g["debug"]["sethook"]
        self._limit_hook = self._lua.eval(_LIMIT_HOOK)
        self._wrap_varargs = self._lua.eval(_VARARG_WRAPPER)

        copy = self._lua.eval(_COPY_TABLE)
        self.env = self._lua.table()
        for name in _SAFE_GLOBALS:
            self.env[name] = g[name]
        for name in _SAFE_LIBRARIES:
            if g[name] is not None:
                self.env[name] = copy(g[name])
        self.env["unpack"] = g["table"]["unpack"]
        self.env["_VERSION"] = g["_VERSION"]
        self._closed = False
        logger.debug(f"Lua-Sandbox erstellt ({self.env['_VERSION']})")

    # ─── Installation von Host-Fähigkeiten ───

    def install_function(self, name: str, func: Callable[..., Optional[str]]) -> None:
        """Installiert eine Python-Funktion als globale Lua-Funktion.

        ``func`` erhält zuerst die Anzahl der Lua-Argumente, dann die Argumente.
        Gibt sie einen String zurück, wird er in Lua als Fehler an der
        Aufrufstelle geworfen.
        """
        self.env[name] = self._wrap_varargs(func)

    def set_global(self, name: str, value: Any) -> None:
        self.env[name] = self.to_lua(value)

    def get_global(self, name: str) -> Any:
        return self.env[name]

    # ─── Ausführung ───

    def execute(self, source: str, chunkname: str = "regeln") -> Any:
        """Kompiliert und führt eine Textquelle in der Sandbox-Umgebung aus."""
        self._check_open()
        result = self._load(source, f"={chunkname}", "t", self.env)
        if isinstance(result, tuple):
            chunk, message = result[0], result[1] if len(result) > 1 else None
        else:
            chunk, message = result, None
        if chunk is None:
            raise SandboxError(f"Syntaxfehler: {message}")
        return self.call(chunk)

    def call(self, func: Any, *args: Any) -> Any:
        """Ruft eine Lua-Funktion unter dem Anweisungslimit auf.

        Mehrere Rückgabewerte werden auf den ersten reduziert.
        """
        self._check_open()
        if self.instruction_limit:
            self._sethook(self._limit_hook, "", self.instruction_limit)
        try:
            result = func(*args)
        except (lupa.LuaError, MemoryError) as e:
            raise SandboxError(_clean_message(e)) from e
        finally:
            if self.instruction_limit:
                self._sethook()
        if isinstance(result, tuple):
            return result[0] if result else None
        return result

    # ─── Konvertierung ───

    def to_lua(self, value: Any) -> Any:
        """Wandelt Python-Daten rekursiv in Lua-Tabellen um (Listen 1-basiert)."""
        if isinstance(value, Mapping):
            table = self._lua.table()
            for k, v in value.items():
                table[k] = self.to_lua(v)
            return table
        if isinstance(value, (list, tuple)):
            table = self._lua.table()
            for i, v in enumerate(value, 1):
                table[i] = self.to_lua(v)
            return table
        if isinstance(value, (set, frozenset)):
            return self.to_lua(sorted(value))
        if callable(value) and lua_type(value) is None:
            # Rückgabewerte von Python-Funktionen ebenfalls als Lua-Tabellen
            return lambda *args: self.to_lua(value(*args))
        return value

    def table_to_dict(self, table: Any) -> dict:
        """Flache Kopie einer Lua-Tabelle als dict (für Optionen)."""
        if lua_type(table) != "table":
            return {}
        return {k: v for k, v in table.items()}

    # ─── Lebenszyklus ───

    def close(self) -> None:
        """Gibt die Runtime frei. Danach ist die Sandbox unbrauchbar."""
        if self._closed:
            return
        self._closed = True
        self.env = None
        self._load = self._sethook = self._limit_hook = self._wrap_varargs = None
        self._lua = None
        logger.debug("Lua-Sandbox geschlossen")

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise SandboxError("Sandbox ist geschlossen")


def _clean_message(error: Exception) -> str:
    message = str(error)
    return message.splitlines()[0] if message else type(error).__name__
