"""Regel-Host (Lua-Sandbox via lupa)."""

from .errors import RuleLoadError, RuleRuntimeError
from .registry import Rule, RuleLoader, RuleOptions, RuleRegistry
from .results import EvaluationReport, RuleResult
from .host import RuleHost

__all__ = [
    "RuleLoadError",
    "RuleRuntimeError",
    "Rule",
    "RuleLoader",
    "RuleOptions",
    "RuleRegistry",
    "EvaluationReport",
    "RuleResult",
    "RuleHost",
]
