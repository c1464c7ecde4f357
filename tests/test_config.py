"""Tests für Konfiguration, Katalogdateien und Regelquellen."""

import json
from pathlib import Path

import pytest

from config.defaults import DEFAULT_RULES, default_app_config, default_catalog
from config.manager import ConfigError, ConfigManager
from config.schema import AppConfig, LogLevel, RuleHostConfig
from models.errors import CatalogError


def _manager(tmp_path: Path) -> ConfigManager:
    mgr = ConfigManager()
    mgr.CONFIG_DIR = tmp_path
    mgr.DEFAULT_CONFIG = tmp_path / "kurswahl.yaml"
    return mgr


# ─── SCHEMA ───────────────────────────────────────────────────────────────────

class TestSchema:
    def test_defaults(self):
        config = default_app_config()
        assert config.catalog_path is None
        assert config.rules_path is None
        assert config.rule_host.instruction_limit == 1_000_000
        assert config.log_level == LogLevel.WARNING

    def test_memory_limit_bytes(self):
        assert RuleHostConfig(memory_limit_mb=2).max_memory_bytes == 2 * 1024 * 1024
        assert RuleHostConfig(memory_limit_mb=None).max_memory_bytes is None

    def test_memory_limit_on_by_default(self):
        """Ohne Angabe gilt eine Speichergrenze von 64 MB."""
        assert RuleHostConfig().memory_limit_mb == 64
        assert default_app_config().rule_host.max_memory_bytes == 64 * 1024 * 1024

    def test_negative_instruction_limit(self):
        with pytest.raises(Exception):
            RuleHostConfig(instruction_limit=-1)

    def test_empty_path_is_none(self):
        """Leere Pfade bedeuten 'eingebaut'."""
        assert AppConfig(catalog_path="  ", rules_path="").catalog_path is None


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren — vollständiger Roundtrip."""
        mgr = _manager(tmp_path)
        config = AppConfig(
            rules_path="regeln.lua",
            rule_host=RuleHostConfig(instruction_limit=5000, memory_limit_mb=16),
            log_level=LogLevel.DEBUG,
        )
        mgr.save(config)
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert "# Kurswahl" in text
        loaded = mgr.load()
        assert loaded == config

    def test_first_run_check(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        assert mgr.first_run_check() is True
        mgr.save(default_app_config())
        assert mgr.first_run_check() is False

    def test_missing_default_returns_defaults(self, tmp_path: Path):
        assert _manager(tmp_path).load() == default_app_config()

    def test_missing_explicit_path_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            _manager(tmp_path).load(tmp_path / "not_there.yaml")

    def test_invalid_config_raises(self, tmp_path: Path):
        path = tmp_path / "kaputt.yaml"
        path.write_text("rule_host:\n  instruction_limit: viele\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            _manager(tmp_path).load(path)


# ─── KATALOGDATEIEN ───────────────────────────────────────────────────────────

class TestCatalogFiles:
    @pytest.mark.parametrize("name", ["katalog.yaml", "katalog.json"])
    def test_catalog_roundtrip(self, tmp_path: Path, name: str):
        """Eingebauter Katalog übersteht Speichern und Laden."""
        mgr = _manager(tmp_path)
        original = default_catalog()
        mgr.save_catalog(original, tmp_path / name)
        loaded = mgr.load_catalog(path=tmp_path / name)
        assert loaded == original

    def test_catalog_from_config(self, tmp_path: Path):
        mgr = _manager(tmp_path)
        path = tmp_path / "katalog.json"
        path.write_text(json.dumps({
            "school": "Testschule",
            "version": "2",
            "num_semesters": 2,
            "fields": [{"name": "Kern", "courses": [
                {"name": "Deutsch", "id": "de", "tags": ["lk"]},
            ]}],
        }), encoding="utf-8")
        catalog = mgr.load_catalog(AppConfig(catalog_path=str(path)))
        assert catalog.school == "Testschule"
        assert catalog.find_course("de").has_tag("lk")

    def test_invalid_window_raises_catalog_error(self, tmp_path: Path):
        path = tmp_path / "katalog.yaml"
        path.write_text(
            "school: S\nversion: '1'\nnum_semesters: 2\n"
            "fields:\n"
            "  - name: X\n"
            "    courses:\n"
            "      - {name: Seminar, id: sem, num_semesters: 2, semester_offset: 1}\n",
            encoding="utf-8",
        )
        with pytest.raises(CatalogError):
            _manager(tmp_path).load_catalog(path=path)

    def test_malformed_catalog_raises_config_error(self, tmp_path: Path):
        path = tmp_path / "katalog.yaml"
        path.write_text("school: S\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            _manager(tmp_path).load_catalog(path=path)

    def test_no_path_returns_default(self, tmp_path: Path):
        assert _manager(tmp_path).load_catalog() == default_catalog()


# ─── REGELQUELLEN ─────────────────────────────────────────────────────────────

class TestRulesSource:
    def test_default_rules(self, tmp_path: Path):
        source, name = _manager(tmp_path).load_rules_source()
        assert source == DEFAULT_RULES
        assert name == "eingebaut"

    def test_rules_from_file(self, tmp_path: Path):
        path = tmp_path / "regeln.lua"
        path.write_text('rule("a", function() return true end)', encoding="utf-8")
        source, name = _manager(tmp_path).load_rules_source(AppConfig(rules_path=str(path)))
        assert "rule(" in source
        assert name == "regeln.lua"

    def test_missing_rules_file(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            _manager(tmp_path).load_rules_source(path=tmp_path / "fehlt.lua")
