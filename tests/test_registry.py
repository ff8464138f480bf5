"""
Tests for config loading and module registry.
"""
import logging
import tomllib
from pathlib import Path

import pytest

from core.registry import DEFAULTS, configure_logging, load_config, load_enabled_modules


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "absent.toml")
        assert cfg == DEFAULTS
        assert cfg is not DEFAULTS

    def test_values_override_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[storage]\npath = "elsewhere.json"\n\n[logging]\nlevel = "DEBUG"\n', encoding="utf-8")
        cfg = load_config(path)
        assert cfg["storage"]["path"] == "elsewhere.json"
        assert cfg["logging"]["level"] == "DEBUG"
        assert cfg["app"]["title"] == DEFAULTS["app"]["title"]

    def test_modules_section_replaces_default(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[modules.thyroid]\nenabled = false\n", encoding="utf-8")
        cfg = load_config(path)
        assert cfg["modules"] == {"thyroid": {"enabled": False}}

    def test_defaults_not_mutated(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[app]\ntitle = "Other"\n', encoding="utf-8")
        load_config(path)
        assert DEFAULTS["app"]["title"] == "Thyroid Risk Screening"

    def test_malformed_toml_raises(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[app\n", encoding="utf-8")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(path)

    def test_repo_config_file(self):
        """The shipped config.toml enables the thyroid module."""
        cfg = load_config(Path(__file__).resolve().parent.parent / "config.toml")
        assert cfg["modules"]["thyroid"]["enabled"] is True


class TestModules:

    def test_loads_thyroid(self):
        mods = load_enabled_modules(DEFAULTS)
        assert [m.id for m in mods] == ["thyroid"]
        assert callable(mods[0].compute)

    def test_disabled_modules_skipped(self):
        assert load_enabled_modules({"modules": {"thyroid": {"enabled": False}}}) == []


def test_configure_logging_accepts_names(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw["level"]))
    configure_logging("debug")
    configure_logging("not-a-level")
    assert calls == [logging.DEBUG, logging.INFO]
