"""Tests for configuration defaults and env overrides."""

from __future__ import annotations

from rollcall.core.config import AppSettings, ImportConfig, RangeConfig


def test_default_settings():
    settings = AppSettings()
    assert settings.environment == "dev"
    assert settings.roster_backend == "memory"
    assert settings.log_level == "INFO"


def test_import_config_defaults():
    config = ImportConfig()
    assert config.max_file_bytes == 10 * 1024 * 1024
    assert ".csv" in config.allowed_extensions
    assert config.id_width == 3
    assert config.sniff_lines == 5


def test_range_config_defaults():
    config = RangeConfig()
    assert config.max_span == 1000
    assert config.default_prefix == "参与者"


def test_import_config_env_override(monkeypatch):
    monkeypatch.setenv("ROLLCALL_IMPORT_MAX_FILE_BYTES", "2048")
    monkeypatch.setenv("ROLLCALL_IMPORT_ID_WIDTH", "5")
    config = ImportConfig()
    assert config.max_file_bytes == 2048
    assert config.id_width == 5
