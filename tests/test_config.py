"""
Unit tests for analyzer/config.py - configuration loading.
"""

import json

import pytest

from analyzer.config import AnalyzerConfig, load_config, write_default_config
from analyzer.errors import AnalyzerError


class TestAnalyzerConfig:
    """Tests for the settings model."""

    def test_defaults(self):
        config = AnalyzerConfig()
        assert config.tab_width == 8
        assert config.builtin_functions == ["print"]
        assert "complex" in config.type_hints
        assert config.multi_statement_blocks is False
        assert config.strict_loop_control is False

    def test_tab_width_must_be_positive(self):
        with pytest.raises(ValueError):
            AnalyzerConfig(tab_width=0)


class TestLoadConfig:
    """Tests for config file lookup."""

    def test_defaults_without_files(self, isolated):
        assert load_config() == AnalyzerConfig()

    def test_working_directory_file(self, isolated):
        (isolated / "pyanalyze.json").write_text(json.dumps({"tab_width": 4}))
        assert load_config().tab_width == 4

    def test_home_file(self, isolated, tmp_path):
        user_dir = tmp_path / "home" / ".pyanalyze"
        user_dir.mkdir()
        (user_dir / "config.json").write_text(json.dumps({"strict_loop_control": True}))
        assert load_config().strict_loop_control is True

    def test_working_directory_wins(self, isolated, tmp_path):
        user_dir = tmp_path / "home" / ".pyanalyze"
        user_dir.mkdir()
        (user_dir / "config.json").write_text(json.dumps({"tab_width": 2}))
        (isolated / "pyanalyze.json").write_text(json.dumps({"tab_width": 4}))
        assert load_config().tab_width == 4

    def test_explicit_missing_file(self, isolated):
        with pytest.raises(AnalyzerError) as excinfo:
            load_config("missing.json")
        assert "Config file not found: missing.json" in str(excinfo.value)

    def test_malformed_json(self, isolated):
        (isolated / "bad.json").write_text("{ not json")
        with pytest.raises(AnalyzerError) as excinfo:
            load_config("bad.json")
        assert "is not valid JSON" in excinfo.value.message
        assert excinfo.value.line_number == 1

    def test_invalid_values(self, isolated):
        (isolated / "bad.json").write_text(json.dumps({"tab_width": 0}))
        with pytest.raises(AnalyzerError) as excinfo:
            load_config("bad.json")
        assert "Invalid settings in bad.json" in excinfo.value.message

    def test_write_default_config(self, isolated):
        path = write_default_config("settings.json")
        assert load_config(path) == AnalyzerConfig()
