"""
Tests for configuration loading: defaults, settings file, environment keys.
"""

import json
import os

import pytest

from localizer.config import DEFAULT_AI_MODELS, LocalizerConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEYS", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


class TestDefaults:

    def test_paths_derived_from_tool_root(self, tmp_path):
        config = LocalizerConfig(tool_root=str(tmp_path / "tool"))
        assert config.project_root == str(tmp_path)
        assert config.cached_words_path == str(tmp_path / "tool" / "cached_words.json")
        assert config.missing_words_path == str(tmp_path / "tool" / "missing_words.json")
        assert config.ai_models == DEFAULT_AI_MODELS
        assert config.ai_timeout == 120


class TestLoadConfig:

    def test_missing_settings_file(self, tmp_path):
        config = load_config(str(tmp_path / "none.json"), str(tmp_path))
        assert config.project_root == str(tmp_path)
        assert config.ai_enabled is True
        assert config.api_keys == []

    def test_settings_file(self, tmp_path):
        settings = tmp_path / "_settings.json"
        settings.write_text(json.dumps({
            "ai_enabled": False,
            "ai_timeout": 30,
            "ai_models": [["v1", "gemini-1.5-flash"]],
            "api_keys": ["from-file"],
            "cached_words_path": str(tmp_path / "cw.json"),
        }), encoding="utf-8")

        config = load_config(str(settings))
        assert config.ai_enabled is False
        assert config.ai_timeout == 30
        assert config.ai_models == [("v1", "gemini-1.5-flash")]
        assert config.api_keys == ["from-file"]
        assert config.cached_words_path == str(tmp_path / "cw.json")

    def test_malformed_settings_file(self, tmp_path):
        settings = tmp_path / "_settings.json"
        settings.write_text("{not json", encoding="utf-8")
        config = load_config(str(settings))
        assert config.ai_enabled is True

    def test_env_keys_list(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEYS", "key-a, key-b,,key-c ")
        config = load_config(str(tmp_path / "none.json"))
        assert config.api_keys == ["key-a", "key-b", "key-c"]

    def test_env_single_key(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "only-key")
        config = load_config(str(tmp_path / "none.json"))
        assert config.api_keys == ["only-key"]

    def test_project_root_argument_wins(self, tmp_path):
        settings = tmp_path / "_settings.json"
        settings.write_text(json.dumps({"project_root": "/elsewhere"}), encoding="utf-8")
        config = load_config(str(settings), str(tmp_path))
        assert config.project_root == os.path.abspath(str(tmp_path))
