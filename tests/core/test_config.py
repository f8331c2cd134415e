"""Tests for AppConfig loading."""

from __future__ import annotations

import pytest
import yaml

from skillstream.core import defaults as D
from skillstream.core.config import AppConfig

_ENV_VARS = [
    "DEEPSEEK_API_KEY",
    "QWEN_API_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "SKILLSTREAM_HOST",
    "SKILLSTREAM_PORT",
    "SKILLSTREAM_LOG_LEVEL",
    "SKILLSTREAM_TEXT_MODEL",
    "SKILLSTREAM_VISION_MODEL",
    "SKILLSTREAM_REQUEST_TIMEOUT",
    "SKILLSTREAM_CORS_ORIGINS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestAppConfigDefaults:
    def test_defaults(self):
        config = AppConfig()
        assert config.port == D.DEFAULT_PORT
        assert config.text_model == "deepseek-chat"
        assert config.vision_model == "qwen-vl-plus"
        assert config.max_tasks == 100
        assert config.cors_origins == ["*"]

    def test_features_reflect_credentials(self):
        config = AppConfig(deepseek_api_key="sk")
        assert config.features() == {
            "deepseek": True,
            "qwen": False,
            "openai": False,
            "anthropic": False,
        }


class TestAppConfigLoad:
    def test_missing_file_uses_defaults(self, tmp_path):
        config = AppConfig.load(tmp_path / "nope.yaml")
        assert config.port == D.DEFAULT_PORT
        assert config.deepseek_api_key == ""

    def test_load_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "port": 9000,
                    "text_model": "deepseek-reasoner",
                    "request_timeout": 30,
                    "retry_attempts": 4,
                    "cors_origins": ["http://localhost:5173"],
                }
            )
        )
        config = AppConfig.load(path)
        assert config.port == 9000
        assert config.text_model == "deepseek-reasoner"
        assert config.request_timeout == 30.0
        assert config.retry_attempts == 4
        assert config.cors_origins == ["http://localhost:5173"]

    def test_credentials_never_read_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"deepseek_api_key": "from-file"}))
        assert AppConfig.load(path).deepseek_api_key == ""

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"port": 9000, "text_model": "from-file"}))
        monkeypatch.setenv("SKILLSTREAM_PORT", "9100")
        monkeypatch.setenv("SKILLSTREAM_TEXT_MODEL", "from-env")
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-env")
        monkeypatch.setenv("SKILLSTREAM_CORS_ORIGINS", "http://a, http://b")

        config = AppConfig.load(path)
        assert config.port == 9100
        assert config.text_model == "from-env"
        assert config.deepseek_api_key == "sk-env"
        assert config.features()["deepseek"]
        assert config.cors_origins == ["http://a", "http://b"]

    def test_unreadable_file_is_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("port: [unclosed")
        config = AppConfig.load(path)
        assert config.port == D.DEFAULT_PORT
