"""
Unit tests for settings loading.
"""

import pytest

from aibridge.config.settings import EngineSettings, Settings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the developer's environment and .env file."""
    for prefix in ("ENGINE", "RETRY", "CONVERSATION", "TOOLS"):
        for key in ("NAME", "API_KEY", "MODEL", "URL", "MAX_ATTEMPTS", "MAX_TOOL_ROUNDS"):
            monkeypatch.delenv(f"{prefix}__{key}", raising=False)
            monkeypatch.delenv(f"{prefix}_{key}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestDefaults:

    def test_defaults(self):
        settings = Settings()
        assert settings.engine.name == "GenericAI"
        assert settings.engine.temperature == 0.4
        assert settings.retry.max_attempts == 3
        assert settings.retry.base_delay == 1.0
        assert settings.retry.max_delay == 8.0
        assert settings.conversation.max_tool_rounds == 5
        assert settings.conversation.languages == ["DE DE", "EN US", "FR FR"]
        assert settings.conversation.allowed_system_messages == []
        assert settings.tools.include_builtin is True


class TestEnvironment:

    def test_nested_env_vars(self, monkeypatch):
        monkeypatch.setenv("ENGINE__NAME", "AnthropicAI")
        monkeypatch.setenv("ENGINE__API_KEY", "sk-ant-secret")
        monkeypatch.setenv("RETRY__MAX_ATTEMPTS", "5")

        settings = Settings()

        assert settings.engine.name == "AnthropicAI"
        assert settings.engine.api_key == "sk-ant-secret"
        assert settings.retry.max_attempts == 5

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text(
            "ENGINE__NAME=OllamaAI\n"
            "ENGINE__MODEL=llama3.1\n"
            "CONVERSATION__MAX_TOOL_ROUNDS=8\n"
            "LOG_LEVEL=DEBUG\n"
        )

        settings = load_settings(env_file)

        assert settings.engine.name == "OllamaAI"
        assert settings.engine.model == "llama3.1"
        assert settings.conversation.max_tool_rounds == 8
        assert settings.log_level == "DEBUG"


class TestEngineSettings:

    def test_engine_config_drops_unset_values(self):
        config = EngineSettings(api_key="k").as_engine_config()
        assert "url" not in config
        assert "model" not in config
        assert "name" not in config
        assert config["api_key"] == "k"

    def test_obfuscated_key(self):
        shown = EngineSettings(api_key="sk-1234567890").obfuscated()
        assert shown["api_key"] == "sk-12..."

    def test_obfuscated_without_key(self):
        assert EngineSettings().obfuscated()["api_key"] == ""
