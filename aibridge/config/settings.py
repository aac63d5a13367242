"""
Application settings and configuration management.

Uses Pydantic Settings for validation and environment variable support.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Backend engine selection and connection parameters."""

    name: str = Field(
        default="GenericAI",
        description="Declared engine name, e.g. 'GenericAI', 'OpenAI', 'AnthropicAI', "
                    "'MistralAI', 'OllamaAI', 'Translator', or a plugin engine's name.",
    )
    url: str | None = Field(
        default=None,
        description="Endpoint base URL. Engines fall back to their own default when unset.",
    )
    api_key: str = Field(default="", description="API key for the engine's provider")
    model: str | None = Field(
        default=None,
        description="Model identifier. Engines fall back to their own default when unset.",
    )
    temperature: float = Field(default=0.4, description="Sampling temperature")
    max_tokens: int = Field(default=1024, description="Maximum tokens in response")
    timeout: float = Field(
        default=60.0,
        description="Seconds to wait for one backend round-trip; exceeding it counts "
                    "as the backend being unavailable.",
    )
    target_language: str | None = Field(
        default=None,
        description="Only used by translation engines: language to translate into.",
    )

    model_config = SettingsConfigDict(env_prefix="ENGINE_")

    def as_engine_config(self) -> dict[str, Any]:
        """Mapping handed to Engine.from_config(). Unset values are left out."""
        config = self.model_dump(exclude={"name"})
        return {key: value for key, value in config.items() if value is not None}

    def obfuscated(self) -> dict[str, Any]:
        """Engine config safe for display: the API key is cut to its first 5 characters."""
        config = self.as_engine_config()
        if config.get("api_key"):
            config["api_key"] = config["api_key"][:5] + "..."
        return config


class RetrySettings(BaseSettings):
    """Retry policy around backend calls."""

    max_attempts: int = Field(default=3, description="Total attempts per backend call (>= 1)")
    base_delay: float = Field(default=1.0, description="Seconds to wait before the first retry")
    max_delay: float = Field(default=8.0, description="Upper bound for any single backoff wait")

    model_config = SettingsConfigDict(env_prefix="RETRY_")


class ConversationSettings(BaseSettings):
    """Conversation orchestration defaults."""

    max_tool_rounds: int = Field(
        default=5,
        description="Tool-call rounds allowed per conversation turn (clamped to 1..20)",
    )
    system_prompts: dict[str, str] = Field(
        default_factory=dict,
        description="Named system instructions overriding the built-in ones. "
                    "Set via CONVERSATION__SYSTEM_PROMPTS='{\"default\": \"...\"}'",
    )
    allowed_system_messages: list[str] = Field(
        default_factory=list,
        description="Exact system message contents callers may include in a history. "
                    "Any other caller-supplied system message is dropped.",
    )
    languages: list[str] = Field(
        default_factory=lambda: ["DE DE", "EN US", "FR FR"],
        description="Languages accepted by the 'translate' instruction",
    )

    model_config = SettingsConfigDict(env_prefix="CONVERSATION_")


class ToolSettings(BaseSettings):
    """Tool registration configuration."""

    include_builtin: bool = Field(
        default=True, description="Expose the built-in object/date tools to the model"
    )
    discover_providers: bool = Field(
        default=True,
        description="Load tool providers published under the 'aibridge.tool_providers' "
                    "entry-point group",
    )

    model_config = SettingsConfigDict(env_prefix="TOOLS_")


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: Literal["development", "production"] = Field(
        default="development", description="Deployment environment"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_file: Path | None = Field(default=None, description="Log file path")

    # Sub-configurations
    engine: EngineSettings = Field(default_factory=EngineSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    conversation: ConversationSettings = Field(default_factory=ConversationSettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings from file and environment.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Loaded settings instance
    """
    global _settings
    if env_file:
        _settings = Settings(_env_file=env_file)
    else:
        _settings = Settings()
    return _settings
