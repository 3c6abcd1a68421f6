"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default=">",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    owner_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("owner_ids", "owners")
    )

    @field_validator("owner_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            if not 0 < snowflake < 2**64:
                raise ValueError(f"Invalid Discord snowflake: {snowflake}")
        return v


class AudioSettings(BaseModel):
    """Audio extraction and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: float = Field(default=0.5, ge=0.0, le=2.0)
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )
    ytdlp_format: str = "bestaudio/best"
    socket_timeout: int = Field(default=15, ge=1, le=120)


class QueueSettings(BaseModel):
    """Queue session limits and timeouts."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    resolve_timeout_s: float = Field(
        default=20.0,
        gt=0,
        validation_alias=AliasChoices("resolve_timeout_s", "resolve_timeout"),
    )
    transport_timeout_s: float = Field(
        default=15.0,
        gt=0,
        validation_alias=AliasChoices("transport_timeout_s", "transport_timeout"),
    )
    list_limit: int = Field(default=10, ge=1, le=25)
    max_queue_size: int = Field(default=50, ge=1, le=1000)


class HealthSettings(BaseModel):
    """HTTP liveness listener configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD_TOKEN or TOKEN, DISCORD__COMMAND_PREFIX, etc. (nested with ``__``)
    - QUEUE__RESOLVE_TIMEOUT_S, QUEUE__TRANSPORT_TIMEOUT_S
    - PORT (health listener port, as set by most hosting platforms)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)

    # Flat aliases commonly set by hosting platforms; folded into the groups below.
    discord_token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("discord_token", "token"),
        exclude=True,
    )
    port: int | None = Field(default=None, ge=1, le=65535, exclude=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper

    @model_validator(mode="after")
    def apply_flat_aliases(self) -> Settings:
        """Fold DISCORD_TOKEN/TOKEN and PORT into their settings groups."""
        updates: dict[str, Any] = {}
        if self.discord_token is not None and not self.discord.token.get_secret_value():
            updates["discord"] = self.discord.model_copy(update={"token": self.discord_token})
        if self.port is not None:
            updates["health"] = self.health.model_copy(update={"port": self.port})
        for name, value in updates.items():
            setattr(self, name, value)
        return self

    @property
    def has_token(self) -> bool:
        return bool(self.discord.token.get_secret_value())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
