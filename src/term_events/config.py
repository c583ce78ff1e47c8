"""Event handle configuration and environment-backed demo settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError
from .input.models import Key

DEFAULT_EXIT_KEY = Key.character("q")
DEFAULT_TICK_RATE = timedelta(milliseconds=250)


@dataclass(frozen=True, slots=True)
class EventsConfig:
    """Immutable configuration for an `Events` handle.

    `exit_key` is carried for the UI loop that owns the handle; the
    aggregator never inspects it. `tick_rate` must be positive: a zero or
    negative interval makes the tick thread spin. It is not checked here.
    """

    exit_key: Key = DEFAULT_EXIT_KEY
    tick_rate: timedelta = DEFAULT_TICK_RATE

    @property
    def tick_seconds(self) -> float:
        return self.tick_rate.total_seconds()


class Settings(BaseSettings):
    """Demo front-end settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    tick_rate_ms: int = Field(default=250, alias="TERM_EVENTS_TICK_RATE_MS")
    exit_key: str = Field(default="q", alias="TERM_EVENTS_EXIT_KEY")
    tty_path: str = Field(default="/dev/tty", alias="TERM_EVENTS_TTY_PATH")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="TERM_EVENTS_LOG_LEVEL",
    )
    feed_size: int = Field(default=40, alias="TERM_EVENTS_FEED_SIZE")

    @model_validator(mode="after")
    def validate_values(self) -> Settings:
        """Reject values the event loop cannot run with."""
        if self.tick_rate_ms <= 0:
            raise ValueError("TERM_EVENTS_TICK_RATE_MS must be > 0.")
        if len(self.exit_key) != 1:
            raise ValueError("TERM_EVENTS_EXIT_KEY must be a single character.")
        if not self.tty_path.strip():
            raise ValueError("TERM_EVENTS_TTY_PATH must not be empty.")
        if self.feed_size <= 0:
            raise ValueError("TERM_EVENTS_FEED_SIZE must be > 0.")
        return self

    def events_config(
        self,
        *,
        tick_rate_ms: int | None = None,
        exit_key: str | None = None,
    ) -> EventsConfig:
        """Build the handle config, letting CLI overrides win over settings."""
        return EventsConfig(
            exit_key=Key.character(exit_key or self.exit_key),
            tick_rate=timedelta(milliseconds=tick_rate_ms or self.tick_rate_ms),
        )

    def summary(self) -> dict[str, Any]:
        return {
            "tick_rate_ms": self.tick_rate_ms,
            "exit_key": self.exit_key,
            "tty_path": self.tty_path,
            "log_level": self.log_level,
            "feed_size": self.feed_size,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
