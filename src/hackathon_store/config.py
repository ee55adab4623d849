"""
Configuration management for the hackathon event store.
"""
import logging
import os
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

DEFAULT_EVENT_NAME = "GL Hackathon 2026"
DEFAULT_MAX_TEAM_SIZE = 4
DEFAULT_MAX_TEAMS = 100


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class EventDefaults:
    """Settings used when a fresh event configuration is created."""
    name: str = DEFAULT_EVENT_NAME
    max_team_size: int = DEFAULT_MAX_TEAM_SIZE
    max_teams: int = DEFAULT_MAX_TEAMS


@dataclass
class StorageConfig:
    """Persistence settings."""
    data_dir: Optional[str] = None
    seed_demo_data: bool = True


@dataclass
class LoggingConfig:
    level: str = "INFO"


class ConfigManager:
    """Manages application configuration."""

    def __init__(self):
        self.event = self._load_event_defaults()
        self.storage = self._load_storage_config()
        self.logging = self._load_logging_config()

    def _load_event_defaults(self) -> EventDefaults:
        """Load event defaults from environment."""
        return EventDefaults(
            name=os.getenv("HACKATHON_NAME", DEFAULT_EVENT_NAME),
            max_team_size=int(os.getenv("MAX_TEAM_SIZE", str(DEFAULT_MAX_TEAM_SIZE))),
            max_teams=int(os.getenv("MAX_TEAMS", str(DEFAULT_MAX_TEAMS)))
        )

    def _load_storage_config(self) -> StorageConfig:
        """Load persistence configuration from environment."""
        return StorageConfig(
            data_dir=os.getenv("HACKATHON_DATA_DIR") or None,
            seed_demo_data=_env_bool("SEED_DEMO_DATA", "true")
        )

    def _load_logging_config(self) -> LoggingConfig:
        return LoggingConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    def validate(self) -> list:
        """Validate configuration and return any errors."""
        errors = []

        if not self.event.name.strip():
            errors.append("Event name must not be empty")

        if self.event.max_team_size <= 0:
            errors.append("Max team size must be positive")

        if self.event.max_teams <= 0:
            errors.append("Max teams must be positive")

        if not isinstance(logging.getLevelName(self.logging.level), int):
            errors.append(f"Unknown log level: {self.logging.level}")

        return errors


config = ConfigManager()
