"""Configuration models with validation for the Beacon agent."""

import re
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from beacon.events.models import GameEventType


class BridgeConfig(BaseModel):
    """Game bridge websocket connection settings."""

    uri: str = "ws://localhost:8766"
    # Reconnection settings (exponential backoff)
    reconnect_base_delay: float = Field(default=1.0, ge=0.5, le=10.0)
    reconnect_max_delay: float = Field(default=30.0, ge=5.0, le=300.0)
    reconnect_jitter: float = Field(default=0.1, ge=0.0, le=0.5)
    # Heartbeat settings (ping/pong for dead connection detection)
    ping_interval: float = Field(default=10.0, ge=5.0, le=60.0)
    ping_timeout: float = Field(default=5.0, ge=2.0, le=30.0)
    # Outbound command queue
    command_queue_max_size: int = Field(default=100, ge=10, le=1000)


class EventsConfig(BaseModel):
    """Event log settings."""

    max_events: int = Field(default=1000, ge=1, le=100000)
    # None means every known type is enabled
    enabled_events: list[str] | None = None

    @field_validator("enabled_events")
    @classmethod
    def validate_event_types(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        known = set(GameEventType.values())
        unknown = [name for name in v if name not in known]
        if unknown:
            raise ValueError(f"Unknown event types: {unknown}. Must be among {sorted(known)}")
        return v


class CommandsConfig(BaseModel):
    """In-game admin command settings."""

    enabled: bool = False
    admin_players: list[str] = Field(default_factory=list)
    prefix: str = "!"
    show_results_in_chat: bool = True
    # Ordered candidate modules; the first one exporting commands wins
    modules: list[str] = Field(default_factory=lambda: ["beacon.commands.builtin"])

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if len(v) != 1 or v.isspace():
            raise ValueError(f"Command prefix must be a single non-space character, got {v!r}")
        return v


class ChatFilterConfig(BaseModel):
    """Chat suppression rules."""

    enabled: bool = False
    blocked_players: list[str] = Field(default_factory=list)
    blocked_message_patterns: list[str] = Field(default_factory=list)

    @field_validator("blocked_message_patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid message pattern {pattern!r}: {e}") from e
        return v


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(default="INFO")
    format: str = Field(default="%(asctime)s | %(name)s | %(levelname)s | %(message)s")
    json_mode: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid}")
        return v.upper()


class AgentConfig(BaseSettings):
    """Root configuration for the Beacon agent.

    Loads from config.yaml with environment variable overrides.
    Environment variables use BEACON_ prefix (e.g., BEACON_BRIDGE__URI).
    """

    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    chat_filter: ChatFilterConfig = Field(default_factory=ChatFilterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "BEACON_",
        "env_nested_delimiter": "__",
    }

    @classmethod
    def load(cls, config_path: Path | None = None) -> "AgentConfig":
        """Load configuration from YAML file with env overrides.

        Args:
            config_path: Path to config.yaml. If None, uses defaults.

        Returns:
            Validated AgentConfig instance.
        """
        import os

        import yaml

        config_data = {}

        if config_path and config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}

        if os.getenv("BRIDGE_URI"):
            config_data.setdefault("bridge", {})["uri"] = os.getenv("BRIDGE_URI")

        # Comma-separated admin list, e.g. BEACON_ADMINS=steve,alex
        if os.getenv("BEACON_ADMINS"):
            admins = [name.strip() for name in os.getenv("BEACON_ADMINS").split(",") if name.strip()]
            config_data.setdefault("commands", {})["admin_players"] = admins

        return cls(**config_data)
