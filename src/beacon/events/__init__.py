"""Canonical game events and the handlers that produce them."""

from .base import (
    BaseEventHandler,
    map_entity,
    map_player,
    map_position,
    read_field,
)
from .handlers import (
    BreathEventHandler,
    ChatEventHandler,
    DeathEventHandler,
    EndEventHandler,
    EntityDeathEventHandler,
    EntityHurtEventHandler,
    ErrorEventHandler,
    ForcedMoveEventHandler,
    HealthEventHandler,
    ItemDropEventHandler,
    KickedEventHandler,
    PlayerCollectEventHandler,
    PlayerJoinEventHandler,
    PlayerLeftEventHandler,
    SpawnEventHandler,
    SpawnResetEventHandler,
    WeatherChangeEventHandler,
)
from .models import GameEvent, GameEventType
from .registry import (
    DEFAULT_HANDLERS,
    HandlerDependencies,
    HandlerRegistrationError,
    HandlerRegistry,
)

__all__ = [
    # Models
    "GameEvent",
    "GameEventType",
    # Base
    "BaseEventHandler",
    "map_entity",
    "map_player",
    "map_position",
    "read_field",
    # Handlers
    "BreathEventHandler",
    "ChatEventHandler",
    "DeathEventHandler",
    "EndEventHandler",
    "EntityDeathEventHandler",
    "EntityHurtEventHandler",
    "ErrorEventHandler",
    "ForcedMoveEventHandler",
    "HealthEventHandler",
    "ItemDropEventHandler",
    "KickedEventHandler",
    "PlayerCollectEventHandler",
    "PlayerJoinEventHandler",
    "PlayerLeftEventHandler",
    "SpawnEventHandler",
    "SpawnResetEventHandler",
    "WeatherChangeEventHandler",
    # Registry
    "DEFAULT_HANDLERS",
    "HandlerDependencies",
    "HandlerRegistrationError",
    "HandlerRegistry",
]
