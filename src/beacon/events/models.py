"""Canonical game event schema shared by every event source."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class GameEventType(str, Enum):
    """Event type tags, named after the game connection channels."""

    CHAT = "chat"
    PLAYER_JOINED = "playerJoined"
    PLAYER_LEFT = "playerLeft"
    DEATH = "death"
    SPAWN = "spawn"  # First login and every respawn
    RAIN = "rain"  # Weather change
    KICKED = "kicked"
    SPAWN_RESET = "spawnReset"
    HEALTH = "health"
    BREATH = "breath"
    ENTITY_HURT = "entityHurt"
    ENTITY_DEATH = "entityDead"
    PLAYER_COLLECT = "playerCollect"
    ITEM_DROP = "itemDrop"
    FORCED_MOVE = "forcedMove"
    END = "end"  # Connection closed
    ERROR = "error"

    @classmethod
    def values(cls) -> list[str]:
        """All tags in declaration order."""
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: "str | GameEventType") -> "GameEventType | None":
        """Resolve a tag string to a member, or None if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class GameEvent:
    """Normalized, immutable record stored by the event store.

    Attributes:
        type: Event type tag (a GameEventType value).
        game_tick: World age sampled when the event was built.
        timestamp: Wall-clock capture time in seconds since the epoch.
        data: Type-specific payload. Nested mappings and lists are frozen
            on construction so no holder can mutate a stored event.
    """

    type: str
    game_tick: int
    timestamp: float
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.type, GameEventType):
            object.__setattr__(self, "type", self.type.value)
        object.__setattr__(self, "data", _freeze(self.data or {}))

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready copy of the event."""
        return {
            "type": self.type,
            "gameTick": self.game_tick,
            "timestamp": self.timestamp,
            "data": _thaw(self.data),
        }

    def summary(self) -> dict[str, Any]:
        """Reduced form used when callers ask for no details."""
        return {"type": self.type, "gameTick": self.game_tick}
