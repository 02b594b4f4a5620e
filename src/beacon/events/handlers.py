"""Event handler variants, one per raw notification channel.

Payload shapes per event type:

- chat: ``{username, text}``
- playerJoined / playerLeft: ``{player}``
- death: ``{player}``
- spawn: ``{player, entity}``
- rain: ``{weather, isRaining, thunderState}``
- kicked: ``{player, reason, loggedIn}``
- spawnReset: ``{newSpawnPoint}``
- health: ``{health, food, saturation}``
- breath: ``{oxygenLevel, health, food}``
- entityHurt: ``{entity, damage}``
- entityDead: ``{entity}``
- playerCollect: ``{collector, collected, isSelf}``
- itemDrop: ``{dropped, position}``
- forcedMove: ``{position}``
- end: ``{reason}``
- error: ``{error, errorType}``
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

from ..chat.pipeline import ChatPipeline
from .base import BaseEventHandler, map_entity, map_player, map_position, read_field
from .models import GameEventType

if TYPE_CHECKING:
    from ..chat.filter import ChatFilter
    from ..commands.router import CommandRouter

logger = logging.getLogger(__name__)

DEFAULT_END_REASON = "socketClosed"


class ChatEventHandler(BaseEventHandler):
    """Chat lines, after command dispatch and content filtering."""

    channel = "chat"
    event_type = GameEventType.CHAT

    def __init__(
        self,
        connection,
        is_event_disabled,
        add_event,
        get_game_tick,
        get_timestamp,
        command_router: Optional["CommandRouter"] = None,
        chat_filter: Optional["ChatFilter"] = None,
    ):
        super().__init__(connection, is_event_disabled, add_event, get_game_tick, get_timestamp)
        self.command_router = command_router
        self.chat_filter = chat_filter
        self.pipeline = ChatPipeline.default(command_router, chat_filter)

    def register(self) -> None:
        self.listen(self._on_chat)

    async def _on_chat(self, username: str, message: str, *_: Any) -> None:
        if not await self.pipeline.run(username, message):
            return
        self.emit(lambda: {"username": username, "text": message})


class PlayerJoinEventHandler(BaseEventHandler):
    channel = "playerJoined"
    event_type = GameEventType.PLAYER_JOINED

    def register(self) -> None:
        self.listen(self._on_player_joined)

    def _on_player_joined(self, player: Any, *_: Any) -> None:
        self.emit(lambda: {"player": map_player(player)})


class PlayerLeftEventHandler(BaseEventHandler):
    channel = "playerLeft"
    event_type = GameEventType.PLAYER_LEFT

    def register(self) -> None:
        self.listen(self._on_player_left)

    def _on_player_left(self, player: Any, *_: Any) -> None:
        self.emit(lambda: {"player": map_player(player)})


class DeathEventHandler(BaseEventHandler):
    """The bot died. The notification carries no arguments."""

    channel = "death"
    event_type = GameEventType.DEATH

    def register(self) -> None:
        self.listen(self._on_death)

    def _on_death(self, *_: Any) -> None:
        self.emit(lambda: {"player": map_player(read_field(self.connection, "player"))})


class SpawnEventHandler(BaseEventHandler):
    """Fires on first login and on every respawn."""

    channel = "spawn"
    event_type = GameEventType.SPAWN

    def register(self) -> None:
        self.listen(self._on_spawn)

    def _on_spawn(self, *_: Any) -> None:
        self.emit(
            lambda: {
                "player": map_player(read_field(self.connection, "player")),
                "entity": map_entity(read_field(self.connection, "entity")),
            }
        )


class WeatherChangeEventHandler(BaseEventHandler):
    """Rain toggled; the weather is re-derived from live state."""

    channel = "rain"
    event_type = GameEventType.RAIN

    def register(self) -> None:
        self.listen(self._on_rain)

    def _on_rain(self, *_: Any) -> None:
        self.emit(self._weather_payload)

    def _weather_payload(self) -> dict[str, Any]:
        is_raining = bool(read_field(self.connection, "is_raining", False))
        thunder_state = read_field(self.connection, "thunder_state", 0) or 0

        if thunder_state > 0:
            weather = "thunder"
        elif is_raining:
            weather = "rain"
        else:
            weather = "clear"

        return {"weather": weather, "isRaining": is_raining, "thunderState": thunder_state}


class KickedEventHandler(BaseEventHandler):
    channel = "kicked"
    event_type = GameEventType.KICKED

    def register(self) -> None:
        self.listen(self._on_kicked)

    def _on_kicked(self, reason: Any = None, logged_in: bool = False, *_: Any) -> None:
        self.emit(
            lambda: {
                "player": map_player(read_field(self.connection, "player")),
                "reason": _reason_text(reason),
                "loggedIn": bool(logged_in),
            }
        )


class SpawnResetEventHandler(BaseEventHandler):
    channel = "spawnReset"
    event_type = GameEventType.SPAWN_RESET

    def register(self) -> None:
        self.listen(self._on_spawn_reset)

    def _on_spawn_reset(self, *_: Any) -> None:
        self.emit(lambda: {"newSpawnPoint": map_position(read_field(self.connection, "spawn_point"))})


class HealthEventHandler(BaseEventHandler):
    """Vitals changed; all three are reported together."""

    channel = "health"
    event_type = GameEventType.HEALTH

    def register(self) -> None:
        self.listen(self._on_health)

    def _on_health(self, *_: Any) -> None:
        self.emit(
            lambda: {
                "health": read_field(self.connection, "health", 0),
                "food": read_field(self.connection, "food", 0),
                "saturation": read_field(self.connection, "food_saturation", 0),
            }
        )


class BreathEventHandler(BaseEventHandler):
    channel = "breath"
    event_type = GameEventType.BREATH

    def register(self) -> None:
        self.listen(self._on_breath)

    def _on_breath(self, *_: Any) -> None:
        self.emit(
            lambda: {
                "oxygenLevel": read_field(self.connection, "oxygen_level", 0),
                "health": read_field(self.connection, "health", 0),
                "food": read_field(self.connection, "food", 0),
            }
        )


class EntityHurtEventHandler(BaseEventHandler):
    channel = "entityHurt"
    event_type = GameEventType.ENTITY_HURT

    def register(self) -> None:
        self.listen(self._on_entity_hurt)

    def _on_entity_hurt(self, entity: Any, *_: Any) -> None:
        # The notification carries no damage amount; 0 keeps the shape stable
        self.emit(lambda: {"entity": map_entity(entity), "damage": 0})


class EntityDeathEventHandler(BaseEventHandler):
    channel = "entityDead"
    event_type = GameEventType.ENTITY_DEATH

    def register(self) -> None:
        self.listen(self._on_entity_dead)

    def _on_entity_dead(self, entity: Any, *_: Any) -> None:
        self.emit(lambda: {"entity": map_entity(entity)})


class PlayerCollectEventHandler(BaseEventHandler):
    channel = "playerCollect"
    event_type = GameEventType.PLAYER_COLLECT

    def register(self) -> None:
        self.listen(self._on_player_collect)

    def _on_player_collect(self, collector: Any, collected: Any, *_: Any) -> None:
        event = self.emit(lambda: self._collect_payload(collector, collected))
        if event is not None and event.data["isSelf"]:
            items = ", ".join(f"{item['name']} x{item['count']}" for item in event.data["collected"])
            logger.info(f"Bot collected: {items or 'nothing'}")

    def _collect_payload(self, collector: Any, collected: Any) -> dict[str, Any]:
        bot_entity = read_field(self.connection, "entity")
        collector_id = read_field(collector, "id")
        return {
            "collector": map_entity(collector),
            "collected": self.resolve_items(read_field(collected, "metadata", [])),
            "isSelf": collector_id is not None and collector_id == read_field(bot_entity, "id"),
        }


class ItemDropEventHandler(BaseEventHandler):
    channel = "itemDrop"
    event_type = GameEventType.ITEM_DROP

    def register(self) -> None:
        self.listen(self._on_item_drop)

    def _on_item_drop(self, entity: Any, *_: Any) -> None:
        event = self.emit(
            lambda: {
                "dropped": self.resolve_items(read_field(entity, "metadata", [])),
                "position": map_position(read_field(entity, "position")),
            }
        )
        if event is not None:
            items = ", ".join(f"{item['name']} x{item['count']}" for item in event.data["dropped"])
            logger.info(f"Items dropped: {items or 'nothing'}")


class ForcedMoveEventHandler(BaseEventHandler):
    """The server teleported the bot."""

    channel = "forcedMove"
    event_type = GameEventType.FORCED_MOVE

    def register(self) -> None:
        self.listen(self._on_forced_move)

    def _on_forced_move(self, *_: Any) -> None:
        entity = read_field(self.connection, "entity")
        self.emit(lambda: {"position": map_position(read_field(entity, "position"))})


class EndEventHandler(BaseEventHandler):
    """Connection to the server closed."""

    channel = "end"
    event_type = GameEventType.END

    def register(self) -> None:
        self.listen(self._on_end)

    def _on_end(self, reason: Any = None, *_: Any) -> None:
        self.emit(lambda: {"reason": _reason_text(reason) or DEFAULT_END_REASON})


class ErrorEventHandler(BaseEventHandler):
    channel = "error"
    event_type = GameEventType.ERROR

    def register(self) -> None:
        self.listen(self._on_error)

    def _on_error(self, error: Any = None, *_: Any) -> None:
        self.emit(
            lambda: {
                "error": str(read_field(error, "message", error)) if error is not None else "",
                "errorType": type(error).__name__ if isinstance(error, BaseException)
                else str(read_field(error, "name", "Error")),
            }
        )


def _reason_text(reason: Any) -> str:
    """Kick/disconnect reasons may be plain text or a chat component."""
    if reason is None:
        return ""
    if isinstance(reason, str):
        return reason
    try:
        return json.dumps(reason, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(reason)
