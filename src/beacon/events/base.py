"""Base class and translation helpers shared by all event handlers."""

import functools
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping

from .models import GameEvent, GameEventType

logger = logging.getLogger(__name__)

COORDINATE_PRECISION = 2


def read_field(record: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an attribute-style record."""
    if record is None:
        return default
    if isinstance(record, Mapping):
        value = record.get(name, default)
    else:
        value = getattr(record, name, default)
    return default if value is None else value


def _text(value: Any) -> str | None:
    # Display names may arrive as chat components; keep their string form
    return None if value is None else str(value)


def round_coordinate(value: Any) -> float:
    try:
        return round(float(value), COORDINATE_PRECISION)
    except (TypeError, ValueError):
        return 0.0


def map_position(position: Any) -> dict[str, float] | None:
    """Position record to ``{x, y, z}`` rounded to two decimals."""
    if position is None:
        return None
    return {
        "x": round_coordinate(read_field(position, "x", 0)),
        "y": round_coordinate(read_field(position, "y", 0)),
        "z": round_coordinate(read_field(position, "z", 0)),
    }


def map_player(player: Any) -> dict[str, Any] | None:
    """Player list record to PlayerInfo."""
    if player is None:
        return None
    return {
        "uuid": read_field(player, "uuid"),
        "username": read_field(player, "username"),
        "displayName": _text(read_field(player, "displayName")),
        "ping": read_field(player, "ping"),
        "gamemode": read_field(player, "gamemode"),
    }


def map_entity(entity: Any) -> dict[str, Any] | None:
    """Entity record to EntityInfo."""
    if entity is None:
        return None
    return {
        "id": read_field(entity, "id"),
        "uuid": read_field(entity, "uuid"),
        "type": read_field(entity, "type"),
        "name": read_field(entity, "name"),
        "displayName": _text(read_field(entity, "displayName")),
        "username": read_field(entity, "username"),
        "position": map_position(read_field(entity, "position")),
        "health": read_field(entity, "health"),
    }


class BaseEventHandler(ABC):
    """
    Translates one raw notification channel into one canonical event type.

    Subclasses set ``channel`` and ``event_type`` and implement ``register``.
    Every callback subscribed through ``listen`` is guarded: a translation
    failure is logged and never reaches the connection's dispatcher.
    """

    channel: str = ""
    event_type: GameEventType

    def __init__(
        self,
        connection: Any,
        is_event_disabled: Callable[[GameEventType], bool],
        add_event: Callable[[GameEvent], None],
        get_game_tick: Callable[[], int],
        get_timestamp: Callable[[], float],
    ):
        self.connection = connection
        self.is_event_disabled = is_event_disabled
        self.add_event = add_event
        self.get_game_tick = get_game_tick
        self.get_timestamp = get_timestamp

    @abstractmethod
    def register(self) -> None:
        """Subscribe to this handler's raw notification channel."""

    def get_event_type(self) -> GameEventType:
        return self.event_type

    def create_event(self, event_type: GameEventType | str, data: Mapping[str, Any] | None = None) -> GameEvent:
        """Stamp the current tick and wall-clock time onto a payload."""
        return GameEvent(
            type=event_type,
            game_tick=self.get_game_tick(),
            timestamp=self.get_timestamp(),
            data=data or {},
        )

    def emit(self, build_data: Callable[[], Mapping[str, Any]]) -> GameEvent | None:
        """Build and store an event unless its type is disabled.

        The payload builder only runs when the type is enabled.
        """
        if self.is_event_disabled(self.event_type):
            return None
        event = self.create_event(self.event_type, build_data())
        self.add_event(event)
        return event

    def listen(self, callback: Callable[..., Any]) -> None:
        """Subscribe ``callback`` to ``self.channel`` behind an error guard."""
        self.connection.on(self.channel, self._guard(callback))
        logger.debug(f"Listening on '{self.channel}' for {self.event_type.value}")

    def _guard(self, callback: Callable[..., Any]) -> Callable[..., Any]:
        channel = self.channel

        if inspect.iscoroutinefunction(callback):
            @functools.wraps(callback)
            async def guarded_async(*args: Any) -> None:
                try:
                    await callback(*args)
                except Exception as e:
                    logger.error(f"Handler for '{channel}' failed: {e}", exc_info=True)

            return guarded_async

        @functools.wraps(callback)
        def guarded(*args: Any) -> None:
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Handler for '{channel}' failed: {e}", exc_info=True)

        return guarded

    def resolve_items(self, stacks: Any) -> list[dict[str, Any]]:
        """Resolve raw item stack metadata against the item registry.

        Entries without an item id are skipped; ids missing from the
        registry resolve to "unknown".
        """
        items = []
        for stack in stacks or []:
            item_id = read_field(stack, "itemId")
            if item_id is None:
                continue
            try:
                info = self.connection.item_by_id(item_id) or {}
            except Exception as e:
                logger.warning(f"Item registry lookup failed for {item_id}: {e}")
                info = {}
            items.append(
                {
                    "id": item_id,
                    "name": read_field(info, "name", "unknown"),
                    "displayName": read_field(info, "displayName", "unknown"),
                    "count": read_field(stack, "itemCount", 1),
                }
            )
        return items
