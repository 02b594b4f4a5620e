"""Bounded in-memory event log with type gating and tick-ordered queries."""

import logging
from collections import deque
from typing import Any, Iterable

from ..events.models import GameEvent, GameEventType

logger = logging.getLogger(__name__)

DEFAULT_MAX_EVENTS = 1000


class EventStore:
    """
    Insertion-ordered log of canonical events, capped at ``max_events``.
    Oldest events are evicted first once the cap is reached.

    The store also owns the enabled-type policy. Handlers consult
    ``is_event_disabled`` before building an event, so disabling a type
    stops events at the source rather than hiding them at read time.

    Not thread-safe: all access is expected from the single asyncio loop
    that delivers game notifications.
    """

    def __init__(
        self,
        max_events: int = DEFAULT_MAX_EVENTS,
        enabled_events: Iterable[str | GameEventType] | None = None,
    ):
        """Initialize the store.

        Args:
            max_events: Capacity of the log (at least 1).
            enabled_events: Types accepted at startup. None enables all.
        """
        self.max_events = max(1, int(max_events))
        self._events: deque[GameEvent] = deque(maxlen=self.max_events)
        self._enabled: set[str] = set(GameEventType.values())
        if enabled_events is not None:
            self.set_enabled_events(enabled_events)

    def __len__(self) -> int:
        return len(self._events)

    def add_event(self, event: GameEvent) -> None:
        """Append an event, evicting the oldest one when full."""
        # deque(maxlen=...) drops from the left on overflow
        self._events.append(event)
        logger.debug(f"Event added: {event.type} (total: {len(self._events)})")

    def query_recent_events(
        self,
        event_type: str | None = None,
        since_tick: int | None = None,
        limit: int = 50,
        include_details: bool = True,
        timestamp_after: float | None = None,
        timestamp_before: float | None = None,
    ) -> dict[str, Any]:
        """Filter, sort and truncate the log.

        Filters are conjunctive. Matching events are sorted by game tick
        (ties keep insertion order) and truncated to ``limit``.

        Args:
            event_type: Keep only events of this type.
            since_tick: Keep only events with ``game_tick >= since_tick``.
            limit: Maximum number of events returned. Zero or negative
                returns none.
            include_details: If False, each event is reduced to its type
                and game tick.
            timestamp_after: Keep only events captured at or after this time.
            timestamp_before: Keep only events captured at or before this time.

        Returns:
            ``{"total": <matches before truncation>, "events": [...]}``
        """
        if isinstance(event_type, GameEventType):
            event_type = event_type.value

        matches = [
            event
            for event in self._events
            if (event_type is None or event.type == event_type)
            and (since_tick is None or event.game_tick >= since_tick)
            and (timestamp_after is None or event.timestamp >= timestamp_after)
            and (timestamp_before is None or event.timestamp <= timestamp_before)
        ]
        # sorted() is stable, so equal ticks stay in insertion order
        matches = sorted(matches, key=lambda event: event.game_tick)

        limited = matches[: max(0, limit)]
        if include_details:
            events = [event.to_dict() for event in limited]
        else:
            events = [event.summary() for event in limited]

        logger.debug(f"Query matched {len(matches)} events, returning {len(events)}")
        return {"total": len(matches), "events": events}

    def get_event_stats(self) -> dict[str, Any]:
        """Count per type plus the tick range currently held."""
        by_type: dict[str, int] = {}
        oldest_tick: int | None = None
        newest_tick: int | None = None

        for event in self._events:
            by_type[event.type] = by_type.get(event.type, 0) + 1
            if oldest_tick is None or event.game_tick < oldest_tick:
                oldest_tick = event.game_tick
            if newest_tick is None or event.game_tick > newest_tick:
                newest_tick = event.game_tick

        return {
            "total": len(self._events),
            "byType": by_type,
            "oldestGameTick": oldest_tick,
            "newestGameTick": newest_tick,
        }

    def cleanup_old_events(self, before_tick: int) -> int:
        """Drop every event with a game tick strictly below ``before_tick``.

        Returns:
            Number of events removed.
        """
        original_count = len(self._events)
        kept = [event for event in self._events if event.game_tick >= before_tick]
        self._events = deque(kept, maxlen=self.max_events)
        removed = original_count - len(self._events)

        if removed > 0:
            logger.info(f"Removed {removed} events older than tick {before_tick}")
        return removed

    def clear(self) -> None:
        """Empty the log."""
        self._events.clear()
        logger.info("Event log cleared")

    def set_enabled_events(self, types: Iterable[str | GameEventType]) -> None:
        """Replace the enabled-type set wholesale."""
        enabled: set[str] = set()
        for value in types:
            member = GameEventType.parse(value)
            if member is None:
                logger.warning(f"Ignoring unknown event type: {value}")
                continue
            enabled.add(member.value)

        self._enabled = enabled
        logger.info(f"Enabled event types: {', '.join(sorted(enabled)) or '(none)'}")

    def get_enabled_events(self) -> list[str]:
        return sorted(self._enabled)

    def is_event_disabled(self, event_type: str | GameEventType) -> bool:
        """True if events of this type must not be built or stored."""
        if isinstance(event_type, GameEventType):
            event_type = event_type.value
        return event_type not in self._enabled

    def get_supported_event_types(self) -> list[str]:
        return GameEventType.values()
