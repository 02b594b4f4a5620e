"""Event log tools for the agent's tool layer."""

import logging
from typing import TYPE_CHECKING

from langchain_core.tools import tool

from .schemas import CleanupEventsArgs, QueryRecentEventsArgs

if TYPE_CHECKING:
    from ..core.event_store import EventStore

logger = logging.getLogger(__name__)


def create_event_tools(store: "EventStore") -> list:
    """Create event log tools bound to an event store."""

    @tool("query_recent_events", args_schema=QueryRecentEventsArgs)
    async def query_recent_events(
        event_type: str | None = None,
        since_tick: int | None = None,
        timestamp_after: float | None = None,
        timestamp_before: float | None = None,
        limit: int = 50,
        include_details: bool = True,
    ):
        """Query recent game events (chat, joins, deaths, weather, damage, item pickups...) sorted by game tick."""
        logger.debug(f"🔧 Tool: query_recent_events(type={event_type}, since={since_tick}, limit={limit})")
        result = store.query_recent_events(
            event_type=event_type,
            since_tick=since_tick,
            limit=limit,
            include_details=include_details,
            timestamp_after=timestamp_after,
            timestamp_before=timestamp_before,
        )
        return {
            **result,
            "stats": store.get_event_stats(),
            "supportedEventTypes": store.get_supported_event_types(),
        }

    @tool("get_event_stats")
    async def get_event_stats():
        """Count stored game events per type and report the game tick range they cover."""
        logger.debug("🔧 Tool: get_event_stats()")
        return store.get_event_stats()

    @tool("cleanup_events", args_schema=CleanupEventsArgs)
    async def cleanup_events(before_tick: int):
        """Drop stored game events older than a game tick to free the log."""
        logger.info(f"🔧 Tool: cleanup_events(before_tick={before_tick})")
        removed = store.cleanup_old_events(before_tick)
        return f"Removed {removed} events older than tick {before_tick}."

    return [
        query_recent_events,
        get_event_stats,
        cleanup_events,
    ]
