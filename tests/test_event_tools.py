"""Tests for the LangChain event log tools."""

import pytest
from pydantic import ValidationError

from beacon.events.models import GameEvent
from beacon.tools.event_tools import create_event_tools
from beacon.tools.schemas import QueryRecentEventsArgs


@pytest.fixture
def tools(store):
    for tick, event_type in [(10, "chat"), (20, "death"), (30, "chat")]:
        store.add_event(GameEvent(type=event_type, game_tick=tick, timestamp=float(tick), data={"n": tick}))
    return {t.name: t for t in create_event_tools(store)}


def test_tool_names(tools):
    assert set(tools) == {"query_recent_events", "get_event_stats", "cleanup_events"}


@pytest.mark.asyncio
async def test_query_recent_events(tools):
    result = await tools["query_recent_events"].ainvoke({"event_type": "chat", "limit": 1})

    assert result["total"] == 2
    assert result["events"][0]["gameTick"] == 10
    assert result["stats"]["total"] == 3
    assert "breath" in result["supportedEventTypes"]


@pytest.mark.asyncio
async def test_query_without_details(tools):
    result = await tools["query_recent_events"].ainvoke({"since_tick": 20, "include_details": False})
    assert result["events"] == [{"type": "death", "gameTick": 20}, {"type": "chat", "gameTick": 30}]


@pytest.mark.asyncio
async def test_get_event_stats(tools):
    stats = await tools["get_event_stats"].ainvoke({})
    assert stats["byType"] == {"chat": 2, "death": 1}


@pytest.mark.asyncio
async def test_cleanup_events(tools, store):
    message = await tools["cleanup_events"].ainvoke({"before_tick": 25})

    assert message == "Removed 2 events older than tick 25."
    assert len(store) == 1


def test_limit_bounds():
    with pytest.raises(ValidationError):
        QueryRecentEventsArgs(limit=0)
    with pytest.raises(ValidationError):
        QueryRecentEventsArgs(limit=101)
    assert QueryRecentEventsArgs().limit == 50
