"""Tests for the websocket bridge connection, without a live socket."""

import asyncio

import pytest

from beacon.config import BridgeConfig
from beacon.core.connection import BridgeConnection, GameConnection, ReconnectBackoff
from beacon.core.event_manager import EventManager


@pytest.fixture
def bridge():
    return BridgeConnection("ws://localhost:8766", BridgeConfig(command_queue_max_size=10))


def test_bridge_satisfies_game_connection(bridge):
    assert isinstance(bridge, GameConnection)


def test_backoff_grows_and_resets():
    backoff = ReconnectBackoff(base_delay=1.0, max_delay=8.0, jitter=0.0)

    delays = [backoff.next_delay() for _ in range(5)]

    assert delays == [1.0, 2.0, 4.0, 8.0, 8.0]
    backoff.reset()
    assert backoff.attempt == 0


@pytest.mark.asyncio
async def test_state_message_updates_accessors(bridge):
    await bridge._handle_message({
        "type": "state",
        "age": 1200,
        "isRaining": True,
        "thunderState": 1,
        "health": 12.5,
        "oxygenLevel": 7,
        "spawnPoint": {"x": 1, "y": 2, "z": 3},
    })

    assert bridge.age == 1200
    assert bridge.is_raining is True
    assert bridge.thunder_state == 1
    assert bridge.health == 12.5
    assert bridge.oxygen_level == 7
    # Fields absent from the snapshot keep their previous values
    assert bridge.food == 20.0


@pytest.mark.asyncio
async def test_registry_message(bridge):
    await bridge._handle_message({"type": "registry", "items": {"1": {"name": "stone"}, "oops": {}}})

    assert bridge.item_by_id(1) == {"name": "stone"}
    assert bridge.item_by_id(2) is None


@pytest.mark.asyncio
async def test_event_message_reaches_listeners(bridge):
    received = []
    bridge.on("playerJoined", lambda player: received.append(player))

    await bridge._handle_message({"type": "event", "name": "playerJoined", "args": [{"username": "Alex"}]})

    assert received == [{"username": "Alex"}]


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others(bridge):
    received = []

    def broken(*_):
        raise RuntimeError("boom")

    bridge.on("death", broken)
    bridge.on("death", lambda: received.append("ok"))

    bridge.emit("death")

    assert received == ["ok"]


@pytest.mark.asyncio
async def test_async_listeners_are_scheduled(bridge):
    done = asyncio.Event()

    async def listener(username, message):
        done.set()

    bridge.on("chat", listener)
    bridge.emit("chat", "Alex", "hi")

    await asyncio.wait_for(done.wait(), timeout=1.0)


def test_chat_is_queued_as_command(bridge):
    bridge.chat("hello")

    assert bridge.get_queue_size() == 1
    queued = bridge._command_queue.get_nowait()
    assert queued["command"] == "chat"
    assert queued["parameters"] == {"message": "hello"}
    assert queued["sequence"] == 1


def test_full_queue_drops_oldest(bridge):
    for i in range(12):
        bridge.chat(f"msg {i}")

    assert bridge.get_queue_size() == 10
    assert bridge._command_queue.get_nowait()["parameters"]["message"] == "msg 2"


@pytest.mark.asyncio
async def test_bridge_events_flow_into_store(bridge):
    """State snapshot plus raw notification yields a stored event."""
    manager = EventManager()
    manager.register_bot(bridge)

    await bridge._handle_message({"type": "state", "age": 50, "health": 9, "food": 3, "foodSaturation": 0})
    await bridge._handle_message({"type": "event", "name": "health", "args": []})
    await bridge._handle_message({"type": "event", "name": "chat", "args": ["Alex", "hi"]})
    await asyncio.sleep(0)

    events = manager.store.query_recent_events()["events"]
    assert [e["type"] for e in events] == ["health", "chat"]
    assert events[0]["gameTick"] == 50
    assert events[0]["data"] == {"health": 9, "food": 3, "saturation": 0}
