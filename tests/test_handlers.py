"""Tests for the event handler variants and their payloads."""

import pytest

from beacon.core.event_store import EventStore
from beacon.events import handlers as h
from beacon.events.base import map_entity, map_player, map_position, read_field
from beacon.events.registry import HandlerDependencies


def build(handler_type, connection, store, clock, **kwargs):
    """Construct and register one handler against a store."""
    deps = HandlerDependencies(
        connection=connection,
        is_event_disabled=store.is_event_disabled,
        add_event=store.add_event,
        get_game_tick=lambda: connection.age,
        get_timestamp=clock,
    )
    handler = handler_type(*deps.as_args(), **kwargs)
    handler.register()
    return handler


def only_event(store):
    events = store.query_recent_events()["events"]
    assert len(events) == 1
    return events[0]


class TestMappers:
    """Tests for the record translation helpers."""

    def test_read_field_mapping_and_attributes(self):
        class Record:
            username = "Alex"
            ping = None

        assert read_field({"username": "Alex"}, "username") == "Alex"
        assert read_field(Record(), "username") == "Alex"
        assert read_field(Record(), "ping", 0) == 0
        assert read_field(None, "anything", "x") == "x"

    def test_position_rounding(self):
        assert map_position({"x": 1.23456, "y": 64, "z": -0.006}) == {"x": 1.23, "y": 64.0, "z": -0.01}
        assert map_position(None) is None

    def test_player(self):
        player = map_player({"uuid": "u1", "username": "Alex", "displayName": "Alex", "ping": 30, "gamemode": 1})
        assert player == {"uuid": "u1", "username": "Alex", "displayName": "Alex", "ping": 30, "gamemode": 1}

    def test_entity(self):
        entity = map_entity({"id": 7, "type": "mob", "name": "zombie", "position": {"x": 1, "y": 2, "z": 3}})

        assert entity["id"] == 7
        assert entity["name"] == "zombie"
        assert entity["username"] is None
        assert entity["position"] == {"x": 1.0, "y": 2.0, "z": 3.0}


class TestGating:
    """Disabled types never run their payload builder."""

    def test_disabled_type_skips_builder(self, connection, clock):
        store = EventStore(enabled_events=["chat"])
        handler = build(h.HealthEventHandler, connection, store, clock)
        calls = []

        def builder():
            calls.append(1)
            return {}

        assert handler.emit(builder) is None
        assert calls == []
        assert len(store) == 0

    def test_stamps_tick_and_time(self, connection, store, clock):
        build(h.DeathEventHandler, connection, store, clock)
        connection.age = 4242
        clock.advance(5)

        connection.emit("death")

        event = only_event(store)
        assert event["gameTick"] == 4242
        assert event["timestamp"] == clock.now

    def test_translation_failure_is_contained(self, connection, store, clock, caplog):
        """A broken payload never reaches the connection's dispatcher."""
        build(h.EntityDeathEventHandler, connection, store, clock)

        class Broken:
            @property
            def id(self):
                raise RuntimeError("bad entity")

        connection.emit("entityDead", Broken())

        assert len(store) == 0
        assert "bad entity" in caplog.text


class TestChatHandler:
    @pytest.mark.asyncio
    async def test_plain_chat_is_stored(self, connection, store, clock):
        build(h.ChatEventHandler, connection, store, clock)

        await connection.say("Alex", "hello")

        assert only_event(store)["data"] == {"username": "Alex", "text": "hello"}

    @pytest.mark.asyncio
    async def test_disabled_chat_not_stored(self, connection, clock):
        store = EventStore(enabled_events=["death"])
        build(h.ChatEventHandler, connection, store, clock)

        await connection.say("Alex", "hello")

        assert len(store) == 0


class TestPlayerHandlers:
    def test_player_joined(self, connection, store, clock):
        build(h.PlayerJoinEventHandler, connection, store, clock)

        connection.emit("playerJoined", {"uuid": "u2", "username": "Alex", "ping": 40, "gamemode": 0})

        data = only_event(store)["data"]
        assert data["player"]["username"] == "Alex"
        assert data["player"]["ping"] == 40

    def test_player_left(self, connection, store, clock):
        build(h.PlayerLeftEventHandler, connection, store, clock)
        connection.emit("playerLeft", {"username": "Alex"})
        assert only_event(store)["type"] == "playerLeft"

    def test_death_reports_bot(self, connection, store, clock):
        build(h.DeathEventHandler, connection, store, clock)
        connection.emit("death")
        assert only_event(store)["data"]["player"]["username"] == "Beacon"

    def test_spawn(self, connection, store, clock):
        build(h.SpawnEventHandler, connection, store, clock)

        connection.emit("spawn")

        data = only_event(store)["data"]
        assert data["player"]["uuid"] == "bot-uuid"
        assert data["entity"]["position"] == {"x": 10.12, "y": 64.0, "z": -5.68}

    def test_kicked_with_component_reason(self, connection, store, clock):
        build(h.KickedEventHandler, connection, store, clock)

        connection.emit("kicked", {"text": "Banned"}, True)

        data = only_event(store)["data"]
        assert data["reason"] == '{"text": "Banned"}'
        assert data["loggedIn"] is True

    def test_spawn_reset(self, connection, store, clock):
        build(h.SpawnResetEventHandler, connection, store, clock)
        connection.spawn_point = {"x": 100.556, "y": 65, "z": 20}

        connection.emit("spawnReset")

        assert only_event(store)["data"] == {"newSpawnPoint": {"x": 100.56, "y": 65.0, "z": 20.0}}


class TestWorldHandlers:
    @pytest.mark.parametrize(
        "is_raining,thunder,expected",
        [
            (False, 0, "clear"),
            (True, 0, "rain"),
            (True, 0.5, "thunder"),
        ],
    )
    def test_weather(self, connection, store, clock, is_raining, thunder, expected):
        build(h.WeatherChangeEventHandler, connection, store, clock)
        connection.is_raining = is_raining
        connection.thunder_state = thunder

        connection.emit("rain")

        data = only_event(store)["data"]
        assert data == {"weather": expected, "isRaining": is_raining, "thunderState": thunder}

    def test_health_is_flat(self, connection, store, clock):
        build(h.HealthEventHandler, connection, store, clock)
        connection.health = 7

        connection.emit("health")

        assert only_event(store)["data"] == {"health": 7, "food": 18, "saturation": 4.5}

    def test_breath(self, connection, store, clock):
        build(h.BreathEventHandler, connection, store, clock)
        connection.oxygen_level = 3

        connection.emit("breath")

        assert only_event(store)["data"] == {"oxygenLevel": 3, "health": 20, "food": 18}

    def test_forced_move(self, connection, store, clock):
        build(h.ForcedMoveEventHandler, connection, store, clock)
        connection.entity = {"id": 1, "position": {"x": -1.006, "y": 80, "z": 2}}

        connection.emit("forcedMove")

        assert only_event(store)["data"] == {"position": {"x": -1.01, "y": 80.0, "z": 2.0}}


class TestEntityHandlers:
    def test_entity_hurt(self, connection, store, clock):
        build(h.EntityHurtEventHandler, connection, store, clock)

        connection.emit("entityHurt", {"id": 9, "type": "mob", "name": "skeleton"})

        data = only_event(store)["data"]
        assert data["entity"]["name"] == "skeleton"
        assert data["damage"] == 0

    def test_entity_dead(self, connection, store, clock):
        build(h.EntityDeathEventHandler, connection, store, clock)
        connection.emit("entityDead", {"id": 9, "name": "skeleton"})
        assert only_event(store)["data"]["entity"]["id"] == 9

    def test_self_collect(self, connection, store, clock, caplog):
        build(h.PlayerCollectEventHandler, connection, store, clock)
        caplog.set_level("INFO")
        collected = {"metadata": [{"itemId": 280, "itemCount": 3}, {"itemCount": 1}, {"itemId": 999}]}

        connection.emit("playerCollect", {"id": 1, "type": "player"}, collected)

        data = only_event(store)["data"]
        assert data["isSelf"] is True
        assert data["collected"] == [
            {"id": 280, "name": "stick", "displayName": "Stick", "count": 3},
            {"id": 999, "name": "unknown", "displayName": "unknown", "count": 1},
        ]
        assert "Bot collected: stick x3" in caplog.text

    def test_other_player_collect(self, connection, store, clock):
        build(h.PlayerCollectEventHandler, connection, store, clock)
        connection.emit("playerCollect", {"id": 55}, {"metadata": []})
        assert only_event(store)["data"]["isSelf"] is False

    def test_item_drop(self, connection, store, clock):
        build(h.ItemDropEventHandler, connection, store, clock)

        connection.emit("itemDrop", {"metadata": [{"itemId": 1, "itemCount": 64}], "position": {"x": 1, "y": 2, "z": 3}})

        data = only_event(store)["data"]
        assert data["dropped"][0]["name"] == "stone"
        assert data["position"] == {"x": 1.0, "y": 2.0, "z": 3.0}


class TestConnectionHandlers:
    def test_end_default_reason(self, connection, store, clock):
        build(h.EndEventHandler, connection, store, clock)
        connection.emit("end")
        assert only_event(store)["data"] == {"reason": "socketClosed"}

    def test_end_with_reason(self, connection, store, clock):
        build(h.EndEventHandler, connection, store, clock)
        connection.emit("end", "server restart")
        assert only_event(store)["data"] == {"reason": "server restart"}

    def test_error_from_exception(self, connection, store, clock):
        build(h.ErrorEventHandler, connection, store, clock)
        connection.emit("error", ConnectionResetError("peer reset"))
        assert only_event(store)["data"] == {"error": "peer reset", "errorType": "ConnectionResetError"}

    def test_error_from_record(self, connection, store, clock):
        build(h.ErrorEventHandler, connection, store, clock)
        connection.emit("error", {"message": "timed out", "name": "TimeoutError"})
        assert only_event(store)["data"] == {"error": "timed out", "errorType": "TimeoutError"}
