"""Shared fixtures: an in-memory game connection and a fixed clock."""

import inspect
from collections import defaultdict

import pytest

from beacon.config import ChatFilterConfig, CommandsConfig
from beacon.core.event_store import EventStore


class FakeConnection:
    """Stands in for a live game client.

    ``emit`` calls listeners synchronously and parks any awaitable they
    return; ``drain`` awaits the parked ones.
    """

    def __init__(self, age=100, **state):
        self.age = age
        self.player = {"uuid": "bot-uuid", "username": "Beacon", "displayName": "Beacon", "ping": 12, "gamemode": 0}
        self.entity = {"id": 1, "type": "player", "username": "Beacon", "position": {"x": 10.123, "y": 64.0, "z": -5.678}}
        self.is_raining = False
        self.thunder_state = 0
        self.health = 20
        self.food = 18
        self.food_saturation = 4.5
        self.oxygen_level = 20
        self.spawn_point = {"x": 0, "y": 70, "z": 0}
        self.items = {1: {"name": "stone", "displayName": "Stone"}, 280: {"name": "stick", "displayName": "Stick"}}
        for key, value in state.items():
            setattr(self, key, value)

        self.listeners = defaultdict(list)
        self.sent = []
        self.pending = []

    def on(self, channel, callback):
        self.listeners[channel].append(callback)

    def chat(self, message):
        self.sent.append(message)

    def item_by_id(self, item_id):
        return self.items.get(item_id)

    def emit(self, channel, *args):
        for callback in list(self.listeners[channel]):
            result = callback(*args)
            if inspect.isawaitable(result):
                self.pending.append(result)

    async def drain(self):
        while self.pending:
            await self.pending.pop(0)

    async def say(self, username, text):
        """Deliver a chat line and wait for the chat handler to finish."""
        self.emit("chat", username, text)
        await self.drain()


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds=1.0):
        self.now += seconds


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def make_connection():
    """Factory for additional connections within one test."""
    return FakeConnection


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return EventStore(max_events=100)


@pytest.fixture
def commands_config():
    """Commands on, one admin named Steve."""
    return CommandsConfig(enabled=True, admin_players=["Steve"])


@pytest.fixture
def filter_config():
    return ChatFilterConfig(
        enabled=True,
        blocked_players=["SpamBot"],
        blocked_message_patterns=[r"^\[AD\]", r"(?i)free diamonds"],
    )
