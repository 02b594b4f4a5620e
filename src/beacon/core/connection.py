"""Game connection boundary and the websocket bridge that implements it."""

import asyncio
import inspect
import json
import logging
import random
import time
from collections import defaultdict
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

import websockets

from ..config import BridgeConfig

logger = logging.getLogger(__name__)


@runtime_checkable
class GameConnection(Protocol):
    """What the event core needs from a live game client.

    Notifications are delivered by calling the callbacks registered with
    ``on``. A callback may return an awaitable; the connection schedules it
    on the running loop without waiting for it.
    """

    age: int
    player: Any
    entity: Any
    is_raining: bool
    thunder_state: float
    health: float
    food: float
    food_saturation: float
    oxygen_level: int
    spawn_point: Any

    def on(self, channel: str, callback: Callable[..., Any]) -> None: ...

    def chat(self, message: str) -> None: ...

    def item_by_id(self, item_id: int) -> Optional[Dict[str, Any]]: ...


class ReconnectBackoff:
    """Exponential backoff with jitter for reconnection."""

    def __init__(
        self,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: float = 0.1
    ):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self._attempt = 0

    def next_delay(self) -> float:
        """Get next delay and increment attempt counter."""
        delay = min(self.base_delay * (2 ** self._attempt), self.max_delay)
        jitter_range = delay * self.jitter
        delay += random.uniform(-jitter_range, jitter_range)
        self._attempt += 1
        return max(0.5, delay)

    def reset(self):
        """Reset on successful connection."""
        self._attempt = 0

    @property
    def attempt(self) -> int:
        """Current attempt number."""
        return self._attempt


class BridgeConnection:
    """Websocket client for a game-side bridge plugin.

    The bridge forwards raw game notifications and periodic state snapshots,
    and accepts chat commands back. This class turns that stream into the
    ``GameConnection`` interface:

    - ``{"type": "event", "name": ..., "args": [...]}`` calls listeners
    - ``{"type": "state", ...}`` refreshes the synchronous accessors
    - ``{"type": "registry", "items": {...}}`` loads the item registry

    Outgoing chat is queued and sent by a dedicated sender coroutine so
    message order is preserved.
    """

    def __init__(self, uri: str, config: Optional[BridgeConfig] = None):
        self.uri = uri
        self.websocket = None
        self.running = False
        self._config = config or BridgeConfig()

        self._listeners: Dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._background_tasks: set[asyncio.Task] = set()

        self._command_queue: asyncio.Queue[Dict[str, Any]] = asyncio.Queue()
        self._sender_task: Optional[asyncio.Task] = None
        self._sequence_counter = 0

        # Mirrored game state
        self.age = 0
        self.player: Optional[Dict[str, Any]] = None
        self.entity: Optional[Dict[str, Any]] = None
        self.is_raining = False
        self.thunder_state = 0.0
        self.health = 20.0
        self.food = 20.0
        self.food_saturation = 5.0
        self.oxygen_level = 20
        self.spawn_point: Optional[Dict[str, Any]] = None
        self._items: Dict[int, Dict[str, Any]] = {}

        self._backoff = ReconnectBackoff(
            base_delay=self._config.reconnect_base_delay,
            max_delay=self._config.reconnect_max_delay,
            jitter=self._config.reconnect_jitter
        )

    # ==================== GameConnection interface ====================

    def on(self, channel: str, callback: Callable[..., Any]) -> None:
        """Subscribe a callback to a raw notification channel."""
        self._listeners[channel].append(callback)

    def listener_count(self, channel: str) -> int:
        return len(self._listeners.get(channel, []))

    def chat(self, message: str) -> None:
        """Queue a chat message for the bot to send in-game."""
        self._queue_command("chat", {"message": message})

    def item_by_id(self, item_id: int) -> Optional[Dict[str, Any]]:
        return self._items.get(item_id)

    # ==================== Dispatch ====================

    def emit(self, channel: str, *args: Any) -> None:
        """Deliver a raw notification to every listener of ``channel``.

        Coroutine results are scheduled as tasks; a slow listener never
        holds up the next notification.
        """
        for callback in list(self._listeners.get(channel, [])):
            try:
                result = callback(*args)
            except Exception as e:
                logger.error(f"Listener for '{channel}' failed: {e}", exc_info=True)
                continue

            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._background_tasks.add(task)
                task.add_done_callback(self._background_tasks.discard)

    async def _handle_message(self, data: Dict[str, Any]):
        """Route incoming messages to appropriate handlers."""
        msg_type = data.get("type")

        if msg_type == "event":
            name = data.get("name")
            if not name:
                logger.warning("Event message without a name")
                return
            self.emit(name, *data.get("args", []))
        elif msg_type == "state":
            self._apply_state(data)
        elif msg_type == "registry":
            self._load_registry(data.get("items", {}))
        else:
            logger.warning(f"Unknown message type: {msg_type}")

    def _apply_state(self, data: Dict[str, Any]) -> None:
        self.age = data.get("age", self.age)
        self.player = data.get("player", self.player)
        self.entity = data.get("entity", self.entity)
        self.is_raining = data.get("isRaining", self.is_raining)
        self.thunder_state = data.get("thunderState", self.thunder_state)
        self.health = data.get("health", self.health)
        self.food = data.get("food", self.food)
        self.food_saturation = data.get("foodSaturation", self.food_saturation)
        self.oxygen_level = data.get("oxygenLevel", self.oxygen_level)
        self.spawn_point = data.get("spawnPoint", self.spawn_point)

    def _load_registry(self, items: Dict[str, Any]) -> None:
        loaded = {}
        for key, info in items.items():
            try:
                loaded[int(key)] = info
            except (TypeError, ValueError):
                logger.warning(f"Skipping registry entry with non-numeric id: {key}")
        self._items = loaded
        logger.info(f"Item registry loaded: {len(loaded)} items")

    # ==================== Connection loop ====================

    async def connect(self):
        """Connect to the bridge with exponential backoff reconnection."""
        self.running = True

        while self.running:
            try:
                logger.info(f"Connecting to {self.uri}... (attempt {self._backoff.attempt + 1})")

                async with websockets.connect(
                    self.uri,
                    ping_interval=self._config.ping_interval,
                    ping_timeout=self._config.ping_timeout,
                    close_timeout=5,
                ) as websocket:
                    self.websocket = websocket
                    self._backoff.reset()
                    logger.info("Connected to game bridge")

                    self._sender_task = asyncio.create_task(self._command_sender())

                    try:
                        async for message in websocket:
                            try:
                                data = json.loads(message)
                                await self._handle_message(data)
                            except json.JSONDecodeError as e:
                                logger.error(f"Failed to parse message: {e}")
                            except Exception as e:
                                logger.error(f"Error handling message: {e}", exc_info=True)
                    finally:
                        if self._sender_task:
                            self._sender_task.cancel()
                            try:
                                await self._sender_task
                            except asyncio.CancelledError:
                                pass
                            self._sender_task = None

            except websockets.ConnectionClosed as e:
                delay = self._backoff.next_delay()
                logger.warning(f"Connection closed (code={e.code}), reconnecting in {delay:.1f}s...")
                self.websocket = None
                await asyncio.sleep(delay)
            except Exception as e:
                delay = self._backoff.next_delay()
                logger.error(f"Connection error: {e}, reconnecting in {delay:.1f}s...")
                self.websocket = None
                await asyncio.sleep(delay)

    async def _command_sender(self):
        """Dedicated coroutine for sending commands - ensures ordering."""
        while self.running:
            try:
                try:
                    command_data = await asyncio.wait_for(
                        self._command_queue.get(),
                        timeout=1.0
                    )
                except asyncio.TimeoutError:
                    continue

                if self.websocket:
                    try:
                        await self.websocket.send(json.dumps(command_data))
                        logger.debug(f"Sent command: {command_data.get('command')}")
                    except Exception as e:
                        logger.error(f"Failed to send command: {e}")
                        # The connect() loop handles reconnection
                        self.websocket = None
                        await self._command_queue.put(command_data)
                        await asyncio.sleep(0.5)
                else:
                    await self._command_queue.put(command_data)
                    await asyncio.sleep(0.5)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Command sender error: {e}")
                await asyncio.sleep(0.1)

    def _queue_command(self, command: str, parameters: Dict[str, Any]) -> None:
        if self._command_queue.qsize() >= self._config.command_queue_max_size:
            logger.warning("Command queue full, dropping oldest command")
            try:
                self._command_queue.get_nowait()
            except asyncio.QueueEmpty:
                pass

        self._sequence_counter += 1
        message = {
            "type": "command",
            "command": command,
            "sequence": self._sequence_counter,
            "timestamp": int(time.time() * 1000),
            "parameters": parameters,
        }
        self._command_queue.put_nowait(message)
        logger.debug(f"Queued command: {command} | {parameters}")

    def get_queue_size(self) -> int:
        """Get number of commands waiting to be sent."""
        return self._command_queue.qsize()

    def stop(self):
        """Stop the client."""
        self.running = False
        logger.info("Stopping bridge client...")
