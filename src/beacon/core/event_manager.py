"""Wires the event store, chat collaborators and handlers to a connection."""

import logging
import time
from typing import Any, Callable, Optional, Sequence

from ..chat.filter import ChatFilter
from ..commands.base import CommandContext
from ..commands.router import CommandRouter
from ..config import AgentConfig, ChatFilterConfig, CommandsConfig, EventsConfig
from ..events.base import BaseEventHandler, read_field
from ..events.registry import DEFAULT_HANDLERS, HandlerDependencies, HandlerRegistry
from .event_store import EventStore

logger = logging.getLogger(__name__)


class EventManager:
    """Owns the event log and registers handlers on game connections.

    ``register_bot`` is the single integration seam: call it once the
    connection is live. Calling it again with the same connection is a
    no-op, so handlers are never subscribed twice.
    """

    def __init__(
        self,
        events_config: Optional[EventsConfig] = None,
        commands_config: Optional[CommandsConfig] = None,
        chat_filter_config: Optional[ChatFilterConfig] = None,
        handler_types: Sequence[type[BaseEventHandler]] = DEFAULT_HANDLERS,
        clock: Callable[[], float] = time.time,
    ):
        events_config = events_config or EventsConfig()
        self.commands_config = commands_config or CommandsConfig()
        self.store = EventStore(
            max_events=events_config.max_events,
            enabled_events=events_config.enabled_events,
        )
        self.chat_filter = ChatFilter(chat_filter_config, command_prefix=self.commands_config.prefix)
        self.command_router: Optional[CommandRouter] = None
        self.registry: Optional[HandlerRegistry] = None
        self._handler_types = tuple(handler_types)
        self._clock = clock
        self._registrations: list[tuple[Any, list[BaseEventHandler]]] = []

    @classmethod
    def from_config(cls, config: AgentConfig) -> "EventManager":
        return cls(
            events_config=config.events,
            commands_config=config.commands,
            chat_filter_config=config.chat_filter,
        )

    def register_bot(self, connection: Any) -> list[BaseEventHandler]:
        """Build and subscribe every handler for ``connection``.

        Returns:
            The handler instances bound to this connection.

        Raises:
            HandlerRegistrationError: If any handler fails to build or
                register. No degraded partial set is kept.
        """
        for registered, handlers in self._registrations:
            if registered is connection:
                logger.warning("Connection already registered, skipping duplicate handler registration")
                return handlers

        router = CommandRouter(
            connection,
            self.commands_config,
            CommandContext(connection=connection, event_store=self.store, chat_filter=self.chat_filter),
        )
        if self.commands_config.enabled:
            router.load_commands()

        registry = HandlerRegistry(self._handler_types, command_router=router, chat_filter=self.chat_filter)
        deps = HandlerDependencies(
            connection=connection,
            is_event_disabled=self.store.is_event_disabled,
            add_event=self.store.add_event,
            get_game_tick=lambda: self._game_tick(connection),
            get_timestamp=self._clock,
        )

        handlers = registry.build(deps)
        registry.register_all(handlers)

        self.command_router = router
        self.registry = registry
        self._registrations.append((connection, handlers))
        logger.info(
            f"Event handlers attached ({len(handlers)} handlers, "
            f"{len(router.commands)} commands, admins: {', '.join(self.commands_config.admin_players) or 'none'})"
        )
        return handlers

    def is_registered(self, connection: Any) -> bool:
        return any(registered is connection for registered, _ in self._registrations)

    @staticmethod
    def _game_tick(connection: Any) -> int:
        try:
            return int(read_field(connection, "age", 0))
        except (TypeError, ValueError):
            return 0
