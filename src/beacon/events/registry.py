"""Which handler variants exist, and how each one is constructed."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Sequence

from .base import BaseEventHandler
from .handlers import (
    BreathEventHandler,
    ChatEventHandler,
    DeathEventHandler,
    EndEventHandler,
    EntityDeathEventHandler,
    EntityHurtEventHandler,
    ErrorEventHandler,
    ForcedMoveEventHandler,
    HealthEventHandler,
    ItemDropEventHandler,
    KickedEventHandler,
    PlayerCollectEventHandler,
    PlayerJoinEventHandler,
    PlayerLeftEventHandler,
    SpawnEventHandler,
    SpawnResetEventHandler,
    WeatherChangeEventHandler,
)
from .models import GameEvent, GameEventType

if TYPE_CHECKING:
    from ..chat.filter import ChatFilter
    from ..commands.router import CommandRouter

logger = logging.getLogger(__name__)


class HandlerRegistrationError(RuntimeError):
    """A handler could not be built or subscribed."""


DEFAULT_HANDLERS: tuple[type[BaseEventHandler], ...] = (
    ChatEventHandler,
    PlayerJoinEventHandler,
    PlayerLeftEventHandler,
    DeathEventHandler,
    SpawnEventHandler,
    WeatherChangeEventHandler,
    KickedEventHandler,
    SpawnResetEventHandler,
    HealthEventHandler,
    BreathEventHandler,
    EntityHurtEventHandler,
    EntityDeathEventHandler,
    PlayerCollectEventHandler,
    ItemDropEventHandler,
    ForcedMoveEventHandler,
    EndEventHandler,
    ErrorEventHandler,
)


@dataclass(frozen=True)
class HandlerDependencies:
    """The five collaborators every handler receives."""

    connection: Any
    is_event_disabled: Callable[[GameEventType], bool]
    add_event: Callable[[GameEvent], None]
    get_game_tick: Callable[[], int]
    get_timestamp: Callable[[], float]

    def as_args(self) -> tuple:
        return (
            self.connection,
            self.is_event_disabled,
            self.add_event,
            self.get_game_tick,
            self.get_timestamp,
        )


HandlerFactory = Callable[[type[BaseEventHandler], HandlerDependencies], BaseEventHandler]


class HandlerRegistry:
    """
    Builds and registers every handler variant for a connection.

    Construction goes through a per-type factory map: most variants get
    only the universal dependencies, chat also gets the command router and
    the chat filter.
    """

    def __init__(
        self,
        handler_types: Sequence[type[BaseEventHandler]] = DEFAULT_HANDLERS,
        command_router: Optional["CommandRouter"] = None,
        chat_filter: Optional["ChatFilter"] = None,
    ):
        self.handler_types = tuple(handler_types)
        self.command_router = command_router
        self.chat_filter = chat_filter
        self.factories: dict[GameEventType, HandlerFactory] = {
            GameEventType.CHAT: self._build_chat_handler,
        }

    @staticmethod
    def _build_default(handler_type: type[BaseEventHandler], deps: HandlerDependencies) -> BaseEventHandler:
        return handler_type(*deps.as_args())

    def _build_chat_handler(self, handler_type: type[BaseEventHandler], deps: HandlerDependencies) -> BaseEventHandler:
        return handler_type(
            *deps.as_args(),
            command_router=self.command_router,
            chat_filter=self.chat_filter,
        )

    def get_handler_types(self) -> list[type[BaseEventHandler]]:
        return list(self.handler_types)

    def event_types(self) -> list[GameEventType]:
        return [handler_type.event_type for handler_type in self.handler_types]

    def build(self, deps: HandlerDependencies) -> list[BaseEventHandler]:
        """Construct one instance of every variant, in list order."""
        handlers = []
        for handler_type in self.handler_types:
            factory = self.factories.get(handler_type.event_type, self._build_default)
            try:
                handlers.append(factory(handler_type, deps))
            except Exception as e:
                logger.error(f"Failed to build {handler_type.__name__}: {e}", exc_info=True)
                raise HandlerRegistrationError(f"Failed to build {handler_type.__name__}: {e}") from e
        return handlers

    def register_all(self, handlers: Sequence[BaseEventHandler]) -> None:
        """Call ``register()`` once on each handler, in order."""
        for handler in handlers:
            try:
                handler.register()
            except Exception as e:
                logger.error(f"Failed to register {type(handler).__name__}: {e}", exc_info=True)
                raise HandlerRegistrationError(f"Failed to register {type(handler).__name__}: {e}") from e
            logger.debug(f"Registered {type(handler).__name__} on '{handler.channel}'")

        logger.info(f"Registered {len(handlers)} event handlers")

    def describe(self) -> Mapping[str, str]:
        """Channel to handler class name, for diagnostics."""
        return {handler_type.channel: handler_type.__name__ for handler_type in self.handler_types}
