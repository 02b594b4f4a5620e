"""Ordered interception stages a chat message passes before it is stored."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Optional

if TYPE_CHECKING:
    from ..commands.router import CommandRouter
    from .filter import ChatFilter

logger = logging.getLogger(__name__)


class StageOutcome(Enum):
    """Result of one interception stage."""

    CONTINUE = "continue"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class ChatMessage:
    """A chat line as seen by the interception stages."""

    username: str
    text: str


ChatStage = Callable[[ChatMessage], Awaitable[StageOutcome]]


class CommandStage:
    """Hands admin command lines to the command router."""

    name = "commands"

    def __init__(self, router: "CommandRouter"):
        self.router = router

    async def __call__(self, message: ChatMessage) -> StageOutcome:
        handled = await self.router.handle_chat_message(message.username, message.text)
        return StageOutcome.TERMINATE if handled else StageOutcome.CONTINUE


class FilterStage:
    """Drops messages the chat filter rejects."""

    name = "filter"

    def __init__(self, chat_filter: "ChatFilter"):
        self.chat_filter = chat_filter

    async def __call__(self, message: ChatMessage) -> StageOutcome:
        if self.chat_filter.should_filter_message(message.username, message.text):
            return StageOutcome.TERMINATE
        return StageOutcome.CONTINUE


class ChatPipeline:
    """Runs stages in order; the first TERMINATE stops the message."""

    def __init__(self, stages: Iterable[ChatStage] = ()):
        self.stages: list[ChatStage] = list(stages)

    @classmethod
    def default(
        cls,
        command_router: Optional["CommandRouter"] = None,
        chat_filter: Optional["ChatFilter"] = None,
    ) -> "ChatPipeline":
        """Command dispatch first, then content filtering."""
        stages: list[ChatStage] = []
        if command_router is not None:
            stages.append(CommandStage(command_router))
        if chat_filter is not None:
            stages.append(FilterStage(chat_filter))
        return cls(stages)

    def add_stage(self, stage: ChatStage) -> None:
        self.stages.append(stage)

    async def run(self, username: str, text: str) -> bool:
        """Pass a message through every stage.

        Returns:
            True if the message should become a stored chat event.
        """
        message = ChatMessage(username=username, text=text)
        for stage in self.stages:
            if await stage(message) is StageOutcome.TERMINATE:
                logger.debug(f"Chat from {username} stopped at stage '{getattr(stage, 'name', stage)}'")
                return False
        return True
