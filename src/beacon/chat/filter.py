"""Chat suppression by blocked sender, blocked pattern and command prefix."""

import logging
import re

from ..config import ChatFilterConfig

logger = logging.getLogger(__name__)


class ChatFilter:
    """Decides whether a chat message is noise that must not be stored.

    Rules, first match wins:
    1. The sender is on the blocked player list.
    2. The text matches a blocked regular expression.
    3. The text starts with the command prefix. Command lines the router
       consumed never reach the filter, so any prefixed line seen here is
       raw command syntax that should stay out of the event log.

    A disabled filter lets everything through.
    """

    def __init__(self, config: ChatFilterConfig | None = None, command_prefix: str = "!"):
        self.command_prefix = command_prefix
        self._blocked_players: set[str] = set()
        self._patterns: list[re.Pattern] = []
        self.config = ChatFilterConfig()
        self.update_config(config or ChatFilterConfig())

    def update_config(self, config: ChatFilterConfig) -> None:
        """Replace the rules and recompile patterns."""
        self.config = config.model_copy(deep=True)
        self._blocked_players = set(self.config.blocked_players)
        self._patterns = self._compile(self.config.blocked_message_patterns)

        if not self.config.enabled:
            logger.debug("Chat filter disabled")
            return
        logger.debug(
            f"Chat filter ready: {len(self._blocked_players)} blocked players, "
            f"{len(self._patterns)} patterns"
        )

    def get_config(self) -> ChatFilterConfig:
        return self.config.model_copy(deep=True)

    @staticmethod
    def _compile(patterns: list[str]) -> list[re.Pattern]:
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                logger.error(f"Invalid message pattern {pattern!r}: {e}")
        return compiled

    def should_filter_message(self, username: str, message: str) -> bool:
        """True if the message must be suppressed."""
        if not self.config.enabled:
            return False

        if username in self._blocked_players:
            logger.debug(f"Filtered message from blocked player: {username}")
            return True

        for pattern in self._patterns:
            if pattern.search(message):
                logger.debug(f"Filtered message matching {pattern.pattern!r}: {message}")
                return True

        if message.startswith(self.command_prefix):
            logger.debug(f"Filtered unhandled command line from {username}: {message}")
            return True

        return False

    def add_blocked_player(self, username: str) -> bool:
        """Block a sender. Returns False if already blocked."""
        if username in self._blocked_players:
            return False
        self.config.blocked_players.append(username)
        self._blocked_players.add(username)
        logger.info(f"Blocked chat from player: {username}")
        return True

    def remove_blocked_player(self, username: str) -> bool:
        """Unblock a sender. Returns False if they were not blocked."""
        if username not in self._blocked_players:
            return False
        self.config.blocked_players.remove(username)
        self._blocked_players.discard(username)
        logger.info(f"Unblocked chat from player: {username}")
        return True

    def add_blocked_message_pattern(self, pattern: str) -> bool:
        """Add a regex rule. Returns False if invalid or already present."""
        if pattern in self.config.blocked_message_patterns:
            return False
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            logger.error(f"Rejected message pattern {pattern!r}: {e}")
            return False

        self.config.blocked_message_patterns.append(pattern)
        self._patterns.append(compiled)
        logger.info(f"Added message pattern: {pattern}")
        return True

    def remove_blocked_message_pattern(self, pattern: str) -> bool:
        if pattern not in self.config.blocked_message_patterns:
            return False
        self.config.blocked_message_patterns.remove(pattern)
        self._patterns = self._compile(self.config.blocked_message_patterns)
        logger.info(f"Removed message pattern: {pattern}")
        return True

    def get_filter_stats(self) -> dict:
        return {
            "enabled": self.config.enabled,
            "blockedPlayersCount": len(self._blocked_players),
            "blockedMessagePatternsCount": len(self._patterns),
            "blockedPlayers": sorted(self._blocked_players),
            "blockedMessagePatterns": list(self.config.blocked_message_patterns),
        }
