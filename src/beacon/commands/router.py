"""Admin command discovery, gating and dispatch for chat-borne commands."""

import importlib
import inspect
import logging
from types import ModuleType
from typing import Any, Iterable, Mapping, Optional

from ..config import CommandsConfig
from .base import CommandContext, CommandResult, is_command

logger = logging.getLogger(__name__)

FEEDBACK_TAG = "[debug]"


def discover_commands(module: ModuleType) -> list[Any]:
    """Collect the command-shaped values a module exports.

    Honours ``__all__`` when present, otherwise every public name.
    """
    names = getattr(module, "__all__", None)
    if names is None:
        names = [name for name in vars(module) if not name.startswith("_")]

    found = []
    for name in names:
        value = getattr(module, name, None)
        if is_command(value) and value not in found:
            found.append(value)
    return found


class CommandRouter:
    """
    Intercepts admin command lines in chat and runs the matching command.

    A message is a command only when commands are enabled, the sender is an
    admin and the text starts with the prefix. Everything else is left for
    the next chat stage.
    """

    def __init__(
        self,
        connection: Any,
        config: Optional[CommandsConfig] = None,
        context: Optional[CommandContext] = None,
    ):
        self.connection = connection
        self.config = config or CommandsConfig()
        self.context = context or CommandContext(connection=connection)
        self.commands: dict[str, Any] = {}

    # ==================== Registration ====================

    def load_commands(self, modules: Optional[Iterable[str]] = None) -> int:
        """Load commands from the first candidate module that provides any.

        Modules that fail to import are skipped with a warning. Later
        candidates are not imported once one yields commands.

        Returns:
            Number of registered commands.
        """
        candidates = list(modules) if modules is not None else list(self.config.modules)

        for module_path in candidates:
            try:
                module = importlib.import_module(module_path)
            except Exception as e:
                logger.warning(f"Skipping command module {module_path}: {e}")
                continue

            found = discover_commands(module)
            if not found:
                logger.debug(f"No commands in {module_path}")
                continue

            for command in found:
                self.register_command(command)
            logger.info(f"Loaded {len(found)} commands from {module_path}")
            break
        else:
            if candidates:
                logger.warning(f"No commands found in: {', '.join(candidates)}")

        return len(self.commands)

    def register_command(self, command: Any) -> None:
        """Register a command by lower-cased name; last registration wins."""
        if not is_command(command):
            raise TypeError(f"Not a command: {command!r}")

        key = command.name.lower()
        if key in self.commands and self.commands[key] is not command:
            logger.warning(f"Command '{key}' registered twice, replacing previous")
        self.commands[key] = command

        set_config = getattr(command, "set_config", None)
        if callable(set_config):
            set_config(self.config)

        # Commands that enumerate their peers (help) see the full table
        for registered in self.commands.values():
            set_available = getattr(registered, "set_available_commands", None)
            if callable(set_available):
                set_available(self.commands)

        logger.debug(f"Registered command: {key}")

    # ==================== Dispatch ====================

    def is_admin(self, username: str) -> bool:
        return username in self.config.admin_players

    async def handle_chat_message(self, username: str, message: str) -> bool:
        """Run ``message`` as a command if it qualifies.

        Returns:
            True if the message was consumed as a command (including unknown
            or failing commands), False if chat processing should continue.
        """
        if not self.config.enabled:
            return False
        if not self.is_admin(username):
            return False
        if not message.startswith(self.config.prefix):
            return False

        parts = message[len(self.config.prefix):].split()
        command_name = parts[0].lower() if parts else ""
        await self.execute_command(username, command_name, parts[1:])
        return True

    async def execute_command(self, username: str, command_name: str, args: list[str]) -> CommandResult:
        """Execute a command, reporting the outcome in chat and in the log."""
        command = self.commands.get(command_name)
        if command is None:
            logger.info(f"Unknown command from {username}: {command_name!r}")
            self._reply(f"{FEEDBACK_TAG} Unknown command: {command_name}. Try {self.config.prefix}help")
            return CommandResult(success=False, message=f"Unknown command: {command_name}")

        try:
            outcome = command.execute(self.context, username, args)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as e:
            logger.error(
                f"Command '{command_name}' from {username} failed (args={args}): {e}",
                exc_info=True,
            )
            self._reply(f"{FEEDBACK_TAG} Command failed: {command_name}")
            return CommandResult(success=False, message="Command failed")

        result = self._to_result(outcome)
        status = "ok" if result.success else "failed"
        logger.info(
            f"Admin {username} ran {command_name} {' '.join(args)}".rstrip()
            + f" -> {status}: {result.message or ''}"
        )

        if self.config.show_results_in_chat and result.message:
            self._reply(f"{FEEDBACK_TAG} {result.message}")
        return result

    @staticmethod
    def _to_result(outcome: Any) -> CommandResult:
        if isinstance(outcome, CommandResult):
            return outcome
        if isinstance(outcome, Mapping):
            return CommandResult(
                success=bool(outcome.get("success", False)),
                message=outcome.get("message"),
                data=outcome.get("data"),
            )
        return CommandResult(success=True, data=outcome)

    def _reply(self, text: str) -> None:
        try:
            self.connection.chat(text)
        except Exception as e:
            logger.error(f"Failed to send command feedback: {e}")

    def get_command_names(self) -> list[str]:
        return sorted(self.commands)
