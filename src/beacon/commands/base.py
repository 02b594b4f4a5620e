"""Admin command contract, result type and shared base class."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..chat.filter import ChatFilter
    from ..config import CommandsConfig
    from ..core.event_store import EventStore


@dataclass
class CommandResult:
    """Structured outcome of one command execution."""

    success: bool
    message: Optional[str] = None
    data: Any = None


@dataclass
class CommandContext:
    """Collaborators a command may act on."""

    connection: Any
    event_store: Optional["EventStore"] = None
    chat_filter: Optional["ChatFilter"] = None


@runtime_checkable
class DebugCommand(Protocol):
    """Shape every admin command must expose."""

    name: str
    description: str

    async def execute(self, ctx: CommandContext, username: str, args: list[str]) -> CommandResult: ...

    def get_help(self) -> str: ...


def is_command(value: Any) -> bool:
    """Structural check for the DebugCommand shape.

    Classes are rejected even if their attributes match; only instances
    can be dispatched.
    """
    if isinstance(value, type):
        return False
    return (
        isinstance(getattr(value, "name", None), str)
        and isinstance(getattr(value, "description", None), str)
        and callable(getattr(value, "execute", None))
        and callable(getattr(value, "get_help", None))
    )


class BaseCommand(ABC):
    """Convenience base for commands: logging, help text, arg parsing."""

    name: str = ""
    description: str = ""
    usage: Optional[str] = None

    def __init__(self):
        self.config: Optional["CommandsConfig"] = None
        self.logger = logging.getLogger(f"{__name__}.{self.name or type(self).__name__}")

    def set_config(self, config: "CommandsConfig") -> None:
        self.config = config

    @property
    def prefix(self) -> str:
        return self.config.prefix if self.config else "!"

    @abstractmethod
    async def execute(self, ctx: CommandContext, username: str, args: list[str]) -> CommandResult:
        """Run the command for ``username`` with whitespace-split ``args``."""

    def get_help(self) -> str:
        help_text = f"{self.prefix}{self.name}: {self.description}"
        if self.usage:
            help_text += f" | usage: {self.usage}"
        return help_text

    @staticmethod
    def parse_args(args: list[str]) -> dict[str, Any]:
        """Split ``--flag value`` / ``--flag`` options from positionals.

        Positionals are keyed ``arg0``, ``arg1``... by their index in ``args``.
        """
        result: dict[str, Any] = {}
        i = 0
        while i < len(args):
            arg = args[i]
            if arg.startswith("--"):
                param = arg[2:]
                next_arg = args[i + 1] if i + 1 < len(args) else None
                if next_arg is not None and not next_arg.startswith("--"):
                    result[param] = next_arg
                    i += 1
                else:
                    result[param] = True
            else:
                result[f"arg{i}"] = arg
            i += 1
        return result

    @staticmethod
    def success(message: Optional[str] = None, data: Any = None) -> CommandResult:
        return CommandResult(success=True, message=message, data=data)

    @staticmethod
    def error(message: str) -> CommandResult:
        return CommandResult(success=False, message=message)
