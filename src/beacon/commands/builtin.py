"""Built-in admin commands.

Every command instance exported here is picked up by the command router.
"""

from ..events.base import read_field, round_coordinate
from .base import BaseCommand, CommandContext, CommandResult

MAX_RECENT_LINES = 10


class HelpCommand(BaseCommand):
    """Lists commands, or shows the help line of one command."""

    name = "help"
    description = "List available commands"
    usage = "help [command]"

    def __init__(self):
        super().__init__()
        self.available_commands: dict = {}

    def set_available_commands(self, commands: dict) -> None:
        self.available_commands = commands

    async def execute(self, ctx: CommandContext, username: str, args: list[str]) -> CommandResult:
        if args:
            command_name = args[0].lower()
            command = self.available_commands.get(command_name)
            if command is None:
                return self.error(f"Unknown command: {command_name}")
            ctx.connection.chat(command.get_help())
            return self.success(f"Shown help for {command_name}")

        names = sorted(self.available_commands)
        ctx.connection.chat(f"[debug] Commands: {', '.join(names)}")
        ctx.connection.chat(f"[debug] Use {self.prefix}help <command> for details")
        return self.success(f"Listed {len(names)} commands")


class ChatCommand(BaseCommand):
    """Makes the bot say something."""

    name = "chat"
    description = "Make the bot send a chat message"
    usage = "chat <message>"

    async def execute(self, ctx: CommandContext, username: str, args: list[str]) -> CommandResult:
        if not args:
            return self.error(f"Usage: {self.prefix}{self.usage}")

        message = " ".join(args)
        ctx.connection.chat(message)
        self.logger.info(f"Admin {username} made the bot say: {message}")
        return self.success(f"Sent: {message}")


class TestCommand(BaseCommand):
    name = "test"
    description = "Check that the command system responds"
    usage = "test [--echo <text>] [--info]"

    async def execute(self, ctx: CommandContext, username: str, args: list[str]) -> CommandResult:
        options = self.parse_args(args)

        if options.get("help"):
            ctx.connection.chat(f"[debug] {self.get_help()}")
            return self.success("Shown test help")

        if "echo" in options:
            message = " ".join(args[args.index("--echo") + 1:])
            ctx.connection.chat(f"[test] echo: {message}")
            return self.success(f"Echoed: {message}")

        if options.get("info"):
            conn = ctx.connection
            position = read_field(read_field(conn, "entity"), "position")
            ctx.connection.chat(
                f"[bot] health {int(read_field(conn, 'health', 0))}/20, "
                f"food {int(read_field(conn, 'food', 0))}/20"
            )
            if position is not None:
                x, y, z = (round_coordinate(read_field(position, axis, 0)) for axis in ("x", "y", "z"))
                ctx.connection.chat(f"[bot] position ({x}, {y}, {z})")
            return self.success("Shown bot info")

        ctx.connection.chat(f"[test] command system OK, caller {username}, {len(args)} args")
        return self.success("Test complete", data={"args": args})


class EventsCommand(BaseCommand):
    """Inspect or reset the event log from chat."""

    name = "events"
    description = "Show event log stats, recent events, or clear the log"
    usage = "events [recent [type] [count] | clear | types]"

    async def execute(self, ctx: CommandContext, username: str, args: list[str]) -> CommandResult:
        store = ctx.event_store
        if store is None:
            return self.error("Event log not available")

        action = args[0].lower() if args else "stats"

        if action == "stats":
            stats = store.get_event_stats()
            by_type = ", ".join(f"{name}={count}" for name, count in sorted(stats["byType"].items()))
            return self.success(
                f"{stats['total']} events, ticks {stats['oldestGameTick']}..{stats['newestGameTick']}"
                + (f" ({by_type})" if by_type else ""),
                data=stats,
            )

        if action == "recent":
            event_type = None
            count = 5
            for arg in args[1:]:
                if arg.isdigit():
                    count = min(int(arg), MAX_RECENT_LINES)
                else:
                    event_type = arg
            result = store.query_recent_events(event_type=event_type, limit=store.max_events, include_details=False)
            recent = result["events"][-count:] if count > 0 else []
            for event in recent:
                ctx.connection.chat(f"[events] tick {event['gameTick']}: {event['type']}")
            return self.success(f"Shown {len(recent)} of {result['total']} events", data=recent)

        if action == "clear":
            count = len(store)
            store.clear()
            self.logger.info(f"Admin {username} cleared {count} events")
            return self.success(f"Cleared {count} events")

        if action == "types":
            enabled = store.get_enabled_events()
            return self.success(f"Enabled: {', '.join(enabled) or '(none)'}", data=enabled)

        return self.error(f"Usage: {self.prefix}{self.usage}")


class FilterCommand(BaseCommand):
    """Adjust chat filter rules at runtime."""

    name = "filter"
    description = "Manage blocked players and message patterns"
    usage = "filter [stats | block <player> | unblock <player> | pattern <regex> | unpattern <regex>]"

    async def execute(self, ctx: CommandContext, username: str, args: list[str]) -> CommandResult:
        chat_filter = ctx.chat_filter
        if chat_filter is None:
            return self.error("Chat filter not available")

        action = args[0].lower() if args else "stats"
        target = args[1] if len(args) > 1 else None

        if action == "stats":
            stats = chat_filter.get_filter_stats()
            state = "on" if stats["enabled"] else "off"
            return self.success(
                f"Filter {state}: {stats['blockedPlayersCount']} players, "
                f"{stats['blockedMessagePatternsCount']} patterns",
                data=stats,
            )

        if target is None:
            return self.error(f"Usage: {self.prefix}{self.usage}")

        if action == "block":
            if chat_filter.add_blocked_player(target):
                return self.success(f"Blocked {target}")
            return self.error(f"{target} is already blocked")

        if action == "unblock":
            if chat_filter.remove_blocked_player(target):
                return self.success(f"Unblocked {target}")
            return self.error(f"{target} is not blocked")

        if action == "pattern":
            if chat_filter.add_blocked_message_pattern(target):
                return self.success(f"Added pattern {target}")
            return self.error(f"Pattern rejected: {target}")

        if action == "unpattern":
            if chat_filter.remove_blocked_message_pattern(target):
                return self.success(f"Removed pattern {target}")
            return self.error(f"Pattern not found: {target}")

        return self.error(f"Usage: {self.prefix}{self.usage}")


help_command = HelpCommand()
chat_command = ChatCommand()
test_command = TestCommand()
events_command = EventsCommand()
filter_command = FilterCommand()

__all__ = [
    "help_command",
    "chat_command",
    "test_command",
    "events_command",
    "filter_command",
]
