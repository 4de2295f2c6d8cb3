from dataclasses import dataclass
from enum import Enum


class CommandType(str, Enum):
    EXIT = "EXIT"
    LOAD = "LOAD"
    TABLE = "TABLE"
    HISTORY = "HISTORY"
    RERUN = "RERUN"
    CLEAR = "CLEAR"
    SUGGEST = "SUGGEST"
    HELP = "HELP"
    QUERY = "QUERY"


@dataclass(frozen=True)
class Command:
    type: CommandType
    argument: str = ""


_EXIT_KEYWORDS = {"/exit", "exit", "quit", "/quit", "bye"}

_SLASH_COMMANDS = {
    "/load": CommandType.LOAD,
    "/table": CommandType.TABLE,
    "/history": CommandType.HISTORY,
    "/rerun": CommandType.RERUN,
    "/clear": CommandType.CLEAR,
    "/suggest": CommandType.SUGGEST,
    "/help": CommandType.HELP,
}


def parse_command(user_input: str) -> Command | None:
    text = (user_input or "").strip()
    if not text:
        return None

    if text.lower() in _EXIT_KEYWORDS:
        return Command(CommandType.EXIT)

    if text.startswith("/"):
        head, _, rest = text.partition(" ")
        command_type = _SLASH_COMMANDS.get(head.lower())
        if command_type is not None:
            return Command(command_type, rest.strip())

    return Command(CommandType.QUERY, text)
