"""
Command line interpreter: one line of user input -> one Command.

Only syntax is checked here. Whether a module exists etc. is decided
when the command is executed.
"""

from __future__ import annotations

import re
from typing import Dict

from climods.commands import COMMANDS, Command, HelpCommand
from climods.errors import ParseError

# command word, then (optionally) whitespace and the rest of the line
BASIC_COMMAND_FORMAT = re.compile(r"^(?P<command_word>\S+)(?:\s+(?P<arguments>.*))?$", re.DOTALL)

COMMAND_BY_WORD: Dict[str, type] = {c.COMMAND_WORD: c for c in COMMANDS}


def parse_command(user_input: str) -> Command:
    """
    Parse one line of input.

    Raises ParseError for an empty line, an unknown command word or
    invalid arguments.
    """
    match = BASIC_COMMAND_FORMAT.match(user_input.strip())
    if not match:
        raise ParseError("Please enter a command.", HelpCommand.MESSAGE_USAGE)

    command_word = match.group("command_word")
    arguments = match.group("arguments") or ""

    command_cls = COMMAND_BY_WORD.get(command_word.lower())
    if command_cls is None:
        raise ParseError(f"Unknown command: {command_word}", HelpCommand.MESSAGE_USAGE)

    return command_cls.parse(arguments)
