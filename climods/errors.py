"""
Exception types shared across the package.

Rule of thumb:
- ParseError / CommandError are user-facing and printed by the REPL
- RetrievalError / DataFormatError come from the boundary adapters
  (NUSMods client, JSON storage) and are translated by their callers
- PreconditionError means a bug in the caller and is never caught
"""

from __future__ import annotations


class ClimodsError(Exception):
    """Base class for all expected errors raised by climods."""


class ParseError(ClimodsError):
    """
    A command line could not be understood.

    Carries the usage text of the command that failed to parse (if known),
    so the REPL can show the user how to type it correctly.
    """

    def __init__(self, message: str, usage: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.usage = usage


class CommandError(ClimodsError):
    """A valid command could not be carried out in the current state."""


class NotFoundError(CommandError):
    """A module code does not exist in the catalogue."""


class DetailedModuleRetrievalError(CommandError):
    """Focusing a module failed (unknown code or detail fetch failure)."""


class RetrievalError(ClimodsError):
    """The NUSMods API could not be reached or returned unusable data."""


class DataFormatError(ClimodsError):
    """A persisted JSON file exists but does not have the expected shape."""


class PreconditionError(AssertionError):
    """Caller misuse, e.g. asking for lesson data before enrichment."""
