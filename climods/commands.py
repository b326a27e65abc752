"""
Commands typed by the user.

Every command class has:
- COMMAND_WORD / MESSAGE_USAGE
- parse(arguments): build the command from the text after the command word
  (raises ParseError with the usage text if the arguments are wrong)
- execute(model, storage): do the work, return a CommandResult
  (raises CommandError if it cannot be done; the model is then unchanged)

Commands are single-use: built by the parser, executed once, thrown away.
Changes to the user's module list are saved right away (write-through).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from climods.errors import CommandError, DetailedModuleRetrievalError, ParseError
from climods.model import LessonType
from climods.module import UserModule, normalize_code
from climods.session import Model
from climods.storage import Storage

logger = logging.getLogger(__name__)

MODULE_CODE_RE = re.compile(r"^[A-Za-z]{2,4}\d{4}[A-Za-z]{0,4}$")


@dataclass
class CommandResult:
    """
    What a command tells the user, plus which command produced it
    (the UI uses command_word to decide what to show next).
    """

    feedback: str
    command_word: str
    lesson_types: List[LessonType] = field(default_factory=list)

    @property
    def should_exit(self) -> bool:
        return self.command_word == ExitCommand.COMMAND_WORD


def _parse_module_code(text: str, usage: str) -> str:
    code = text.strip()
    if not code:
        raise ParseError("Missing module code.", usage)
    if not MODULE_CODE_RE.match(code):
        raise ParseError(f"Invalid module code: {code}", usage)
    return normalize_code(code)


def _save_user_modules(model: Model, storage: Storage) -> None:
    try:
        storage.save_user_module_list(model.user_modules)
    except OSError as e:
        logger.error("Could not save user modules: %s", e)
        raise CommandError(f"Could not save your modules: {e}") from e


class Command:
    COMMAND_WORD = ""
    MESSAGE_USAGE = ""

    @classmethod
    def parse(cls, arguments: str) -> "Command":
        if arguments.strip():
            raise ParseError(f"'{cls.COMMAND_WORD}' does not take arguments.", cls.MESSAGE_USAGE)
        return cls()

    def execute(self, model: Model, storage: Storage) -> CommandResult:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and vars(other) == vars(self)

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({args})"


class AddCommand(Command):
    COMMAND_WORD = "add"
    MESSAGE_USAGE = COMMAND_WORD + " <Module Code> : Adds the module to your modules. Example: add CS2103"

    MESSAGE_SUCCESS = "Added Module: %s"
    MESSAGE_DUPLICATE = "Module already exists in your modules: %s"

    def __init__(self, target_code: str) -> None:
        self.target_code = normalize_code(target_code)

    @classmethod
    def parse(cls, arguments: str) -> "AddCommand":
        return cls(_parse_module_code(arguments, cls.MESSAGE_USAGE))

    def execute(self, model: Model, storage: Storage) -> CommandResult:
        to_add = UserModule(model.get_module(self.target_code))
        if not model.add_user_module(to_add):
            return CommandResult(self.MESSAGE_DUPLICATE % self.target_code, self.COMMAND_WORD)

        try:
            _save_user_modules(model, storage)
        except CommandError:
            model.delete_user_module(to_add)
            raise

        return CommandResult(self.MESSAGE_SUCCESS % self.target_code, self.COMMAND_WORD)


class DeleteCommand(Command):
    COMMAND_WORD = "rm"
    MESSAGE_USAGE = COMMAND_WORD + " <Module Code> : Deletes the module from your modules. Example: rm CS2103"

    MESSAGE_DELETE_MODULE_SUCCESS = "Deleted Module: %s"
    MESSAGE_DELETE_MODULE_FAILED = "Module does not exist in your modules: %s"

    def __init__(self, target_code: str) -> None:
        self.target_code = normalize_code(target_code)

    @classmethod
    def parse(cls, arguments: str) -> "DeleteCommand":
        return cls(_parse_module_code(arguments, cls.MESSAGE_USAGE))

    def execute(self, model: Model, storage: Storage) -> CommandResult:
        to_delete = UserModule(model.get_module(self.target_code))
        if not model.filtered_list_has_user_module(to_delete):
            # not an error: just tell the user
            return CommandResult(self.MESSAGE_DELETE_MODULE_FAILED % self.target_code, self.COMMAND_WORD)

        position = model.user_modules.index(to_delete)
        model.delete_user_module(to_delete)
        try:
            _save_user_modules(model, storage)
        except CommandError:
            model.restore_user_module(position, to_delete)
            raise

        return CommandResult(self.MESSAGE_DELETE_MODULE_SUCCESS % self.target_code, self.COMMAND_WORD)


class ViewCommand(Command):
    COMMAND_WORD = "view"
    MESSAGE_USAGE = (
        COMMAND_WORD + ": View details for a module.\n"
        "Parameters: MODULE-CODE [LESSON-TYPE...]\n"
        "Example: " + COMMAND_WORD + " CS2103 lec tut"
    )

    MESSAGE_MODULE_NOT_FOUND = "'%s' not in current NUS curriculum"
    MESSAGE_API_ERROR = "Error retrieving module details"
    MESSAGE_SUCCESS = "Viewing details for module %s"

    def __init__(self, module_code: str, lesson_types: Optional[List[LessonType]] = None) -> None:
        self.module_code = normalize_code(module_code)
        self.lesson_types = list(lesson_types or [])

    @classmethod
    def parse(cls, arguments: str) -> "ViewCommand":
        words = arguments.split()
        if not words:
            raise ParseError("Missing module code.", cls.MESSAGE_USAGE)

        code = _parse_module_code(words[0], cls.MESSAGE_USAGE)
        lesson_types: List[LessonType] = []
        for word in words[1:]:
            try:
                lesson_type = LessonType.from_text(word)
            except ValueError:
                raise ParseError(f"Unknown lesson type: {word}", cls.MESSAGE_USAGE) from None
            if lesson_type not in lesson_types:
                lesson_types.append(lesson_type)
        return cls(code, lesson_types)

    def execute(self, model: Model, storage: Storage) -> CommandResult:
        if not model.has_list_module(self.module_code):
            raise CommandError(self.MESSAGE_MODULE_NOT_FOUND % self.module_code)
        try:
            model.set_active_module(self.module_code)
        except DetailedModuleRetrievalError:
            raise CommandError(self.MESSAGE_API_ERROR) from None

        return CommandResult(self.MESSAGE_SUCCESS % self.module_code, self.COMMAND_WORD, self.lesson_types)


class ListCommand(Command):
    COMMAND_WORD = "ls"
    MESSAGE_USAGE = (
        COMMAND_WORD + ": List modules, optionally of one department and/or only your modules.\n"
        "Parameters: [DEPARTMENT] [--user]\n"
        "Example: " + COMMAND_WORD + " Computer Science --user"
    )

    MESSAGE_SUCCESS = "Listing %d modules"
    USER_FLAG = "--user"

    def __init__(self, faculty_code: Optional[str] = None, has_user: Optional[bool] = None) -> None:
        self.faculty_code = faculty_code
        self.has_user = has_user

    @classmethod
    def parse(cls, arguments: str) -> "ListCommand":
        words = arguments.split()
        has_user = None
        if cls.USER_FLAG in words:
            has_user = True
            words = [w for w in words if w != cls.USER_FLAG]

        for w in words:
            if w.startswith("--"):
                raise ParseError(f"Unknown option: {w}", cls.MESSAGE_USAGE)

        # department names contain spaces ("Computer Science")
        faculty_code = " ".join(words) or None
        return cls(faculty_code, has_user)

    def execute(self, model: Model, storage: Storage) -> CommandResult:
        model.update_filtered_module_list(self.faculty_code, self.has_user)
        count = len(model.get_filtered_module_list())
        return CommandResult(self.MESSAGE_SUCCESS % count, self.COMMAND_WORD)


class FindCommand(Command):
    COMMAND_WORD = "find"
    MESSAGE_USAGE = (
        COMMAND_WORD + ": Find modules whose code or title matches a (case-sensitive) regular expression.\n"
        "Parameters: KEYWORD\n"
        "Example: " + COMMAND_WORD + " ^CS2"
    )

    MESSAGE_SUCCESS = "%d modules found"

    def __init__(self, pattern: "re.Pattern[str]") -> None:
        self.pattern = pattern

    @classmethod
    def parse(cls, arguments: str) -> "FindCommand":
        keyword = arguments.strip()
        if not keyword:
            raise ParseError("Missing keyword.", cls.MESSAGE_USAGE)
        try:
            return cls(re.compile(keyword))
        except re.error as e:
            raise ParseError(f"Invalid keyword pattern: {e}", cls.MESSAGE_USAGE) from None

    def execute(self, model: Model, storage: Storage) -> CommandResult:
        model.set_filtered_module_list(lambda module: module.matches_keyword(self.pattern))
        count = len(model.get_filtered_module_list())
        return CommandResult(self.MESSAGE_SUCCESS % count, self.COMMAND_WORD)


class HelpCommand(Command):
    COMMAND_WORD = "help"
    MESSAGE_USAGE = COMMAND_WORD + ": Shows all commands."

    def execute(self, model: Model, storage: Storage) -> CommandResult:
        return CommandResult("\n\n".join(c.MESSAGE_USAGE for c in COMMANDS), self.COMMAND_WORD)


class ExitCommand(Command):
    COMMAND_WORD = "exit"
    MESSAGE_USAGE = COMMAND_WORD + ": Exits the program."

    MESSAGE_EXIT = "Exiting CLIMods..."

    def execute(self, model: Model, storage: Storage) -> CommandResult:
        return CommandResult(self.MESSAGE_EXIT, self.COMMAND_WORD)


COMMANDS: Tuple[type, ...] = (
    AddCommand,
    DeleteCommand,
    ViewCommand,
    ListCommand,
    FindCommand,
    HelpCommand,
    ExitCommand,
)
