"""
Unit tests for the command interpreter (text -> Command).

Only syntax is checked here; no model is involved.
"""

import unittest

from climods.commands import (
    AddCommand,
    DeleteCommand,
    ExitCommand,
    FindCommand,
    HelpCommand,
    ListCommand,
    ViewCommand,
)
from climods.errors import ParseError
from climods.model import LessonType
from climods.parser import parse_command


class TestParseCommand(unittest.TestCase):
    def test_unknown_command_word(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_command("delete CS2103")
        self.assertIn("delete", ctx.exception.message)

    def test_empty_line(self) -> None:
        with self.assertRaises(ParseError):
            parse_command("   ")

    def test_rm(self) -> None:
        self.assertEqual(parse_command("rm cs2103"), DeleteCommand("CS2103"))
        self.assertEqual(parse_command("  rm \t CS2103T  "), DeleteCommand("CS2103T"))
        self.assertNotEqual(parse_command("rm CS2103"), DeleteCommand("CS2030"))

    def test_rm_requires_valid_code(self) -> None:
        for line in ("rm", "rm 2103", "rm CS-2103", "rm CS2103 CS2030"):
            with self.assertRaises(ParseError) as ctx:
                parse_command(line)
            self.assertEqual(ctx.exception.usage, DeleteCommand.MESSAGE_USAGE)

    def test_add(self) -> None:
        self.assertEqual(parse_command("add MA1521"), AddCommand("MA1521"))
        with self.assertRaises(ParseError):
            parse_command("add")

    def test_view_with_lesson_types(self) -> None:
        cmd = parse_command("view CS2103 lec TUT Laboratory lec")
        self.assertIsInstance(cmd, ViewCommand)
        self.assertEqual(cmd.module_code, "CS2103")
        self.assertEqual(cmd.lesson_types, [LessonType.LECTURE, LessonType.TUTORIAL, LessonType.LABORATORY])
        self.assertEqual(parse_command("view cs2103"), ViewCommand("CS2103"))

    def test_view_unknown_lesson_type(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse_command("view CS2103 lecture2")
        self.assertEqual(ctx.exception.usage, ViewCommand.MESSAGE_USAGE)

    def test_ls(self) -> None:
        self.assertEqual(parse_command("ls"), ListCommand())
        self.assertEqual(parse_command("ls --user"), ListCommand(None, True))
        self.assertEqual(parse_command("ls Computer Science --user"), ListCommand("Computer Science", True))
        with self.assertRaises(ParseError):
            parse_command("ls --all")

    def test_find(self) -> None:
        cmd = parse_command("find ^CS2")
        self.assertIsInstance(cmd, FindCommand)
        self.assertEqual(cmd.pattern.pattern, "^CS2")
        with self.assertRaises(ParseError):
            parse_command("find")
        with self.assertRaises(ParseError):
            parse_command("find CS(")

    def test_help_and_exit(self) -> None:
        self.assertEqual(parse_command("HELP"), HelpCommand())
        self.assertEqual(parse_command("exit"), ExitCommand())
        with self.assertRaises(ParseError):
            parse_command("exit now")


if __name__ == "__main__":
    unittest.main()
