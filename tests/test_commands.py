"""
Tests for command execution against a Model and a temporary Storage.

Scenarios:
- rm of a module not in the user's list is reported, not raised
- add + rm round trip, saved to disk after every change
- view of an unknown module raises CommandError and changes nothing
- a failed save is reported and the in-memory change is undone
"""

import tempfile
import unittest
from pathlib import Path

from climods.commands import AddCommand, CommandResult, DeleteCommand, HelpCommand, ViewCommand
from climods.errors import CommandError
from climods.model import LessonType
from climods.parser import parse_command
from climods.session import Model
from climods.storage import Storage, load_user_module_codes

from fakes import FakeClient, make_module, sample_catalogue


class FailingStorage(Storage):
    def save_user_module_list(self, user_modules) -> None:
        raise OSError("disk full")


class CommandTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.storage = Storage(Path(self._tmp.name))
        self.model = Model(sample_catalogue())

    def run_line(self, line: str) -> CommandResult:
        return parse_command(line).execute(self.model, self.storage)


class TestDeleteCommand(CommandTestCase):
    def test_rm_not_in_list_is_reported(self) -> None:
        result = self.run_line("rm CS2103")
        self.assertEqual(result.feedback, "Module does not exist in your modules: CS2103")
        self.assertEqual(result.command_word, "rm")
        self.assertEqual(len(self.model.user_modules), 0)

    def test_add_then_rm(self) -> None:
        self.assertEqual(self.run_line("add CS2103").feedback, "Added Module: CS2103")
        self.assertEqual(load_user_module_codes(self.storage.user_modules_path), ["CS2103"])

        result = self.run_line("rm CS2103")
        self.assertEqual(result.feedback, "Deleted Module: CS2103")
        self.assertEqual(len(self.model.user_modules), 0)
        self.assertEqual(load_user_module_codes(self.storage.user_modules_path), [])

        again = self.run_line("rm CS2103")
        self.assertEqual(again.feedback, "Module does not exist in your modules: CS2103")

    def test_rm_unknown_module_is_command_error(self) -> None:
        with self.assertRaises(CommandError):
            self.run_line("rm CS9999")

    def test_failed_save_restores_list(self) -> None:
        self.run_line("add CS2103")
        self.run_line("add MA1521")

        failing = FailingStorage(self.storage.data_dir)
        with self.assertRaises(CommandError) as ctx:
            DeleteCommand("CS2103").execute(self.model, failing)
        self.assertIn("disk full", str(ctx.exception))
        self.assertEqual(self.model.user_modules.codes(), ["CS2103", "MA1521"])

    def test_equality_is_structural(self) -> None:
        self.assertEqual(DeleteCommand("CS2103"), DeleteCommand("cs2103"))
        self.assertNotEqual(DeleteCommand("CS2103"), AddCommand("CS2103"))


class TestAddCommand(CommandTestCase):
    def test_add_duplicate_is_reported(self) -> None:
        self.run_line("add CS2103")
        result = self.run_line("add cs2103")
        self.assertEqual(result.feedback, "Module already exists in your modules: CS2103")
        self.assertEqual(self.model.user_modules.codes(), ["CS2103"])

    def test_add_unknown_module(self) -> None:
        with self.assertRaises(CommandError) as ctx:
            self.run_line("add CS9999")
        self.assertEqual(str(ctx.exception), "'CS9999' not in current NUS curriculum")

    def test_failed_save_undoes_add(self) -> None:
        failing = FailingStorage(self.storage.data_dir)
        with self.assertRaises(CommandError):
            AddCommand("CS2103").execute(self.model, failing)
        self.assertEqual(len(self.model.user_modules), 0)


class TestViewCommand(CommandTestCase):
    def test_view_unknown_module(self) -> None:
        self.run_line("view CS2103")
        with self.assertRaises(CommandError) as ctx:
            self.run_line("view CS9999")
        self.assertEqual(str(ctx.exception), "'CS9999' not in current NUS curriculum")
        self.assertEqual(self.model.get_active_module().code, "CS2103")

    def test_view_sets_active_module(self) -> None:
        result = self.run_line("view cs2103 tut")
        self.assertEqual(result.feedback, "Viewing details for module CS2103")
        self.assertEqual(result.lesson_types, [LessonType.TUTORIAL])
        active = self.model.get_active_module()
        assert active is not None
        self.assertTrue(active.is_focused)

    def test_view_api_error_is_generic(self) -> None:
        self.model = Model([make_module("CS2103", FakeClient(fail=True))])
        with self.assertRaises(CommandError) as ctx:
            ViewCommand("CS2103").execute(self.model, self.storage)
        self.assertEqual(str(ctx.exception), ViewCommand.MESSAGE_API_ERROR)
        self.assertIsNone(self.model.get_active_module())


class TestListingCommands(CommandTestCase):
    def test_ls_by_department(self) -> None:
        result = self.run_line("ls Mathematics")
        self.assertEqual(result.feedback, "Listing 1 modules")
        self.assertEqual([m.code for m in self.model.get_filtered_module_list()], ["MA1521"])

    def test_ls_user(self) -> None:
        self.run_line("add CS2030")
        self.assertEqual(self.run_line("ls --user").feedback, "Listing 1 modules")
        self.assertEqual(self.run_line("ls").feedback, "Listing 4 modules")

    def test_find(self) -> None:
        result = self.run_line("find ^CS")
        self.assertEqual(result.feedback, "2 modules found")
        self.assertEqual(self.run_line("find Calculus").feedback, "1 modules found")

    def test_help_lists_all_commands(self) -> None:
        result = HelpCommand().execute(self.model, self.storage)
        for word in ("add", "rm", "view", "ls", "find", "help", "exit"):
            self.assertIn(word, result.feedback)

    def test_exit(self) -> None:
        result = self.run_line("exit")
        self.assertTrue(result.should_exit)
        self.assertFalse(self.run_line("help").should_exit)


if __name__ == "__main__":
    unittest.main()
