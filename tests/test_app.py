"""
Tests for startup (catalogue + saved state -> Model) and configuration.
"""

import tempfile
import unittest
from datetime import date
from pathlib import Path

from climods.app import build_model, load_catalogue
from climods.config import Config, current_academic_year, load_config
from climods.errors import RetrievalError
from climods.module import UserModule
from climods.storage import Storage

YEAR = "2026-2027"

ROWS = [
    {"moduleCode": "CS2103", "title": "Software Engineering", "moduleCredit": "4",
     "department": "Computer Science", "semesterData": [{"semester": 1}]},
    {"moduleCode": "MA1521", "title": "Calculus for Computing", "moduleCredit": "4",
     "department": "Mathematics", "semesterData": [{"semester": 2}]},
    {"title": "broken row without a code"},
]


class FakeListingClient:
    def __init__(self, rows=None) -> None:
        self.rows = rows

    def fetch_listing_raw(self, academic_year: str):
        if self.rows is None:
            raise RetrievalError("offline")
        return self.rows

    def fetch_detail(self, academic_year: str, module_code: str):
        raise RetrievalError("offline")


class TestStartup(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.data_dir = Path(self._tmp.name)
        self.storage = Storage(self.data_dir)
        self.config = Config(data_dir=self.data_dir, academic_year=YEAR)

    def test_listing_is_cached_and_bad_rows_skipped(self) -> None:
        modules = load_catalogue(FakeListingClient(ROWS), self.storage, YEAR)
        self.assertEqual([m.code for m in modules], ["CS2103", "MA1521"])
        self.assertEqual(self.storage.read_catalogue_cache(YEAR), ROWS)

    def test_offline_uses_cache(self) -> None:
        self.storage.save_catalogue_cache(YEAR, ROWS[:1])
        modules = load_catalogue(FakeListingClient(None), self.storage, YEAR)
        self.assertEqual([m.code for m in modules], ["CS2103"])

    def test_offline_without_cache_fails(self) -> None:
        with self.assertRaises(RetrievalError):
            load_catalogue(FakeListingClient(None), self.storage, YEAR)

    def test_build_model_restores_user_modules_and_prefs(self) -> None:
        self.storage.user_modules_path.write_text(
            '{"user_modules": [{"module_code": "MA1521"}, {"module_code": "CS2103"}]}', encoding="utf-8"
        )
        self.storage.save_user_prefs({"theme": "dark"})

        model = build_model(self.config, FakeListingClient(ROWS), self.storage)

        self.assertEqual(model.user_modules.codes(), ["MA1521", "CS2103"])
        self.assertEqual(model.get_user_prefs(), {"theme": "dark"})

    def test_corrupted_saved_state_starts_empty(self) -> None:
        self.storage.user_modules_path.write_text("{oops", encoding="utf-8")
        self.storage.prefs_path.write_text("{oops", encoding="utf-8")

        with self.assertLogs("climods.app", level="WARNING"):
            model = build_model(self.config, FakeListingClient(ROWS), self.storage)

        self.assertEqual(len(model.user_modules), 0)
        self.assertEqual(model.get_user_prefs(), {})

    def test_unknown_saved_module_starts_empty(self) -> None:
        self.storage.user_modules_path.write_text(
            '{"user_modules": [{"module_code": "CS2103"}, {"module_code": "XX9999"}]}', encoding="utf-8"
        )
        model = build_model(self.config, FakeListingClient(ROWS), self.storage)
        self.assertEqual(len(model.user_modules), 0)

    def test_rejected_saved_list_is_backed_up_before_next_save(self) -> None:
        original = '{"user_modules": [{"module_code": "CS2103"}, {"module_code": "XX9999"}]}'
        self.storage.user_modules_path.write_text(original, encoding="utf-8")

        with self.assertLogs("climods.app", level="WARNING") as logs:
            model = build_model(self.config, FakeListingClient(ROWS), self.storage)
        output = "\n".join(logs.output)
        self.assertIn("XX9999", output)
        self.assertIn(str(self.storage.user_modules_backup_path), output)

        # the next write-through replaces user_modules.json, the backup stays
        model.add_user_module(UserModule(model.get_module("MA1521")))
        self.storage.save_user_module_list(model.user_modules)
        self.assertEqual(self.storage.read_user_module_codes(), ["MA1521"])
        self.assertEqual(self.storage.user_modules_backup_path.read_text(encoding="utf-8"), original)

    def test_missing_saved_list_makes_no_backup(self) -> None:
        build_model(self.config, FakeListingClient(ROWS), self.storage)
        self.assertFalse(self.storage.user_modules_backup_path.exists())


class TestConfig(unittest.TestCase):
    def test_academic_year_starts_in_august(self) -> None:
        self.assertEqual(current_academic_year(date(2026, 10, 18)), "2026-2027")
        self.assertEqual(current_academic_year(date(2027, 3, 1)), "2026-2027")
        self.assertEqual(current_academic_year(date(2027, 8, 1)), "2027-2028")

    def test_env_and_arguments(self) -> None:
        env = {"CLIMODS_DATA_DIR": "/tmp/climods", "CLIMODS_ACADEMIC_YEAR": "2025-2026"}
        config = load_config(environ=env)
        self.assertEqual(config.data_dir, Path("/tmp/climods"))
        self.assertEqual(config.academic_year, "2025-2026")

        config = load_config(data_dir="/data", academic_year="2024-2025", api_base_url="http://x", environ=env)
        self.assertEqual(config.data_dir, Path("/data"))
        self.assertEqual(config.academic_year, "2024-2025")
        self.assertEqual(config.api_base_url, "http://x")


if __name__ == "__main__":
    unittest.main()
