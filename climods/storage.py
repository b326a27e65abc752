"""
Persistent storage for the user's state.

Files (all inside the configured data directory):

    user_modules.json        the user's module list
    preferences.json         opaque user preferences
    catalogue_<year>.json    last successfully fetched module listing

Design rationale:
- the catalogue comes from NUSMods and can always be fetched again
- user_modules.json stores only the user's personal choices

Reading never crashes the app: a missing file means "nothing saved yet",
a broken file raises DataFormatError and the caller decides what to do
(usually: log it and start empty). Writing errors (OSError) are passed on,
because the user must learn that their change was not saved.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, Iterable, List

from climods.errors import DataFormatError
from climods.module import UserModule, normalize_code

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DataFormatError(f"{path} is not valid JSON: {e}") from e


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def load_user_module_codes(path: str | Path) -> List[str]:
    """
    Load the user's module codes, in saved order.

    Returns [] if the file does not exist. Raises DataFormatError if the
    file is not of the form {"user_modules": [{"module_code": ...}, ...]}.
    """
    selected_path = Path(path)

    # First run: nothing saved yet
    if not selected_path.exists():
        return []

    data = _read_json(selected_path)
    entries = data.get("user_modules") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise DataFormatError(f"{selected_path}: 'user_modules' must be a list")

    codes: List[str] = []
    for entry in entries:
        code = entry.get("module_code") if isinstance(entry, dict) else None
        if not isinstance(code, str) or not code.strip():
            raise DataFormatError(f"{selected_path}: invalid entry {entry!r}")
        code = normalize_code(code)
        if code not in codes:
            codes.append(code)
    return codes


def save_user_modules(user_modules: Iterable[UserModule], path: str | Path) -> None:
    """
    Save the user's modules. The title is stored only to make the file
    readable for humans; it is ignored when loading.
    """
    payload = {
        "user_modules": [{"module_code": um.code, "title": um.title} for um in user_modules],
    }
    _write_json(Path(path), payload)


class Storage:
    """
    Bundles the file locations of one data directory.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    @property
    def user_modules_path(self) -> Path:
        return self.data_dir / "user_modules.json"

    @property
    def prefs_path(self) -> Path:
        return self.data_dir / "preferences.json"

    def catalogue_cache_path(self, academic_year: str) -> Path:
        return self.data_dir / f"catalogue_{academic_year}.json"

    @property
    def user_modules_backup_path(self) -> Path:
        return self.data_dir / "user_modules.json.bak"

    # -----------------------------------------------------------------------
    # User modules
    # -----------------------------------------------------------------------

    def read_user_module_codes(self) -> List[str]:
        return load_user_module_codes(self.user_modules_path)

    def save_user_module_list(self, user_modules: Iterable[UserModule]) -> None:
        user_modules = list(user_modules)
        save_user_modules(user_modules, self.user_modules_path)
        logger.info("Saved %d user modules to %s", len(user_modules), self.user_modules_path)

    def backup_user_modules(self) -> Path:
        """
        Copy user_modules.json to user_modules.json.bak, replacing an older
        backup. Used before a saved list that cannot be restored gets
        overwritten by the next save.
        """
        backup = self.user_modules_backup_path
        shutil.copyfile(self.user_modules_path, backup)
        return backup

    # -----------------------------------------------------------------------
    # Preferences
    # -----------------------------------------------------------------------

    def read_user_prefs(self) -> Dict[str, Any]:
        if not self.prefs_path.exists():
            return {}
        data = _read_json(self.prefs_path)
        if not isinstance(data, dict):
            raise DataFormatError(f"{self.prefs_path}: preferences must be a JSON object")
        return data

    def save_user_prefs(self, prefs: Dict[str, Any]) -> None:
        _write_json(self.prefs_path, prefs)

    # -----------------------------------------------------------------------
    # Catalogue cache
    # -----------------------------------------------------------------------

    def read_catalogue_cache(self, academic_year: str) -> List[Dict[str, Any]]:
        """
        Return the cached raw listing rows, or [] if there is no cache.
        """
        path = self.catalogue_cache_path(academic_year)
        if not path.exists():
            return []
        data = _read_json(path)
        if not isinstance(data, list):
            raise DataFormatError(f"{path}: catalogue cache must be a JSON list")
        return data

    def save_catalogue_cache(self, academic_year: str, rows: List[Dict[str, Any]]) -> None:
        _write_json(self.catalogue_cache_path(academic_year), rows)
