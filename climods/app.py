"""
Startup: load the catalogue and the user's saved state into a Model.

Both the interactive REPL and the one-shot `climods run` use this.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from climods.api import NusModsClient, parse_module_info
from climods.config import Config
from climods.errors import DataFormatError, RetrievalError
from climods.module import Module, UserModule
from climods.session import Model
from climods.storage import Storage

logger = logging.getLogger(__name__)


def refresh_catalogue_cache(client: NusModsClient, storage: Storage, academic_year: str) -> List[Dict[str, Any]]:
    """
    Fetch the module listing and store it as the offline cache.

    Raises RetrievalError if the fetch fails.
    """
    rows = client.fetch_listing_raw(academic_year)
    try:
        storage.save_catalogue_cache(academic_year, rows)
    except OSError as e:
        # the app still works without a cache
        logger.warning("Could not write catalogue cache: %s", e)
    return rows


def load_catalogue(client: NusModsClient, storage: Storage, academic_year: str) -> List[Module]:
    """
    Fetch the module listing, falling back to the cached listing when offline.

    Raises RetrievalError if neither is available.
    """
    try:
        rows = refresh_catalogue_cache(client, storage, academic_year)
    except RetrievalError as e:
        logger.warning("Could not fetch module listing (%s), using cached catalogue", e)
        try:
            rows = storage.read_catalogue_cache(academic_year)
        except DataFormatError as cache_error:
            logger.warning("Catalogue cache unusable: %s", cache_error)
            rows = []
        if not rows:
            raise RetrievalError(f"No module listing available for {academic_year}") from e

    modules: List[Module] = []
    for row in rows:
        try:
            info = parse_module_info(row)
        except RetrievalError as e:
            logger.warning("Skipping listing entry: %s", e)
            continue
        modules.append(Module(info, academic_year, client))
    return modules


def _load_user_prefs(storage: Storage) -> Dict[str, Any]:
    try:
        return storage.read_user_prefs()
    except (DataFormatError, OSError) as e:
        logger.warning("Ignoring preferences file: %s", e)
        return {}


def _load_user_modules(storage: Storage, modules: List[Module]) -> List[UserModule]:
    """
    Rebuild the user's list from the saved codes.

    A broken file, or one that names modules not in this year's catalogue,
    is ignored as a whole: the user starts with an empty list. The rejected
    file is copied to a backup first, since the next save overwrites it.
    """
    by_code = {m.code: m for m in modules}
    try:
        codes = storage.read_user_module_codes()
        missing = [c for c in codes if c not in by_code]
        if missing:
            raise DataFormatError(f"Unknown modules in saved list: {', '.join(missing)}")
    except (DataFormatError, OSError) as e:
        logger.warning("Starting with an empty module list: %s", e)
        _backup_rejected_user_modules(storage)
        return []
    return [UserModule(by_code[c]) for c in codes]


def _backup_rejected_user_modules(storage: Storage) -> None:
    if not storage.user_modules_path.exists():
        return
    try:
        backup = storage.backup_user_modules()
    except OSError as e:
        logger.error("Could not back up %s, it will be overwritten on the next save: %s",
                     storage.user_modules_path, e)
        return
    logger.warning("Saved module list kept as %s", backup)


def build_model(config: Config, client: NusModsClient, storage: Storage) -> Model:
    """
    Create the session Model. Raises RetrievalError if no catalogue is available.
    """
    modules = load_catalogue(client, storage, config.academic_year)
    user_modules = _load_user_modules(storage, modules)
    return Model(modules, user_modules, _load_user_prefs(storage))
