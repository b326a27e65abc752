"""
Session state (the Model).

Holds everything the commands read and write during one run:
- the user's preferences (opaque dict, round-tripped by the app)
- the full catalogue + the currently filtered view of it
- the user's module list + the currently filtered view of it
- the code of the module currently viewed in detail

Filtered views are plain lists, recomputed right away whenever a filter
changes or the underlying data changes. The UI only reads them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from climods.errors import DetailedModuleRetrievalError, NotFoundError, RetrievalError
from climods.module import Module, UserModule, normalize_code

logger = logging.getLogger(__name__)

ModulePredicate = Callable[[Module], bool]
UserModulePredicate = Callable[[UserModule], bool]


def _show_all(_: Any) -> bool:
    return True


class UniqueUserModuleList:
    """
    Insertion-ordered list of UserModules without duplicates.
    """

    def __init__(self, user_modules: Iterable[UserModule] = ()) -> None:
        self._items: List[UserModule] = []
        for um in user_modules:
            self.add(um)

    def __contains__(self, user_module: object) -> bool:
        return user_module in self._items

    def __iter__(self) -> Iterator[UserModule]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def codes(self) -> List[str]:
        return [um.code for um in self._items]

    def add(self, user_module: UserModule) -> bool:
        """
        Append user_module. Returns False (and changes nothing) if it is already present.
        """
        if user_module in self._items:
            return False
        self._items.append(user_module)
        return True

    def remove(self, user_module: UserModule) -> bool:
        """
        Remove user_module. Returns False if it was not in the list.
        """
        if user_module not in self._items:
            return False
        self._items.remove(user_module)
        return True

    def insert(self, index: int, user_module: UserModule) -> None:
        if user_module not in self._items:
            self._items.insert(index, user_module)

    def index(self, user_module: UserModule) -> int:
        return self._items.index(user_module)


class Model:
    """
    In-memory state of one climods session.
    """

    def __init__(
        self,
        modules: Iterable[Module],
        user_modules: Iterable[UserModule] = (),
        user_prefs: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._user_prefs: Dict[str, Any] = dict(user_prefs or {})

        self._modules: Dict[str, Module] = {}
        for m in modules:
            self._modules[m.code] = m

        self._module_predicate: ModulePredicate = _show_all
        self._user_module_predicate: UserModulePredicate = _show_all
        self._filtered_modules: List[Module] = []
        self._filtered_user_modules: List[UserModule] = []
        self._active_module_code: Optional[str] = None

        self._user_modules = UniqueUserModuleList()
        for um in user_modules:
            self.add_user_module(um)

        self._refresh_views()

    # -----------------------------------------------------------------------
    # Preferences
    # -----------------------------------------------------------------------

    def get_user_prefs(self) -> Dict[str, Any]:
        return dict(self._user_prefs)

    def set_user_prefs(self, user_prefs: Dict[str, Any]) -> None:
        self._user_prefs = dict(user_prefs)

    # -----------------------------------------------------------------------
    # Catalogue
    # -----------------------------------------------------------------------

    @property
    def modules(self) -> List[Module]:
        return list(self._modules.values())

    def has_list_module(self, module_code: str) -> bool:
        return normalize_code(module_code) in self._modules

    def get_module(self, module_code: str) -> Module:
        """
        Look up a module of the catalogue by code.

        Raises NotFoundError if the code is not in the catalogue.
        """
        code = normalize_code(module_code)
        try:
            return self._modules[code]
        except KeyError:
            raise NotFoundError(f"'{code}' not in current NUS curriculum") from None

    def get_filtered_module_list(self) -> List[Module]:
        return list(self._filtered_modules)

    def set_filtered_module_list(self, predicate: ModulePredicate) -> None:
        self._module_predicate = predicate
        self._refresh_filtered_modules()

    def update_filtered_module_list(self, faculty_code: Optional[str] = None, has_user: Optional[bool] = None) -> None:
        """
        Filter the catalogue by department and/or by membership in the user's list.

        A filter that is None is not applied. has_user=False keeps only the
        modules that are NOT in the user's list.
        """
        department = faculty_code.strip().lower() if faculty_code is not None else None

        def predicate(module: Module) -> bool:
            if department is not None and module.department.strip().lower() != department:
                return False
            if has_user is not None and (UserModule(module) in self._user_modules) != has_user:
                return False
            return True

        self.set_filtered_module_list(predicate)

    def _refresh_filtered_modules(self) -> None:
        self._filtered_modules = [m for m in self._modules.values() if self._module_predicate(m)]

    # -----------------------------------------------------------------------
    # User module list
    # -----------------------------------------------------------------------

    @property
    def user_modules(self) -> UniqueUserModuleList:
        return self._user_modules

    def has_user_module(self, user_module: UserModule) -> bool:
        return user_module in self._user_modules

    def filtered_list_has_user_module(self, user_module: UserModule) -> bool:
        return user_module in self._filtered_user_modules

    def add_user_module(self, user_module: UserModule) -> bool:
        """
        Add a module to the user's list.

        Returns False if it was already there. Raises NotFoundError if the
        module is not part of the catalogue.
        """
        if user_module.code not in self._modules:
            raise NotFoundError(f"'{user_module.code}' not in current NUS curriculum")
        added = self._user_modules.add(user_module)
        if added:
            self._refresh_views()
        return added

    def delete_user_module(self, user_module: UserModule) -> None:
        """
        Remove a module from the user's list. Does nothing if it is not there.
        """
        if self._user_modules.remove(user_module):
            self._refresh_views()

    def restore_user_module(self, index: int, user_module: UserModule) -> None:
        """
        Put a removed module back at its old position (used to undo a failed save).
        """
        self._user_modules.insert(index, user_module)
        self._refresh_views()

    def get_filtered_user_module_list(self) -> List[UserModule]:
        return list(self._filtered_user_modules)

    def update_filtered_user_module_list(self, predicate: UserModulePredicate) -> None:
        self._user_module_predicate = predicate
        self._refresh_filtered_user_modules()

    def _refresh_filtered_user_modules(self) -> None:
        self._filtered_user_modules = [um for um in self._user_modules if self._user_module_predicate(um)]

    def _refresh_views(self) -> None:
        # the catalogue filter may depend on the user's list (has_user)
        self._refresh_filtered_user_modules()
        self._refresh_filtered_modules()

    # -----------------------------------------------------------------------
    # Active (focused) module
    # -----------------------------------------------------------------------

    def get_active_module(self) -> Optional[Module]:
        if self._active_module_code is None:
            return None
        return self._modules.get(self._active_module_code)

    def set_active_module(self, module_code: str) -> None:
        """
        Focus a module (loads its details) and remember it as the active one.

        The previously active module keeps its focus flag; clear it first if
        only one module should be focused.
        """
        try:
            module = self.get_module(module_code)
            module.focus()
        except (NotFoundError, RetrievalError) as e:
            logger.warning("Could not focus %s: %s", module_code, e)
            raise DetailedModuleRetrievalError(str(e)) from e

        self._active_module_code = module.code
