"""
Catalogue entries (Module) and the user's selection records (UserModule).

A Module is created from listing data only. The heavier detail data
(prerequisite, preclusion, timetable) is fetched the first time it is
needed, via enrich(), and kept for the rest of the session.

Lesson data is stored as:

    semester -> lesson type -> lesson group id (classNo) -> [Lesson, ...]
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Set, Union

from climods.errors import PreconditionError
from climods.model import Lesson, LessonType, ModuleDetail, ModuleInfo, Semester

logger = logging.getLogger(__name__)

LessonGroups = Dict[str, List[Lesson]]
LessonMap = Dict[str, LessonGroups]


def normalize_code(code: str) -> str:
    """
    Normalize a module code: strip + uppercase.
    """
    return str(code).strip().upper()


def _lesson_type_key(lesson_type: Union[LessonType, str]) -> str:
    if isinstance(lesson_type, LessonType):
        return lesson_type.value
    return str(lesson_type)


class Module:
    """
    One module of the catalogue.

    `client` is anything with a fetch_detail(academic_year, module_code)
    method returning a ModuleDetail (normally climods.api.NusModsClient).
    """

    def __init__(self, info: ModuleInfo, academic_year: str, client: Any = None) -> None:
        self.info = info
        self.academic_year = academic_year
        self.client = client
        self.is_focused = False

        # Only set by enrich(); both are set together or not at all
        self._detail: Optional[ModuleDetail] = None
        self._lesson_map: Optional[Dict[Semester, LessonMap]] = None

    def __repr__(self) -> str:
        return f"Module({self.code!r}, enriched={self.is_enriched})"

    # -----------------------------------------------------------------------
    # Listing data
    # -----------------------------------------------------------------------

    @property
    def code(self) -> str:
        return normalize_code(self.info.module_code)

    @property
    def title(self) -> str:
        return self.info.title

    @property
    def module_credit(self) -> str:
        return self.info.module_credit

    @property
    def department(self) -> str:
        return self.info.department

    @property
    def faculty(self) -> str:
        return self.info.faculty

    @property
    def description(self) -> str:
        return self.info.description

    @property
    def semesters(self) -> List[Semester]:
        return list(self.info.semesters)

    def available_in_semester(self, semester: Semester) -> bool:
        return semester in self.info.semesters

    def matches_keyword(self, pattern: "re.Pattern[str]") -> bool:
        """
        Search the compiled pattern in the module code and title.

        The description is not searched.
        """
        return any(pattern.search(text) for text in (self.code, self.title))

    # -----------------------------------------------------------------------
    # Detail data (lazy)
    # -----------------------------------------------------------------------

    @property
    def is_enriched(self) -> bool:
        return self._detail is not None

    def enrich(self) -> None:
        """
        Fetch detail data from the API, once.

        Raises RetrievalError if the fetch fails. Nothing is stored in that
        case, so calling enrich() again retries from scratch.
        """
        if self.is_enriched:
            return
        if self.client is None:
            raise PreconditionError(f"{self.code} has no catalogue client to fetch details with")

        detail = self.client.fetch_detail(self.academic_year, self.code)
        lesson_map = self._build_lesson_map(detail)

        self._detail = detail
        self._lesson_map = lesson_map
        logger.debug("Loaded details of %s for %d semesters", self.code, len(lesson_map))

    @staticmethod
    def _build_lesson_map(detail: ModuleDetail) -> Dict[Semester, LessonMap]:
        lesson_map: Dict[Semester, LessonMap] = {}
        for semester_data in detail.semester_data:
            by_type: LessonMap = {}
            for lesson in semester_data.timetable:
                groups = by_type.setdefault(lesson.lesson_type, {})
                groups.setdefault(lesson.class_no, []).append(lesson)
            lesson_map[semester_data.semester] = by_type
        return lesson_map

    def _require_detail(self) -> ModuleDetail:
        if self._detail is None:
            raise PreconditionError(f"Details of {self.code} have not been loaded")
        return self._detail

    def _semester_lessons(self, semester: Semester) -> LessonMap:
        self._require_detail()
        assert self._lesson_map is not None
        if semester not in self._lesson_map:
            raise PreconditionError(f"{self.code} has no timetable for {getattr(semester, 'label', semester)}")
        return self._lesson_map[semester]

    @property
    def prerequisite(self) -> Optional[str]:
        return self._require_detail().prerequisite

    @property
    def preclusion(self) -> Optional[str]:
        return self._require_detail().preclusion

    @property
    def timetable_semesters(self) -> List[Semester]:
        """Semesters for which timetable data was returned."""
        self._require_detail()
        assert self._lesson_map is not None
        return list(self._lesson_map)

    def get_lessons(self, semester: Semester) -> LessonMap:
        return self._semester_lessons(semester)

    def get_lesson_types(self, semester: Semester) -> Set[str]:
        return set(self._semester_lessons(semester))

    def has_lesson_type(self, lesson_type: Union[LessonType, str], semester: Optional[Semester] = None) -> bool:
        key = _lesson_type_key(lesson_type)
        if semester is not None:
            return key in self._semester_lessons(semester)
        self._require_detail()
        assert self._lesson_map is not None
        return any(key in by_type for by_type in self._lesson_map.values())

    def get_selectable_lesson_types(self, semester: Semester) -> Set[str]:
        """
        Lesson types with more than one lesson group: the user has to pick one.
        """
        lessons = self._semester_lessons(semester)
        return {lesson_type for lesson_type, groups in lessons.items() if len(groups) > 1}

    def get_unselectable_lesson_types(self, semester: Semester) -> Set[str]:
        return self.get_lesson_types(semester) - self.get_selectable_lesson_types(semester)

    def is_selectable(self, lesson_type: Union[LessonType, str], semester: Semester) -> bool:
        groups = self._semester_lessons(semester).get(_lesson_type_key(lesson_type), {})
        return len(groups) > 1

    def has_lesson_id(self, lesson_id: str, semester: Semester, lesson_type: Union[LessonType, str]) -> bool:
        groups = self._semester_lessons(semester).get(_lesson_type_key(lesson_type), {})
        return lesson_id in groups

    def get_unselectable_lesson_id(self, lesson_type: Union[LessonType, str], semester: Semester) -> str:
        """
        Return the only lesson group id of a fixed (unselectable) lesson type.
        """
        groups = self._semester_lessons(semester).get(_lesson_type_key(lesson_type), {})
        if len(groups) != 1:
            raise PreconditionError(f"{lesson_type} of {self.code} is not a fixed lesson type")
        return next(iter(groups))

    # -----------------------------------------------------------------------
    # Focus
    # -----------------------------------------------------------------------

    def focus(self) -> None:
        """
        Load details (may raise RetrievalError) and mark the module focused.

        Other modules are not unfocused here, callers do that.
        """
        self.enrich()
        self.is_focused = True

    def clear_focus(self) -> None:
        self.is_focused = False


class UserModule:
    """
    A module in the user's own list.

    Two UserModules are equal iff their module codes are equal. The
    referenced Module is only used for display, so catalogue updates
    show up automatically.
    """

    def __init__(self, module: Module) -> None:
        self.module = module

    @property
    def code(self) -> str:
        return self.module.code

    @property
    def title(self) -> str:
        return self.module.title

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserModule):
            return NotImplemented
        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)

    def __repr__(self) -> str:
        return f"UserModule({self.code!r})"
