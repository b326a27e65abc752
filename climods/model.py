"""
Central data record definitions used across the project.

These are plain dataclasses filled from the NUSMods API responses
(see climods/api.py), so that:
- the rest of the package never touches raw JSON dicts
- field names stay the same across the API, model and UI layers
- a change in the remote schema only needs a fix in one place (api.py)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional


class Semester(IntEnum):
    """
    Semesters as numbered by NUSMods.

    3 and 4 are the two special terms run during the vacation.
    """

    SEMESTER_1 = 1
    SEMESTER_2 = 2
    SPECIAL_TERM_1 = 3
    SPECIAL_TERM_2 = 4

    @property
    def label(self) -> str:
        return {
            Semester.SEMESTER_1: "Semester 1",
            Semester.SEMESTER_2: "Semester 2",
            Semester.SPECIAL_TERM_1: "Special Term I",
            Semester.SPECIAL_TERM_2: "Special Term II",
        }[self]


class LessonType(Enum):
    """
    Lesson types known to NUSMods.

    The value is the exact string used by the API ("lessonType" field),
    `short` is what users type in the `view` command.
    """

    LECTURE = "Lecture"
    TUTORIAL = "Tutorial"
    TUTORIAL_TYPE_2 = "Tutorial Type 2"
    TUTORIAL_TYPE_3 = "Tutorial Type 3"
    LABORATORY = "Laboratory"
    RECITATION = "Recitation"
    SECTIONAL_TEACHING = "Sectional Teaching"
    SEMINAR = "Seminar-Style Module Class"
    DESIGN_LECTURE = "Design Lecture"
    PACKAGED_LECTURE = "Packaged Lecture"
    PACKAGED_TUTORIAL = "Packaged Tutorial"
    WORKSHOP = "Workshop"
    MINI_PROJECT = "Mini-Project"

    @property
    def short(self) -> str:
        return _LESSON_TYPE_SHORT[self]

    @classmethod
    def from_text(cls, text: str) -> "LessonType":
        """
        Resolve a user-typed lesson type ("lec", "TUT", "Laboratory", ...).

        Raises ValueError if nothing matches.
        """
        key = text.strip().lower()
        for lesson_type in cls:
            if key == lesson_type.short or key == lesson_type.value.lower():
                return lesson_type
        raise ValueError(f"Unknown lesson type: {text!r}")


_LESSON_TYPE_SHORT = {
    LessonType.LECTURE: "lec",
    LessonType.TUTORIAL: "tut",
    LessonType.TUTORIAL_TYPE_2: "tut2",
    LessonType.TUTORIAL_TYPE_3: "tut3",
    LessonType.LABORATORY: "lab",
    LessonType.RECITATION: "rec",
    LessonType.SECTIONAL_TEACHING: "sec",
    LessonType.SEMINAR: "sem",
    LessonType.DESIGN_LECTURE: "dlec",
    LessonType.PACKAGED_LECTURE: "plec",
    LessonType.PACKAGED_TUTORIAL: "ptut",
    LessonType.WORKSHOP: "ws",
    LessonType.MINI_PROJECT: "proj",
}


@dataclass(frozen=True)
class ModuleInfo:
    """
    Listing data of one module, as returned by moduleInfo.json.

    module_credit is kept as a string: some modules have fractional
    credits (e.g. "2.5") and we never calculate with it.
    """

    module_code: str
    title: str
    module_credit: str
    department: str
    faculty: str
    description: str
    semesters: List[Semester] = field(default_factory=list)


@dataclass(frozen=True)
class Lesson:
    """
    One scheduled slot of a module.

    Each Lesson corresponds to exactly one row of a semester "timetable".
    class_no is the lesson group id: all rows with the same class_no and
    lesson_type are taken together.
    """

    class_no: str
    lesson_type: str
    day: str
    start_time: str
    end_time: str
    venue: str
    weeks: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class SemesterData:
    semester: Semester
    timetable: List[Lesson] = field(default_factory=list)


@dataclass(frozen=True)
class ModuleDetail:
    """
    Detailed data of one module, as returned by modules/<code>.json.
    """

    module_code: str
    prerequisite: Optional[str]
    preclusion: Optional[str]
    semester_data: List[SemesterData] = field(default_factory=list)
