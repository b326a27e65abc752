"""
NUSMods API client (HTTP JSON -> records in climods/model.py).

Endpoints used (NUSMods v2):

    {base}/{acad_year}/moduleInfo.json          listing of all modules
    {base}/{acad_year}/modules/{code}.json      details of one module

Only the fields the app displays are mapped. Everything that can go wrong
on the way (network, HTTP status, broken JSON, unexpected shape) is
reported as RetrievalError, so callers never see requests exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from climods.errors import RetrievalError
from climods.model import Lesson, ModuleDetail, ModuleInfo, Semester, SemesterData

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.nusmods.com/v2"
DEFAULT_TIMEOUT = 30.0


# ---------------------------------------------------------------------------
# Raw JSON -> records
# ---------------------------------------------------------------------------


def _text(raw: Dict[str, Any], key: str) -> str:
    value = raw.get(key)
    return "" if value is None else str(value).strip()


def _optional_text(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _semester(value: Any) -> Semester:
    try:
        return Semester(int(value))
    except (TypeError, ValueError) as e:
        raise RetrievalError(f"Unexpected semester value: {value!r}") from e


def parse_module_info(raw: Dict[str, Any]) -> ModuleInfo:
    """
    Map one entry of moduleInfo.json onto a ModuleInfo.
    """
    if not isinstance(raw, dict):
        raise RetrievalError(f"Unexpected module listing entry: {raw!r}")

    code = _text(raw, "moduleCode").upper()
    if not code:
        raise RetrievalError("Module listing entry without moduleCode")

    semesters: List[Semester] = []
    for sem in raw.get("semesterData") or []:
        if isinstance(sem, dict) and sem.get("semester") is not None:
            semesters.append(_semester(sem["semester"]))

    return ModuleInfo(
        module_code=code,
        title=_text(raw, "title"),
        module_credit=_text(raw, "moduleCredit"),
        department=_text(raw, "department"),
        faculty=_text(raw, "faculty"),
        description=_text(raw, "description"),
        semesters=semesters,
    )


def parse_lesson(raw: Dict[str, Any]) -> Lesson:
    if not isinstance(raw, dict):
        raise RetrievalError(f"Unexpected timetable row: {raw!r}")

    weeks = raw.get("weeks")
    return Lesson(
        class_no=_text(raw, "classNo"),
        lesson_type=_text(raw, "lessonType"),
        day=_text(raw, "day"),
        start_time=_text(raw, "startTime"),
        end_time=_text(raw, "endTime"),
        venue=_text(raw, "venue"),
        # weeks may also be a date range object for some modules; we only keep plain week numbers
        weeks=[w for w in weeks if isinstance(w, int)] if isinstance(weeks, list) else [],
    )


def parse_module_detail(raw: Dict[str, Any]) -> ModuleDetail:
    """
    Map modules/<code>.json onto a ModuleDetail.
    """
    if not isinstance(raw, dict):
        raise RetrievalError("Unexpected module detail payload")

    semester_data: List[SemesterData] = []
    for sem in raw.get("semesterData") or []:
        if not isinstance(sem, dict):
            continue
        timetable = [parse_lesson(row) for row in sem.get("timetable") or []]
        semester_data.append(SemesterData(semester=_semester(sem.get("semester")), timetable=timetable))

    return ModuleDetail(
        module_code=_text(raw, "moduleCode").upper(),
        prerequisite=_optional_text(raw, "prerequisite"),
        preclusion=_optional_text(raw, "preclusion"),
        semester_data=semester_data,
    )


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


class NusModsClient:
    """
    Blocking client for the NUSMods REST API.

    One requests.Session is reused for all calls (keep-alive).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, path: str) -> Any:
        url = f"{self.base_url}/{path}"
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise RetrievalError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            # resp.json() raises a ValueError subclass on invalid JSON
            raise RetrievalError(f"Invalid JSON from {url}") from e

    def fetch_listing_raw(self, academic_year: str) -> List[Dict[str, Any]]:
        """
        Return the raw moduleInfo.json rows (used for the offline cache).
        """
        data = self._get_json(f"{academic_year}/moduleInfo.json")
        if not isinstance(data, list):
            raise RetrievalError("Module listing is not a JSON list")
        return data

    def fetch_listing(self, academic_year: str) -> List[ModuleInfo]:
        rows = self.fetch_listing_raw(academic_year)
        logger.info("Fetched %d modules for %s", len(rows), academic_year)
        return [parse_module_info(row) for row in rows]

    def fetch_detail(self, academic_year: str, module_code: str) -> ModuleDetail:
        code = module_code.strip().upper()
        logger.info("Fetching details of %s (%s)", code, academic_year)
        return parse_module_detail(self._get_json(f"{academic_year}/modules/{code}.json"))
