"""
Runtime configuration.

Values are taken, in this order, from:
1. command line flags (see climods/cli.py)
2. environment variables (CLIMODS_DATA_DIR, CLIMODS_ACADEMIC_YEAR, CLIMODS_API_URL)
3. the defaults below
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Mapping, Optional

from climods.api import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

PACKAGE_DIR = Path(__file__).resolve().parent


def _default_data_dir() -> Path:
    """
    Default location of user data, inside the package (like the processed data).
    """
    return PACKAGE_DIR / "data"


def current_academic_year(today: Optional[date] = None) -> str:
    """
    NUS academic years start in August: 2026-10-18 -> "2026-2027", 2027-03-01 -> "2026-2027".
    """
    today = today or date.today()
    start = today.year if today.month >= 8 else today.year - 1
    return f"{start}-{start + 1}"


@dataclass
class Config:
    data_dir: Path
    academic_year: str
    api_base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


def load_config(
    data_dir: str | Path | None = None,
    academic_year: Optional[str] = None,
    api_base_url: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    env = os.environ if environ is None else environ

    if data_dir is None:
        data_dir = env.get("CLIMODS_DATA_DIR") or _default_data_dir()

    return Config(
        data_dir=Path(data_dir),
        academic_year=academic_year or env.get("CLIMODS_ACADEMIC_YEAR") or current_academic_year(),
        api_base_url=api_base_url or env.get("CLIMODS_API_URL") or DEFAULT_BASE_URL,
    )
