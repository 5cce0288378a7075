"""
app/config.py

API process settings.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppSettings:
    title: str = "Marketplace Crawler API"
    log_level: str = "INFO"
    check_database_on_startup: bool = True


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """
    Return cached API settings from APP_TITLE, LOG_LEVEL and
    APP_CHECK_DATABASE_ON_STARTUP.
    """

    load_env_files()
    defaults = AppSettings()

    log_level = (os.getenv("LOG_LEVEL") or defaults.log_level).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = defaults.log_level

    check_raw = os.getenv("APP_CHECK_DATABASE_ON_STARTUP")
    return AppSettings(
        title=(os.getenv("APP_TITLE") or "").strip() or defaults.title,
        log_level=log_level,
        check_database_on_startup=(
            defaults.check_database_on_startup
            if check_raw is None
            else check_raw.strip().lower() in _TRUE_VALUES
        ),
    )
