"""
Settings for the survey document core.

Read from the environment (and a local .env file, if present):

    SURVEYDOC_LOG_LEVEL                 default "INFO"
    SURVEYDOC_LOG_JSON                  default "false"
    SURVEYDOC_LEVEL2_LEGACY_FALLBACK    default "true"

SURVEYDOC_LEVEL2_LEGACY_FALLBACK controls whether a condition recorded
before level 2 text existed shows its level 3 text in a level 2 survey.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_json: bool = False
    level2_legacy_fallback: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            log_level=os.getenv("SURVEYDOC_LOG_LEVEL", "INFO").upper(),
            log_json=_env_flag("SURVEYDOC_LOG_JSON", False),
            level2_legacy_fallback=_env_flag("SURVEYDOC_LEVEL2_LEGACY_FALLBACK", True),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
