"""
Configuration access for the ESG Sunshine backend.
Values are read from the process environment (populated from .env by
load_dotenv() in main.py) at call time so a rotated or removed key is
picked up without a restart.
"""

import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_STATUS_TIMEZONE = "Asia/Taipei"


def get_gemini_api_key() -> Optional[str]:
    """
    Return the configured Gemini API key, or None when none is set.
    GEMINI_API_KEY takes precedence over the legacy API_KEY variable.
    Blank values are treated as missing.
    """
    for name in ("GEMINI_API_KEY", "API_KEY"):
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def get_gemini_model() -> str:
    return os.environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)


def get_status_timezone() -> str:
    return os.environ.get("STATUS_TIMEZONE", DEFAULT_STATUS_TIMEZONE)
