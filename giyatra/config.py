"""
Central configuration for GI Yatra.

Values are read from environment variables. A ``.env`` file in the
working directory is loaded first; variables already set in the shell
take precedence.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


# ── Location catalog API ─────────────────────────────────────────────────────
API_BASE_URL: str = os.getenv("GIYATRA_API_BASE", "http://localhost:8000").rstrip("/")
API_TIMEOUT: float = float(os.getenv("GIYATRA_API_TIMEOUT", "10"))

# ── Scheduling ───────────────────────────────────────────────────────────────
# One speed profile for every leg (local roads including traffic).
AVERAGE_SPEED_KMH: float = float(os.getenv("GIYATRA_AVERAGE_SPEED_KMH", "40"))
MIN_TRAVEL_MINUTES: int = int(os.getenv("GIYATRA_MIN_TRAVEL_MINUTES", "15"))
DEFAULT_VISIT_MINUTES: int = int(os.getenv("GIYATRA_DEFAULT_VISIT_MINUTES", "120"))
MIN_SLACK_MINUTES: int = int(os.getenv("GIYATRA_MIN_SLACK_MINUTES", "60"))

DEFAULT_NUM_DAYS: int = 3
DEFAULT_START_TIME: str = "09:00"
DEFAULT_END_TIME: str = "18:00"

# ── Road travel times (OSRM) ─────────────────────────────────────────────────
USE_ROAD_TIMES: bool = _get_bool("GIYATRA_USE_ROAD_TIMES", "false")
OSRM_URL: str = os.getenv("GIYATRA_OSRM_URL", "https://router.project-osrm.org").rstrip("/")
OSRM_PROFILE: str = os.getenv("GIYATRA_OSRM_PROFILE", "driving")
OSRM_TIMEOUT: float = float(os.getenv("GIYATRA_OSRM_TIMEOUT", "5"))

# ── Storage / geocoding ──────────────────────────────────────────────────────
STORE_PATH: str = os.getenv("GIYATRA_STORE_PATH", "giyatra_trips.json")
GEOCODER_USER_AGENT: str = os.getenv("GIYATRA_GEOCODER_USER_AGENT", "giyatra_planner")
