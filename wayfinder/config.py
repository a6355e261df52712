from __future__ import annotations

import logging
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONFIGS_DIR = PROJECT_ROOT / "configs"

# Pre-parsed facility map (JSON). Override to serve another building.
MAP_PATH = Path(os.getenv("WAYFINDER_MAP_PATH", str(CONFIGS_DIR / "facility_map.json")))

# ---------------------------------------------------------------------------
# Entity resolution
# ---------------------------------------------------------------------------

# Max edit distance for fuzzy aliases; aliases of FUZZY_LONG_ALIAS chars or
# more get one extra edit, aliases under 4 chars are never fuzzy-matched.
FUZZY_DISTANCE = int(os.getenv("WAYFINDER_FUZZY_DISTANCE", "1"))
FUZZY_LONG_ALIAS = int(os.getenv("WAYFINDER_FUZZY_LONG_ALIAS", "8"))

# How many characters after a numbered alias are searched for its number.
NUMBER_WINDOW = int(os.getenv("WAYFINDER_NUMBER_WINDOW", "12"))

# ---------------------------------------------------------------------------
# Navigation / sessions
# ---------------------------------------------------------------------------

STEP_SCALE = float(os.getenv("WAYFINDER_STEP_SCALE", "25"))
SESSION_TTL = int(os.getenv("WAYFINDER_SESSION_TTL", "3600"))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

DEBUG = os.getenv("WAYFINDER_DEBUG") == "1"
LOG_LEVEL = os.getenv("WAYFINDER_LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=getattr(logging, level or LOG_LEVEL, logging.INFO), format=LOG_FORMAT)
