"""ChemSim Engine API — config

Every setting other modules import from `config` lives here,
with safe defaults so the service never crash-loops due to missing env vars.
"""

from __future__ import annotations

import os
import logging
from typing import List, Optional

# -----------------------------
# helpers
# -----------------------------
def _env(key: str, default: str = "") -> str:
    v = os.getenv(key)
    return default if v is None else str(v).strip()

def _env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None or str(v).strip() == "":
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "y", "on"}

def _env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or str(v).strip() == "":
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default

def _env_float(key: str, default: float) -> float:
    v = os.getenv(key)
    if v is None or str(v).strip() == "":
        return default
    try:
        return float(str(v).strip())
    except ValueError:
        return default

def _env_list(key: str, default: Optional[List[str]] = None, sep: str = ",") -> List[str]:
    if default is None:
        default = []
    v = os.getenv(key)
    if v is None or str(v).strip() == "":
        return list(default)
    return [s.strip() for s in str(v).split(sep) if s.strip()]


# -----------------------------
# logging (must exist for imports)
# -----------------------------
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger("chemsim-engine-api")


# -----------------------------
# core app env
# -----------------------------
ENV = _env("ENV", _env("APP_ENV", "production"))
DEBUG = _env_bool("DEBUG", False)

HOST = _env("HOST", "0.0.0.0")
PORT = _env_int("PORT", 10000)

APP_TITLE = _env("APP_TITLE", "ChemSim Engine API")
APP_VERSION = "1.0.0"

# Bodies here are tiny JSON commands; anything larger is refused.
MAX_REQUEST_BYTES = _env_int("MAX_REQUEST_BYTES", 64 * 1024)


# -----------------------------
# state-change simulator
# -----------------------------
STATE_CHANGE_DEFAULT_INTERVAL_MS = _env_int("STATE_CHANGE_DEFAULT_INTERVAL_MS", 50)
STATE_CHANGE_MIN_INTERVAL_MS = _env_int("STATE_CHANGE_MIN_INTERVAL_MS", 10)
STATE_CHANGE_MAX_INTERVAL_MS = _env_int("STATE_CHANGE_MAX_INTERVAL_MS", 200)

STATE_CHANGE_MIN_MASS_G = _env_float("STATE_CHANGE_MIN_MASS_G", 1.0)
STATE_CHANGE_MAX_MASS_G = _env_float("STATE_CHANGE_MAX_MASS_G", 1000.0)
STATE_CHANGE_MIN_RATE_W = _env_float("STATE_CHANGE_MIN_RATE_W", 50.0)
STATE_CHANGE_MAX_RATE_W = _env_float("STATE_CHANGE_MAX_RATE_W", 2000.0)

# Policy: stop heating/cooling once energy is pinned at a clamp bound.
STATE_CHANGE_AUTO_STOP_ON_SATURATION = _env_bool("STATE_CHANGE_AUTO_STOP_ON_SATURATION", False)

# One daemon ticker thread per session. Disable to drive sessions only via /tick.
STATE_CHANGE_BACKGROUND_CLOCK = _env_bool("STATE_CHANGE_BACKGROUND_CLOCK", True)

STATE_CHANGE_MAX_SESSIONS = _env_int("STATE_CHANGE_MAX_SESSIONS", 200)
# Sessions not read or driven for this long are dropped (0 disables).
STATE_CHANGE_SESSION_TTL_SECONDS = _env_int("STATE_CHANGE_SESSION_TTL_SECONDS", 1800)
STATE_CHANGE_MAX_TICKS_PER_REQUEST = _env_int("STATE_CHANGE_MAX_TICKS_PER_REQUEST", 10000)


# -----------------------------
# rate limiting (session creation only)
# -----------------------------
RATE_LIMIT_WINDOW_SECONDS = _env_int("RATE_LIMIT_WINDOW_SECONDS", 60)
RATE_LIMIT_SESSIONS_PER_WINDOW = _env_int("RATE_LIMIT_SESSIONS_PER_WINDOW", 30)


# -----------------------------
# lab calculators
# -----------------------------
BATTERY_MAX_DISCHARGE_SECONDS = _env_int("BATTERY_MAX_DISCHARGE_SECONDS", 86400)
GAS_SPEED_DISTRIBUTION_POINTS = _env_int("GAS_SPEED_DISTRIBUTION_POINTS", 100)


# -----------------------------
# CORS
# -----------------------------
# - In production, prefer known web origins unless explicitly overridden.
# - In dev/staging, allow "*" unless ALLOWED_ORIGINS is set.
_origins_env = os.getenv("ALLOWED_ORIGINS")
if _origins_env is None or str(_origins_env).strip() == "":
    if str(ENV).lower().strip() == "production":
        ALLOWED_ORIGINS = [
            "https://chemsim.app",
            "https://www.chemsim.app",
        ]
    else:
        ALLOWED_ORIGINS = ["*"]
else:
    ALLOWED_ORIGINS = _env_list("ALLOWED_ORIGINS", default=[])
