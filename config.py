"""Runtime configuration for the clinic room queue.

Values are read from environment variables once, at import time.  There is
no ``.env`` loading here; set the variables in the process environment or
accept the defaults below.
"""

from __future__ import annotations

import os


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


CLINIC_NAME = os.getenv("CLINIC_NAME", "Clinic Queue")

# Redis is optional.  When REDIS_URL is unset, queue calls are not broadcast.
REDIS_URL = os.getenv("REDIS_URL")
CALL_CHANNEL = os.getenv("CALL_CHANNEL", "clinic:calls")
DASHBOARD_CACHE_KEY = os.getenv("DASHBOARD_CACHE_KEY", "clinic:dashboard")
DASHBOARD_CACHE_TTL = int(os.getenv("DASHBOARD_CACHE_TTL", "30"))

SEED_DEMO_DATA = _flag("SEED_DEMO_DATA")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
EVENT_LOG_LIMIT = int(os.getenv("EVENT_LOG_LIMIT", "500"))
PORT = int(os.getenv("PORT", "8000"))
