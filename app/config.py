"""Application settings read from environment variables.

Values are read once at import time; `main.py` loads `.env` before this
module is imported.
"""

import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./bug_tracker.db")

# "sql" keeps the collection in the database, "memory" only for the process lifetime
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sql").lower().strip()
STORAGE_KEY = os.getenv("STORAGE_KEY", "bug-tracker-bugs")

# "uuid" or "legacy" (timestamp + short random suffix, may collide)
ID_STRATEGY = os.getenv("ID_STRATEGY", "uuid").lower().strip()

# Training defects are on by default
ALLOW_CRITICAL_SEVERITY = _env_flag("ALLOW_CRITICAL_SEVERITY")
STRICT_TAG_VALIDATION = _env_flag("STRICT_TAG_VALIDATION")

SEED_ON_STARTUP = _env_flag("SEED_ON_STARTUP", "true")

STORE_READ_DELAY_MS = int(os.getenv("STORE_READ_DELAY_MS", 0))
STORE_WRITE_DELAY_MS = int(os.getenv("STORE_WRITE_DELAY_MS", 0))

ENFORCE_ACCESS_POLICY = _env_flag("ENFORCE_ACCESS_POLICY")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
