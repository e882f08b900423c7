"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Default database ──────────────────────────────────────
DB_ENGINE: str = os.getenv("DB_ENGINE", "postgresql")
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "dbkit")
DB_USER: str = os.getenv("DB_USER", "dbkit")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"{DB_ENGINE}://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# ── Named sources ─────────────────────────────────────────
# DB_SOURCE_REPORTING=mysql://... becomes DATABASE_SOURCES["reporting"]
_SOURCE_PREFIX = "DB_SOURCE_"
DATABASE_SOURCES: dict[str, str] = {
    key[len(_SOURCE_PREFIX):].lower(): value.strip()
    for key, value in os.environ.items()
    if key.startswith(_SOURCE_PREFIX) and value.strip()
}
DATABASE_SOURCES.setdefault("default", DATABASE_URL)

# ── Driver options ────────────────────────────────────────
DB_CONNECT_TIMEOUT: int = int(os.getenv("DB_CONNECT_TIMEOUT", "10"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
