# app/core/config.py

import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

# =====================================================
# APPLICATION
# =====================================================
APP_ENV = os.getenv("APP_ENV")
if APP_ENV not in {"development", "staging", "production"}:
    raise ValueError("APP_ENV must be development | staging | production")

IS_PRODUCTION = APP_ENV == "production"

APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

# =====================================================
# DATABASE
# =====================================================
DB_TYPE = os.getenv("DB_TYPE")
if DB_TYPE not in {"postgres", "sqlite"}:
    raise ValueError("DB_TYPE must be postgres | sqlite")

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres")

elif DB_TYPE == "sqlite":
    if IS_PRODUCTION:
        raise ValueError("SQLite is NOT allowed in production")
    SQLITE_PATH = os.getenv("SQLITE_PATH", "./coal_terminal.db")
    DATABASE_URL = f"sqlite+aiosqlite:///{SQLITE_PATH}"

# ---- Pool tuning (safe defaults) ----
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 20))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 30))
DB_ECHO_POOL = os.getenv("DB_ECHO_POOL", "false").lower() == "true"

# ---- SQLite writer lock wait ----
SQLITE_BUSY_TIMEOUT_SECONDS = float(os.getenv("SQLITE_BUSY_TIMEOUT_SECONDS", 30))
if SQLITE_BUSY_TIMEOUT_SECONDS <= 0:
    raise ValueError("SQLITE_BUSY_TIMEOUT_SECONDS must be positive")

# ---- SSL ----
DB_SSL_VERIFY = os.getenv("DB_SSL_VERIFY", "true").lower() == "true"
if IS_PRODUCTION and not DB_SSL_VERIFY:
    logger.warning("Running in production with relaxed SSL verification")

# =====================================================
# STOCK LEDGER
# =====================================================
# Attempts per apply_delta call, the first one included.
STOCK_UPDATE_MAX_ATTEMPTS = int(os.getenv("STOCK_UPDATE_MAX_ATTEMPTS", 3))
if STOCK_UPDATE_MAX_ATTEMPTS < 1:
    raise ValueError("STOCK_UPDATE_MAX_ATTEMPTS must be >= 1")

STOCK_UPDATE_RETRY_BACKOFF_SECONDS = float(
    os.getenv("STOCK_UPDATE_RETRY_BACKOFF_SECONDS", 0)
)
if STOCK_UPDATE_RETRY_BACKOFF_SECONDS < 0:
    raise ValueError("STOCK_UPDATE_RETRY_BACKOFF_SECONDS cannot be negative")

# =====================================================
# LOGGING
# =====================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if APP_ENV == "development" else "INFO").upper()
STOCK_LOG_LEVEL = os.getenv("STOCK_LOG_LEVEL", LOG_LEVEL).upper()

for _name, _level in (("LOG_LEVEL", LOG_LEVEL), ("STOCK_LOG_LEVEL", STOCK_LOG_LEVEL)):
    if _level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ValueError(f"{_name} must be DEBUG | INFO | WARNING | ERROR | CRITICAL")
