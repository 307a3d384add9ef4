import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# "development" or "production"
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"

# Frontend origin for CORS - required in production
DEV_FRONTEND_URL = "http://localhost:1234"
FRONTEND_URL = os.getenv("FRONTEND_URL")

# Shared secret for the cleanup task; empty disables the check
CRON_KEY = os.getenv("CRON_KEY", "")

# Storage: "memory" or "sql" (defaults to sql when DATABASE_URL is set)
DATABASE_URL = os.getenv("DATABASE_URL")
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sql" if DATABASE_URL else "memory").lower()

# Connection pool settings (ignored for SQLite)
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "300"))
DB_LOG_SLOW_QUERIES = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
DB_SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

# Rate limiting: token bucket per client address
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_BURST = int(os.getenv("RATE_LIMIT_BURST", "20"))
RATE_LIMIT_REPLENISH_MS = int(os.getenv("RATE_LIMIT_REPLENISH_MS", "500"))
# Only enable behind a proxy that overwrites X-Forwarded-For
TRUST_FORWARDED_FOR = os.getenv("TRUST_FORWARDED_FOR", "false").lower() == "true"

# Events not visited for this many days are removed by the cleanup task
RETENTION_DAYS = int(os.getenv("RETENTION_DAYS", "90"))

# Upper bound on identifier probes for a single new event
ID_ALLOCATION_MAX_ATTEMPTS = int(os.getenv("ID_ALLOCATION_MAX_ATTEMPTS", "100"))


def get_frontend_origin() -> str:
    """Origin allowed by CORS for the current environment"""
    if not IS_PRODUCTION:
        return FRONTEND_URL or DEV_FRONTEND_URL
    if not FRONTEND_URL:
        raise RuntimeError("Missing FRONTEND_URL environment variable")
    return FRONTEND_URL
