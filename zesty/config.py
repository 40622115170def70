from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def load_dotenv(path: str = ".env") -> None:
    if not os.path.exists(path):
        return

    try:
        with open(path, "r", encoding="utf-8") as env_file:
            for raw_line in env_file:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                if key.startswith("export "):
                    key = key[len("export "):].strip()
                value = value.strip().strip("'").strip('"')
                if key:
                    os.environ.setdefault(key, value)
    except OSError:
        logger.exception("Failed to read %s", path)


load_dotenv()


def required_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        raise RuntimeError(f"{name} is not configured")
    return value


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


def env_int(name: str, default: int) -> int:
    return int(env_float(name, float(default)))


PORT = env_int("PORT", 5001)
FLASK_DEBUG = os.environ.get("FLASK_DEBUG", "0") == "1"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

STORAGE_BUCKET = os.environ.get("STORAGE_BUCKET", "incident-images")

BACKEND_TIMEOUT_SECONDS = env_float("BACKEND_TIMEOUT_SECONDS", 10.0)
DB_STATEMENT_TIMEOUT_MS = env_int("DB_STATEMENT_TIMEOUT_MS", 8000)
DB_POOL_MAX = env_int("DB_POOL_MAX", 10)

FEED_LIMIT = env_int("FEED_LIMIT", 5)
POLL_INTERVAL_SECONDS = env_float("POLL_INTERVAL_SECONDS", 5.0)
RESOLVE_RETURN_DELAY_SECONDS = env_float("RESOLVE_RETURN_DELAY_SECONDS", 1.5)
REPORT_RETURN_DELAY_SECONDS = env_float("REPORT_RETURN_DELAY_SECONDS", 2.0)
TOAST_SECONDS = env_float("TOAST_SECONDS", 4.0)

MAX_UPLOAD_BYTES = env_int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)
UPLOAD_WAIT_SECONDS = env_float("UPLOAD_WAIT_SECONDS", 10.0)
UPLOAD_TTL_SECONDS = env_float("UPLOAD_TTL_SECONDS", 15 * 60)


def database_url() -> str:
    return required_env("DATABASE_URL")


def supabase_url() -> str:
    return required_env("SUPABASE_URL").rstrip("/")


def supabase_anon_key() -> str:
    return required_env("SUPABASE_ANON_KEY")


def run_db_init() -> bool:
    return os.environ.get("RUN_DB_INIT", "0") == "1"
