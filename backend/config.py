import os
from dotenv import load_dotenv

load_dotenv()


def get_int(name: str, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_float(name: str, default: float | None = None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def database_path() -> str:
    # read on every call so tests can point DATABASE_PATH at a temp file
    return os.getenv("DATABASE_PATH", "database.db")


def sync_timezone() -> str:
    return os.getenv("SYNC_TIMEZONE", "UTC")


REQUEST_TIMEOUT_SECONDS = get_float("REQUEST_TIMEOUT_SECONDS", 20.0)
RATE_LIMIT_RETRIES = get_int("RATE_LIMIT_RETRIES", 2)
RATE_LIMIT_BACKOFF_SECONDS = get_float("RATE_LIMIT_BACKOFF_SECONDS", 2.0)
INTER_REQUEST_DELAY_SECONDS = get_float("INTER_REQUEST_DELAY_SECONDS", 1.0)
SYNC_LOCK_STALE_SECONDS = get_int("SYNC_LOCK_STALE_SECONDS", 300)
CODEFORCES_SUBMISSION_COUNT = get_int("CODEFORCES_SUBMISSION_COUNT", 20)
