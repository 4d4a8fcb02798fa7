import os
from pathlib import Path

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


def _normalise_prefix(raw_prefix: str) -> str:
    raw_prefix = raw_prefix.strip()
    if not raw_prefix or raw_prefix == "/":
        return ""
    if not raw_prefix.startswith("/"):
        raw_prefix = f"/{raw_prefix}"
    return raw_prefix.rstrip("/")


def _int_from_env(name: str, default: int) -> int:
    raw_value = os.environ.get(name, "").strip()
    if not raw_value:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")

    URL_PREFIX = _normalise_prefix(os.environ.get("FLASK_URL_PREFIX", ""))

    TRACKIT_API_URL = os.environ.get("TRACKIT_API_URL", "http://127.0.0.1:5000/api").rstrip("/")
    TRACKIT_API_TIMEOUT = float(os.environ.get("TRACKIT_API_TIMEOUT", "10"))
    # Optional httpx transport, used by the test suite to stand in for the backend.
    TRACKIT_API_TRANSPORT = None

    ITEMS_PER_PAGE = _int_from_env("ITEMS_PER_PAGE", 10)
    TOAST_DURATION_MS = _int_from_env("TOAST_DURATION_MS", 5000)
    ADMIN_ROLE = os.environ.get("ADMIN_ROLE", "Administrateur")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    WTF_CSRF_ENABLED = False
    TRACKIT_API_URL = "http://trackit.test/api"
    LOG_LEVEL = "WARNING"
