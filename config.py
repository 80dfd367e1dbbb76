"""
Module-level settings, read once at import.

Hosted deployments set real environment variables. A repo-root .env is
loaded for local development only; tests never read it.
"""
import os
import logging

from dotenv import load_dotenv

from utils.env import get_env_str, get_env_bool, get_env_int
from utils.redaction import redact_database_url

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

if (os.getenv("FLASK_ENV") or "").strip().lower() not in {"test", "testing"}:
    load_dotenv(dotenv_path=os.path.join(BASE_DIR, ".env"), override=False)

# -----------------------------------------------------------------------------
# Stage
# -----------------------------------------------------------------------------
_STAGE_ALIASES = {
    "prod": "production",
    "production": "production",
    "stage": "staging",
    "staging": "staging",
    "test": "test",
    "testing": "test",
}

APP_STAGE = _STAGE_ALIASES.get((get_env_str("APP_STAGE") or "").lower(), "dev")

IS_STAGING = APP_STAGE == "staging"
IS_PRODUCTION = APP_STAGE == "production"
IS_SECURE_ENV = IS_STAGING or IS_PRODUCTION

# -----------------------------------------------------------------------------
# Database: Postgres only
# -----------------------------------------------------------------------------
DATABASE_URL = get_env_str("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required.")

if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = "postgresql://" + DATABASE_URL[len("postgres://"):]
    os.environ["DATABASE_URL"] = DATABASE_URL

if not DATABASE_URL.startswith("postgresql://"):
    raise ValueError(
        "DATABASE_URL must be a PostgreSQL URL (postgresql://...). "
        f"Got: {redact_database_url(DATABASE_URL)}."
    )

# -----------------------------------------------------------------------------
# Secrets
# -----------------------------------------------------------------------------
SECRET_KEY = get_env_str("SECRET_KEY")
if not SECRET_KEY:
    if IS_SECURE_ENV:
        raise ValueError(f"SECRET_KEY must be set in {APP_STAGE} environment.")
    SECRET_KEY = "dev-secret-key-change-this"
    logger.warning("[Config] Using the default development SECRET_KEY.")

# -----------------------------------------------------------------------------
# Proxy / cookies
# -----------------------------------------------------------------------------
TRUST_PROXY_HEADERS = get_env_bool("TRUST_PROXY_HEADERS", default=False)
PROXY_FIX_NUM_PROXIES = get_env_int("PROXY_FIX_NUM_PROXIES", default=1)

SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"
SESSION_COOKIE_SECURE = IS_SECURE_ENV
REMEMBER_COOKIE_HTTPONLY = True
REMEMBER_COOKIE_SECURE = IS_SECURE_ENV
PREFERRED_URL_SCHEME = "https" if IS_SECURE_ENV else "http"

# -----------------------------------------------------------------------------
# /track-event CORS
# -----------------------------------------------------------------------------
TRACK_EVENT_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------
DASHBOARD_TOP_N = get_env_int("DASHBOARD_TOP_N", default=5)
DASHBOARD_RECENT_LIMIT = get_env_int("DASHBOARD_RECENT_LIMIT", default=10)
