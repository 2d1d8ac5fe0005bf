# Settings read from environment variables (.env locally, platform variables in prod).

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_int(key: str, default: int) -> int:
    s = _env(key)
    if not s:
        return default
    try:
        return int(s)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    s = _env(key)
    if not s:
        return default
    return s.lower() in ("1", "true", "yes")


def _env_list(key: str, default: list = None) -> list:
    s = _env(key)
    if not s:
        return default or []
    s = s.strip().strip("[]")
    result = [x.strip().strip("\"'") for x in s.split(",")]
    result = [x for x in result if x]
    return result if result else (default or [])


# ============================================================================
# Auth
# ============================================================================
JWT_SECRET = _env("JWT_SECRET", "dev-incubridge-secret")
JWT_ALGORITHM = _env("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = _env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
BCRYPT_ROUNDS = _env_int("BCRYPT_ROUNDS", 12)

# ============================================================================
# HTTP
# ============================================================================
CORS_ORIGINS = _env_list("CORS_ORIGINS", ["http://localhost:8080"])

# ============================================================================
# Uploads (logo, pitch deck, certificates)
# ============================================================================
UPLOAD_DIR = Path(_env("UPLOAD_DIR", "uploads"))
MAX_UPLOAD_BYTES = _env_int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)
ALLOWED_UPLOAD_EXTENSIONS = {".jpeg", ".jpg", ".png", ".pdf", ".doc", ".docx"}

# ============================================================================
# Legal chatbot -- in-process state, not durable
# ============================================================================
CHAT_RATE_LIMIT = _env_int("CHAT_RATE_LIMIT", 20)
CHAT_RATE_WINDOW_SECONDS = _env_int("CHAT_RATE_WINDOW_SECONDS", 60)
CHAT_HISTORY_TTL_MINUTES = _env_int("CHAT_HISTORY_TTL_MINUTES", 60)
CHAT_HISTORY_MAX_MESSAGES = _env_int("CHAT_HISTORY_MAX_MESSAGES", 200)
CHAT_HISTORY_MAX_USERS = _env_int("CHAT_HISTORY_MAX_USERS", 5000)

# Periodic purge of expired chat state
ENABLE_MAINTENANCE = _env_bool("ENABLE_MAINTENANCE", True)
MAINTENANCE_INTERVAL_MINUTES = _env_int("MAINTENANCE_INTERVAL_MINUTES", 10)

# ============================================================================
# Logging
# ============================================================================
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
