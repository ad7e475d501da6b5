import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from remindme.logger import logger

load_dotenv()

__all__ = [
    "OWNER_ID", "USER_TIMEZONE",
    "LLM_PROVIDER", "GEMINI_API_KEY", "GEMINI_BASE_URL", "OPENAI_API_KEY", "OPENAI_BASE_URL", "LLM_PARSE_MODEL",
    "ADMIN_HTTP_HOST", "ADMIN_HTTP_PORT", "ADMIN_AUTH_TOKEN",
    "LOG_FILE", "LOG_LEVEL",
]


def _parse_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name} is not an integer: {raw!r}, falling back to {default}")
        return default


# User context
OWNER_ID = os.getenv("OWNER_ID", "local-user").strip() or "local-user"

USER_TIMEZONE = os.getenv("USER_TIMEZONE", "UTC").strip() or "UTC"
try:
    ZoneInfo(USER_TIMEZONE)
except (ZoneInfoNotFoundError, ValueError):
    logger.warning(f"USER_TIMEZONE is not a known IANA zone: {USER_TIMEZONE}, falling back to UTC")
    USER_TIMEZONE = "UTC"


# Text parsing service
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
if LLM_PROVIDER not in ("none", "gemini", "openai"):
    logger.warning(f"LLM_PROVIDER is invalid: {LLM_PROVIDER}, only none/gemini/openai are supported; parsing disabled")
    LLM_PROVIDER = "none"

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

_DEFAULT_PARSE_MODELS = {"gemini": "gemini-2.0-flash", "openai": "gpt-4o-mini", "none": ""}
LLM_PARSE_MODEL = os.getenv("LLM_PARSE_MODEL", _DEFAULT_PARSE_MODELS[LLM_PROVIDER])

if LLM_PROVIDER == "gemini" and not GEMINI_API_KEY:
    logger.warning("LLM_PROVIDER=gemini but GEMINI_API_KEY is not set; text parsing will report it as not configured")
if LLM_PROVIDER == "openai" and not OPENAI_API_KEY:
    logger.warning("LLM_PROVIDER=openai but OPENAI_API_KEY is not set; text parsing will report it as not configured")


# Admin API
ADMIN_HTTP_HOST = os.getenv("ADMIN_HTTP_HOST", "127.0.0.1")
ADMIN_HTTP_PORT = _parse_int("ADMIN_HTTP_PORT", 18080)
ADMIN_AUTH_TOKEN = os.getenv("ADMIN_AUTH_TOKEN", "")


# Logging
LOG_FILE = os.getenv("LOG_FILE", "logs/remindme.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").strip().upper()
