import os
import logging
from typing import List, Tuple
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/coopcms.db")
    SQL_ECHO = _env_flag("SQL_ECHO")

    RATE_LIMIT_ENABLED = not _env_flag("DISABLE_RATE_LIMIT")
    DEFAULT_RATE_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "100/minute")
    WRITE_RATE_LIMIT = os.getenv("WRITE_RATE_LIMIT", "30/minute")

    ALLOWED_ORIGINS = _env_list(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    )

    SUPPORTED_LANGUAGES: Tuple[str, ...] = ("es", "en", "ca", "eu", "gl")
    DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "es")

    PAGE_CACHE_MAX_SIZE = int(os.getenv("PAGE_CACHE_MAX_SIZE", "200"))
    DEFAULT_CACHE_MINUTES = 60

    SEARCH_MIN_LENGTH = 3
    SEARCH_RESULT_LIMIT = 20

    ENABLE_HSTS = _env_flag("ENABLE_HSTS")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def sqlite_path(cls, url: str = "") -> str:
        """Filesystem path of a file-backed SQLite URL, or "" for anything else."""
        url = url or cls.DATABASE_URL
        prefix = "sqlite:///"
        if not url.startswith(prefix):
            return ""
        path = url[len(prefix):]
        if not path or path == ":memory:":
            return ""
        return path


if Config.DEFAULT_LANGUAGE not in Config.SUPPORTED_LANGUAGES:
    logger.error(f"Unsupported DEFAULT_LANGUAGE: {Config.DEFAULT_LANGUAGE}")
    raise ValueError("Configuration error: DEFAULT_LANGUAGE must be a supported language")
