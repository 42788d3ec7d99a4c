"""Application settings loaded from the environment (and an optional .env file)."""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from inout.exceptions import ConfigError
from inout.formatting import CURRENCY_SYMBOLS

DEFAULT_SEED_PATH = "data/seed.json"


@dataclass(frozen=True)
class Settings:
    seed_path: Optional[str] = DEFAULT_SEED_PATH
    currency: str = "USD"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    recent_limit: int = 5
    top_categories: int = 5


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def validate_settings(settings: Settings) -> tuple[bool, str]:
    if settings.currency not in CURRENCY_SYMBOLS:
        return False, f"Unsupported currency: {settings.currency}"
    if settings.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        return False, f"Unknown log level: {settings.log_level}"
    if settings.recent_limit < 0:
        return False, "Recent transaction limit must not be negative"
    if settings.top_categories < 1:
        return False, "Top categories must be at least 1"
    return True, "Configuration is valid"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from INOUT_* environment variables.

    Raises ConfigError when a value is malformed or out of range.
    """
    load_dotenv(env_file)

    settings = Settings(
        seed_path=os.getenv("INOUT_SEED_PATH", DEFAULT_SEED_PATH) or None,
        currency=os.getenv("INOUT_CURRENCY", "USD").upper(),
        log_level=os.getenv("INOUT_LOG_LEVEL", "INFO"),
        log_file=os.getenv("INOUT_LOG_FILE") or None,
        recent_limit=_int_env("INOUT_RECENT_LIMIT", 5),
        top_categories=_int_env("INOUT_TOP_CATEGORIES", 5),
    )

    ok, message = validate_settings(settings)
    if not ok:
        raise ConfigError(message)
    return settings
