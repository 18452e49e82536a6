import logging
import os
from dataclasses import dataclass


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Config:
    supabase_url: str
    supabase_key: str

    timeout: float
    page_size: int
    suggestion_limit: int
    debounce_ms: int

    log_level: str


def _number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _log_level() -> str:
    level = os.getenv("ROOMSCHEDULE_LOG_LEVEL", "WARNING").strip().upper()
    # getLevelName() maps known names to their number, anything else to a string
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"ROOMSCHEDULE_LOG_LEVEL must be a logging level name, got {level!r}")
    return level


def load_config() -> Config:
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_ANON_KEY")
    if not url or not key:
        raise ConfigError("SUPABASE_URL/SUPABASE_ANON_KEY not set")

    return Config(
        supabase_url=url.rstrip("/"),
        supabase_key=key,
        timeout=_number("ROOMSCHEDULE_TIMEOUT_SECONDS", "15", float),
        page_size=_number("ROOMSCHEDULE_PAGE_SIZE", "10", int),
        suggestion_limit=_number("ROOMSCHEDULE_SUGGESTION_LIMIT", "5", int),
        debounce_ms=_number("ROOMSCHEDULE_DEBOUNCE_MS", "200", int),
        log_level=_log_level(),
    )
