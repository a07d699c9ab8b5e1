import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

SCHEDULE_URL = "https://europeanleague.football/api/schedule"
SCHEDULE_REFERER = "https://europeanleague.football/games/schedule"


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return float(default)
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be a finite number, got {raw!r}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{name} must be true or false, got {raw!r}")


@dataclass
class Settings:
    schedule_url: str = SCHEDULE_URL
    schedule_referer: str = SCHEDULE_REFERER
    fetch_timeout: float = 10.0
    refresh_interval: float = 300.0
    startup_delay: float = 2.0
    database_url: str = "sqlite:///football.db"
    reference_data_path: Optional[str] = None
    fallback_data_path: Optional[str] = None
    seed_fallback: bool = True
    log_level: str = "INFO"
    port: int = 8080

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from the environment (``.env`` is loaded first)."""
        if env is None:
            load_dotenv()
            env = os.environ

        interval = _number(env, "REFRESH_INTERVAL", cls.refresh_interval)
        if interval == 0:
            raise ConfigError("REFRESH_INTERVAL must be greater than zero")

        port = _number(env, "PORT", cls.port)
        if not port.is_integer():
            raise ConfigError(f"PORT must be an integer, got {env.get('PORT')!r}")

        return cls(
            schedule_url=env.get("SCHEDULE_URL") or SCHEDULE_URL,
            schedule_referer=env.get("SCHEDULE_REFERER") or SCHEDULE_REFERER,
            fetch_timeout=_number(env, "FETCH_TIMEOUT", cls.fetch_timeout),
            refresh_interval=interval,
            startup_delay=_number(env, "STARTUP_DELAY", cls.startup_delay),
            database_url=env.get("DATABASE_URL") or cls.database_url,
            reference_data_path=env.get("REFERENCE_DATA_PATH") or None,
            fallback_data_path=env.get("FALLBACK_DATA_PATH") or None,
            seed_fallback=_flag(env, "SEED_FALLBACK", cls.seed_fallback),
            log_level=(env.get("LOG_LEVEL") or cls.log_level).upper(),
            port=int(port),
        )
