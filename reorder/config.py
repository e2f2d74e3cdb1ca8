"""Runtime configuration read from the environment (and an optional .env file)."""
import os
from functools import lru_cache
from typing import NamedTuple

from dotenv import load_dotenv

from .errors import ConfigError

ACCESS_TTL_DEFAULT = 60  # 1 minute
REFRESH_TTL_DEFAULT = 60 * 60 * 24 * 3  # 3 days


class Settings(NamedTuple):
    jwt_secret: str
    jwt_refresh_secret: str
    database_url: str
    access_token_ttl: int
    refresh_token_ttl: int
    log_level: str


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive")
    return value


def load_settings() -> Settings:
    load_dotenv()

    secret = os.getenv("JWT_SECRET")
    refresh_secret = os.getenv("JWT_REFRESH_SECRET")
    if not secret:
        raise ConfigError("Missing required environment variable: JWT_SECRET")
    if not refresh_secret:
        raise ConfigError("Missing required environment variable: JWT_REFRESH_SECRET")
    if secret == refresh_secret:
        raise ConfigError("JWT_SECRET and JWT_REFRESH_SECRET must be different")

    return Settings(
        jwt_secret=secret,
        jwt_refresh_secret=refresh_secret,
        database_url=os.getenv("DATABASE_URL", "sqlite:///./reorder.db"),
        access_token_ttl=_positive_int("ACCESS_TOKEN_TTL_SECONDS", ACCESS_TTL_DEFAULT),
        refresh_token_ttl=_positive_int("REFRESH_TOKEN_TTL_SECONDS", REFRESH_TTL_DEFAULT),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
