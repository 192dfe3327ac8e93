"""Application settings and environment helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


MERGE_POLICIES = ("best_of", "latest_wins", "accumulator")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}")
    return value


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def _merge_policy(raw: str | None) -> str:
    value = (raw or "best_of").strip().lower().replace("-", "_")
    if value not in MERGE_POLICIES:
        raise RuntimeError(
            f"LEADERBOARD_MERGE_POLICY must be one of {', '.join(MERGE_POLICIES)}"
        )
    return value


# Storage --------------------------------------------------------------------
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/leaderboard.db")
DB_POOL_SIZE = _env_int("DB_POOL_SIZE", 5, minimum=1)
DB_MAX_OVERFLOW = _env_int("DB_MAX_OVERFLOW", 0)
DB_POOL_TIMEOUT = _env_int("DB_POOL_TIMEOUT", 5, minimum=1)
DB_RESET = _env_bool("DB_RESET", False)


# Leaderboard behaviour ------------------------------------------------------
MERGE_POLICY = _merge_policy(os.getenv("LEADERBOARD_MERGE_POLICY"))
AUTO_REGISTER = _env_bool("LEADERBOARD_AUTO_REGISTER", True)
LEADERBOARD_MAX_SIZE = _env_int("LEADERBOARD_MAX_SIZE", 100, minimum=1)


# HTTP -----------------------------------------------------------------------
# FRONTEND_ORIGIN can contain a comma-separated list for multi-domain deploys.
_frontend_origins = _split_csv(os.getenv("FRONTEND_ORIGIN"))
_additional_origins = _split_csv(os.getenv("ADDITIONAL_ALLOWED_ORIGINS"))

_local_dev_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ALLOWED_CORS_ORIGINS = _unique(
    [
        *_frontend_origins,
        *_additional_origins,
        *_local_dev_origins,
    ]
)

PORT = _env_int("PORT", 3000, minimum=1)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration handed to the application factory."""

    database_url: str = DATABASE_URL
    pool_size: int = DB_POOL_SIZE
    max_overflow: int = DB_MAX_OVERFLOW
    pool_timeout: int = DB_POOL_TIMEOUT
    db_reset: bool = DB_RESET
    merge_policy: str = MERGE_POLICY
    auto_register: bool = AUTO_REGISTER
    max_size: int = LEADERBOARD_MAX_SIZE
    allowed_origins: List[str] = field(default_factory=lambda: list(ALLOWED_CORS_ORIGINS))
    log_level: str = LOG_LEVEL

    def with_overrides(self, **overrides) -> "Settings":
        if "merge_policy" in overrides:
            overrides["merge_policy"] = _merge_policy(overrides["merge_policy"])
        return replace(self, **overrides)


def load_settings() -> Settings:
    """Return settings built from the environment captured at import time."""

    return Settings()


__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "AUTO_REGISTER",
    "DATABASE_URL",
    "DB_MAX_OVERFLOW",
    "DB_POOL_SIZE",
    "DB_POOL_TIMEOUT",
    "DB_RESET",
    "LEADERBOARD_MAX_SIZE",
    "LOG_LEVEL",
    "MERGE_POLICIES",
    "MERGE_POLICY",
    "PORT",
    "Settings",
    "load_settings",
]
