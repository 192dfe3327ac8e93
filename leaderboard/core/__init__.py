"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    AUTO_REGISTER,
    DATABASE_URL,
    LEADERBOARD_MAX_SIZE,
    MERGE_POLICIES,
    MERGE_POLICY,
    PORT,
    Settings,
    load_settings,
)
from .database import Database, translate_store_error
from .errors import (
    Conflict,
    InvalidInput,
    LeaderboardError,
    StoreError,
    Unavailable,
    UnknownIdentity,
)
from .logging_setup import RequestIDMiddleware, configure_logging, get_request_id
from .migrations import run_migrations
from .time import utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "AUTO_REGISTER",
    "Conflict",
    "DATABASE_URL",
    "Database",
    "InvalidInput",
    "LEADERBOARD_MAX_SIZE",
    "LeaderboardError",
    "MERGE_POLICIES",
    "MERGE_POLICY",
    "PORT",
    "RequestIDMiddleware",
    "Settings",
    "StoreError",
    "Unavailable",
    "UnknownIdentity",
    "configure_logging",
    "get_request_id",
    "load_settings",
    "run_migrations",
    "translate_store_error",
    "utcnow",
]
