"""Shared configuration, logging and time helpers for the planner core."""

from .config import (
    PLANNER_STORE_BACKEND,
    PLANNER_STORE_PATH,
    PLANNER_STORAGE_KEY,
    ARANGODB_URL,
    ARANGODB_DB,
    ARANGODB_USER,
    ARANGODB_PASSWORD,
    get_store_backend,
    get_store_path,
    get_arango_url,
)
from .utils import get_utc_now, ensure_utc_datetime, start_of_day, new_id

__all__ = [
    # Config exports
    "PLANNER_STORE_BACKEND",
    "PLANNER_STORE_PATH",
    "PLANNER_STORAGE_KEY",
    "ARANGODB_URL",
    "ARANGODB_DB",
    "ARANGODB_USER",
    "ARANGODB_PASSWORD",
    "get_store_backend",
    "get_store_path",
    "get_arango_url",
    # Utility exports
    "get_utc_now",
    "ensure_utc_datetime",
    "start_of_day",
    "new_id",
]
