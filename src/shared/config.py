"""
Shared configuration for the project planner core.

Centralizes storage and collaboration settings using environment variables.
All modules should use these constants instead of hardcoded values.
"""

import os
from typing import Optional

# ============================================
# Aggregate Store
# ============================================

# Backend holding the project blob: "file" (local JSON), "memory" or "arango"
PLANNER_STORE_BACKEND: str = os.getenv("PLANNER_STORE_BACKEND", "file").lower()
# Directory for the file backend (one JSON file per storage key)
PLANNER_STORE_PATH: str = os.getenv(
    "PLANNER_STORE_PATH", os.path.join(os.path.expanduser("~"), ".planner", "store")
)
# Key under which all projects are serialized as a single blob
PLANNER_STORAGE_KEY: str = os.getenv("PLANNER_STORAGE_KEY", "ai-project-planner-projects")
# Seconds to wait for the file backend write lock
PLANNER_STORE_LOCK_TIMEOUT: float = float(os.getenv("PLANNER_STORE_LOCK_TIMEOUT", "10"))
# Reload-and-retry attempts when another writer replaced the blob mid-write
STORE_SWAP_ATTEMPTS: int = int(os.getenv("STORE_SWAP_ATTEMPTS", "5"))

# ============================================
# Memory (ArangoDB) - optional durable blob backend
# ============================================
ARANGODB_URL: str = os.getenv("ARANGODB_URL", "http://localhost:8529")
ARANGODB_DB: str = os.getenv("ARANGODB_DB", "project_planner")
ARANGODB_USER: str = os.getenv("ARANGODB_USER", "root")
ARANGODB_PASSWORD: str = os.getenv("ARANGODB_PASSWORD", "")
PLANNER_BLOB_COLLECTION: str = os.getenv("PLANNER_BLOB_COLLECTION", "planner_blobs")

# ============================================
# Generation Policies
# ============================================
# Days added to "today" when a template is expanded without an explicit start date
PLANNER_START_OFFSET_DAYS: int = int(os.getenv("PLANNER_START_OFFSET_DAYS", "0"))
# Working hours per scheduled day (used for task cost)
HOURS_PER_DAY: int = int(os.getenv("HOURS_PER_DAY", "8"))
DEFAULT_RESOURCE_RATE: float = float(os.getenv("DEFAULT_RESOURCE_RATE", "100"))

# ============================================
# Collaboration Policies
# ============================================
ACTIVITY_FEED_PAGE_SIZE: int = int(os.getenv("ACTIVITY_FEED_PAGE_SIZE", "50"))
# Re-read/re-apply attempts when a write loses a revision race
COLLAB_MAX_RETRIES: int = int(os.getenv("COLLAB_MAX_RETRIES", "3"))
DEFAULT_OWNER_ID: str = os.getenv("DEFAULT_OWNER_ID", "current-user")

# ============================================
# Environment Variable Names (for reference)
# ============================================
# PLANNER_STORE_BACKEND=file
# PLANNER_STORE_PATH=/var/lib/planner
# ARANGODB_URL=http://localhost:8529
# ARANGODB_DB=project_planner
# LOG_FORMAT=json

# ============================================
# Helper Functions
# ============================================

def get_store_backend() -> str:
    """Get the configured store backend name."""
    return PLANNER_STORE_BACKEND


def get_store_path() -> str:
    """Get the directory used by the file backend."""
    return PLANNER_STORE_PATH


def get_arango_url() -> str:
    """Get ArangoDB URL from environment or default."""
    return ARANGODB_URL


def get_arango_password() -> str:
    """Centralized ArangoDB password lookup with ARANGO_ROOT_PASSWORD override."""
    return os.getenv("ARANGO_ROOT_PASSWORD") or ARANGODB_PASSWORD


def get_storage_key(override: Optional[str] = None) -> str:
    return override or PLANNER_STORAGE_KEY
