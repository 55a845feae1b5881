"""
Storage backends for the Aggregate Store.

A backend is a key-value medium holding opaque text blobs. The store keeps
every project in one JSON blob under a single key, so a backend only has to
read a whole value together with a version token and replace it with a
compare-and-swap: the write lands only if the stored version still matches
the one the caller read. That keeps the store's revision check atomic with
its write even when several processes share the medium.
"""

import hashlib
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from arango.database import StandardDatabase
from arango.exceptions import (
    ArangoError,
    DocumentInsertError,
    DocumentReplaceError,
    DocumentRevisionError,
)
from filelock import FileLock

from ..shared.config import (
    ARANGODB_DB,
    ARANGODB_USER,
    PLANNER_BLOB_COLLECTION,
    PLANNER_STORE_LOCK_TIMEOUT,
    get_arango_password,
    get_arango_url,
    get_store_backend,
    get_store_path,
)
from ..shared.logger import get_logger
from ..shared.utils import get_utc_now
from .errors import VersionMismatch

logger = get_logger("store", __name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class StorageBackend:
    """Interface for blob media used by ProjectStore."""

    name = "abstract"

    def read(self, key: str) -> Optional[str]:
        """Return the blob stored under ``key`` or None if absent."""
        return self.read_versioned(key)[0]

    def read_versioned(self, key: str) -> Tuple[Optional[str], Optional[str]]:
        """Return ``(blob, version)``; both are None when the key is absent."""
        raise NotImplementedError

    def compare_and_swap(self, key: str, blob: str, expected_version: Optional[str]) -> None:
        """Replace the blob under ``key`` if its version is still ``expected_version``.

        ``expected_version=None`` means the key must not exist yet. The
        replacement is all-or-nothing.

        Raises:
            VersionMismatch: If another writer got there first.
        """
        raise NotImplementedError


class MemoryBackend(StorageBackend):
    """In-process dictionary backend, used by tests and ephemeral sessions."""

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._blobs: Dict[str, str] = dict(initial or {})
        self._versions: Dict[str, int] = {key: 1 for key in self._blobs}
        self._lock = threading.Lock()

    def read_versioned(self, key: str) -> Tuple[Optional[str], Optional[str]]:
        with self._lock:
            if key not in self._blobs:
                return None, None
            return self._blobs[key], str(self._versions[key])

    def compare_and_swap(self, key: str, blob: str, expected_version: Optional[str]) -> None:
        with self._lock:
            current = str(self._versions[key]) if key in self._versions else None
            if current != expected_version:
                raise VersionMismatch(key, expected_version, current)
            self._blobs[key] = blob
            self._versions[key] = self._versions.get(key, 0) + 1


class FileBackend(StorageBackend):
    """Durable local backend: one JSON file per key inside ``root``.

    The version of a blob is the SHA-256 of its content. A swap holds an
    exclusive lock file next to the target while it re-reads the version,
    writes a temporary file and moves it over the target with ``os.replace``,
    so readers never observe a torn file and writers never interleave.
    """

    name = "file"

    def __init__(self, root: Union[str, Path], lock_timeout: float = PLANNER_STORE_LOCK_TIMEOUT) -> None:
        self.root = Path(root)
        self.lock_timeout = lock_timeout

    def path_for(self, key: str) -> Path:
        return self.root / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def lock_path_for(self, key: str) -> Path:
        return self.root / f".{self.path_for(key).stem}.lock"

    @staticmethod
    def _version_of(blob: str) -> str:
        return hashlib.sha256(blob.encode("utf-8")).hexdigest()

    def read_versioned(self, key: str) -> Tuple[Optional[str], Optional[str]]:
        path = self.path_for(key)
        if not path.exists():
            return None, None
        blob = path.read_text(encoding="utf-8")
        return blob, self._version_of(blob)

    def compare_and_swap(self, key: str, blob: str, expected_version: Optional[str]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        with FileLock(str(self.lock_path_for(key)), timeout=self.lock_timeout):
            _, current = self.read_versioned(key)
            if current != expected_version:
                raise VersionMismatch(key, expected_version, current)
            self._replace(self.path_for(key), blob)

    def _replace(self, target: Path, blob: str) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.stem}.", suffix=".tmp", dir=str(self.root))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(blob)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


class ArangoBackend(StorageBackend):
    """ArangoDB backend storing each blob as a single document.

    The document ``_key`` is the storage key and ``_rev`` is the version.
    A first write inserts the document; later writes replace it with
    ``check_rev=True`` so ArangoDB rejects a stale revision.
    """

    name = "arango"

    def __init__(self, db: StandardDatabase, collection_name: str = PLANNER_BLOB_COLLECTION) -> None:
        """
        Initialize the Arango backend.

        Args:
            db: ArangoDB StandardDatabase instance (must be connected).
            collection_name: Collection holding the blobs.

        Raises:
            ValueError: If db is None.
        """
        if db is None:
            raise ValueError("Database instance is required")
        self.db = db
        self.collection_name = collection_name
        self.ensure_schema()

    def ensure_schema(self) -> None:
        """Ensure the blob collection exists.

        Raises:
            RuntimeError: If schema setup fails.
        """
        try:
            if not self.db.has_collection(self.collection_name):
                self.db.create_collection(self.collection_name)
                logger.info(f"Created collection '{self.collection_name}'")
        except ArangoError as e:
            logger.error(f"Failed to ensure schema for '{self.collection_name}': {e}", exc_info=True)
            raise RuntimeError(f"Schema setup failed: {e}") from e

    def read_versioned(self, key: str) -> Tuple[Optional[str], Optional[str]]:
        doc = self.db.collection(self.collection_name).get(key)
        if doc is None:
            return None, None
        return doc.get("blob"), doc.get("_rev")

    def compare_and_swap(self, key: str, blob: str, expected_version: Optional[str]) -> None:
        collection = self.db.collection(self.collection_name)
        doc = {
            "_key": key,
            "blob": blob,
            "updated_at": get_utc_now().isoformat(),
        }
        try:
            if expected_version is None:
                collection.insert(doc)
            else:
                collection.replace(dict(doc, _rev=expected_version), check_rev=True)
        except DocumentRevisionError as e:
            raise VersionMismatch(key, expected_version, None) from e
        except (DocumentInsertError, DocumentReplaceError) as e:
            # 409: inserted by someone else; 404: deleted by someone else
            if getattr(e, "http_code", None) in (404, 409):
                raise VersionMismatch(key, expected_version, None) from e
            raise


def build_backend(kind: Optional[str] = None) -> StorageBackend:
    """Create the backend named by ``kind`` or by PLANNER_STORE_BACKEND.

    Raises:
        ValueError: If the backend name is unknown.
    """
    kind = (kind or get_store_backend()).lower()
    if kind == MemoryBackend.name:
        return MemoryBackend()
    if kind == FileBackend.name:
        return FileBackend(get_store_path())
    if kind == ArangoBackend.name:
        from arango import ArangoClient

        client = ArangoClient(hosts=get_arango_url())
        db = client.db(ARANGODB_DB, username=ARANGODB_USER, password=get_arango_password())
        return ArangoBackend(db)
    raise ValueError(f"Unknown store backend: {kind}")
