"""
Transient blob registry for attachment bytes.

Attachments hold a ``blob:<uuid>`` url pointing here instead of owning file
bytes. Whoever removes an attachment (or the project holding it) must call
``release`` so the bytes do not outlive their last reference. The content
type travels on the attachment (``file_type``), not with the bytes.
"""

import threading
import uuid
from typing import Dict, Optional

from ..shared.logger import get_logger

logger = get_logger("blobs", __name__)

BLOB_URL_PREFIX = "blob:"


class BlobStore:
    """Thread-safe in-process registry of uploaded file bytes."""

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, data: bytes) -> str:
        """Register bytes and return the url referencing them."""
        url = f"{BLOB_URL_PREFIX}{uuid.uuid4()}"
        with self._lock:
            self._blobs[url] = bytes(data)
        logger.debug("Registered blob", extra={"payload": {"url": url, "size": len(data)}})
        return url

    def get(self, url: str) -> Optional[bytes]:
        with self._lock:
            return self._blobs.get(url)

    def is_live(self, url: str) -> bool:
        with self._lock:
            return url in self._blobs

    def release(self, url: str) -> bool:
        """Drop the bytes behind ``url``. Returns False if already released."""
        with self._lock:
            released = self._blobs.pop(url, None) is not None
        if released:
            logger.debug("Released blob", extra={"payload": {"url": url}})
        return released

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)
