"""
In-memory blob store for tests and dry runs.
"""

import threading

from typing_extensions import override

from ..interfaces import BlobStore
from ..logging_config import get_logger

logger = get_logger("memory_blobs")


class MemoryBlobStore(BlobStore):
    """Keeps uploaded payloads in a dict of folders; URLs use ``memory://``."""

    def __init__(self) -> None:
        self.folders = dict[str, dict[str, tuple[str, bytes]]]()
        self._lock: threading.Lock = threading.Lock()

    @override
    def upload(self, folder: str, filename: str, mime_type: str, payload: bytes) -> str:
        with self._lock:
            self.folders.setdefault(folder, {})[filename] = (mime_type, payload)
        url = f"memory://{folder}/{filename}"
        logger.debug(f"Stored {len(payload)} bytes at {url}")
        return url

    @override
    def trash_folder(self, folder: str) -> bool:
        with self._lock:
            return self.folders.pop(folder, None) is not None
