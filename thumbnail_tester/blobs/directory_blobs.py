"""
Directory blob store implementation.

Writes uploaded thumbnails below a root directory, one sub-directory per
test folder. Public URLs are built from a configured base URL (for a web
server exposing the root directory) or fall back to ``file://`` URIs.
"""

import shutil
import time
from pathlib import Path
from urllib.parse import quote

from typing_extensions import override

from ..exceptions import StoreError
from ..interfaces import BlobStore
from ..logging_config import get_logger

# Module-level logger
logger = get_logger("directory_blobs")

TRASH_DIR_NAME = ".trash"


class DirectoryBlobStore(BlobStore):
    """
    Filesystem-backed BlobStore.

    Trashed folders are moved into ``<root>/.trash`` rather than removed, so
    an accidental delete can still be recovered by hand.
    """

    def __init__(self, root_dir: Path, base_url: str | None = None):
        """
        Initialize directory blob store.

        Args:
            root_dir: Directory receiving one sub-directory per folder
            base_url: Public URL under which root_dir is served (optional)
        """
        self.root_dir: Path = Path(root_dir)
        self.base_url: str | None = base_url.rstrip("/") if base_url else None
        self.root_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Directory blob store initialized: root={self.root_dir}, base_url={self.base_url}")

    def _folder_path(self, folder: str) -> Path:
        if not folder:
            raise StoreError("Folder name cannot be empty")
        return self.root_dir / quote(folder, safe="")

    @override
    def upload(self, folder: str, filename: str, mime_type: str, payload: bytes) -> str:
        folder_path = self._folder_path(folder)
        file_name = quote(filename, safe="")
        file_path = folder_path / file_name
        try:
            folder_path.mkdir(parents=True, exist_ok=True)
            _ = file_path.write_bytes(payload)
        except OSError as e:
            raise StoreError(f"Failed to store {filename} in {folder}: {e}") from e

        if self.base_url:
            url = f"{self.base_url}/{quote(folder_path.name)}/{quote(file_name)}"
        else:
            url = file_path.resolve().as_uri()

        logger.debug(f"Stored {len(payload)} bytes ({mime_type}) at {url}")
        return url

    @override
    def trash_folder(self, folder: str) -> bool:
        folder_path = self._folder_path(folder)
        if not folder_path.is_dir():
            return False

        trash_dir = self.root_dir / TRASH_DIR_NAME
        target = trash_dir / f"{folder_path.name}-{int(time.time() * 1000)}"
        try:
            trash_dir.mkdir(exist_ok=True)
            _ = shutil.move(str(folder_path), str(target))
        except OSError as e:
            raise StoreError(f"Failed to trash folder {folder}: {e}") from e

        logger.info(f"Trashed blob folder {folder} -> {target}")
        return True
