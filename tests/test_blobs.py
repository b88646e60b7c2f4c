"""
Tests for data URL decoding and the blob store implementations.
"""

import tempfile
from pathlib import Path

import pytest

from thumbnail_tester.blobs.data_url import decode_data_url, encode_data_url
from thumbnail_tester.blobs.directory_blobs import TRASH_DIR_NAME, DirectoryBlobStore
from thumbnail_tester.blobs.memory_blobs import MemoryBlobStore

from conftest import PNG_DATA_URL


class TestDataUrl:
    """Test decode_data_url and encode_data_url."""

    def test_decode_png(self) -> None:
        image = decode_data_url(PNG_DATA_URL)

        assert image.mime_type == "image/png"
        assert image.extension == "png"
        assert image.payload.startswith(b"\x89PNG")

    def test_encode_matches_decode(self) -> None:
        data_url = encode_data_url("image/svg+xml", b"<svg/>")

        image = decode_data_url(data_url)

        assert data_url.startswith("data:image/svg+xml;base64,")
        assert image.payload == b"<svg/>"
        assert image.extension == "svg"

    @pytest.mark.parametrize(
        "value",
        [
            "https://img.example/a.png",
            "data:image/png;base64",
            "data:image/png,rawbytes",
            "data:image/png;base64,@@@",
            "data:image/png;base64,",
        ],
    )
    def test_rejects_malformed(self, value: str) -> None:
        with pytest.raises(ValueError):
            _ = decode_data_url(value)


class TestMemoryBlobStore:
    def test_upload_and_trash(self) -> None:
        blobs = MemoryBlobStore()

        url = blobs.upload("Test-t1", "thumbnail-1.png", "image/png", b"abc")

        assert url == "memory://Test-t1/thumbnail-1.png"
        assert blobs.trash_folder("Test-t1") is True
        assert blobs.trash_folder("Test-t1") is False


class TestDirectoryBlobStore:
    """Test DirectoryBlobStore."""

    def test_upload_writes_file_and_builds_url(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            root = Path(temp_dir) / "images"
            blobs = DirectoryBlobStore(root, base_url="https://cdn.example/images/")

            # Act
            url = blobs.upload("Test-t 1", "thumbnail-1.png", "image/png", b"abc")

            # Assert
            assert url == "https://cdn.example/images/Test-t%25201/thumbnail-1.png"
            assert (root / "Test-t%201" / "thumbnail-1.png").read_bytes() == b"abc"

    def test_file_urls_without_base_url(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            blobs = DirectoryBlobStore(Path(temp_dir))

            url = blobs.upload("Test-t1", "thumbnail-1.png", "image/png", b"abc")

            assert url.startswith("file://")
            assert url.endswith("/Test-t1/thumbnail-1.png")

    def test_trash_moves_folder_aside(self) -> None:
        """Trashed folders are kept under .trash rather than removed."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            root = Path(temp_dir)
            blobs = DirectoryBlobStore(root)
            _ = blobs.upload("Test-t1", "thumbnail-1.png", "image/png", b"abc")

            # Act
            trashed = blobs.trash_folder("Test-t1")

            # Assert
            assert trashed is True
            assert not (root / "Test-t1").exists()
            moved = list((root / TRASH_DIR_NAME).iterdir())
            assert len(moved) == 1
            assert (moved[0] / "thumbnail-1.png").read_bytes() == b"abc"

    def test_trash_missing_folder(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            blobs = DirectoryBlobStore(Path(temp_dir))

            assert blobs.trash_folder("Test-nope") is False
