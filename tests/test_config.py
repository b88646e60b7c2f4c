"""
Tests for application configuration and logging setup.
"""

import sys
import tempfile
from pathlib import Path

import pytest
from loguru import logger

from thumbnail_tester.__main__ import parse_args
from thumbnail_tester.config import AppConfig
from thumbnail_tester.exceptions import ConfigurationError
from thumbnail_tester.logging_config import get_logger, setup_logging


class TestAppConfig:
    """Test AppConfig validation."""

    def test_defaults(self) -> None:
        config = AppConfig()

        assert config.tables_dir == Path("thumbnail_data") / "tables"
        assert config.images_dir == Path("thumbnail_data") / "images"
        assert config.log_level == "INFO"

    def test_log_level_normalized(self) -> None:
        assert AppConfig(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"log_level": "LOUD"},
            {"blob_base_url": "ftp://cdn.example"},
        ],
    )
    def test_invalid_values(self, kwargs: dict[str, str]) -> None:
        with pytest.raises(ConfigurationError):
            _ = AppConfig(**kwargs)

    def test_data_dir_must_be_directory(self) -> None:
        with tempfile.NamedTemporaryFile() as f:
            with pytest.raises(ConfigurationError):
                _ = AppConfig(data_dir=Path(f.name))

    def test_environment_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        # Arrange
        monkeypatch.setenv("THUMBNAIL_TESTER_DATA_DIR", "/srv/thumbs")
        monkeypatch.setenv("THUMBNAIL_TESTER_BLOB_BASE_URL", "https://cdn.example/images")

        # Act
        args = parse_args(["list"])

        # Assert
        assert args.data_dir == "/srv/thumbs"
        assert args.blob_base_url == "https://cdn.example/images"


class TestLogging:
    def test_file_sink_written(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            setup_logging(level="INFO", log_dir=Path(temp_dir))

            # Act
            get_logger("test").info("test created: t1")
            logger.remove()
            _ = logger.add(sys.stderr)

            # Assert
            log_text = (Path(temp_dir) / "thumbnail_tester.log").read_text()
            assert "test created: t1" in log_text
