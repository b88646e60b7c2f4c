"""
Application configuration.
"""

from dataclasses import dataclass
from pathlib import Path

from .exceptions import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AppConfig:
    """Where the thumbnail tester keeps its data and how it logs."""

    data_dir: Path = Path("thumbnail_data")
    blob_base_url: str | None = None  # public URL serving <data_dir>/images
    log_level: str = "INFO"
    debug: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.data_dir = Path(self.data_dir)
        if self.data_dir.exists() and not self.data_dir.is_dir():
            raise ConfigurationError(f"data_dir is not a directory: {self.data_dir}")
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level}")
        if self.blob_base_url and not self.blob_base_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"blob_base_url must be an http(s) URL, got {self.blob_base_url}")

    @property
    def tables_dir(self) -> Path:
        return self.data_dir / "tables"

    @property
    def images_dir(self) -> Path:
        return self.data_dir / "images"
