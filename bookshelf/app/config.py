"""
Application Configuration
=========================
Configuration management for the bookshelf catalog.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from bookshelf.storage.database import MEMORY_DATABASE

TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class AppConfig:
    """
    Application configuration.

    Attributes:
        data_dir: Directory for application data (database, log file)
        db_path: Path to SQLite database, or ":memory:"
        seed_sample_data: Insert sample books into an empty library
        log_level: Root logging level name
        log_file: Optional file receiving log output
        page_size: Books per page for paged listings
        default_limit: Default size of top-rated and recent listings
    """

    # Directories
    data_dir: Path = field(default_factory=lambda: Path("data"))

    # Database
    db_path: Optional[Path] = None
    seed_sample_data: bool = True

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    # Listings
    page_size: int = 20
    default_limit: int = 5

    def __post_init__(self):
        """Ensure the data directory exists and set defaults."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if self.db_path is None:
            self.db_path = self.data_dir / "bookshelf.db"

    @property
    def in_memory(self) -> bool:
        return str(self.db_path) == MEMORY_DATABASE

    @classmethod
    def from_dict(cls, config_dict: dict) -> "AppConfig":
        """
        Create config from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            AppConfig instance
        """
        path_fields = {"data_dir", "db_path", "log_file"}
        processed = {}

        for key, value in config_dict.items():
            if key in path_fields and value is not None:
                processed[key] = Path(value)
            else:
                processed[key] = value

        return cls(**processed)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "AppConfig":
        """
        Create config from BOOKSHELF_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Values that win over the environment (None is ignored)

        Returns:
            AppConfig instance
        """
        env = os.environ if environ is None else environ
        values = {}

        if env.get("BOOKSHELF_DATA_DIR"):
            values["data_dir"] = env["BOOKSHELF_DATA_DIR"]
        if env.get("BOOKSHELF_DB"):
            values["db_path"] = env["BOOKSHELF_DB"]
        if env.get("BOOKSHELF_LOG_LEVEL"):
            values["log_level"] = env["BOOKSHELF_LOG_LEVEL"].upper()
        if env.get("BOOKSHELF_NO_SEED", "").strip().lower() in TRUTHY:
            values["seed_sample_data"] = False

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls.from_dict(values)

    def to_dict(self) -> dict:
        """
        Convert config to dictionary.

        Returns:
            Configuration dictionary
        """
        return {
            "data_dir": str(self.data_dir),
            "db_path": str(self.db_path) if self.db_path else None,
            "seed_sample_data": self.seed_sample_data,
            "log_level": self.log_level,
            "log_file": str(self.log_file) if self.log_file else None,
            "page_size": self.page_size,
            "default_limit": self.default_limit,
        }
