"""Configuration management for Dead Hunt.

Loads environment variables (optionally from a .env file) and provides
centralized config access.
"""
import os
from pathlib import Path
from typing import List, Optional, Tuple
from dotenv import load_dotenv

from deadhunt.analyzer.categorizer import Category
from deadhunt.analyzer.discovery import FileFilter

__version__ = "1.0.0"

DEFAULT_SCAN_DIR = "./src"
DEFAULT_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")
DEFAULT_EXPORT_IGNORE = ("**/node_modules/**", "**/dist/**", "**/*.d.ts")
DEFAULT_USAGE_IGNORE = ("**/node_modules/**", "**/dist/**")


def _split_list(value: Optional[str], default: Tuple[str, ...]) -> Tuple[str, ...]:
    """Parse a comma-separated environment value; unset means default."""
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_file: Optional[Path] = None):
        """Initialize config by loading a .env file.

        Variables already present in the environment take precedence.

        Args:
            env_file: .env path (defaults to ./.env in the working directory)
        """
        load_dotenv(env_file or Path.cwd() / ".env")
        self._validate()

    def _validate(self):
        """Fail early on malformed settings.

        Raises:
            ValueError: If an extension lacks its leading dot or a
                category name is unknown
        """
        for extension in self.extensions:
            if not extension.startswith("."):
                raise ValueError(
                    f"Invalid extension '{extension}' in DEADHUNT_EXTENSIONS "
                    "(expected a leading dot, e.g. '.tsx')"
                )
        if not self.extensions:
            raise ValueError("DEADHUNT_EXTENSIONS must list at least one extension")
        for name in _split_list(os.getenv("DEADHUNT_CATEGORIES"), ()):
            Category.parse(name)

    @property
    def scan_dir(self) -> str:
        """Default folder offered when prompting for the scan directory."""
        return os.getenv("DEADHUNT_SCAN_DIR", DEFAULT_SCAN_DIR)

    @property
    def extensions(self) -> Tuple[str, ...]:
        return _split_list(os.getenv("DEADHUNT_EXTENSIONS"), DEFAULT_EXTENSIONS)

    @property
    def export_ignore(self) -> Tuple[str, ...]:
        """Globs excluded from the export (registration) pass."""
        return _split_list(os.getenv("DEADHUNT_EXPORT_IGNORE"), DEFAULT_EXPORT_IGNORE)

    @property
    def usage_ignore(self) -> Tuple[str, ...]:
        """Globs excluded from the usage pass."""
        return _split_list(os.getenv("DEADHUNT_USAGE_IGNORE"), DEFAULT_USAGE_IGNORE)

    @property
    def default_categories(self) -> List[Category]:
        """Categories to hunt without prompting (empty means ask)."""
        names = _split_list(os.getenv("DEADHUNT_CATEGORIES"), ())
        return [Category.parse(name) for name in names]

    def export_filter(self) -> FileFilter:
        return FileFilter(self.extensions, self.export_ignore)

    def usage_filter(self) -> FileFilter:
        return FileFilter(self.extensions, self.usage_ignore)


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config():
    """Drop the cached Config so the next get_config() re-reads the environment."""
    global _config
    _config = None
