"""
Configuration management for cheatdocs.

Handles reading/writing the INI configuration file with type-safe
accessors layered over built-in defaults.

I know where the declarations live and where the exports go.
You only have to remember the keyword.
"""

import configparser
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from cheatdocs.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "cheatdocs.ini"


def _find_base_path() -> Path:
    """Find the cheatdocs base path.

    Resolution order:
    1. CHEATDOCS_HOME environment variable
    2. The current working directory
    """
    env_path = os.environ.get("CHEATDOCS_HOME")
    if env_path:
        return Path(env_path).resolve()

    return Path.cwd()


class CheatdocsConfig:
    """Configuration manager for cheatdocs.

    Reads configuration from an INI file and provides type-safe accessors
    with default value fallbacks.
    """

    # Default configuration values
    DEFAULTS = {
        "loader": {
            "source_dir": "cheatsheets",
            "declaration_suffix": ".json",
            "recursive": "false",
            "parallel_workers": "1",
            "reject_unknown_fields": "true",
        },
        "export": {
            "output_dir": "build",
            "manifest_name": "manifest.json",
            "json_indent": "2",
        },
    }

    def __init__(self, base_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            base_path: Root path of the cheatsheet repository. If None, auto-detected.
        """
        self.base_path = Path(base_path).resolve() if base_path else _find_base_path()
        self.config_path = self.base_path / CONFIG_FILE_NAME

        self._config = configparser.ConfigParser()
        self._load_defaults()
        self._load_user_config()

    def _load_defaults(self) -> None:
        """Load default configuration values."""
        for section, values in self.DEFAULTS.items():
            if not self._config.has_section(section):
                self._config.add_section(section)
            for key, value in values.items():
                self._config.set(section, key, value)

    def _load_user_config(self) -> None:
        """Load user configuration from cheatdocs.ini if it exists."""
        if self.config_path.exists():
            logger.debug("Reading config from %s", self.config_path)
            try:
                self._config.read(str(self.config_path))
            except configparser.Error as e:
                raise ConfigError(f"unreadable config: {e}", self.config_path) from e

    def save(self) -> None:
        """Save current configuration to cheatdocs.ini."""
        self.base_path.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            self._config.write(f)

    def _resolve(self, raw: str) -> Path:
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = self.base_path / path
        return path

    def _getint(self, section: str, key: str, fallback: int) -> int:
        try:
            return self._config.getint(section, key, fallback=fallback)
        except ValueError as e:
            raise ConfigError(f"[{section}] {key} must be an integer") from e

    def _getboolean(self, section: str, key: str, fallback: bool) -> bool:
        try:
            return self._config.getboolean(section, key, fallback=fallback)
        except ValueError as e:
            raise ConfigError(f"[{section}] {key} must be a boolean") from e

    # --- Type-safe property accessors ---

    @property
    def source_dir(self) -> Path:
        return self._resolve(self._config.get("loader", "source_dir", fallback="cheatsheets"))

    @property
    def declaration_suffix(self) -> str:
        suffix = self._config.get("loader", "declaration_suffix", fallback=".json").strip()
        if not suffix.startswith(".") or len(suffix) < 2:
            raise ConfigError(f"[loader] declaration_suffix must look like '.json', got {suffix!r}")
        return suffix

    @property
    def recursive(self) -> bool:
        return self._getboolean("loader", "recursive", fallback=False)

    @property
    def parallel_workers(self) -> int:
        workers = self._getint("loader", "parallel_workers", fallback=1)
        if workers < 1:
            raise ConfigError(f"[loader] parallel_workers must be at least 1, got {workers}")
        return workers

    @property
    def reject_unknown_fields(self) -> bool:
        return self._getboolean("loader", "reject_unknown_fields", fallback=True)

    @property
    def output_dir(self) -> Path:
        return self._resolve(self._config.get("export", "output_dir", fallback="build"))

    @property
    def manifest_name(self) -> str:
        return self._config.get("export", "manifest_name", fallback="manifest.json")

    @property
    def json_indent(self) -> int:
        return self._getint("export", "json_indent", fallback=2)

    def get(self, section: str, key: str, fallback: str = "") -> str:
        return self._config.get(section, key, fallback=fallback)

    def set(self, section: str, key: str, value: str) -> None:
        if not self._config.has_section(section):
            self._config.add_section(section)
        self._config.set(section, key, value)

    def get_status(self) -> Dict[str, Any]:
        return {
            "base_path": str(self.base_path),
            "config_exists": self.config_path.exists(),
            "source_dir": str(self.source_dir),
            "declaration_suffix": self.declaration_suffix,
            "recursive": self.recursive,
            "parallel_workers": self.parallel_workers,
            "output_dir": str(self.output_dir),
        }
