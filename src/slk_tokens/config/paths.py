"""Cross-platform location of the config directory.

Uses the XDG base directory layout on Unix and %APPDATA% on Windows.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Optional

from loguru import logger

APP_NAME = "slk"
WINDOWS = os.name == "nt"


def default_config_dir() -> Path:
    if override := os.getenv("SLK_CONFIG_DIR"):
        return Path(override).expanduser()

    if WINDOWS:
        base = os.getenv("APPDATA") or str(Path.home() / "AppData" / "Roaming")
    else:
        base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME


class ConfigPaths:
    """Paths of files in the user-private config directory."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize paths.

        Args:
            config_dir: Directory for config files (defaults to the platform config dir)
        """
        self.config_dir = Path(config_dir) if config_dir is not None else default_config_dir()

    def config_file(self, filename: str) -> Path:
        return self.config_dir / filename

    def ensure_config_dir(self) -> None:
        """Ensure config directory exists with owner-only permissions."""
        try:
            if not self.config_dir.exists():
                self.config_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
                if not WINDOWS:
                    os.chmod(self.config_dir, stat.S_IRWXU)
                logger.debug(f"Created config directory {self.config_dir}")
        except OSError as e:
            logger.error(f"Failed to create config directory: {e}")
            raise
