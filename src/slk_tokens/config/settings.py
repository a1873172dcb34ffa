"""Runtime settings for the token store.

Settings come from dataclass defaults, overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

from .paths import default_config_dir

_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class StoreSettings:
    """Complete token store configuration."""

    # Storage
    config_dir: Path = field(default_factory=default_config_dir)

    # External tools
    age_binary: str = "age"
    ssh_keygen_binary: str = "ssh-keygen"

    # Logging
    log_level: str = "INFO"
    log_to_console: bool = True
    log_to_file: bool = False
    log_rotation: str = "1 MB"
    log_retention: str = "7 days"

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        if age_binary := os.getenv("SLK_AGE_BIN"):
            self.age_binary = age_binary

        if ssh_keygen_binary := os.getenv("SLK_SSH_KEYGEN_BIN"):
            self.ssh_keygen_binary = ssh_keygen_binary

        if log_level := os.getenv("SLK_LOG_LEVEL"):
            if log_level.upper() in _LOG_LEVELS:
                self.log_level = log_level.upper()
            else:
                logger.warning(f"Invalid log level: {log_level}")

        if log_to_file := os.getenv("SLK_LOG_TO_FILE"):
            self.log_to_file = log_to_file.lower() in _TRUTHY

    @property
    def log_file_path(self) -> Path:
        return self.config_dir / "slk.log"

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the settings.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.age_binary:
            errors.append("age binary name is required")

        if not self.ssh_keygen_binary:
            errors.append("ssh-keygen binary name is required")

        if self.log_level not in _LOG_LEVELS:
            errors.append(f"Unknown log level: {self.log_level}")

        return len(errors) == 0, errors


_settings: Optional[StoreSettings] = None


def get_settings() -> StoreSettings:
    """Get the process-wide settings, created on first use."""
    global _settings
    if _settings is None:
        _settings = StoreSettings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next ``get_settings()`` re-reads the environment."""
    global _settings
    _settings = None
