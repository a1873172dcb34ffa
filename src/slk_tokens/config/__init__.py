"""Configuration module for the token store."""

from .logger_config import setup_logging
from .paths import ConfigPaths, default_config_dir
from .settings import StoreSettings, get_settings, reset_settings
from .user_config import UserConfig

__all__ = [
    "ConfigPaths",
    "StoreSettings",
    "UserConfig",
    "default_config_dir",
    "get_settings",
    "reset_settings",
    "setup_logging",
]
