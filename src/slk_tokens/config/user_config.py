"""The user's ``config.json`` record.

Holds the path of the SSH key tokens are encrypted with, and other settings
the command layer owns. The token store never reads this file itself; callers
turn ``ssh_key`` into a ``ProtectionMode`` and pass it in.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Optional

from loguru import logger

from ..atomic import write_atomic
from .paths import ConfigPaths

CONFIG_FILENAME = "config.json"


class UserConfig:
    """Lazily loaded key/value settings persisted as JSON."""

    def __init__(self, paths: Optional[ConfigPaths] = None, on_warning: Optional[Callable[[str], None]] = None):
        self.paths = paths or ConfigPaths()
        self.on_warning = on_warning
        self._data: Optional[Dict[str, Any]] = None  # Loaded on first access so on_warning can be set first

    @property
    def config_file(self):
        return self.paths.config_file(CONFIG_FILENAME)

    @property
    def ssh_key(self) -> Optional[str]:
        return self.data.get("ssh_key") or None

    @ssh_key.setter
    def ssh_key(self, path: Optional[str]) -> None:
        self["ssh_key"] = path

    @property
    def primary_workspace(self) -> Optional[str]:
        return self.data.get("primary_workspace")

    @primary_workspace.setter
    def primary_workspace(self, name: Optional[str]) -> None:
        self["primary_workspace"] = name

    def __getitem__(self, key: str) -> Any:
        return self.data.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        if value is None:
            self.data.pop(key, None)
        else:
            self.data[key] = value
        self.save()

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.data)

    @property
    def data(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = self._load()
        return self._data

    def save(self) -> None:
        self.paths.ensure_config_dir()
        write_atomic(self.config_file, json.dumps(self.data, indent=2).encode("utf-8"))

    def _load(self) -> Dict[str, Any]:
        if not self.config_file.exists():
            return {}

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            self._warn(f"Config file {self.config_file} is corrupted ({e}). Using defaults.")
            return {}

        if not isinstance(data, dict):
            self._warn(f"Config file {self.config_file} is not a JSON object. Using defaults.")
            return {}

        return data

    def _warn(self, message: str) -> None:
        logger.warning(message)
        if self.on_warning:
            self.on_warning(message)
