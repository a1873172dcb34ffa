"""High-level SSH key management for the token store.

Changing the configured SSH key migrates the stored tokens first and only
then records the new key in ``config.json``, so the config never points at a
key the tokens are not encrypted with.
"""

from __future__ import annotations

import errno
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..config.user_config import UserConfig
from ..errors import CredentialStoreError, MissingKeyError
from ..models import MigrationOutcome
from .store import CredentialStore, MessageHook

# Asked for the old key when tokens are encrypted but no key is configured
KeyPathPrompt = Callable[[], Optional[str]]

# Filesystem errors mapped to user-friendly messages
_OS_ERROR_MESSAGES = {
    getattr(errno, name): message
    for name, message in (
        ("ENOENT", "File not found"),
        ("EACCES", "Permission denied"),
        ("EPERM", "Permission denied"),
        ("ENOSPC", "Disk full"),
        ("EDQUOT", "Disk quota exceeded"),  # Not defined on Windows
        ("EROFS", "Read-only file system"),
    )
    if hasattr(errno, name)
}


@dataclass(frozen=True)
class KeyChangeResult:
    """Outcome of setting or clearing the SSH key."""

    success: bool
    message: str
    outcome: Optional[MigrationOutcome] = None

    @classmethod
    def ok(cls, message: str, outcome: Optional[MigrationOutcome] = None) -> "KeyChangeResult":
        return cls(True, message, outcome)

    @classmethod
    def error(cls, message: str) -> "KeyChangeResult":
        return cls(False, message)


class KeyManager:
    """Sets and clears the SSH key tokens are encrypted with."""

    def __init__(
        self,
        config: UserConfig,
        store: CredentialStore,
        prompt_for_key_path: Optional[KeyPathPrompt] = None,
    ):
        """Initialize key manager.

        Args:
            config: User config holding ``ssh_key``
            store: Token store to migrate
            prompt_for_key_path: Asked for the decryption key when encrypted
                tokens exist but no key is configured
        """
        self.config = config
        self.store = store
        self.prompt_for_key_path = prompt_for_key_path
        self.on_info: Optional[MessageHook] = None
        self.on_warning: Optional[MessageHook] = None

    def set_key(self, new_path: Optional[str]) -> KeyChangeResult:
        """Encrypt tokens with ``new_path`` and remember it; an empty path clears the key."""
        if not new_path:
            return self.unset_key()
        return self._with_error_handling(lambda: self._perform_set(new_path))

    def unset_key(self) -> KeyChangeResult:
        """Store tokens in plaintext and forget the key."""
        return self._with_error_handling(self._perform_unset)

    def _perform_set(self, new_path: str) -> KeyChangeResult:
        if new_path.endswith(".pub"):
            return KeyChangeResult.error("Please provide the private key path, not the public key (.pub)")

        key_path = Path(new_path).expanduser().absolute()
        outcome = self._migrate(self.config.ssh_key, key_path)
        self.config.ssh_key = str(key_path)
        return KeyChangeResult.ok(f"Set ssh_key = {key_path}", outcome)

    def _perform_unset(self) -> KeyChangeResult:
        outcome = self._migrate(self._resolve_old_key(), None)
        self.config.ssh_key = None
        return KeyChangeResult.ok("Cleared ssh_key", outcome)

    def _resolve_old_key(self) -> Optional[str]:
        old_key = self.config.ssh_key
        if old_key or not self.store.loader.encrypted_file_exists():
            return old_key

        answer = self.prompt_for_key_path() if self.prompt_for_key_path else None
        if not answer:
            raise MissingKeyError("SSH key path required to decrypt existing tokens. Operation cancelled.")
        return str(Path(answer).expanduser().absolute())

    def _migrate(self, old_key: Optional[str], new_key: Optional[Path]) -> MigrationOutcome:
        self.store.on_info = self.on_info
        self.store.on_warning = self.on_warning
        return self.store.migrate(old_key, new_key)

    def _with_error_handling(self, action: Callable[[], KeyChangeResult]) -> KeyChangeResult:
        try:
            return action()
        except CredentialStoreError as e:
            logger.error(f"SSH key change failed ({e.kind.value}): {e}")
            return KeyChangeResult.error(str(e))
        except OSError as e:
            label = _OS_ERROR_MESSAGES.get(e.errno, "File error")
            logger.error(f"SSH key change failed: {e}")
            return KeyChangeResult.error(f"{label}: {e}")
