"""Writes the credential map in the configured protection mode.

The new token file is always fully in place before the file of the other
mode is removed. A crash in between leaves both files, and the encrypted one
wins on the next load.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..atomic import atomic_target, remove_if_exists, write_atomic
from ..config.paths import ConfigPaths
from ..crypto import Encryptor
from ..errors import StoreError
from ..models import ProtectionMode
from .loader import ENCRYPTED_TOKENS_FILE, PLAIN_TOKENS_FILE
from .serialization import CredentialMap, serialize_credential_map


class CredentialSaver:
    """Persists the complete credential map; there are no partial updates."""

    def __init__(self, paths: ConfigPaths, encryptor: Encryptor):
        self.paths = paths
        self.encryptor = encryptor
        self.on_warning: Optional[Callable[[str], None]] = None

    @property
    def encrypted_file(self) -> Path:
        return self.paths.config_file(ENCRYPTED_TOKENS_FILE)

    @property
    def plain_file(self) -> Path:
        return self.paths.config_file(PLAIN_TOKENS_FILE)

    def save(self, credentials: CredentialMap, mode: ProtectionMode) -> None:
        """Write ``credentials`` and remove the other mode's file.

        A leftover ``tokens.json`` next to a freshly written ``tokens.age`` is
        only reported as a warning: the encrypted file is authoritative, so
        the save has taken effect. A leftover ``tokens.age`` would still shadow
        the new ``tokens.json``, so failing to remove it is an error.

        Raises:
            EncryptionError: age failed or the key is unusable (nothing is replaced)
            StoreError: a filesystem operation failed and the new tokens are not in effect
        """
        self.paths.ensure_config_dir()

        if mode.is_encrypted:
            self._save_encrypted(credentials, mode)
            self._remove_stale_plain_file()
        else:
            self._save_plaintext(credentials)
            remove_if_exists(self.encrypted_file)

        logger.info(f"Saved {len(credentials)} workspace(s) ({mode})")

    def _save_encrypted(self, credentials: CredentialMap, mode: ProtectionMode) -> None:
        payload = serialize_credential_map(credentials, pretty=False)
        # age writes the ciphertext into the temp file, which only replaces tokens.age on success
        with atomic_target(self.encrypted_file, restrict_permissions=True) as temp_path:
            self.encryptor.encrypt(payload, mode.key_path, temp_path)

    def _save_plaintext(self, credentials: CredentialMap) -> None:
        payload = serialize_credential_map(credentials, pretty=True)
        write_atomic(self.plain_file, payload.encode("utf-8"), restrict_permissions=True)

    def _remove_stale_plain_file(self) -> None:
        try:
            remove_if_exists(self.plain_file)
        except StoreError as e:
            message = f"Tokens were encrypted but the plaintext copy could not be removed: {e}. Delete it manually."
            logger.warning(message)
            if self.on_warning:
                self.on_warning(message)
