"""Reads the credential map from whichever token file is authoritative."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from ..config.paths import ConfigPaths
from ..crypto import Encryptor
from ..errors import CorruptedStoreError, MissingKeyError, StoreError
from ..models import ProtectionMode
from .serialization import CredentialMap, CredentialParseError, parse_credential_map

ENCRYPTED_TOKENS_FILE = "tokens.age"
PLAIN_TOKENS_FILE = "tokens.json"


class CredentialLoader:
    """Loads tokens from ``tokens.age`` (preferred) or ``tokens.json``."""

    def __init__(self, paths: ConfigPaths, encryptor: Encryptor):
        self.paths = paths
        self.encryptor = encryptor

    @property
    def encrypted_file(self) -> Path:
        return self.paths.config_file(ENCRYPTED_TOKENS_FILE)

    @property
    def plain_file(self) -> Path:
        return self.paths.config_file(PLAIN_TOKENS_FILE)

    def encrypted_file_exists(self) -> bool:
        return self.encrypted_file.exists()

    def plain_file_exists(self) -> bool:
        return self.plain_file.exists()

    def load(self, mode: ProtectionMode) -> CredentialMap:
        """Load the credential map.

        An encrypted file always wins over a plaintext one. No token file at
        all is the first-run state and yields an empty map.

        Args:
            mode: Protection mode supplying the private key for decryption

        Raises:
            MissingKeyError: tokens are encrypted but ``mode`` has no key
            EncryptionError: decryption failed
            CorruptedStoreError: the token file does not parse
            StoreError: the plaintext file could not be read
        """
        if self.encrypted_file_exists():
            if not mode.is_encrypted:
                raise MissingKeyError(
                    f"Tokens in {self.encrypted_file} are encrypted but no SSH key is configured. "
                    "Set ssh_key in config.json to the private key they were encrypted with."
                )
            return self._load_encrypted(mode.key_path)

        if self.plain_file_exists():
            return self._load_plain()

        logger.debug("No token file found")
        return {}

    def _load_encrypted(self, key_path: Path) -> CredentialMap:
        content = self.encryptor.decrypt(self.encrypted_file, key_path)
        if content is None or not content.strip():
            return {}

        try:
            credentials = parse_credential_map(content)
        except CredentialParseError as e:
            raise CorruptedStoreError(
                f"Encrypted tokens file is corrupted: {e}", path=self.encrypted_file, encrypted=True
            ) from None

        logger.debug(f"Loaded {len(credentials)} workspace(s) from {self.encrypted_file}")
        return credentials

    def _load_plain(self) -> CredentialMap:
        try:
            with open(self.plain_file, "r", encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            # Removed between the existence check and the read
            return {}
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"Failed to read tokens file {self.plain_file}: {e}", self.plain_file) from e

        try:
            credentials = parse_credential_map(content)
        except CredentialParseError as e:
            raise CorruptedStoreError(
                f"Tokens file {self.plain_file} is corrupted: {e}", path=self.plain_file, encrypted=False
            ) from None

        logger.debug(f"Loaded {len(credentials)} workspace(s) from {self.plain_file}")
        return credentials
