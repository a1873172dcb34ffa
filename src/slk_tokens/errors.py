"""Error taxonomy for the credential store.

Every failure the store can raise carries an ``ErrorKind`` so callers can
handle the closed set of outcomes exhaustively instead of catching broad
exception types. Messages never contain token, cookie or decrypted content.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(Enum):
    """Enumeration of credential store failure kinds."""

    VALIDATION = "validation"  # Bad workspace input, never reaches disk
    NOT_FOUND = "not_found"  # Unknown workspace name
    UNSUPPORTED_KEY_TYPE = "unsupported_key_type"  # age cannot use this key
    KEY_MISMATCH = "key_mismatch"  # Public key does not belong to private key
    KEY_UNVERIFIABLE = "key_unverifiable"  # ssh-keygen failed (passphrase, corrupt key)
    PRIVATE_KEY_NOT_FOUND = "private_key_not_found"
    PUBLIC_KEY_NOT_FOUND = "public_key_not_found"
    ENCRYPTION = "encryption"  # age missing or non-zero exit
    CORRUPTED_STORE = "corrupted_store"  # Loaded content does not parse
    MISSING_KEY = "missing_key"  # Encrypted tokens but no key configured
    STORE_IO = "store_io"  # Filesystem failure while reading or writing


class CredentialStoreError(Exception):
    """Base class for all credential store errors."""

    kind: ErrorKind = ErrorKind.STORE_IO


class ValidationError(CredentialStoreError):
    kind = ErrorKind.VALIDATION


class WorkspaceValidationKind(Enum):
    """Reasons a workspace is rejected at construction."""

    EMPTY_NAME = "empty_name"
    INVALID_NAME = "invalid_name"
    INVALID_TOKEN_PREFIX = "invalid_token_prefix"
    MISSING_COOKIE = "missing_cookie"
    UNSAFE_COOKIE = "unsafe_cookie"


class WorkspaceValidationError(ValidationError):
    """Raised when a workspace cannot be constructed."""

    def __init__(self, message: str, validation_kind: WorkspaceValidationKind):
        super().__init__(message)
        self.validation_kind = validation_kind


class WorkspaceNotFoundError(CredentialStoreError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str):
        super().__init__(f"Workspace '{name}' not found")
        self.name = name


class EncryptionError(CredentialStoreError):
    """age is unavailable, a key file is missing, or age exited non-zero."""

    kind = ErrorKind.ENCRYPTION


class KeyValidationError(EncryptionError):
    """Base for failures that block a key from being used for encryption."""


class UnsupportedKeyType(KeyValidationError):
    kind = ErrorKind.UNSUPPORTED_KEY_TYPE


class KeyMismatch(KeyValidationError):
    kind = ErrorKind.KEY_MISMATCH


class KeyUnverifiable(KeyValidationError):
    kind = ErrorKind.KEY_UNVERIFIABLE


class PrivateKeyNotFound(KeyValidationError):
    kind = ErrorKind.PRIVATE_KEY_NOT_FOUND


class PublicKeyNotFound(KeyValidationError):
    kind = ErrorKind.PUBLIC_KEY_NOT_FOUND


class CorruptedStoreError(CredentialStoreError):
    """A token file exists but its content cannot be parsed.

    ``encrypted`` is True when the age file decrypted to garbage, which means
    either the wrong key was used or the data is lost.
    """

    kind = ErrorKind.CORRUPTED_STORE

    def __init__(self, message: str, path: Optional[Path] = None, encrypted: bool = False):
        super().__init__(message)
        self.path = path
        self.encrypted = encrypted


class MissingKeyError(CredentialStoreError):
    kind = ErrorKind.MISSING_KEY


class StoreError(CredentialStoreError):
    """Filesystem failure (permission denied, disk full, read-only filesystem)."""

    kind = ErrorKind.STORE_IO

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path
