"""Workspace credential storage.

This module provides the token store: loading and saving the credential map
in plaintext or age-encrypted form, and migrating between the two.
"""

from .loader import ENCRYPTED_TOKENS_FILE, PLAIN_TOKENS_FILE, CredentialLoader
from .manager import KeyChangeResult, KeyManager
from .saver import CredentialSaver
from .serialization import CredentialMap, parse_credential_map, serialize_credential_map
from .store import CredentialStore, create_credential_store

__all__ = [
    "ENCRYPTED_TOKENS_FILE",
    "PLAIN_TOKENS_FILE",
    "CredentialLoader",
    "CredentialMap",
    "CredentialSaver",
    "CredentialStore",
    "KeyChangeResult",
    "KeyManager",
    "create_credential_store",
    "parse_credential_map",
    "serialize_credential_map",
]
