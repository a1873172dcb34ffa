"""slk-tokens - workspace token storage with optional age encryption."""

from loguru import logger

from .config import ConfigPaths, StoreSettings, UserConfig, get_settings, setup_logging
from .credential import CredentialStore, KeyChangeResult, KeyManager, create_credential_store
from .errors import CredentialStoreError, ErrorKind
from .models import MigrationOutcome, ProtectionMode, TokenKind, Workspace

__version__ = "0.1.0"

# Silent until the application calls setup_logging()
logger.disable("slk_tokens")

__all__ = [
    "ConfigPaths",
    "CredentialStore",
    "CredentialStoreError",
    "ErrorKind",
    "KeyChangeResult",
    "KeyManager",
    "MigrationOutcome",
    "ProtectionMode",
    "StoreSettings",
    "TokenKind",
    "UserConfig",
    "Workspace",
    "create_credential_store",
    "get_settings",
    "setup_logging",
]
