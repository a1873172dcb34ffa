"""Workspace token store with optional age encryption.

This module handles:
- Looking up and listing workspaces from the token files
- Adding and removing workspaces with validation before any disk access
- Migrating the token files between plaintext and encrypted storage
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Set

from loguru import logger

from ..config.paths import ConfigPaths
from ..config.settings import StoreSettings, get_settings
from ..crypto import AgeTool, Encryptor, KeyValidator, PublicKeyPrompt, SshKeygenTool
from ..crypto.key_validator import default_public_key_path
from ..errors import CorruptedStoreError, PrivateKeyNotFound, WorkspaceNotFoundError, WorkspaceValidationError
from ..models import MigrationOutcome, ProtectionMode, TokenRecord, Workspace, normalize_key_path
from ..models.protection import KeyPath
from ..models.workspace import normalize_name
from .loader import CredentialLoader
from .saver import CredentialSaver
from .serialization import CredentialMap

MessageHook = Callable[[str], None]

_MIGRATION_MESSAGES = {
    MigrationOutcome.ENCRYPTED: "Tokens have been encrypted with the new SSH key.",
    MigrationOutcome.RE_ENCRYPTED: "Tokens have been re-encrypted with the new SSH key.",
    MigrationOutcome.DECRYPTED: "Tokens are now stored in plaintext.",
}


class CredentialStore:
    """Public interface to the stored workspace credentials.

    Every query loads the token files afresh, since tokens can change outside
    this process. Every mutation rewrites the complete map.
    """

    def __init__(
        self,
        protection: ProtectionMode,
        paths: Optional[ConfigPaths] = None,
        encryptor: Optional[Encryptor] = None,
        key_validator: Optional[KeyValidator] = None,
    ):
        """Initialize credential store.

        Args:
            protection: How tokens are stored; owned by the caller's config
            paths: Location of the token files (defaults to the platform config dir)
            encryptor: age wrapper (defaults to the real ``age`` binary)
            key_validator: SSH key checks (defaults to the encryptor's validator)
        """
        self.protection = protection
        self.paths = paths or ConfigPaths()
        self.encryptor = encryptor or Encryptor(key_validator=key_validator)
        self.key_validator = key_validator or self.encryptor.key_validator

        self._loader = CredentialLoader(self.paths, self.encryptor)
        self._saver = CredentialSaver(self.paths, self.encryptor)

        self.on_info: Optional[MessageHook] = None
        self._on_warning: Optional[MessageHook] = None

    @property
    def on_warning(self) -> Optional[MessageHook]:
        return self._on_warning

    @on_warning.setter
    def on_warning(self, hook: Optional[MessageHook]) -> None:
        # Key checks report a skipped pair comparison through the same hook
        self._on_warning = hook
        self._saver.on_warning = hook
        self.key_validator.on_warning = hook
        self.encryptor.key_validator.on_warning = hook

    @property
    def on_prompt_pub_key(self) -> Optional[PublicKeyPrompt]:
        return self.encryptor.on_prompt_pub_key

    @on_prompt_pub_key.setter
    def on_prompt_pub_key(self, hook: Optional[PublicKeyPrompt]) -> None:
        self.encryptor.on_prompt_pub_key = hook

    @property
    def loader(self) -> CredentialLoader:
        return self._loader

    def lookup(self, name: str) -> Workspace:
        """Get the workspace called ``name``.

        Raises:
            WorkspaceNotFoundError: no such workspace
            CorruptedStoreError: the stored entry is not a valid workspace
        """
        name = normalize_name(name)
        record = self._load().get(name)
        if record is None:
            raise WorkspaceNotFoundError(name)
        return self._to_workspace(name, record)

    def all(self) -> List[Workspace]:
        """All workspaces, in the order they were first added."""
        return [self._to_workspace(name, record) for name, record in self._load().items()]

    def names(self) -> Set[str]:
        return set(self._load())

    def exists(self, name: str) -> bool:
        return normalize_name(name) in self._load()

    def empty(self) -> bool:
        return not self._load()

    def add(self, name: str, token: str, cookie: Optional[str] = None) -> Workspace:
        """Add or replace a workspace.

        The workspace is validated before the token files are touched.

        Raises:
            WorkspaceValidationError: invalid name, token or cookie
            CredentialStoreError: the tokens could not be loaded or saved
        """
        workspace = Workspace(name=name, token=token, cookie=cookie)

        credentials = self._load()
        replaced = workspace.name in credentials
        credentials[workspace.name] = workspace.to_record()
        self._saver.save(credentials, self.protection)

        logger.info(f"{'Updated' if replaced else 'Added'} workspace {workspace.name}")
        return workspace

    def remove(self, name: str) -> bool:
        """Remove a workspace.

        Returns:
            True if the workspace existed. Nothing is written otherwise.
        """
        name = normalize_name(name)
        credentials = self._load()
        if credentials.pop(name, None) is None:
            return False

        self._saver.save(credentials, self.protection)
        logger.info(f"Removed workspace {name}")
        return True

    def migrate(self, old_key: Optional[KeyPath], new_key: Optional[KeyPath]) -> MigrationOutcome:
        """Re-store all tokens under ``new_key`` (None for plaintext).

        The tokens are read with ``old_key`` explicitly, not with the store's
        current protection, since the caller's config may already point at the
        new key. The destination key is fully validated before anything is
        written.

        Raises:
            MissingKeyError: tokens are encrypted and ``old_key`` is None
            KeyValidationError: ``new_key`` cannot be used (unsupported, mismatched, ...)
            EncryptionError, CorruptedStoreError, StoreError: load or save failed
        """
        old_path = normalize_key_path(old_key)
        new_path = normalize_key_path(new_key)

        if old_path == new_path:
            return MigrationOutcome.UNCHANGED

        credentials = self._loader.load(ProtectionMode.from_key(old_path))
        if not credentials:
            logger.debug("No tokens to migrate")
            return MigrationOutcome.NOTHING_TO_MIGRATE

        new_mode = ProtectionMode.from_key(new_path)
        if new_path is not None:
            self._validate_new_key(new_path)

        self._saver.save(credentials, new_mode)
        self.protection = new_mode

        outcome = _migration_outcome(old_path, new_path)
        self._notify(outcome)
        return outcome

    def _validate_new_key(self, key_path: Path) -> None:
        if not key_path.exists():
            raise PrivateKeyNotFound(f"Private key not found: {key_path}")

        public_key = self.encryptor.resolve_public_key(key_path)
        # A prompted public key was already checked when it was accepted
        if public_key == default_public_key_path(key_path):
            self.key_validator.validate(key_path, public_key)

    def _notify(self, outcome: MigrationOutcome) -> None:
        message = _MIGRATION_MESSAGES.get(outcome)
        if message is None:
            return

        if outcome.is_downgrade:
            logger.warning(message)
            if self.on_warning:
                self.on_warning(message)
        else:
            logger.info(message)
            if self.on_info:
                self.on_info(message)

    def _load(self) -> CredentialMap:
        return self._loader.load(self.protection)

    def _to_workspace(self, name: str, record: TokenRecord) -> Workspace:
        try:
            return Workspace.from_record(name, record)
        except WorkspaceValidationError as e:
            encrypted = self._loader.encrypted_file_exists()
            path = self._loader.encrypted_file if encrypted else self._loader.plain_file
            raise CorruptedStoreError(
                f"Stored workspace '{name}' is invalid ({e})", path=path, encrypted=encrypted
            ) from None


def _migration_outcome(old_path: Optional[Path], new_path: Optional[Path]) -> MigrationOutcome:
    if new_path is None:
        return MigrationOutcome.DECRYPTED
    if old_path is None:
        return MigrationOutcome.ENCRYPTED
    return MigrationOutcome.RE_ENCRYPTED


def create_credential_store(
    protection: ProtectionMode,
    settings: Optional[StoreSettings] = None,
) -> CredentialStore:
    """Build a store wired to the real ``age`` and ``ssh-keygen`` binaries from ``settings``."""
    settings = settings or get_settings()
    key_validator = KeyValidator(keygen=SshKeygenTool(settings.ssh_keygen_binary))
    encryptor = Encryptor(age=AgeTool(settings.age_binary), key_validator=key_validator)
    return CredentialStore(
        protection,
        paths=ConfigPaths(settings.config_dir),
        encryptor=encryptor,
        key_validator=key_validator,
    )
