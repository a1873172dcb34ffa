"""SSH key checks performed before a key is used to encrypt tokens."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..errors import KeyMismatch, KeyUnverifiable, PrivateKeyNotFound, PublicKeyNotFound, UnsupportedKeyType
from .tools import SshKeygenTool

WarningHook = Callable[[str], None]

# Key types age accepts as SSH recipients
SUPPORTED_KEY_TYPES = ("ssh-rsa", "ssh-ed25519")

# Diagnostics that mean ssh-keygen is not installed. They vary by OS and shell.
_NOT_FOUND_MARKERS = ("command not found", "not recognized", "No such file or directory")


class PairCheck(Enum):
    """Outcome of a key pair comparison that did not fail."""

    MATCHED = "matched"
    SKIPPED = "skipped"  # ssh-keygen unavailable, pair could not be compared


def read_first_line(path: Path) -> str:
    """First line of a text file, stripped; empty string for an empty file."""
    with open(path, "r", encoding="utf-8") as f:
        return f.readline().strip()


def key_fields(public_key: str) -> list[str]:
    """Type and base64 key material of an OpenSSH public key line, minus the comment."""
    return public_key.split()[:2]


class KeyValidator:
    """Validates SSH keys against what age supports."""

    def __init__(self, keygen: Optional[SshKeygenTool] = None, on_warning: Optional[WarningHook] = None):
        self.keygen = keygen or SshKeygenTool()
        self.on_warning = on_warning

    def validate_key_type(self, public_key_path: Path) -> None:
        """Check the key type on the first line of ``public_key_path``.

        Raises:
            UnsupportedKeyType: unknown type, or the file is missing, unreadable or empty
        """
        try:
            first_line = read_first_line(Path(public_key_path))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read public key {public_key_path}: {e}")
            first_line = ""

        key_type = first_line.split()[0] if first_line else None
        if key_type in SUPPORTED_KEY_TYPES:
            return

        raise UnsupportedKeyType(
            f"Unsupported SSH key type: {key_type or 'unknown'}. age only supports: {', '.join(SUPPORTED_KEY_TYPES)}"
        )

    def validate_pair(self, private_key_path: Path, public_key_path: Path) -> PairCheck:
        """Check that ``public_key_path`` is the public half of ``private_key_path``.

        Returns:
            PairCheck.MATCHED when the keys correspond, PairCheck.SKIPPED when
            ssh-keygen is not installed and the check could not run.

        Raises:
            KeyMismatch: the public key belongs to a different private key
            KeyUnverifiable: ssh-keygen failed for another reason, e.g. a
                passphrase-protected or corrupted private key
        """
        result = self.keygen.derive_public_key(Path(private_key_path))

        if not result.ok:
            if _keygen_missing(result.diagnostic):
                message = "ssh-keygen not found; skipping the check that the public key matches the private key"
                logger.warning(message)
                if self.on_warning:
                    self.on_warning(message)
                return PairCheck.SKIPPED

            raise KeyUnverifiable(
                f"Cannot verify key pair: {result.diagnostic}. "
                "This may indicate a passphrase-protected or corrupted private key."
            )

        try:
            provided = read_first_line(Path(public_key_path))
        except (OSError, UnicodeDecodeError) as e:
            raise PublicKeyNotFound(f"Cannot read public key {public_key_path}: {e}") from e

        if key_fields(result.stdout.strip()) != key_fields(provided):
            raise KeyMismatch(
                "Public key does not match private key. Please provide the correct public key for this private key."
            )

        logger.debug(f"Public key {public_key_path} matches {private_key_path}")
        return PairCheck.MATCHED

    def validate(self, private_key_path: Path, public_key_path: Optional[Path] = None) -> PairCheck:
        """Run every check needed before encrypting to ``private_key_path``.

        ``public_key_path`` defaults to ``<private_key_path>.pub``.
        """
        private_key_path = Path(private_key_path)
        if not private_key_path.exists():
            raise PrivateKeyNotFound(f"Private key not found: {private_key_path}")

        if public_key_path is None:
            public_key_path = default_public_key_path(private_key_path)
        if not Path(public_key_path).exists():
            raise PublicKeyNotFound(f"Public key not found: {public_key_path}")

        self.validate_key_type(public_key_path)
        return self.validate_pair(private_key_path, public_key_path)


def default_public_key_path(private_key_path: Path) -> Path:
    return Path(f"{private_key_path}.pub")


def _keygen_missing(diagnostic: str) -> bool:
    return any(marker in diagnostic for marker in _NOT_FOUND_MARKERS)
