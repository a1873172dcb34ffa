"""Encrypts and decrypts token payloads with age, using an SSH key pair."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Optional

from loguru import logger

from ..errors import EncryptionError, PublicKeyNotFound
from .key_validator import KeyValidator, default_public_key_path
from .tools import AgeTool

# Called with the private key path when <key>.pub is missing; returns another path or None
PublicKeyPrompt = Callable[[Path], Optional[str]]


class Encryptor:
    """age encryption to the public half of an SSH key."""

    def __init__(
        self,
        age: Optional[AgeTool] = None,
        key_validator: Optional[KeyValidator] = None,
        on_prompt_pub_key: Optional[PublicKeyPrompt] = None,
    ):
        """Initialize the encryptor.

        Args:
            age: age wrapper (defaults to the ``age`` binary on PATH)
            key_validator: validator applied to prompted public keys
            on_prompt_pub_key: asked for a public key path when ``<key>.pub`` is missing
        """
        self.age = age or AgeTool()
        self.key_validator = key_validator or KeyValidator()
        self.on_prompt_pub_key = on_prompt_pub_key
        # Public keys accepted from the prompt, by private key path
        self._prompted_keys: Dict[Path, Path] = {}

    def available(self) -> bool:
        return self.age.available()

    def resolve_public_key(self, private_key_path: Path, on_missing_prompt: Optional[PublicKeyPrompt] = None) -> Path:
        """Find the public key belonging to ``private_key_path``.

        Looks for ``<private_key_path>.pub`` first. If that is missing, asks the
        prompt once; a prompted path is only accepted after it passes the key
        type and key pair checks.

        Raises:
            PublicKeyNotFound: no public key could be found
            UnsupportedKeyType, KeyMismatch, KeyUnverifiable: the prompted key is unusable
        """
        private_key_path = Path(private_key_path)
        default_pub = default_public_key_path(private_key_path)
        if default_pub.exists():
            return default_pub
        if private_key_path in self._prompted_keys:
            return self._prompted_keys[private_key_path]

        prompt = on_missing_prompt or self.on_prompt_pub_key
        if prompt is not None:
            answer = prompt(private_key_path)
            if answer:
                candidate = Path(answer).expanduser()
                if candidate.exists():
                    self.key_validator.validate_key_type(candidate)
                    self.key_validator.validate_pair(private_key_path, candidate)
                    logger.info(f"Using public key {candidate} for {private_key_path}")
                    self._prompted_keys[private_key_path] = candidate
                    return candidate
                logger.warning(f"Prompted public key {candidate} does not exist")

        raise PublicKeyNotFound(f"Public key not found: {default_pub}")

    def encrypt(self, plaintext: str, private_key_path: Path, output_path: Path) -> None:
        """Encrypt ``plaintext`` into ``output_path``.

        Raises:
            EncryptionError: age is unavailable or exited non-zero
            PublicKeyNotFound: no public key for ``private_key_path``
        """
        if not self.available():
            raise EncryptionError("age encryption tool not available")

        public_key = self.resolve_public_key(Path(private_key_path))
        result = self.age.encrypt(plaintext, public_key, Path(output_path))
        if not result.ok:
            raise EncryptionError(f"Failed to encrypt: {result.diagnostic}")

        logger.debug(f"Encrypted payload to {output_path}")

    def decrypt(self, encrypted_path: Path, private_key_path: Path) -> Optional[str]:
        """Decrypt ``encrypted_path`` with ``private_key_path``.

        Returns:
            The decrypted text, or None when ``encrypted_path`` does not exist

        Raises:
            EncryptionError: age unavailable, private key missing, or age exited non-zero
        """
        encrypted_path = Path(encrypted_path)
        if not encrypted_path.exists():
            return None

        if not self.available():
            raise EncryptionError("age encryption tool not available")
        if not Path(private_key_path).exists():
            raise EncryptionError(f"SSH key not found: {private_key_path}")

        result = self.age.decrypt(encrypted_path, Path(private_key_path))
        if not result.ok:
            raise EncryptionError(f"Failed to decrypt {encrypted_path}: {result.diagnostic}")

        return result.stdout
