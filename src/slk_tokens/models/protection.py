"""Protection mode of the token files and outcomes of changing it."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

KeyPath = Union[str, os.PathLike]


def normalize_key_path(key_path: Optional[KeyPath]) -> Optional[Path]:
    """Return ``key_path`` as a Path, mapping None and "" to None."""
    if key_path is None or str(key_path) == "":
        return None
    return Path(key_path)


@dataclass(frozen=True)
class ProtectionMode:
    """Either plaintext or encrypted to the public half of ``key_path``.

    The caller owns this value (it comes from the user's config) and passes it
    to the store explicitly.
    """

    key_path: Optional[Path] = None

    @classmethod
    def plaintext(cls) -> "ProtectionMode":
        return cls(None)

    @classmethod
    def encrypted(cls, key_path: KeyPath) -> "ProtectionMode":
        path = normalize_key_path(key_path)
        if path is None:
            raise ValueError("Encrypted protection mode requires a private key path")
        return cls(path)

    @classmethod
    def from_key(cls, key_path: Optional[KeyPath]) -> "ProtectionMode":
        return cls(normalize_key_path(key_path))

    @property
    def is_encrypted(self) -> bool:
        return self.key_path is not None

    def __str__(self) -> str:
        return f"encrypted({self.key_path})" if self.key_path else "plaintext"


class MigrationOutcome(Enum):
    """What a protection mode migration did."""

    UNCHANGED = "unchanged"  # Old and new key are the same
    NOTHING_TO_MIGRATE = "nothing_to_migrate"  # No tokens stored yet
    ENCRYPTED = "encrypted"  # Plaintext -> key
    RE_ENCRYPTED = "re_encrypted"  # Key -> different key
    DECRYPTED = "decrypted"  # Key -> plaintext

    @property
    def is_downgrade(self) -> bool:
        return self is MigrationOutcome.DECRYPTED
