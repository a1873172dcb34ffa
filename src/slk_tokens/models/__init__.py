"""Models package."""

from .protection import MigrationOutcome, ProtectionMode, normalize_key_path
from .record import TokenRecord
from .workspace import TokenKind, Workspace

__all__ = [
    "MigrationOutcome",
    "ProtectionMode",
    "TokenKind",
    "TokenRecord",
    "Workspace",
    "normalize_key_path",
]
