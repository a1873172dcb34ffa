"""age encryption and SSH key validation."""

from .encryptor import Encryptor, PublicKeyPrompt
from .key_validator import SUPPORTED_KEY_TYPES, KeyValidator, PairCheck
from .tools import AgeTool, SshKeygenTool, ToolResult

__all__ = [
    "AgeTool",
    "Encryptor",
    "KeyValidator",
    "PairCheck",
    "PublicKeyPrompt",
    "SUPPORTED_KEY_TYPES",
    "SshKeygenTool",
    "ToolResult",
]
