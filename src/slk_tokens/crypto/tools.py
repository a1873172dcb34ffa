"""Thin wrappers around the external ``age`` and ``ssh-keygen`` executables.

Business logic never spawns processes itself; it talks to these classes,
which tests replace with in-memory fakes.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

# Exit status shells use for "command not found"
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class ToolResult:
    """Exit status and captured output of an external tool run."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        return self.stderr.strip()


def run_tool(args: Sequence[str], stdin: Optional[str] = None) -> ToolResult:
    """Run ``args`` to completion and capture its output.

    A missing executable is reported as a result with the OS error text in
    ``stderr`` rather than raised, so callers can tell "not installed" apart
    from a real failure by looking at the diagnostic.
    """
    logger.debug(f"Running {args[0]}")
    try:
        completed = subprocess.run(
            list(args),
            input=stdin,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        return ToolResult(COMMAND_NOT_FOUND, "", str(e))
    return ToolResult(completed.returncode, completed.stdout, completed.stderr)


class AgeTool:
    """The ``age`` encryption tool, used with SSH keys as recipients/identities."""

    def __init__(self, binary: str = "age"):
        self.binary = binary

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def encrypt(self, plaintext: str, recipients_file: Path, output_path: Path) -> ToolResult:
        """Encrypt ``plaintext`` (read from stdin) to ``output_path``."""
        return run_tool([self.binary, "-R", str(recipients_file), "-o", str(output_path)], stdin=plaintext)

    def decrypt(self, encrypted_path: Path, identity_file: Path) -> ToolResult:
        """Decrypt ``encrypted_path``; the plaintext is in ``stdout``."""
        return run_tool([self.binary, "-d", "-i", str(identity_file), str(encrypted_path)])


class SshKeygenTool:
    """``ssh-keygen``, used only to derive a public key from a private key."""

    def __init__(self, binary: str = "ssh-keygen"):
        self.binary = binary

    def derive_public_key(self, private_key_path: Path) -> ToolResult:
        return run_tool([self.binary, "-y", "-f", str(private_key_path)])
