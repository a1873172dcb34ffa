"""Atomic file replacement.

Data is written to a temporary file in the destination's directory (so the
final rename never crosses filesystems), optionally restricted to the owner,
then renamed over the destination. Readers see either the old file or the
complete new one, never a partial write.
"""

from __future__ import annotations

import os
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from .errors import StoreError

WINDOWS = os.name == "nt"


def restrict_file_permissions(path: Path) -> None:
    """Restrict ``path`` to owner read/write.

    No-op on Windows, where files under %APPDATA% are already user-private.
    """
    if not WINDOWS:
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)


@contextmanager
def atomic_target(path: Path, restrict_permissions: bool = True) -> Iterator[Path]:
    """Yield a temporary path that replaces ``path`` when the block succeeds.

    Whatever the block writes to the yielded path is renamed over ``path`` on
    normal exit. With ``restrict_permissions`` off, the replacement keeps the
    mode of the file it replaces; a new file stays owner-only, as created by
    ``mkstemp``. On any exception, including KeyboardInterrupt, the temporary
    file is removed and ``path`` is left untouched.

    Raises:
        StoreError: a filesystem operation failed
    """
    path = Path(path)
    try:
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        os.close(fd)
    except OSError as e:
        raise StoreError(f"Failed to create temporary file for {path}: {e.strerror or e}", path) from e

    temp_path = Path(temp_name)
    try:
        yield temp_path
        if restrict_permissions:
            restrict_file_permissions(temp_path)
        else:
            _copy_existing_mode(path, temp_path)
        os.replace(temp_path, path)
    except OSError as e:
        _discard(temp_path)
        raise StoreError(f"Failed to write {path}: {e.strerror or e}", path) from e
    except BaseException:
        _discard(temp_path)
        raise


def write_atomic(path: Path, data: bytes, restrict_permissions: bool = True) -> None:
    """Atomically replace ``path`` with ``data``.

    Raises:
        StoreError: permission denied, disk full, read-only filesystem, ...
    """
    with atomic_target(path, restrict_permissions) as temp_path:
        with open(temp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

    logger.debug(f"Wrote {path} ({len(data)} bytes)")


def remove_if_exists(path: Path) -> bool:
    """Delete ``path`` if present.

    Returns:
        True if a file was removed

    Raises:
        StoreError: the file exists but could not be removed
    """
    try:
        Path(path).unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise StoreError(f"Failed to remove {path}: {e.strerror or e}", Path(path)) from e

    logger.debug(f"Removed {path}")
    return True


def _copy_existing_mode(path: Path, temp_path: Path) -> None:
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return
    os.chmod(temp_path, mode)


def _discard(temp_path: Path) -> None:
    try:
        temp_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temporary file {temp_path}: {e}")
