"""Filesystem helpers: atomic artifact writes and reads with path-aware errors."""

import glob
import os
import tempfile
from pathlib import Path

from .errors import ArtifactIOError

PRIVATE_MODE = 0o600
PUBLIC_MODE = 0o644
TEMP_SUFFIX = ".tmp"


def _temp_pattern(path: Path) -> str:
    return f".{glob.escape(path.name)}.*{TEMP_SUFFIX}"


def atomic_write(path: Path, data: bytes, mode: int = PUBLIC_MODE) -> None:
    """Write data to path via temp file + rename.

    The temp file lives in the destination directory so the rename stays on one
    filesystem. A failure before the rename leaves path untouched. Temp files
    for the same path left by a killed earlier run are removed first.

    Args:
        path: Final destination
        data: File contents
        mode: Permission bits applied before the rename

    Raises:
        ArtifactIOError: If any filesystem step fails
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        for stale in path.parent.glob(_temp_pattern(path)):
            stale.unlink(missing_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=TEMP_SUFFIX)
    except OSError as e:
        raise ArtifactIOError(f"cannot prepare write: {e}", path) from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise ArtifactIOError(f"atomic write failed: {e}", path) from e


def read_artifact(path: Path) -> bytes:
    """Read an artifact, wrapping OSError with the offending path."""
    try:
        return path.read_bytes()
    except OSError as e:
        raise ArtifactIOError(f"read failed: {e}", path) from e
