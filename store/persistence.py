"""
Backing file utilities for the store module.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from collections.abc import Iterable
from pathlib import Path


logger = logging.getLogger(__name__)

ENCODING = "utf-8"


def ensure_file(path: str | Path) -> bool:
    """Create an empty backing file if needed. Returns True if it was created."""
    path = Path(path)
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
    return True


def _target_mode(path: Path) -> int:
    """Permission bits the replaced file should keep, or the umask default for a new one."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_lines_atomic(path: str | Path, lines: Iterable[str]) -> bool:
    """
    Replace the file at *path* with *lines*, one per line.

    The content goes to a temporary file in the target's directory first and
    is then renamed over the target. When the rename fails the temporary file
    is byte-copied into place instead; that fallback is not crash-atomic and
    a crash mid-copy can leave a truncated target.

    Returns:
        True if the non-atomic fallback copy was used.

    Raises:
        OSError: If the content could not be written. The target is left
            untouched unless the failure happened during the fallback copy.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=ENCODING, newline="\n") as handle:
            for line in lines:
                handle.write(line)
                handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_path, _target_mode(path))
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    try:
        os.replace(tmp_path, path)
        return False
    except OSError as exc:
        logger.warning(f"Atomic rename onto {path} failed ({exc}); falling back to copy")

    try:
        shutil.copyfile(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)
    return True
