"""Small filesystem helpers shared by the CA store and the output encoder."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

from ..errors import StorageError


def path_exists(path: str | os.PathLike) -> bool:
    return os.path.exists(path)


def write_file(path: str | os.PathLike, data: bytes, mode: int, what: str) -> Path:
    """Write ``data`` to ``path`` with ``mode`` via a temp file and os.replace.

    The final mode is applied before the rename so the file never becomes
    visible with looser permissions.
    """
    target = Path(path)
    directory = target.parent if str(target.parent) else Path(".")
    try:
        fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", dir=directory)
    except OSError as e:
        raise StorageError(f"failed to save {what} at {target}: {e}") from e
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp, mode)
        os.replace(tmp, target)
    except OSError as e:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise StorageError(f"failed to save {what} at {target}: {e}") from e
    return target


def read_file(path: str | os.PathLike, what: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise StorageError(f"failed to read {what} at {path}: {e}") from e


def move_to_backup(path: str | os.PathLike, suffix: str, what: str) -> Path | None:
    """Rename ``path`` to ``path + suffix`` if it exists; return the new path."""
    if not path_exists(path):
        return None
    new_path = Path(f"{path}{suffix}")
    try:
        os.replace(path, new_path)
    except OSError as e:
        raise StorageError(f"failed to move old {what} to {new_path}: {e}") from e
    return new_path
