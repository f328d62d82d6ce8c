"""File utility helpers."""
from __future__ import annotations

import os
import stat
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Iterator, Optional, Union

DEFAULT_PERMISSIONS = 0o644


def existing_permissions(path: Union[str, Path]) -> Optional[int]:
    """Return the permission bits of ``path`` or ``None`` if it does not exist."""

    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return None


@contextmanager
def atomic_write(
    path: Union[str, Path],
    mode: str = "w",
    encoding: Optional[str] = "utf-8",
    permissions: Optional[int] = None,
    newline: Optional[str] = None,
) -> Iterator[IO[Any]]:
    """Safe atomic file write using a temporary file.

    Args:
        path: Target file path.
        mode: Open mode ('w' for text, 'wb' for binary).
        encoding: Text encoding (default: 'utf-8'). Ignored if binary mode.
        permissions: File permissions. ``None`` keeps the mode of an existing
                     target and falls back to 0o644 for new files.
        newline: Newline control (passed to open). Use ``""`` to write line
                 terminators exactly as given.
    """
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)

    if permissions is None:
        permissions = existing_permissions(target)
        if permissions is None:
            permissions = DEFAULT_PERMISSIONS

    text_mode = "b" not in mode
    if not text_mode:
        encoding = None
        newline = None

    # Unique name so a crashed writer never blocks the next one.
    unique_id = uuid.uuid4().hex
    tmp_path = target.with_name(f"{target.name}.{unique_id}.tmp")

    f: Optional[IO[Any]] = None
    try:
        f = open(tmp_path, mode, encoding=encoding, newline=newline)
        yield f
        f.flush()
        os.fsync(f.fileno())
        f.close()
        f = None

        try:
            os.chmod(tmp_path, permissions)
        except OSError:
            # Some filesystems reject chmod; the write itself still succeeds.
            pass

        os.replace(tmp_path, target)

    except BaseException:
        if f is not None:
            try:
                f.close()
            except OSError:
                pass
        if os.path.exists(tmp_path):
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


__all__ = ["DEFAULT_PERMISSIONS", "atomic_write", "existing_permissions"]
