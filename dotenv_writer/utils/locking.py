"""Cross-platform advisory file locks for ``.env`` writers."""

from __future__ import annotations

import errno
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, MutableMapping, Union

try:  # pragma: no cover - platform dependent
    import fcntl  # type: ignore
except ModuleNotFoundError:  # pragma: no cover
    fcntl = None  # type: ignore

try:  # pragma: no cover - platform dependent
    import msvcrt  # type: ignore
except ModuleNotFoundError:  # pragma: no cover
    msvcrt = None  # type: ignore

log = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"

# Per-path thread locks, reference counted so unused entries are dropped.
_THREAD_LOCKS: MutableMapping[str, threading.Lock] = {}
_LOCK_COUNTS: MutableMapping[str, int] = {}
_THREAD_LOCKS_GUARD = threading.Lock()


def _acquire_thread_lock_ref(path: str) -> threading.Lock:
    with _THREAD_LOCKS_GUARD:
        if path not in _THREAD_LOCKS:
            _THREAD_LOCKS[path] = threading.Lock()
            _LOCK_COUNTS[path] = 0
        _LOCK_COUNTS[path] += 1
        return _THREAD_LOCKS[path]


def _release_thread_lock_ref(path: str) -> None:
    with _THREAD_LOCKS_GUARD:
        _LOCK_COUNTS[path] -= 1
        if _LOCK_COUNTS[path] <= 0:
            _THREAD_LOCKS.pop(path, None)
            _LOCK_COUNTS.pop(path, None)


def _acquire_file_lock(fileobj: Any, exclusive: bool) -> None:
    if fcntl is not None:  # pragma: no branch - simple POSIX case
        flag = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        while True:
            try:
                fcntl.flock(fileobj.fileno(), flag)
                return
            except OSError as exc:  # pragma: no cover - rare EINTR handling
                if exc.errno != errno.EINTR:
                    raise
    elif msvcrt is not None:  # pragma: no cover - Windows fallback
        # msvcrt has no shared locks; lock the first byte, which also works
        # on an empty sidecar file.
        fileobj.seek(0)
        msvcrt.locking(fileobj.fileno(), msvcrt.LK_LOCK, 1)


def _release_file_lock(fileobj: Any) -> None:
    if fcntl is not None:  # pragma: no branch - simple POSIX case
        while True:
            try:
                fcntl.flock(fileobj.fileno(), fcntl.LOCK_UN)
                return
            except OSError as exc:  # pragma: no cover - rare EINTR handling
                if exc.errno != errno.EINTR:
                    raise
    elif msvcrt is not None:  # pragma: no cover - Windows fallback
        fileobj.seek(0)
        msvcrt.locking(fileobj.fileno(), msvcrt.LK_UNLCK, 1)


@contextmanager
def file_lock(fileobj: Any, *, exclusive: bool, strict: bool = False) -> Iterator[None]:
    """Hold a thread lock and an OS-level lock on ``fileobj``.

    With ``strict`` unset a failing OS lock is logged and the block runs
    unlocked; with ``strict`` set the ``OSError`` propagates.
    """
    thread_lock = None
    path = None
    if hasattr(fileobj, "name"):
        path = os.path.abspath(fileobj.name)
        thread_lock = _acquire_thread_lock_ref(path)
        thread_lock.acquire()

    try:
        locked = False
        try:
            _acquire_file_lock(fileobj, exclusive)
            locked = True
        except OSError as exc:
            if strict:
                raise
            log.debug("Dateisperre fehlgeschlagen (%s) – fahre ohne Lock fort.", exc)
        try:
            yield
        finally:
            if locked:
                try:
                    _release_file_lock(fileobj)
                except OSError as exc:  # pragma: no cover - release failures are rare
                    log.debug("Dateisperre konnte nicht gelöst werden: %s", exc)
    finally:
        if thread_lock is not None:
            thread_lock.release()
            if path:
                _release_thread_lock_ref(path)


def lock_path_for(target: Union[str, Path]) -> Path:
    """Return the sidecar lock file guarding ``target``."""

    target = Path(target)
    return target.with_name(target.name + LOCK_SUFFIX)


@contextmanager
def exclusive_sidecar_lock(target: Union[str, Path]) -> Iterator[Path]:
    """Exclusively lock ``<target>.lock`` for the duration of the block.

    The target itself is replaced atomically while the lock is held, so the
    lock lives on a separate file whose inode stays stable.
    """
    lock_path = lock_path_for(target)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with lock_path.open("a+", encoding="utf-8") as lock_file:
        with file_lock(lock_file, exclusive=True, strict=True):
            yield lock_path


__all__ = ["LOCK_SUFFIX", "exclusive_sidecar_lock", "file_lock", "lock_path_for"]
