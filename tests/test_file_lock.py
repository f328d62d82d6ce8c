from __future__ import annotations

import errno
import logging
import os
from pathlib import Path
from types import SimpleNamespace

import pytest

from dotenv_writer.utils import locking


class FakeFcntl:
    LOCK_EX = 2
    LOCK_SH = 1
    LOCK_UN = 8

    def __init__(self, fail_with: OSError | None = None) -> None:
        self.calls: list[int] = []
        self.fail_with = fail_with

    def flock(self, fileno: int, flag: int) -> None:
        if self.fail_with is not None and flag != self.LOCK_UN:
            raise self.fail_with
        self.calls.append(flag)


def test_lock_path_for_appends_suffix() -> None:
    assert locking.lock_path_for(Path("/srv/app/.env")) == Path("/srv/app/.env.lock")
    assert locking.lock_path_for("prod.env") == Path("prod.env.lock")


def test_file_lock_acquires_and_releases(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeFcntl()
    monkeypatch.setattr(locking, "fcntl", fake)

    with (tmp_path / "x.lock").open("a+") as handle:
        with locking.file_lock(handle, exclusive=True):
            assert fake.calls == [FakeFcntl.LOCK_EX]
            assert os.path.abspath(handle.name) in locking._THREAD_LOCKS

    assert fake.calls == [FakeFcntl.LOCK_EX, FakeFcntl.LOCK_UN]
    assert os.path.abspath(handle.name) not in locking._THREAD_LOCKS


def test_file_lock_shared_mode(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeFcntl()
    monkeypatch.setattr(locking, "fcntl", fake)

    with (tmp_path / "x.lock").open("a+") as handle:
        with locking.file_lock(handle, exclusive=False):
            pass

    assert fake.calls == [FakeFcntl.LOCK_SH, FakeFcntl.LOCK_UN]


def test_file_lock_lenient_mode_continues_without_lock(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    fake = FakeFcntl(fail_with=OSError(errno.ENOLCK, "No locks available"))
    monkeypatch.setattr(locking, "fcntl", fake)
    caplog.set_level(logging.DEBUG, logger="dotenv_writer.utils.locking")
    ran = False

    with (tmp_path / "x.lock").open("a+") as handle:
        with locking.file_lock(handle, exclusive=True):
            ran = True

    assert ran
    assert fake.calls == []
    assert "Dateisperre fehlgeschlagen" in caplog.text


def test_file_lock_strict_mode_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeFcntl(fail_with=OSError(errno.ENOLCK, "No locks available"))
    monkeypatch.setattr(locking, "fcntl", fake)

    with (tmp_path / "x.lock").open("a+") as handle:
        with pytest.raises(OSError):
            with locking.file_lock(handle, exclusive=True, strict=True):
                pytest.fail("body must not run without the lock")

        assert os.path.abspath(handle.name) not in locking._THREAD_LOCKS


def test_file_lock_without_name_skips_thread_lock(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = FakeFcntl()
    monkeypatch.setattr(locking, "fcntl", fake)
    fileobj = SimpleNamespace(fileno=lambda: 3)

    with locking.file_lock(fileobj, exclusive=True):
        pass

    assert fake.calls == [FakeFcntl.LOCK_EX, FakeFcntl.LOCK_UN]


@pytest.mark.skipif(os.name != "posix", reason="flock semantics")
def test_exclusive_sidecar_lock_creates_lock_file(tmp_path: Path) -> None:
    target = tmp_path / "sub" / ".env"

    with locking.exclusive_sidecar_lock(target) as lock_path:
        assert lock_path == tmp_path / "sub" / ".env.lock"
        assert lock_path.exists()

    assert not target.exists()
