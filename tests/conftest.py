import sys
from pathlib import Path

import pytest

root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))


@pytest.fixture(autouse=True)
def writer_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin writer settings so expectations do not depend on the host."""
    monkeypatch.setenv("DOTENV_WRITER_NEWLINE", "lf")
    monkeypatch.delenv("DOTENV_WRITER_FILE_MODE", raising=False)
    monkeypatch.delenv("DOTENV_WRITER_LOCK", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)


@pytest.fixture
def env_file(tmp_path: Path):
    """Return a factory writing ``content`` byte for byte to ``tmp_path/.env``."""

    def _write(content: str, name: str = ".env") -> Path:
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return path

    return _write
