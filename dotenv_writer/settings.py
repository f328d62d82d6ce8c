"""Environment driven defaults for :class:`~dotenv_writer.writer.DotEnvWriter`."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .utils.env import get_bool_env, get_octal_env

__all__ = ["DEFAULT_FILE_MODE", "NEWLINES", "WriterSettings", "load_settings", "resolve_newline"]

log = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o600

NEWLINES = {
    "lf": "\n",
    "crlf": "\r\n",
    "cr": "\r",
}


@dataclass(frozen=True)
class WriterSettings:
    """Summary of the applied writer configuration."""

    newline: str
    file_mode: int
    lock: bool


def resolve_newline(name: str | None) -> str:
    """Map ``lf``/``crlf``/``cr``/``native`` to the terminator string."""

    lowered = (name or "").strip().casefold()
    if not lowered or lowered == "native":
        return os.linesep
    try:
        return NEWLINES[lowered]
    except KeyError:
        log.warning(
            "Unbekannter Zeilenumbruch %r – verwende den Systemstandard "
            "(erlaubt: lf, crlf, cr, native)",
            name,
        )
        return os.linesep


def load_settings() -> WriterSettings:
    """Read ``DOTENV_WRITER_*`` variables, falling back to the defaults."""

    return WriterSettings(
        newline=resolve_newline(os.getenv("DOTENV_WRITER_NEWLINE")),
        file_mode=get_octal_env("DOTENV_WRITER_FILE_MODE", DEFAULT_FILE_MODE),
        lock=get_bool_env("DOTENV_WRITER_LOCK", True),
    )
