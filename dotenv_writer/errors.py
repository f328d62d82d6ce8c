"""Exceptions raised by the ``.env`` writer."""

from __future__ import annotations

__all__ = ["ConfigurationError", "DotEnvError", "InvalidKeyError"]


class DotEnvError(Exception):
    """Base class for all errors raised by :mod:`dotenv_writer`."""


class ConfigurationError(DotEnvError, RuntimeError):
    """Raised when the source cannot be read or no destination is known."""


class InvalidKeyError(DotEnvError, ValueError):
    """Raised when a new key contains characters outside ``[A-Za-z0-9_.]``."""

    def __init__(self, key: str) -> None:
        super().__init__(
            f"Neuer Schlüssel {key!r} kann nicht angelegt werden: erlaubt sind "
            "nur ASCII-Buchstaben, Ziffern, Unterstriche und Punkte."
        )
        self.key = key
