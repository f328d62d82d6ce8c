"""Logging utilities for sanitizing inputs and handling sensitive data."""

from __future__ import annotations

import logging
import os
import re
from typing import Any

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
# CSI, OSC, Fe and two-byte ANSI escape sequences
_ANSI_ESCAPE_RE = re.compile(r'\x1b(?:\[[0-?]*[ -/]*[@-~]|\][^\x07\x1b]*(?:\x07|\x1b\\)|[@-Z\\^_]|[\x20-\x2f][\x30-\x7e])')

_SECRET_KEY_RE = re.compile(
    r"(?i)(?:password|passwd|secret|token|api[-_.]?key|access[-_.]?id|"
    r"credential|private[-_.]?key|auth|session|cookie|signature|dsn)"
)


def sanitize_log_message(text: str, strip_control_chars: bool = True) -> str:
    """
    Remove ANSI sequences and escape control characters in ``text``.

    Keys and values read from ``.env`` files are user controlled; a value with
    embedded newlines must not be able to forge additional log records.
    """
    if not text:
        return ""

    sanitized = _ANSI_ESCAPE_RE.sub("", text)

    if strip_control_chars:
        sanitized = sanitized.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
        sanitized = _CONTROL_CHARS_RE.sub("", sanitized)

    return sanitized


def sanitize_log_arg(arg: Any) -> Any:
    """Sanitize a single argument passed to a logging call."""
    if isinstance(arg, (int, float)):
        return arg
    if isinstance(arg, str):
        return sanitize_log_message(arg)
    return sanitize_log_message(str(arg))


def is_secret_key(key: str) -> bool:
    """Return ``True`` if ``key`` looks like it holds a credential."""
    return bool(_SECRET_KEY_RE.search(key or ""))


def mask_value(value: str) -> str:
    if not value:
        return "<leer>"
    if len(value) <= 4:
        return "*" * len(value)
    return f"{value[:2]}***{value[-2:]}"


def _logging_level_from_env(default_level: int = logging.INFO) -> int:
    raw = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    level = getattr(logging, raw, default_level)
    return level if isinstance(level, int) else default_level


def configure_logging(level: int | None = None) -> int:
    """Configure console logging for command line use and return the level.

    The library itself never configures handlers; only entry points call this.
    """
    if level is None:
        level = _logging_level_from_env()
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    logging.getLogger().setLevel(level)
    return level


__all__ = [
    "configure_logging",
    "is_secret_key",
    "mask_value",
    "sanitize_log_arg",
    "sanitize_log_message",
]
