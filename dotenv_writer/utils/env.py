#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Helpers for reading environment variables in a safe way.

The writer itself never exports values into the process environment.  These
helpers only cover the other direction: reading the handful of
``DOTENV_WRITER_*`` settings that tune how files are written.
"""

from __future__ import annotations

import logging
import os

__all__ = [
    "get_bool_env",
    "get_octal_env",
]

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}

log = logging.getLogger("dotenv_writer")


def get_bool_env(name: str, default: bool) -> bool:
    """Read boolean environment variables safely.

    Supported truthy values are ``1``, ``true``, ``t``, ``yes``, ``y`` and
    ``on`` (case-insensitive).  Falsy values are ``0``, ``false``, ``f``,
    ``no``, ``n`` and ``off``.  Unset variables or values consisting solely of
    whitespace result in the provided default.  All other values trigger a
    warning and also fall back to the default.
    """

    raw = os.getenv(name)
    if raw is None:
        return default

    stripped = raw.strip()
    if not stripped:
        return default

    lowered = stripped.casefold()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False

    log.warning(
        "Ungültiger boolescher Wert für %s=%r – verwende Default %s "
        "(erlaubt: 1/0, true/false, yes/no, on/off)",
        name,
        raw,
        default,
    )
    return default


def get_octal_env(name: str, default: int) -> int:
    """Read file permission bits such as ``640`` or ``0o640``."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    text = raw.strip().lower()
    if text.startswith("0o"):
        text = text[2:]
    try:
        value = int(text, 8)
    except ValueError as e:
        log.warning(
            "Ungültige Dateirechte für %s=%r – verwende Default %o (%s: %s)",
            name,
            raw,
            default,
            type(e).__name__,
            e,
        )
        return default
    if value > 0o777:
        log.warning(
            "Dateirechte für %s=%r außerhalb von 000-777 – verwende Default %o",
            name,
            raw,
            default,
        )
        return default
    return value
