"""Quoting rules for ``.env`` values.

Reading and writing are asymmetric.  :func:`escape_value` only
quotes what would otherwise be misread, so plain values like ``8080`` or
``production`` stay readable.  :func:`format_value` accepts unquoted, single-
and double-quoted input and resolves backslash escapes inside quotes.

The round trip ``format_value(escape_value(v)) == v`` holds for every value
whose inner lines neither start nor end with whitespace.  The parser trims
each physical line of a multi-line value, so indentation of continuation
lines and whitespace before an inner line break are not kept.
"""

from __future__ import annotations

import re
from typing import Optional

__all__ = [
    "QUOTE_CHARS",
    "close_quoted",
    "escape_value",
    "format_value",
    "is_open_quoted",
    "is_valid_name",
    "strip_inline_comment",
    "unescape",
]

QUOTE_CHARS = ('"', "'")

# whitespace, the characters shells and dotenv readers treat specially, plus
# the comment and quote characters this parser itself reacts to
_NEEDS_QUOTES_RE = re.compile(r"""[\s"\\=:.$()#']""")
_VALID_NAME_RE = re.compile(r"[\w.]+", re.ASCII)
_ESCAPE_RE = re.compile(r"\\(.?)", re.DOTALL)


def is_valid_name(key: str) -> bool:
    """Return ``True`` if ``key`` may be added as a new variable."""

    return bool(_VALID_NAME_RE.fullmatch(key))


def _is_escaped(text: str, idx: int) -> bool:
    backslashes = 0
    idx -= 1
    while idx >= 0 and text[idx] == "\\":
        backslashes += 1
        idx -= 1
    return backslashes % 2 == 1


def _ends_with_quote(text: str, quote: str) -> bool:
    return text.endswith(quote) and not _is_escaped(text, len(text) - 1)


def close_quoted(text: str, quote: str, start: int = 0) -> Optional[str]:
    """Return ``text`` cut after its closing ``quote``, or ``None``.

    ``text`` closes when it ends in an unescaped ``quote`` or when such a
    quote is followed only by a ``# comment``.  The first ``start``
    characters (the opening quote) never count as the closing one.
    """

    if len(text) > start and _ends_with_quote(text, quote):
        return text
    idx = text.find("#", start)
    while idx >= 0:
        head = text[:idx].rstrip()
        if len(head) > start and _ends_with_quote(head, quote):
            return head
        idx = text.find("#", idx + 1)
    return None


def is_open_quoted(raw: str) -> bool:
    """Return ``True`` if ``raw`` opens a quoted value it does not close."""

    if not raw or raw[0] not in QUOTE_CHARS:
        return False
    return close_quoted(raw, raw[0], 1) is None


def strip_inline_comment(raw: str) -> str:
    """Remove a trailing ``# comment`` from ``raw``.

    In a quoted value the comment may only start after the closing quote.  In
    an unquoted value the first ``#`` without a backslash in front of it
    starts the comment.
    """

    text = raw.strip()
    if not text:
        return text

    if text[0] in QUOTE_CHARS:
        closed = close_quoted(text, text[0], 1)
        return text if closed is None else closed

    idx = text.find("#")
    while idx >= 0 and _is_escaped(text, idx):
        idx = text.find("#", idx + 1)
    if idx >= 0:
        return text[:idx].rstrip()
    return text


def unescape(text: str) -> str:
    """Resolve backslash escapes: ``\\x`` becomes ``x``."""

    return _ESCAPE_RE.sub(r"\1", text)


def format_value(raw: str) -> str:
    """Turn a raw value as found in the file into the value it represents."""

    text = strip_inline_comment(raw)
    if len(text) >= 2 and text[0] in QUOTE_CHARS and _ends_with_quote(text, text[0]):
        return unescape(text[1:-1])
    return text


def escape_value(value: str, force_quote: bool = False) -> str:
    """Render ``value`` for the right-hand side of ``KEY=``.

    Values containing whitespace, quotes, backslashes or any of
    ``= : . $ ( ) #`` are wrapped in double quotes, as is everything when
    ``force_quote`` is set.  The empty string is never quoted.
    """

    if value == "":
        return ""

    if force_quote or _NEEDS_QUOTES_RE.search(value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    return value
