"""Line oriented parser that keeps every byte of the original document.

The document is a list of :class:`EnvLine` records.  Untouched records render
back to exactly the text they were parsed from, including their own line
terminator, so editing one variable never reformats its neighbours.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .utils.logging import sanitize_log_arg
from .values import close_quoted, format_value, is_open_quoted, strip_inline_comment

__all__ = [
    "EnvLine",
    "format_assignment",
    "parse_lines",
    "render_lines",
    "split_lines",
]

log = logging.getLogger(__name__)

_NEWLINE_RE = re.compile(r"\r\n|\r|\n")
_EXPORT_RE = re.compile(r"^export\s+(.+)$")


@dataclass(frozen=True)
class EnvLine:
    """One record of the document.

    ``text`` excludes the final terminator stored in ``newline``.  A quoted
    value spanning several physical lines is a single record whose ``text``
    contains the inner terminators.  Comments, blank lines and anything the
    parser does not understand have ``key`` set to ``None``.
    """

    text: str
    newline: str = ""
    key: Optional[str] = None
    value: Optional[str] = None
    export: bool = False

    @property
    def is_assignment(self) -> bool:
        return self.key is not None

    def render(self) -> str:
        return self.text + self.newline


def split_lines(content: str) -> List[Tuple[str, str]]:
    """Split ``content`` into ``(text, terminator)`` pairs.

    ``\\r\\n``, ``\\r`` and ``\\n`` are all accepted, even mixed in one file.
    A final line without terminator gets ``""``.
    """

    lines: List[Tuple[str, str]] = []
    pos = 0
    for match in _NEWLINE_RE.finditer(content):
        lines.append((content[pos:match.start()], match.group()))
        pos = match.end()
    if pos < len(content):
        lines.append((content[pos:], ""))
    return lines


def format_assignment(key: str, escaped: str, export: bool = False) -> str:
    prefix = "export " if export else ""
    return f"{prefix}{key}={escaped}"


def _split_assignment(text: str) -> Optional[Tuple[str, str, bool]]:
    stripped = text.strip()
    if not stripped or stripped.startswith("#"):
        return None

    eq = text.find("=")
    if eq < 0:
        log.debug("Zeile ohne '=' wird unverändert übernommen: %s", sanitize_log_arg(stripped))
        return None
    hash_idx = text.find("#")
    if 0 <= hash_idx < eq:
        return None

    key = text[:eq].strip()
    export = False
    match = _EXPORT_RE.match(key)
    if match:
        key = match.group(1).strip()
        export = True
    if not key:
        log.debug("Zeile ohne Schlüssel wird unverändert übernommen: %s", sanitize_log_arg(stripped))
        return None

    return key, strip_inline_comment(text[eq + 1:]), export


def _join_span(physical: List[Tuple[str, str]]) -> Tuple[str, str]:
    inner = "".join(text + newline for text, newline in physical[:-1])
    last_text, last_newline = physical[-1]
    return inner + last_text, last_newline


def parse_lines(content: str) -> List[EnvLine]:
    """Parse ``content`` into records.  Never raises for malformed input."""

    records: List[EnvLine] = []

    span: List[Tuple[str, str]] = []
    span_parts: List[str] = []
    span_key = ""
    span_export = False
    span_quote = ""

    for text, newline in split_lines(content):
        if span:
            span.append((text, newline))
            part = text.strip()
            closing = close_quoted(part, span_quote)
            span_parts.append(part if closing is None else closing)
            if closing is not None:
                joined, last_newline = _join_span(span)
                records.append(
                    EnvLine(
                        joined,
                        last_newline,
                        key=span_key,
                        value=format_value("\n".join(span_parts)),
                        export=span_export,
                    )
                )
                span = []
                span_parts = []
            continue

        parsed = _split_assignment(text)
        if parsed is None:
            records.append(EnvLine(text, newline))
            continue

        key, raw, export = parsed
        if is_open_quoted(raw):
            span = [(text, newline)]
            span_parts = [raw]
            span_key = key
            span_export = export
            span_quote = raw[0]
            continue

        records.append(EnvLine(text, newline, key=key, value=format_value(raw), export=export))

    if span:
        log.debug(
            "Mehrzeiliger Wert für %s wird nicht geschlossen – %d Zeilen bleiben unverändert.",
            sanitize_log_arg(span_key),
            len(span),
        )
        records.extend(EnvLine(text, newline) for text, newline in span)

    return records


def render_lines(lines: Iterable[EnvLine]) -> str:
    return "".join(line.render() for line in lines)
