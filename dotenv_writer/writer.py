"""In-place editor for ``.env`` files.

:class:`DotEnvWriter` loads a document, lets callers add, update and delete
variables and writes the result back.  Only the lines that belong to an edited
variable change; comments, blank lines, ordering and the line terminators of
every other line are preserved.

This is a writer.  :meth:`DotEnvWriter.get` returns strings exactly as stored
and is not meant as a replacement for a runtime configuration loader.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Set, Tuple, Union

from .errors import ConfigurationError, InvalidKeyError
from .parser import EnvLine, format_assignment, parse_lines, render_lines
from .settings import WriterSettings, load_settings
from .utils.files import atomic_write, existing_permissions
from .utils.locking import exclusive_sidecar_lock
from .utils.logging import sanitize_log_arg
from .values import escape_value, is_valid_name

__all__ = ["DotEnvWriter"]

log = logging.getLogger(__name__)

PathLike = Union[str, Path]


class DotEnvWriter:
    """Edit the variables of one ``.env`` document.

    Args:
        source: File to load.  ``None`` starts with an empty document; the
            file must then be given as ``destination`` to :meth:`write`.
        newline: Terminator for appended lines.  Defaults to
            ``DOTENV_WRITER_NEWLINE`` or the platform convention.
        settings: Explicit settings instead of reading the environment.

    Raises:
        ConfigurationError: If ``source`` is given but cannot be read.
    """

    def __init__(
        self,
        source: Optional[PathLike] = None,
        *,
        newline: Optional[str] = None,
        settings: Optional[WriterSettings] = None,
    ) -> None:
        self._settings = settings if settings is not None else load_settings()
        self.newline = newline if newline is not None else self._settings.newline
        self.source: Optional[Path] = Path(source) if source is not None else None
        self._lines: List[EnvLine] = []
        self._variables: Dict[str, str] = {}
        self._changed = False
        self._written: Set[Path] = set()

        if self.source is not None:
            self._load(_read_source(self.source))

    @classmethod
    def from_string(
        cls,
        content: str,
        source: Optional[PathLike] = None,
        *,
        newline: Optional[str] = None,
        settings: Optional[WriterSettings] = None,
    ) -> "DotEnvWriter":
        """Build a writer over in-memory ``content``.

        ``source`` is only remembered as the default destination; it is not
        read.
        """
        writer = cls(newline=newline, settings=settings)
        writer.source = Path(source) if source is not None else None
        writer._load(content)
        return writer

    def _load(self, content: str) -> None:
        self._lines = parse_lines(content)
        self._refresh()

    def _refresh(self) -> None:
        # The table is always rebuilt from the records, never patched.
        self._variables = {
            line.key: line.value or ""
            for line in self._lines
            if line.key is not None
        }

    def _mark_changed(self) -> None:
        self._refresh()
        self._changed = True
        self._written.clear()

    # -- queries -----------------------------------------------------------

    def exists(self, key: str) -> bool:
        return key in self._variables

    def get(self, key: str) -> str:
        """Return the value of ``key`` or ``""`` if it is not set."""
        return self._variables.get(key, "")

    def get_all(self) -> Dict[str, str]:
        return dict(self._variables)

    def get_content(self) -> str:
        return render_lines(self._lines)

    @property
    def content(self) -> str:
        return self.get_content()

    @property
    def lines(self) -> Tuple[EnvLine, ...]:
        return tuple(self._lines)

    def has_changed(self) -> bool:
        """Return ``True`` once any ``set``/``delete`` modified the document."""
        return self._changed

    # -- mutations ---------------------------------------------------------

    def set(self, key: str, value: str, force_quote: bool = False) -> "DotEnvWriter":
        """Update ``key`` if present, otherwise append it.

        The value is quoted only when needed (see
        :func:`~dotenv_writer.values.escape_value`) unless ``force_quote`` is
        set.  Every line declaring ``key`` is rewritten in place; a quoted
        value spanning several lines is replaced as a whole.

        Raises:
            InvalidKeyError: If ``key`` is new and not made of ASCII letters,
                digits, underscores and dots.  Nothing is modified then.
        """
        escaped = escape_value(value, force_quote)

        if self.exists(key):
            self._lines = [
                replace(line, text=format_assignment(key, escaped, line.export), value=value)
                if line.key == key
                else line
                for line in self._lines
            ]
            action = "aktualisiert"
        else:
            if not is_valid_name(key):
                raise InvalidKeyError(key)
            if self._lines and not self._lines[-1].newline:
                self._lines[-1] = replace(self._lines[-1], newline=self.newline)
            self._lines.append(
                EnvLine(format_assignment(key, escaped), self.newline, key=key, value=value)
            )
            action = "hinzugefügt"

        self._mark_changed()
        log.debug("Variable %s %s.", sanitize_log_arg(key), action)
        return self

    def set_values(self, values: Mapping[str, str]) -> "DotEnvWriter":
        """Call :meth:`set` for every item; values are never force-quoted."""
        for key, value in values.items():
            self.set(key, value)
        return self

    def delete(self, key: str) -> "DotEnvWriter":
        """Remove every line declaring ``key``.  Absent keys are ignored."""
        if not self.exists(key):
            return self

        self._lines = [line for line in self._lines if line.key != key]
        self._mark_changed()
        log.debug("Variable %s entfernt.", sanitize_log_arg(key))
        return self

    # -- persistence -------------------------------------------------------

    def write(self, force: bool = False, destination: Optional[PathLike] = None) -> bool:
        """Write the document to ``destination`` (default: the source file).

        Unless ``force`` is set nothing is written when the document is
        unchanged or was already written to the same file since the last
        edit.  The file is replaced atomically while an exclusive lock on
        ``<file>.lock`` is held.

        Returns:
            ``True`` on success (including skipped writes), ``False`` if the
            file could not be written.

        Raises:
            ConfigurationError: If neither ``destination`` nor a source is known.
        """
        target = Path(destination) if destination is not None else self.source
        if target is None:
            raise ConfigurationError(
                "Kein Ziel für die .env-Datei bekannt – weder Quelle noch Ziel angegeben."
            )

        resolved = target.resolve()
        if not force and (not self._changed or resolved in self._written):
            log.debug("Keine Änderungen für %s – Schreiben übersprungen.", target)
            return True

        content = self.get_content()
        try:
            if self._settings.lock:
                with exclusive_sidecar_lock(target):
                    self._write_file(target, content)
            else:
                self._write_file(target, content)
        except OSError as exc:
            log.error(
                "Schreiben nach %s fehlgeschlagen (%s: %s)",
                target,
                type(exc).__name__,
                exc,
            )
            return False

        self._written.add(resolved)
        log.info("%d Variablen nach %s geschrieben.", len(self._variables), target)
        return True

    def _write_file(self, target: Path, content: str) -> None:
        permissions = existing_permissions(target)
        if permissions is None:
            permissions = self._settings.file_mode
        with atomic_write(target, "w", encoding="utf-8", permissions=permissions, newline="") as handle:
            handle.write(content)


def _read_source(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        log.error(
            "Kann .env-Datei %s nicht lesen (%s: %s)",
            path,
            type(exc).__name__,
            exc,
        )
        raise ConfigurationError(f".env-Datei {path} kann nicht gelesen werden: {exc}") from exc
