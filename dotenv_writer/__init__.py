"""Edit ``.env`` files in place while keeping unrelated lines untouched."""

from .errors import ConfigurationError, DotEnvError, InvalidKeyError
from .parser import EnvLine, parse_lines, render_lines
from .values import escape_value, format_value, is_valid_name
from .writer import DotEnvWriter

__all__ = [
    "ConfigurationError",
    "DotEnvError",
    "DotEnvWriter",
    "EnvLine",
    "InvalidKeyError",
    "escape_value",
    "format_value",
    "is_valid_name",
    "parse_lines",
    "render_lines",
]
