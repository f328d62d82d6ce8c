"""Command-line helper to inspect and edit ``.env`` files."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .errors import ConfigurationError, DotEnvError
from .utils.logging import configure_logging, is_secret_key, mask_value
from .writer import DotEnvWriter

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _parse_assignments(values: Sequence[str]) -> dict[str, str]:
    assignments: dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise ConfigurationError(f"Ungültiges --set Argument: {item!r}. Erwartet KEY=VALUE.")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ConfigurationError("Schlüssel in --set darf nicht leer sein.")
        assignments[key] = value
    return assignments


def _display_value(key: str, value: str, show_secrets: bool) -> str:
    if not show_secrets and is_secret_key(key):
        return mask_value(value)
    return value


def _open_writer(path: Path, create: bool) -> DotEnvWriter:
    if not path.exists() and create:
        return DotEnvWriter.from_string("", source=path)
    return DotEnvWriter(path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dotenv-writer", description=__doc__)
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Pfad zur .env-Datei (Standard: ./.env).",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Setzt oder ergänzt eine Variable. Mehrfach verwendbar.",
    )
    parser.add_argument(
        "--quote",
        action="store_true",
        help="Werte aus --set immer in doppelte Anführungszeichen setzen.",
    )
    parser.add_argument(
        "--unset",
        action="append",
        default=[],
        metavar="KEY",
        help="Entfernt eine Variable, falls vorhanden. Mehrfach verwendbar.",
    )
    parser.add_argument("--get", metavar="KEY", help="Gibt den Wert einer Variable aus.")
    parser.add_argument(
        "--list",
        action="store_true",
        help="Listet alle Variablen; geheime Werte werden maskiert.",
    )
    parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Geheime Werte bei --list im Klartext ausgeben.",
    )
    parser.add_argument("--output", metavar="PATH", help="Ergebnis in eine andere Datei schreiben.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Datei auch ohne Änderungen schreiben.",
    )
    parser.add_argument(
        "--create",
        action="store_true",
        help="Fehlende .env-Datei als leeres Dokument anlegen.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Nichts schreiben, sondern das Ergebnis ausgeben.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    env_path = Path(args.env_file)
    try:
        assignments = _parse_assignments(args.set)
        writer = _open_writer(env_path, args.create)
        for key, value in assignments.items():
            writer.set(key, value, force_quote=args.quote)
        for key in args.unset:
            writer.delete(key)
    except DotEnvError as exc:
        print(f"Fehler: {exc}", file=sys.stderr)
        return EXIT_USAGE

    status = EXIT_OK
    if args.get is not None:
        if writer.exists(args.get):
            print(writer.get(args.get))
        else:
            print(f"Variable {args.get} ist nicht gesetzt.", file=sys.stderr)
            status = EXIT_FAILURE

    if args.list:
        for key, value in writer.get_all().items():
            print(f"{key}={_display_value(key, value, args.show_secrets)}")

    if args.dry_run:
        sys.stdout.write(writer.get_content())
        return status

    if not writer.has_changed() and not args.force:
        return status

    destination = Path(args.output) if args.output else None
    if not writer.write(force=args.force, destination=destination):
        print(f"Konfiguration konnte nicht nach {destination or env_path} geschrieben werden.", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Konfiguration wurde nach {destination or env_path} geschrieben.")
    return status


if __name__ == "__main__":  # pragma: no cover - manual execution
    raise SystemExit(main())
