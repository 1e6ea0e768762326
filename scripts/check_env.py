"""Utility for verifying that the signup server's configuration is intact.

The tool performs two main checks:

1. It loads ``AppSettings`` from the provided ``.env`` file and confirms the
   values a working deployment needs (Google client credentials and a state
   signing secret) are present, warning about discouraged fallbacks and
   optional values such as Supabase.
2. It can record and verify a checksum for the ``.env`` file so unexpected
   edits (for example, from an accidental ``git pull``) are detected.

Example usages::

    # Validate required settings are present and record the expected checksum.
    python -m scripts.check_env record --env-file /opt/gmail-connect/.env \
        --hash-file /opt/gmail-connect/.env.sha256

    # Run later (e.g. from cron/systemd) to alert on drift.
    python -m scripts.check_env verify --env-file /opt/gmail-connect/.env \
        --hash-file /opt/gmail-connect/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from gmail_connect.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


class MissingSettingsError(Exception):
    """Raised when settings load but values a deployment needs are empty."""

    def __init__(self, keys: list[str]) -> None:
        super().__init__(", ".join(keys))
        self.keys = keys


def _compute_hash(env_file: Path) -> str:
    """Return the SHA256 checksum for the target environment file."""
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _missing_required(settings: AppSettings) -> list[str]:
    missing = []
    if not settings.google.client_id:
        missing.append("GOOGLE_CLIENT_ID")
    if not settings.google.client_secret:
        missing.append("GOOGLE_CLIENT_SECRET")
    if not settings.signing_secret:
        missing.append("STATE_SECRET")
    return missing


def _validate_settings(env_file: Path) -> None:
    """Ensure required settings can be loaded from the supplied env file."""
    _load_env_file(str(env_file))
    settings = AppSettings()
    missing = _missing_required(settings)
    if missing:
        raise MissingSettingsError(missing)
    if not settings.security.state_secret:
        print(
            "Warning: STATE_SECRET is not set; state tokens are signed with "
            "GOOGLE_CLIENT_SECRET. Set a dedicated STATE_SECRET instead.",
            file=sys.stderr,
        )
    if not settings.supabase.is_configured:
        print(
            "Warning: SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY are not set; "
            "connections will not be recorded.",
            file=sys.stderr,
        )


def _record_checksum(env_file: Path, hash_file: Path) -> int:
    """Persist the current checksum to ``hash_file``."""
    checksum = _compute_hash(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify_checksum(env_file: Path, hash_file: Path) -> int:
    """Compare the current checksum to the recorded baseline."""
    if not hash_file.exists():
        print(
            f"Expected checksum file {hash_file} is missing. "
            "Re-run with the 'record' command to establish a baseline.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _compute_hash(env_file)
    if expected == actual:
        print("Environment checksum OK.")
        return EXIT_OK

    print(
        "Environment checksum mismatch!\n"
        f"  expected: {expected}\n"
        f"  actual:   {actual}\n"
        "Investigate recent changes before restarting services.",
        file=sys.stderr,
    )
    return EXIT_CHECKSUM_ERROR


_COMMANDS = {
    "record": ("Validate settings and store the checksum baseline.", True),
    "verify": ("Validate settings and compare the checksum with the baseline.", True),
    "check": ("Validate settings without touching any checksum files.", False),
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate signup server settings and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, (help_text, needs_hash_file) in _COMMANDS.items():
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )
        if needs_hash_file:
            subparser.add_argument(
                "--hash-file",
                required=True,
                type=Path,
                help="Checksum baseline file.",
            )

    return parser


def _ensure_env_file(env_file: Path) -> None:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file

    try:
        _ensure_env_file(env_file)
        _validate_settings(env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except MissingSettingsError as exc:
        print(f"Required settings are missing: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error during validation: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    command: str = args.command
    handlers: dict[str, Callable[[], int]] = {
        "record": lambda: _record_checksum(env_file, args.hash_file),
        "verify": lambda: _verify_checksum(env_file, args.hash_file),
        "check": lambda: EXIT_OK,
    }
    return handlers[command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
