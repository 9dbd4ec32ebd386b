"""Command-line interface for the seminar signup service."""

from __future__ import annotations
import argparse
import logging
import sys
from getpass import getpass
from pathlib import Path
from typing import Sequence

from seminar.config import load_settings
from seminar.security import hash_password

logger = logging.getLogger("seminar.main")

KNOWN_COMMANDS = {"serve", "hash-password", "export"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seminar signup utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=5000,
        help="Port for the HTTP service (default: 5000)",
    )

    hash_parser = subparsers.add_parser(
        "hash-password",
        help="Hash an admin password for SEMINAR_ADMIN_PASSWORD_HASH",
    )
    hash_parser.add_argument(
        "--stdin",
        action="store_true",
        help="Read the password from standard input instead of prompting",
    )

    export_parser = subparsers.add_parser(
        "export", help="Write the registration CSV export from the configured store"
    )
    export_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="File to write (default: standard output)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in KNOWN_COMMANDS:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(*, host: str, port: int) -> None:
    from seminar.application import create_application
    import uvicorn

    logger.info("Starting seminar signup service on http://%s:%s", host, port)
    app = create_application(load_settings())
    uvicorn.run(app, host=host, port=port, log_level="info")


def _prompt_for_password() -> str | None:
    for _ in range(3):
        password = getpass("Admin password: ")
        if not password:
            print("Password must not be empty. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def _hash_password_command(*, from_stdin: bool = False) -> int:
    if from_stdin:
        password: str | None = sys.stdin.readline().rstrip("\n")
    else:
        password = _prompt_for_password()
        if password is None:
            print("Failed to read a password after three attempts.", file=sys.stderr)
            return 1

    try:
        hashed = hash_password(password or "")
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(hashed)
    print("Set SEMINAR_ADMIN_PASSWORD_HASH to the value above.", file=sys.stderr)
    return 0


def _export(output: str | None) -> int:
    from seminar.application import build_storage
    from seminar.registration import RegistrationService

    storage = build_storage(load_settings())
    try:
        content = RegistrationService(storage).export_csv()
    finally:
        close = getattr(storage, "close", None)
        if callable(close):
            close()

    if output:
        Path(output).write_text(content + "\n", encoding="utf-8")
        logger.info("Wrote registration export to %s", output)
    else:
        sys.stdout.write(content + "\n")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)

    if args.command == "serve":
        _serve(host=args.host, port=args.port)
        return 0
    if args.command == "hash-password":
        return _hash_password_command(from_stdin=args.stdin)
    if args.command == "export":
        return _export(args.output)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
