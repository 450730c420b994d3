#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from subsync.app import run_reconciliation, set_user_mode
from subsync.config import configure_logging
from subsync.domain.model import UserMode

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a number, got {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return parsed


def _user_mode(value: str) -> UserMode:
    try:
        return UserMode(value.strip().upper())
    except ValueError as exc:
        choices = ", ".join(mode.value for mode in UserMode)
        raise argparse.ArgumentTypeError(f"expected one of {choices}") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subsync",
        description="Reconcile local subscription state with the billing provider",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Run one reconciliation pass")
    reconcile.add_argument(
        "--concurrency",
        type=_positive_int,
        help="Maximum concurrent provider lookups (default: SUBSYNC_SYNC_CONCURRENCY or 8)",
    )
    reconcile.add_argument(
        "--deadline-seconds",
        type=_positive_float,
        help="Abandon outstanding lookups after this many seconds",
    )
    reconcile.add_argument(
        "--grace-mode",
        type=_user_mode,
        help="Entitlement held during an active grace period (FULL or RESTRICTED)",
    )

    user = subparsers.add_parser("user", help="Manual user administration")
    user_commands = user.add_subparsers(dest="user_command", required=True)
    set_mode = user_commands.add_parser(
        "set-mode",
        help="Force a user's entitlement mode",
        description=(
            "Force a user's entitlement mode. Reconciliation leaves the override in "
            "place until the provider reports a change to the user's subscription."
        ),
    )
    set_mode.add_argument("--email", required=True, help="Email address of the user")
    set_mode.add_argument(
        "--mode",
        type=_user_mode,
        required=True,
        help="New mode (FULL or RESTRICTED)",
    )
    return parser


def _run(args: argparse.Namespace) -> None:
    if args.command == "reconcile":
        result = run_reconciliation(
            concurrency=args.concurrency,
            deadline_seconds=args.deadline_seconds,
            grace_mode=args.grace_mode,
        )
        print(json.dumps(result.as_dict()))
        return
    user = set_user_mode(args.email, args.mode)
    print(f"User {user.email} is now {user.mode}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parser = _build_parser()
    # argparse exits with status 2 on invalid arguments.
    parsed_args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])
    configure_logging()

    try:
        _run(parsed_args)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def cli() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
