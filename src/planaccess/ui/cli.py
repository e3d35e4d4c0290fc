from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from planaccess.adapters.policy_file import PolicyFileError, load_access_policy
from planaccess.app import apply_access_policy, remove_broker, show_broker_access
from planaccess.config import ConfigurationError, configure_logging
from planaccess.domain.model import access_as_mapping

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from planaccess.domain.reconciliation import ReconciliationResult

log = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("Value must be non-negative")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile service broker plan access")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser("apply", help="Apply an access policy file")
    apply.add_argument("policy", type=str, help="Path to the TOML access policy")
    apply.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute public flag changes and the access diff without applying them",
    )
    apply.add_argument(
        "--org-page-limit",
        type=_non_negative_int,
        default=0,
        help=(
            "Maximum number of organization pages to read (default: all); plan-wide"
            " and service-wide declarations then only cover the organizations read"
        ),
    )

    show = subparsers.add_parser("show", help="Show the observed access of a broker")
    show.add_argument("broker", type=str, help="Registered service broker name")
    show.add_argument(
        "--org-page-limit",
        type=_non_negative_int,
        default=0,
        help="Maximum number of organization pages to read (default: all)",
    )

    deregister = subparsers.add_parser("deregister", help="Remove a service broker registration")
    deregister.add_argument("broker", type=str, help="Registered service broker name")

    return parser.parse_args(list(argv))


def _report_result(broker_name: str, result: ReconciliationResult) -> None:
    diff = result.diff
    prefix = "[dry-run] " if result.dry_run else ""
    for change in result.public_changes:
        print(f"{prefix}public {change.plan.name}={change.public}")  # noqa: T201
    for access in sorted(diff.to_create):
        print(f"{prefix}+ {access}")  # noqa: T201
    for access in sorted(diff.to_delete):
        print(f"{prefix}- {access}")  # noqa: T201
    if not result.changed:
        log.info("Access for broker %s is up to date", broker_name)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        policy = load_access_policy(parsed_args.policy) if parsed_args.command == "apply" else None
    except (PolicyFileError, ConfigurationError, ValueError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "apply" and policy is not None:
            result = apply_access_policy(
                policy,
                dry_run=parsed_args.dry_run,
                page_limit=parsed_args.org_page_limit,
            )
            _report_result(policy.broker_name, result)
        elif parsed_args.command == "show":
            for declaration in show_broker_access(
                parsed_args.broker,
                page_limit=parsed_args.org_page_limit,
            ):
                fields = access_as_mapping(declaration)
                print(f"{fields['service']}\t{fields['plan']}\t{fields['org_id']}")  # noqa: T201
        elif parsed_args.command == "deregister":
            remove_broker(parsed_args.broker)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
