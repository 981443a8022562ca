# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from intakesync.app import (
    apply_reconciliation,
    complete_consultation,
    open_database,
    reconcile_questionnaire,
    sync_questionnaires,
    sync_website_bookings,
)
from intakesync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from intakesync.adapters.sqlalchemy import Database
    from intakesync.domain.ingest import SyncRunResult
    from intakesync.domain.reconciliation import FieldComparison, ReconciliationResult

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise client intake data")
    parser.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy URI of the record store (defaults to config)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("bookings", help="Import confirmed website bookings")
    subparsers.add_parser("questionnaires", help="Import recent Jotform questionnaires")

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Compare a saved questionnaire with the client's records",
    )
    _add_submission_arguments(reconcile)

    apply = subparsers.add_parser("apply", help="Apply selected questionnaire fields")
    _add_submission_arguments(apply)
    apply.add_argument(
        "--fields",
        type=_parse_fields,
        required=True,
        help="Comma separated field names, e.g. breed,sex",
    )
    apply.add_argument(
        "--pet",
        action="store_true",
        help="Apply to the questionnaire's pet instead of the client",
    )

    complete = subparsers.add_parser(
        "complete-consultation",
        help="Mark the client's website booking as completed or cancelled",
    )
    complete.add_argument("--client-id", type=int, required=True)
    complete.add_argument(
        "--date",
        type=_parse_iso_datetime,
        help="ISO-8601 timestamp near the consultation (default: now)",
    )
    complete.add_argument(
        "--cancelled",
        action="store_true",
        help="Mark the booking cancelled instead of completed",
    )

    return parser.parse_args(list(argv))


def _add_submission_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--client-id", type=int, required=True)
    parser.add_argument("--submission-id", type=str, required=True)


def _parse_fields(value: str) -> list[str]:
    fields = [item.strip() for item in value.split(",") if item.strip()]
    if not fields:
        raise argparse.ArgumentTypeError("At least one field is required")
    return fields


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _print_run(label: str, run: SyncRunResult) -> None:
    print(
        f"{label}: total={run.total} successful={run.successful} "
        f"failed={run.failed} skipped={run.skipped}"
    )
    for result in run.results:
        name = result.reference or result.submission_id
        if result.success:
            suffix = f" ({len(result.warnings)} warnings)" if result.warnings else ""
            print(
                f"  ok    {name} client={result.client_id} "
                f"event={result.primary_event_id}{suffix}"
            )
        else:
            print(f"  fail  {name} [{result.error_kind}] {result.error}")


def _print_comparisons(title: str, comparisons: Sequence[FieldComparison]) -> None:
    print(title)
    for comparison in comparisons:
        marker = "*" if comparison.is_change else " "
        print(
            f" {marker} {comparison.label:<16} {comparison.status:<9} "
            f"{comparison.current_value or '-'} -> {comparison.incoming_value or '-'}"
        )


def _print_reconciliation(result: ReconciliationResult) -> None:
    _print_comparisons(f"Client {result.client.full_name}", result.client_comparisons)
    pet_title = f"Pet {result.pet.name}" if result.pet else "Pet (not on file)"
    _print_comparisons(pet_title, result.pet_comparisons)
    if not result.has_changes:
        print("No changes to apply")


def _run_command(args: argparse.Namespace, database: Database) -> None:
    uow_factory = database.unit_of_work
    if args.command == "bookings":
        _print_run("Bookings", sync_website_bookings(unit_of_work_factory=uow_factory))
    elif args.command == "questionnaires":
        _print_run("Questionnaires", sync_questionnaires(unit_of_work_factory=uow_factory))
    elif args.command == "reconcile":
        result = reconcile_questionnaire(
            args.client_id, args.submission_id, unit_of_work_factory=uow_factory
        )
        _print_reconciliation(result)
    elif args.command == "apply":
        updated = apply_reconciliation(
            args.client_id,
            args.submission_id,
            args.fields,
            unit_of_work_factory=uow_factory,
            pet=args.pet,
        )
        log.info("Updated %s %s", updated.entity_type, updated.id)
    elif args.command == "complete-consultation":
        booking = complete_consultation(
            args.client_id,
            unit_of_work_factory=uow_factory,
            on_date=args.date,
            cancelled=args.cancelled,
        )
        print(f"Booking {booking.reference} updated")
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        database = open_database(parsed_args.database_uri)
        try:
            _run_command(parsed_args, database)
        finally:
            database.dispose()
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
