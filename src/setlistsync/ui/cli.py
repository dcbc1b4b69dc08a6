from __future__ import annotations

import argparse
import logging
import sys
import threading
from signal import SIGINT, SIGTERM, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from setlistsync.adapters.apscheduler import APSchedulerTrigger
from setlistsync.app import build_import_service, build_sync_scheduler
from setlistsync.config import configure_logging
from setlistsync.domain.errors import JobAlreadyRunningError, UnknownJobError
from setlistsync.domain.model import ExternalIdentifierSet, ImportOptions

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from setlistsync.domain.import_service import ImportService
    from setlistsync.domain.model import ImportStatus, RunReport
    from setlistsync.domain.scheduling import SyncScheduler

    ServiceFactory = Callable[[], ImportService]

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import and keep artists in sync")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Import one artist and wait for it")
    import_cmd.add_argument("--catalog-id", type=str, help="Spotify artist id")
    import_cmd.add_argument("--ticketing-id", type=str, help="Ticketmaster attraction id")
    import_cmd.add_argument("--name", type=str, help="Artist name to resolve")
    import_cmd.add_argument(
        "--light",
        action="store_true",
        help="Skip the catalog step (events and default lists only)",
    )
    import_cmd.add_argument("--skip-events", action="store_true", help="Skip the events step")
    import_cmd.add_argument(
        "--skip-defaults",
        action="store_true",
        help="Skip creating default prediction lists",
    )

    status = subparsers.add_parser("status", help="Show the status of an import key")
    status.add_argument("import_key", type=str)

    subparsers.add_parser("active", help="List imports that are still running")

    jobs = subparsers.add_parser("jobs", help="Inspect or run sync jobs")
    jobs_sub = jobs.add_subparsers(dest="jobs_command", required=True)
    jobs_sub.add_parser("list", help="List registered sync jobs")
    jobs_run = jobs_sub.add_parser("run", help="Run a sync job once, now")
    jobs_run.add_argument("name", type=str)

    serve = subparsers.add_parser("serve", help="Run the sync scheduler until interrupted")
    serve.add_argument(
        "--disable",
        action="append",
        default=[],
        metavar="JOB",
        help="Job to leave disabled (repeatable)",
    )

    subparsers.add_parser("cleanup", help="Purge expired import statuses")

    return parser.parse_args(list(argv))


def _identifiers_from_args(args: argparse.Namespace) -> ExternalIdentifierSet:
    identifiers = ExternalIdentifierSet(
        catalog_id=args.catalog_id,
        ticketing_id=args.ticketing_id,
        display_name=args.name,
    )
    if identifiers.is_empty:
        raise ValueError("Provide at least one of --catalog-id, --ticketing-id or --name")
    return identifiers


def _options_from_args(args: argparse.Namespace) -> ImportOptions:
    return ImportOptions(
        sync_catalog=not args.light,
        sync_events=not args.skip_events,
        create_defaults=not args.skip_defaults,
    )


def _describe_status(status: ImportStatus) -> str:
    text = f"{status.import_key}: {status.stage} {status.progress_percent}% {status.message}"
    if status.error:
        text += f" (error: {status.error})"
    if status.alias_of:
        text += f" [was {status.alias_of}]"
    return text


def _log_report(report: RunReport) -> None:
    if report.already_running:
        log.info("Import already running under %s", report.import_key)
        if report.existing_status is not None:
            log.info("%s", _describe_status(report.existing_status))
        return
    log.info(
        "Import %s finished: success=%s, entity=%s",
        report.import_key,
        report.success,
        report.entity_id,
    )
    for step in report.steps:
        detail = step.error or step.payload.get("reason") or ""
        log.info("  %-16s %-9s %s", step.name, step.status, detail)
    if report.error:
        log.error("Import error: %s", report.error)


def _log_jobs(scheduler: SyncScheduler) -> None:
    for job in scheduler.list_jobs():
        log.info(
            "%-24s %-14s enabled=%s runs=%d last_run=%s last_error=%s",
            job.name,
            job.schedule,
            job.enabled,
            job.run_count,
            job.last_run_at,
            job.last_error,
        )


def _serve(scheduler: SyncScheduler, disabled: Sequence[str]) -> None:
    for name in disabled:
        scheduler.disable(name)
    stop = threading.Event()

    def _request_stop(_signal_received: int, _frame: FrameType | None) -> None:
        log.info("Stopping scheduler")
        stop.set()

    signal(SIGINT, _request_stop)
    signal(SIGTERM, _request_stop)
    scheduler.start()
    try:
        stop.wait()
    finally:
        scheduler.stop()


def _run_command(args: argparse.Namespace, service: ImportService) -> int:
    """Dispatch a parsed command and return the process exit code."""

    if args.command == "import":
        report = service.run_import(_identifiers_from_args(args), _options_from_args(args))
        _log_report(report)
        return 0 if report.success or report.already_running else 1
    if args.command == "status":
        status = service.get_status(args.import_key)
        if status is None:
            log.warning("No import status for %s", args.import_key)
            return 1
        log.info("%s", _describe_status(status))
        return 0
    if args.command == "active":
        active = service.list_active()
        if not active:
            log.info("No active imports")
        for status in active:
            log.info("%s", _describe_status(status))
        return 0
    if args.command == "cleanup":
        removed = service.cleanup()
        log.info("Removed %d import statuses", removed)
        return 0
    if args.command == "jobs" and args.jobs_command == "list":
        _log_jobs(build_sync_scheduler(service))
        return 0
    if args.command == "jobs" and args.jobs_command == "run":
        reports = build_sync_scheduler(service).run_now(args.name)
        failed = [report for report in reports if not report.success and not report.already_running]
        log.info("Job %s processed %d artists, %d failed", args.name, len(reports), len(failed))
        return 1 if failed else 0
    if args.command == "serve":
        _serve(build_sync_scheduler(service, trigger=APSchedulerTrigger()), args.disable)
        return 0
    raise ValueError(f"Unsupported command: {args.command}")


def main(
    argv: Sequence[str] | None = None,
    *,
    service_factory: ServiceFactory = build_import_service,
) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        if parsed_args.command == "import":
            _identifiers_from_args(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    service = None
    try:
        service = service_factory()
        exit_code = _run_command(parsed_args, service)
    except (UnknownJobError, JobAlreadyRunningError) as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    finally:
        if service is not None:
            service.shutdown()

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
