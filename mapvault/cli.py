"""
mapvault command-line interface.

Actions can be combined and always run in the order
backup -> clear -> restore -> test, so '--backup --clear' saves the
mappings before removing them and '--clear --restore' re-applies a backup
on a clean session.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import Settings
from .core.exceptions import BackupNotFoundError, MappingStoreError
from .dependencies import get_orchestrator, override_settings
from .logging_config import setup_logging
from .models import AccessReport, CleanupOutcome, RestoreOutcome, RestoreStatus

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_MISSING_INPUT = 2

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mapvault",
        description="Backup, restore, test and clear the mapped network drives of this session.",
    )
    actions = parser.add_argument_group("actions")
    actions.add_argument("--backup", action="store_true", help="save current mappings and a restore script")
    actions.add_argument("--clear", action="store_true", help="remove all current mappings")
    actions.add_argument("--restore", action="store_true", help="re-create mappings from the backup file")
    actions.add_argument("--test", action="store_true", help="check read/write access of current mappings")

    parser.add_argument("--file", help="backup file (default from settings)")
    parser.add_argument("--script", help="restore script to write on backup (default from settings)")
    parser.add_argument("--include-shares", action="store_true", help="also back up visible unmounted shares")
    parser.add_argument("--verify", action="store_true", help="check access to each share before restoring")
    parser.add_argument("--dry-run", action="store_true", help="report what restore/clear would do")
    parser.add_argument("--skip-credential-store", action="store_true", help="never read or write stored credentials")
    parser.add_argument("--no-prompt", action="store_true", help="never ask for credentials interactively")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def settings_from_args(args: argparse.Namespace, settings: Settings) -> Settings:
    updates = {}
    if args.file:
        updates["backup_file_path"] = args.file
    if args.script:
        updates["restore_script_path"] = args.script
    if args.include_shares:
        updates["include_available_shares"] = True
    if args.verify:
        updates["verify_before_restore"] = True
    if args.dry_run:
        updates["dry_run"] = True
    if args.skip_credential_store:
        updates["skip_credential_store"] = True
    if args.no_prompt:
        updates["prompt_for_credentials"] = False
    if args.log_level:
        updates["log_level"] = args.log_level.upper()
    return settings.model_copy(update=updates)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not (args.backup or args.clear or args.restore or args.test):
        parser.print_help()
        return EXIT_MISSING_INPUT

    settings = settings_from_args(args, Settings())
    setup_logging(settings)
    override_settings(settings)

    return asyncio.run(run(args))


async def run(args: argparse.Namespace) -> int:
    orchestrator = get_orchestrator()
    exit_code = EXIT_OK

    if args.backup:
        try:
            result = await orchestrator.backup()
        except MappingStoreError as e:
            console.print(f"[red]Backup failed:[/red] {escape(str(e))}")
            return EXIT_FAILURES
        console.print(
            f"Backed up {len(result.mappings)} mapping(s) to {escape(result.backup_path)}; "
            f"restore script: {escape(result.script_path)}"
        )

    if args.clear:
        outcomes = await orchestrator.clear()
        print_cleanup(outcomes)
        if any(not o.removed for o in outcomes) and not args.dry_run:
            exit_code = EXIT_FAILURES

    if args.restore:
        loop = asyncio.get_running_loop()
        executor = orchestrator.executor
        # Ctrl+C: let the running record finish, skip the rest
        previous_handler = signal.signal(
            signal.SIGINT, lambda *_: loop.call_soon_threadsafe(executor.request_stop)
        )
        try:
            report = await orchestrator.restore()
        except BackupNotFoundError as e:
            console.print(f"[red]{escape(str(e))}[/red] - run with --backup first or pass --file")
            return EXIT_MISSING_INPUT
        except MappingStoreError as e:
            console.print(f"[red]Restore failed:[/red] {escape(str(e))}")
            return EXIT_FAILURES
        finally:
            signal.signal(signal.SIGINT, previous_handler)

        if report.prechecks:
            print_access_reports(report.prechecks, title="Pre-check")
        print_restore(report.outcomes)
        if not all(o.ok for o in report.outcomes):
            exit_code = EXIT_FAILURES

    if args.test:
        reports = await orchestrator.test()
        print_access_reports(reports, title="Access test")
        if any(not r.can_read for r in reports):
            exit_code = EXIT_FAILURES

    logging.debug(f"Exiting with code {exit_code}")
    return exit_code


def print_restore(outcomes: List[RestoreOutcome]) -> None:
    table = Table(title="Restore")
    table.add_column("Drive")
    table.add_column("Remote path")
    table.add_column("Status")
    table.add_column("Details")
    styles = {RestoreStatus.FAILED: "red", RestoreStatus.APPLIED: "green"}

    for outcome in outcomes:
        style = styles.get(outcome.status, "yellow")
        table.add_row(
            outcome.record.drive_letter or "-",
            escape(outcome.record.remote_path),
            f"[{style}]{outcome.status.value}[/{style}]",
            escape(outcome.message),
        )
    console.print(table)

    failed = sum(1 for o in outcomes if o.status == RestoreStatus.FAILED)
    skipped = sum(1 for o in outcomes if o.status == RestoreStatus.SKIPPED)
    ok = sum(1 for o in outcomes if o.ok)
    console.print(
        f"Processed {len(outcomes)} mapping(s): {ok} ok, {failed} failed, {skipped} skipped"
    )


def print_cleanup(outcomes: List[CleanupOutcome]) -> None:
    table = Table(title="Clear")
    table.add_column("Drive")
    table.add_column("Remote path")
    table.add_column("Removed")
    table.add_column("Details")
    for outcome in outcomes:
        table.add_row(
            outcome.record.drive_letter or "-",
            escape(outcome.record.remote_path),
            "[green]yes[/green]" if outcome.removed else "[red]no[/red]",
            escape(outcome.message),
        )
    console.print(table)

    removed = sum(1 for o in outcomes if o.removed)
    console.print(f"Processed {len(outcomes)} mapping(s): {removed} removed")


def print_access_reports(reports: List[AccessReport], title: str) -> None:
    table = Table(title=title)
    table.add_column("Path")
    table.add_column("Read")
    table.add_column("Write")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Details")
    for report in reports:
        table.add_row(
            escape(report.path),
            "[green]yes[/green]" if report.can_read else "[red]no[/red]",
            "[green]yes[/green]" if report.can_write else "[red]no[/red]",
            f"{report.elapsed_ms:.0f}",
            escape(report.error_message or ""),
        )
    console.print(table)
    console.print(f"Processed {len(reports)} path(s)")


if __name__ == "__main__":
    sys.exit(main())
