#!/usr/bin/env python3
"""
Command line entry point for running imports against the configured database.

    timeport-import types
    timeport-import init-db
    timeport-import import --organization-id <id> --type toggl_time_entries --timezone Europe/Berlin export.csv
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from timeport.core.config import settings
from timeport.core.logging_config import configure_logging
from timeport.db.models import Organization
from timeport.db.session import get_session_local, init_db
from timeport.domain.imports.exceptions import ImportException
from timeport.domain.imports.registry import ImporterRegistry
from timeport.domain.imports.report import ImportReport
from timeport.domain.imports.service import build_import_service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timeport-import", description="Import time tracking exports")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("types", help="List registered importer types")
    subparsers.add_parser("init-db", help="Create database tables")

    run = subparsers.add_parser("import", help="Import an export file into an organization")
    run.add_argument("file", type=Path, help="CSV or ZIP export")
    run.add_argument("--organization-id", required=True)
    run.add_argument("--type", dest="importer_type", required=True, help="Importer type key")
    run.add_argument("--timezone", default=None, help="Timezone of the source system (IANA name)")
    run.add_argument("--date-format", default=None, choices=["MM/DD/YYYY", "DD/MM/YYYY"])
    return parser


def render_report(console: Console, report: ImportReport) -> None:
    table = Table(title="Import report")
    table.add_column("Entity", style="cyan", no_wrap=True)
    table.add_column("Created", justify="right", style="green")
    for entity, counts in report.to_dict().items():
        table.add_row(entity, str(counts["created"]))
    console.print(table)


def render_types(console: Console, registry: ImporterRegistry) -> None:
    table = Table(title="Importer types")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Description", style="dim")
    for importer_type, info in registry.describe().items():
        table.add_row(importer_type, info["name"], info["description"])
    console.print(table)


def run_import(console: Console, args: argparse.Namespace) -> int:
    session_factory = get_session_local()
    with session_factory() as session:
        organization = session.get(Organization, args.organization_id)
    if organization is None:
        console.print(f"[red]Organization '{args.organization_id}' not found[/red]")
        return 1

    options = {}
    if args.timezone:
        options["timezone"] = args.timezone
    if args.date_format:
        options["date_format"] = args.date_format

    service = build_import_service(session_factory)
    try:
        report = service.execute_import(organization, args.importer_type, args.file.read_bytes(), options)
    except ImportException as exc:
        console.print(f"[red]Import failed:[/red] {exc.message}")
        return 1

    render_report(console, report)
    return 0


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    configure_logging(settings.log_level, log_timezone=settings.log_timezone, echo_sql=settings.debug)
    args = build_parser().parse_args(argv)
    console = console or Console()

    if args.command == "types":
        render_types(console, ImporterRegistry())
        return 0
    if args.command == "init-db":
        init_db()
        console.print("[green]Database tables ready[/green]")
        return 0
    return run_import(console, args)


if __name__ == "__main__":
    sys.exit(main())
