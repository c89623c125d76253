from __future__ import annotations

import argparse

from rich.panel import Panel
from rich.table import Table

from siarni.application.services.project_service import ProjectService
from siarni.application.services.stats_service import StatsService
from siarni.cli.context import CLIContext
from siarni.infrastructure.db.repos.record_repo import RecordRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("stats", help="Show archive totals per district")
    parser.add_argument("--kecamatan", help="Limit the summary to one district")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    summary = StatsService(RecordRepo(ctx.paths.db_path)).summary(kecamatan=args.kecamatan)

    ctx.console.print(
        Panel.fit(
            f"Total records: {summary.total_records}\nThis month: {summary.records_this_month}",
            title="Archive Summary",
        )
    )

    table = Table(title="Records per Kecamatan")
    table.add_column("Kecamatan")
    table.add_column("Records", justify="right")
    for name, count in summary.by_kecamatan.items():
        table.add_row(name, str(count))
    ctx.console.print(table)

    if summary.recent_records:
        recent = Table(title="Recent Uploads")
        recent.add_column("Created")
        recent.add_column("Pasangan")
        recent.add_column("Kecamatan")
        for r in summary.recent_records:
            recent.add_row(r.created_at, f"{r.husband_name} & {r.wife_name}", r.kecamatan)
        ctx.console.print(recent)
    return 0
