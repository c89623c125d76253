from __future__ import annotations

import argparse
from pathlib import Path

from siarni.application.services.project_service import ProjectService
from siarni.cli.context import CLIContext
from siarni.core.errors import RecordNotFoundError
from siarni.core.links import qr_service_url, render_qr_png, verify_link
from siarni.infrastructure.db.repos.record_repo import RecordRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("link", help="Print the public verification link of a record")
    parser.add_argument("record_id")
    parser.add_argument("--base-url", help="Override SIARNI_PUBLIC_BASE_URL")
    parser.add_argument("--qr", type=Path, help="Write a QR code PNG encoding the link")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    record = RecordRepo(ctx.paths.db_path).get_by_id(args.record_id)
    if record is None:
        raise RecordNotFoundError(f"Record not found: {args.record_id}")

    link = verify_link(args.base_url or ctx.settings.public_base_url, record.fingerprint)
    ctx.console.print(link, markup=False, highlight=False)
    ctx.console.print(qr_service_url(link, ctx.settings.qr_size), markup=False, highlight=False)

    if args.qr is not None:
        out = args.qr.expanduser()
        out.write_bytes(render_qr_png(link))
        ctx.console.print(f"[green]QR code written[/green] {out}")
    return 0
