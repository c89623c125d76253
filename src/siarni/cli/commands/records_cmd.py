from __future__ import annotations

import argparse

from rich.table import Table

from siarni.application.services.project_service import ProjectService
from siarni.cli.context import CLIContext
from siarni.core.errors import RecordNotFoundError
from siarni.core.integrity import verify_record_integrity
from siarni.infrastructure.db.repos.record_repo import RecordRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("records", help="List and inspect archived records")
    records_subparsers = parser.add_subparsers(dest="records_command", required=True)

    list_parser = records_subparsers.add_parser("list", help="List records, newest first")
    list_parser.add_argument("--kecamatan", help="Only records of this district")
    list_parser.add_argument("--search", help="Match husband/wife name, nomor akta or nomor NB")
    list_parser.add_argument("--limit", type=int, default=50)
    list_parser.set_defaults(handler=run_list)

    show_parser = records_subparsers.add_parser("show", help="Show one record")
    show_parser.add_argument("record_id")
    show_parser.set_defaults(handler=run_show)


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    records = RecordRepo(ctx.paths.db_path).list(
        limit=args.limit,
        kecamatan=args.kecamatan,
        search=args.search,
    )

    table = Table(title=f"Records ({len(records)})")
    table.add_column("ID")
    table.add_column("Pasangan")
    table.add_column("Nomor Akta")
    table.add_column("Kecamatan")
    table.add_column("Integrity")
    table.add_column("Fingerprint", overflow="fold")

    for r in records:
        status = "[green]valid[/green]" if verify_record_integrity(r) else "[red]INVALID[/red]"
        table.add_row(r.id, f"{r.husband_name} & {r.wife_name}", r.nomor_akta, r.kecamatan, status, r.fingerprint)

    ctx.console.print(table)
    return 0


def run_show(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    record = RecordRepo(ctx.paths.db_path).get_by_id(args.record_id)
    if record is None:
        raise RecordNotFoundError(f"Record not found: {args.record_id}")

    table = Table(title=f"Record {record.id}", show_header=False)
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    for label, value in (
        ("Nama Suami", record.husband_name),
        ("Nama Istri", record.wife_name),
        ("Tanggal Nikah", record.marriage_date),
        ("Nomor NB", record.nomor_nb),
        ("Nomor Akta", record.nomor_akta),
        ("Kecamatan", record.kecamatan),
        ("Nomor Bok", record.nomor_bok),
        ("Lokasi Simpan", record.lokasi_simpan),
        ("Media Simpan", record.media_simpan),
        ("Jumlah Lembar", str(record.jumlah_lembar)),
        ("Tahun", record.tahun),
        ("Jangka Simpan", record.jangka_simpan),
        ("Tingkat Perkembangan", record.tingkat_perkembangan),
        ("Diunggah Oleh", record.uploaded_by),
        ("Dibuat", record.created_at),
        ("Fingerprint", record.fingerprint),
        ("Integrity", "valid" if verify_record_integrity(record) else "INVALID"),
    ):
        table.add_row(label, value)
    for attachment in record.attachments:
        table.add_row(f"Lampiran {attachment.position + 1}", f"{attachment.original_filename} ({attachment.media_type})")

    ctx.console.print(table)
    return 0
