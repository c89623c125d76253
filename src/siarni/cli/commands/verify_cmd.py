from __future__ import annotations

import argparse

from rich.panel import Panel
from rich.table import Table

from siarni.application.services.project_service import ProjectService
from siarni.application.services.verification_service import VerificationService
from siarni.cli.context import CLIContext
from siarni.infrastructure.db.repos.record_repo import RecordRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("verify", help="Check archived records against their fingerprints")
    verify_subparsers = parser.add_subparsers(dest="verify_command", required=True)

    record_parser = verify_subparsers.add_parser("record", help="Verify a single record by ID")
    record_parser.add_argument("record_id")
    record_parser.set_defaults(handler=run_verify_record)

    fp_parser = verify_subparsers.add_parser("fingerprint", help="Resolve a verification link fingerprint")
    fp_parser.add_argument("fingerprint")
    fp_parser.set_defaults(handler=run_verify_fingerprint)

    all_parser = verify_subparsers.add_parser("all", help="Verify every archived record")
    all_parser.add_argument("--kecamatan", help="Only records of this district")
    all_parser.set_defaults(handler=run_verify_all)


def _service(ctx: CLIContext) -> VerificationService:
    ProjectService(ctx.paths).require_initialized()
    return VerificationService(RecordRepo(ctx.paths.db_path))


def run_verify_record(args: argparse.Namespace, ctx: CLIContext) -> int:
    check = _service(ctx).verify_record(args.record_id)
    lines = [
        f"Record ID: {check.record_id}",
        f"Fingerprint: {check.fingerprint}",
        f"Status: {'VERIFIED' if check.verified else 'TAMPERED'}",
    ]
    ctx.console.print(Panel.fit("\n".join(lines), title="Verify Record"))
    return 0 if check.verified else 1


def run_verify_fingerprint(args: argparse.Namespace, ctx: CLIContext) -> int:
    outcome = _service(ctx).verify_by_fingerprint(args.fingerprint)
    lines = [f"Fingerprint: {outcome.fingerprint}", f"Status: {outcome.status}"]
    if outcome.record is not None:
        lines.append(f"Pasangan: {outcome.record.husband_name} & {outcome.record.wife_name}")
        lines.append(f"Kecamatan: {outcome.record.kecamatan}")
        lines.append(f"Tahun: {outcome.record.tahun}")
    ctx.console.print(Panel.fit("\n".join(lines), title="Public Verification"))
    return 0 if outcome.ok else 1


def run_verify_all(args: argparse.Namespace, ctx: CLIContext) -> int:
    sweep = _service(ctx).verify_all(kecamatan=args.kecamatan)

    ctx.console.print(
        Panel.fit(
            f"Total: {sweep.total}\nVerified: {sweep.verified}\nFailed: {sweep.failed}",
            title="Integrity Sweep",
        )
    )
    failed = [check for check in sweep.checks if not check.verified]
    if failed:
        table = Table(title="Failed Records")
        table.add_column("Record ID")
        table.add_column("Fingerprint", overflow="fold")
        for check in failed:
            table.add_row(check.record_id, check.fingerprint)
        ctx.console.print(table)
    return 0 if sweep.failed == 0 else 1
