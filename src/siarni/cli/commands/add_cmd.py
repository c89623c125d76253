from __future__ import annotations

import argparse
from pathlib import Path

from rich.panel import Panel

from siarni.application.services.archive_service import (
    DEFAULT_JUMLAH_LEMBAR,
    DEFAULT_MEDIA_SIMPAN,
    ArchiveService,
    RecordDraft,
    UploadedDocument,
)
from siarni.application.services.extraction_service import ExtractedFields, ExtractionService
from siarni.application.services.project_service import ProjectService
from siarni.cli.context import CLIContext
from siarni.cli.record_options import add_record_field_arguments, draft_from_args
from siarni.core.links import verify_link
from siarni.infrastructure.ai.gemini_extractor import DocumentPart, GeminiConfig, GeminiExtractor
from siarni.infrastructure.archive.store import ArchiveStore
from siarni.infrastructure.db.repos.record_repo import RecordRepo


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("add", help="Archive a marriage certificate record")
    parser.add_argument("files", nargs="*", type=Path, help="Scanned pages to attach (max 4)")
    add_record_field_arguments(parser)
    parser.add_argument("--media-simpan", default=DEFAULT_MEDIA_SIMPAN)
    parser.add_argument("--lembar", type=int, default=DEFAULT_JUMLAH_LEMBAR, help="Page count")
    parser.add_argument("--uploaded-by", default="", help="Name of the staff member archiving the record")
    parser.add_argument(
        "--extract",
        action="store_true",
        help="Fill empty fields from the attached scans with AI extraction",
    )
    parser.set_defaults(handler=run)


def _merge_extracted(draft: RecordDraft, extracted: ExtractedFields) -> None:
    # Values given on the command line win over extracted ones.
    draft.husband_name = draft.husband_name or extracted.husband_name
    draft.wife_name = draft.wife_name or extracted.wife_name
    draft.marriage_date = draft.marriage_date or extracted.marriage_date
    draft.nomor_nb = draft.nomor_nb or extracted.nomor_nb
    draft.nomor_akta = draft.nomor_akta or extracted.nomor_akta
    draft.extracted_text = draft.extracted_text or extracted.full_text


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()

    draft = draft_from_args(args)
    documents = [UploadedDocument.from_path(path) for path in args.files]

    if args.extract and documents:
        extractor = GeminiExtractor(
            GeminiConfig(api_key=ctx.settings.gemini_api_key, model=ctx.settings.gemini_model)
        )
        with ctx.console.status("Extracting fields with AI..."):
            extracted = ExtractionService(extractor).extract(
                [DocumentPart(data=doc.data, mime_type=doc.resolved_media_type()) for doc in documents]
            )
        _merge_extracted(draft, extracted)

    service = ArchiveService(RecordRepo(ctx.paths.db_path), ArchiveStore(ctx.paths.archive_dir))
    record = service.create_record(draft, documents, uploaded_by=args.uploaded_by)

    lines = [
        f"Record ID: {record.id}",
        f"Pasangan: {record.husband_name} & {record.wife_name}",
        f"Nomor Akta: {record.nomor_akta}",
        f"Kecamatan: {record.kecamatan}",
        f"Attachments: {len(record.attachments)}",
        f"Fingerprint: {record.fingerprint}",
        f"Verify link: {verify_link(ctx.settings.public_base_url, record.fingerprint)}",
    ]
    ctx.console.print(Panel.fit("\n".join(lines), title="Record Archived"))
    return 0
