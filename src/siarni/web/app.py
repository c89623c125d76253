from __future__ import annotations

import html
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, Response
from pydantic import BaseModel

from siarni.application.services.archive_service import (
    DEFAULT_JUMLAH_LEMBAR,
    DEFAULT_MEDIA_SIMPAN,
    ArchiveService,
    RecordDraft,
    UploadedDocument,
)
from siarni.application.services.extraction_service import ExtractionService
from siarni.application.services.health_service import HealthService
from siarni.application.services.project_service import ProjectService
from siarni.application.services.stats_service import StatsService
from siarni.application.services.verification_service import VerificationService
from siarni.core.config import AppPaths, Settings
from siarni.core.errors import (
    AttachmentError,
    ConfigurationError,
    ExtractionError,
    RecordNotFoundError,
    SiarniError,
    ValidationError,
)
from siarni.core.integrity import canonicalize, compute_fingerprint, verify_record_integrity
from siarni.core.links import qr_service_url, render_qr_png, verify_link
from siarni.domain.models.record import MarriageRecord
from siarni.domain.models.verification import STATUS_NOT_FOUND, STATUS_SUCCESS, PublicVerification
from siarni.infrastructure.ai.gemini_extractor import DocumentPart, GeminiConfig, GeminiExtractor
from siarni.infrastructure.archive.store import ArchiveStore
from siarni.infrastructure.db.repos.record_repo import RecordRepo


class FingerprintRequest(BaseModel):
    husband_name: str = ""
    wife_name: str = ""
    marriage_date: str = ""
    nomor_nb: str = ""
    nomor_akta: str = ""
    kecamatan: str = ""
    nomor_bok: str = ""
    lokasi_simpan: str = ""
    extracted_text: str = ""


def _jsonable(value: Any) -> Any:
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def _http_error(exc: SiarniError) -> HTTPException:
    if isinstance(exc, RecordNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=503, detail=str(exc))
    if isinstance(exc, ExtractionError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


_PAGE_STYLE = """
body { font-family: system-ui, sans-serif; background: #020617; color: #0f172a; margin: 0;
       min-height: 100vh; display: flex; align-items: center; justify-content: center; }
.card { background: #fff; border-radius: 32px; max-width: 480px; width: 100%; overflow: hidden; }
.banner { padding: 32px; text-align: center; color: #fff; }
.success { background: #10b981; } .notfound { background: #f59e0b; } .tampered { background: #dc2626; }
.body { padding: 32px; } .label { font-size: 10px; text-transform: uppercase; color: #94a3b8; }
.value { font-weight: 800; text-transform: uppercase; margin: 4px 0 16px; }
.sig { font-family: monospace; font-size: 11px; word-break: break-all; text-transform: uppercase; }
"""


def render_verification_page(outcome: PublicVerification) -> str:
    record = outcome.record
    if outcome.status == STATUS_SUCCESS and record is not None:
        banner = (
            '<div class="banner success"><h1>Terverifikasi Asli</h1>'
            "<p>Sesuai dengan database arsip Kemenag Jember</p></div>"
        )
        rows = (
            ("Pasangan", f"{record.husband_name} & {record.wife_name}"),
            ("Kecamatan", record.kecamatan),
            ("Tahun", record.tahun),
            ("Nomor Akta", record.nomor_akta),
        )
        details = "".join(
            f'<div class="label">{html.escape(label)}</div><div class="value">{html.escape(value)}</div>'
            for label, value in rows
        )
        body = (
            f'<div class="body">{details}<div class="label">Digital Signature (SHA-256)</div>'
            f'<div class="sig">{html.escape(record.fingerprint)}</div></div>'
        )
    elif outcome.status == STATUS_NOT_FOUND:
        banner = '<div class="banner notfound"><h1>Data Tidak Ditemukan</h1></div>'
        body = (
            '<div class="body"><p>Berkas ini belum tercatat di arsip atau tautan verifikasinya salah.</p>'
            f'<div class="sig">{html.escape(outcome.fingerprint)}</div></div>'
        )
    else:
        banner = '<div class="banner tampered"><h1>Data Palsu / Berubah!</h1></div>'
        body = (
            '<div class="body"><p>Isi berkas digital ini telah berubah sejak diarsipkan. '
            "Digital Signature tidak cocok.</p>"
            f'<div class="sig">{html.escape(outcome.fingerprint)}</div></div>'
        )
    return (
        "<!doctype html><html lang=\"id\"><head><meta charset=\"utf-8\">"
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>Verifikasi Arsip Akta Nikah</title><style>{_PAGE_STYLE}</style></head>"
        f'<body><div class="card">{banner}{body}</div></body></html>'
    )


def create_app(paths: AppPaths, settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(title="SI-ARNI", version="0.1.0")
    static_dir = Path(__file__).resolve().parent / "static"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    project_service = ProjectService(paths)
    project_service.init_project()

    def get_record_repo() -> RecordRepo:
        return RecordRepo(paths.db_path)

    def get_archive_store() -> ArchiveStore:
        return ArchiveStore(paths.archive_dir)

    def get_archive_service() -> ArchiveService:
        return ArchiveService(record_repo=get_record_repo(), archive_store=get_archive_store())

    def get_extraction_service() -> ExtractionService:
        return ExtractionService(
            GeminiExtractor(GeminiConfig(api_key=settings.gemini_api_key, model=settings.gemini_model))
        )

    def get_verify_service() -> VerificationService:
        return VerificationService(get_record_repo())

    def get_record_or_404(record_id: str) -> MarriageRecord:
        record = get_record_repo().get_by_id(record_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
        return record

    def record_payload(record: MarriageRecord) -> dict[str, Any]:
        payload = _jsonable(record)
        payload["verified"] = verify_record_integrity(record)
        payload["verify_link"] = verify_link(settings.public_base_url, record.fingerprint)
        return payload

    async def read_uploads(files: list[UploadFile] | None) -> list[UploadedDocument]:
        documents: list[UploadedDocument] = []
        for upload in files or []:
            data = await upload.read()
            if not upload.filename and not data:
                # Browsers post an empty part for an untouched file input.
                continue
            documents.append(
                UploadedDocument(
                    filename=upload.filename or "upload.bin",
                    data=data,
                    media_type=upload.content_type or None,
                )
            )
        return documents

    @app.get("/", response_class=HTMLResponse)
    def index(verify: str | None = Query(default=None)) -> HTMLResponse:
        if verify:
            outcome = get_verify_service().verify_by_fingerprint(verify)
            return HTMLResponse(render_verification_page(outcome))
        page = static_dir / "index.html"
        return HTMLResponse(page.read_text(encoding="utf-8"))

    @app.post("/api/init")
    def api_init() -> dict[str, Any]:
        result = project_service.init_project()
        return {
            "ok": True,
            "db_path": str(result.db_path),
            "paths_created": [str(p) for p in result.paths_created],
        }

    @app.post("/api/extract")
    async def api_extract(files: list[UploadFile] = File(...)) -> dict[str, Any]:
        documents = await read_uploads(files)
        try:
            extracted = get_extraction_service().extract(
                [DocumentPart(data=doc.data, mime_type=doc.resolved_media_type()) for doc in documents]
            )
        except SiarniError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "fields": _jsonable(extracted)}

    @app.post("/api/records")
    async def api_create_record(
        husband_name: str = Form(default=""),
        wife_name: str = Form(default=""),
        marriage_date: str = Form(default=""),
        nomor_nb: str = Form(default=""),
        nomor_akta: str = Form(default=""),
        kecamatan: str = Form(default=""),
        nomor_bok: str = Form(default=""),
        lokasi_simpan: str = Form(default=""),
        extracted_text: str = Form(default=""),
        media_simpan: str = Form(default=DEFAULT_MEDIA_SIMPAN),
        jumlah_lembar: int = Form(default=DEFAULT_JUMLAH_LEMBAR),
        uploaded_by: str = Form(default=""),
        files: list[UploadFile] | None = File(default=None),
    ) -> dict[str, Any]:
        draft = RecordDraft(
            husband_name=husband_name,
            wife_name=wife_name,
            marriage_date=marriage_date,
            nomor_nb=nomor_nb,
            nomor_akta=nomor_akta,
            kecamatan=kecamatan,
            nomor_bok=nomor_bok,
            lokasi_simpan=lokasi_simpan,
            extracted_text=extracted_text,
            media_simpan=media_simpan,
            jumlah_lembar=jumlah_lembar,
        )
        documents = await read_uploads(files)
        try:
            record = get_archive_service().create_record(draft, documents, uploaded_by=uploaded_by)
        except (ValidationError, AttachmentError) as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "record": record_payload(record)}

    @app.get("/api/records")
    def api_records(
        limit: int = Query(default=100, ge=1, le=100000),
        kecamatan: str | None = Query(default=None),
        search: str | None = Query(default=None),
    ) -> dict[str, Any]:
        records = get_record_repo().list(limit=limit, kecamatan=kecamatan, search=search)
        return {"ok": True, "count": len(records), "records": [record_payload(r) for r in records]}

    @app.get("/api/records/{record_id}")
    def api_record_detail(record_id: str) -> dict[str, Any]:
        return {"ok": True, "record": record_payload(get_record_or_404(record_id))}

    @app.get("/api/records/{record_id}/verify")
    def api_record_verify(record_id: str) -> dict[str, Any]:
        try:
            check = get_verify_service().verify_record(record_id)
        except RecordNotFoundError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "check": _jsonable(check)}

    @app.get("/api/records/{record_id}/link")
    def api_record_link(record_id: str) -> dict[str, Any]:
        record = get_record_or_404(record_id)
        link = verify_link(settings.public_base_url, record.fingerprint)
        return {
            "ok": True,
            "fingerprint": record.fingerprint,
            "link": link,
            "qr_url": qr_service_url(link, settings.qr_size),
        }

    @app.get("/api/records/{record_id}/qr.png")
    def api_record_qr(record_id: str) -> Response:
        record = get_record_or_404(record_id)
        png = render_qr_png(verify_link(settings.public_base_url, record.fingerprint))
        return Response(content=png, media_type="image/png")

    @app.get("/api/records/{record_id}/attachments/{attachment_id}/content")
    def api_attachment_content(record_id: str, attachment_id: str, download: bool = False) -> FileResponse:
        attachment = get_record_repo().get_attachment(record_id, attachment_id)
        if attachment is None:
            raise HTTPException(status_code=404, detail=f"Attachment not found: {attachment_id}")
        try:
            path = get_archive_store().resolve(attachment.archived_relpath)
        except AttachmentError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if not path.exists():
            raise HTTPException(status_code=404, detail=f"Archived file missing for attachment: {attachment_id}")
        disposition = "attachment" if download else "inline"
        response = FileResponse(path, media_type=attachment.media_type)
        safe_filename = attachment.original_filename.replace('"', "")
        response.headers["Content-Disposition"] = f'{disposition}; filename="{safe_filename}"'
        return response

    @app.get("/api/verify")
    def api_verify(fingerprint: str = Query(...)) -> dict[str, Any]:
        outcome = get_verify_service().verify_by_fingerprint(fingerprint)
        record = outcome.record
        return {
            "ok": outcome.ok,
            "status": outcome.status,
            "fingerprint": outcome.fingerprint,
            "record": (
                {
                    "husband_name": record.husband_name,
                    "wife_name": record.wife_name,
                    "kecamatan": record.kecamatan,
                    "tahun": record.tahun,
                    "nomor_akta": record.nomor_akta,
                }
                if record is not None
                else None
            ),
        }

    @app.get("/api/integrity")
    def api_integrity(kecamatan: str | None = Query(default=None)) -> dict[str, Any]:
        sweep = get_verify_service().verify_all(kecamatan=kecamatan)
        return {"ok": sweep.failed == 0, **_jsonable(sweep)}

    @app.post("/api/fingerprint")
    def api_fingerprint(req: FingerprintRequest) -> dict[str, Any]:
        fields = req.model_dump()
        return {
            "ok": True,
            "fingerprint": compute_fingerprint(fields),
            "canonical": canonicalize(fields),
        }

    @app.get("/api/dashboard/summary")
    def api_dashboard_summary(kecamatan: str | None = Query(default=None)) -> dict[str, Any]:
        summary = StatsService(get_record_repo()).summary(kecamatan=kecamatan)
        return {
            "ok": True,
            "total_records": summary.total_records,
            "records_this_month": summary.records_this_month,
            "by_kecamatan": summary.by_kecamatan,
            "recent_records": [record_payload(r) for r in summary.recent_records],
            "services": {"ai_extraction": settings.ai_enabled},
        }

    @app.get("/api/doctor")
    def api_doctor() -> dict[str, Any]:
        report = HealthService(
            db_path=paths.db_path,
            archive_dir=paths.archive_dir,
            settings=settings,
        ).run_doctor()
        return {"ok": report.ok, "report": _jsonable(report)}

    return app
