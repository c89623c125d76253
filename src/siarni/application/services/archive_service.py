from __future__ import annotations

import logging
import mimetypes
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from siarni.core.errors import AttachmentError, ValidationError
from siarni.core.hashing import compute_bytes_digest
from siarni.core.ids import new_uuid
from siarni.core.integrity import compute_fingerprint
from siarni.core.regions import FALLBACK_KECAMATAN
from siarni.core.time import now_utc, now_utc_iso
from siarni.domain.models.record import MarriageRecord, RecordAttachment
from siarni.infrastructure.archive.store import ArchiveStore
from siarni.infrastructure.db.repos.record_repo import RecordRepo

logger = logging.getLogger(__name__)

MAX_ATTACHMENTS = 4
DEFAULT_MEDIA_SIMPAN = "Kertas & Digital"
DEFAULT_JUMLAH_LEMBAR = 4
DEFAULT_JANGKA_SIMPAN = "Permanen"
DEFAULT_TINGKAT_PERKEMBANGAN = "Asli"


@dataclass(slots=True)
class RecordDraft:
    husband_name: str = ""
    wife_name: str = ""
    marriage_date: str = ""
    nomor_nb: str = ""
    nomor_akta: str = ""
    kecamatan: str = ""
    nomor_bok: str = ""
    lokasi_simpan: str = ""
    extracted_text: str = ""
    media_simpan: str = DEFAULT_MEDIA_SIMPAN
    jumlah_lembar: int = DEFAULT_JUMLAH_LEMBAR


@dataclass(slots=True)
class UploadedDocument:
    filename: str
    data: bytes
    media_type: str | None = None

    @classmethod
    def from_path(cls, path: Path) -> UploadedDocument:
        resolved = path.expanduser().resolve()
        if not resolved.is_file():
            raise AttachmentError(f"File not found: {resolved}")
        return cls(filename=resolved.name, data=resolved.read_bytes())

    def resolved_media_type(self) -> str:
        return self.media_type or mimetypes.guess_type(self.filename)[0] or "application/octet-stream"


class ArchiveService:
    def __init__(self, record_repo: RecordRepo, archive_store: ArchiveStore) -> None:
        self.record_repo = record_repo
        self.archive_store = archive_store

    def create_record(
        self,
        draft: RecordDraft,
        documents: list[UploadedDocument] | None = None,
        *,
        uploaded_by: str = "",
    ) -> MarriageRecord:
        documents = documents or []
        self._validate(draft, documents)

        kecamatan = draft.kecamatan.strip() or FALLBACK_KECAMATAN
        record = MarriageRecord(
            id=new_uuid(),
            husband_name=draft.husband_name,
            wife_name=draft.wife_name,
            marriage_date=draft.marriage_date,
            kecamatan=kecamatan,
            extracted_text=draft.extracted_text
            or f"Arsip Akta Nikah: {draft.husband_name} & {draft.wife_name}",
            fingerprint="",
            created_at=now_utc_iso(),
            uploaded_by=uploaded_by,
            nomor_nb=draft.nomor_nb,
            nomor_akta=draft.nomor_akta,
            media_simpan=draft.media_simpan or DEFAULT_MEDIA_SIMPAN,
            jumlah_lembar=draft.jumlah_lembar,
            tahun=draft.marriage_date.strip()[:4] if draft.marriage_date.strip() else str(now_utc().year),
            jangka_simpan=DEFAULT_JANGKA_SIMPAN,
            tingkat_perkembangan=DEFAULT_TINGKAT_PERKEMBANGAN,
            nomor_bok=draft.nomor_bok,
            lokasi_simpan=draft.lokasi_simpan or f"KUA {kecamatan}",
        )
        record.fingerprint = compute_fingerprint(record)

        existing = self.record_repo.get_by_fingerprint(record.fingerprint)
        if existing is not None:
            raise ValidationError(
                f"A record with identical archive fields already exists: {existing.id}"
            )

        record.attachments = [
            self._archive_document(record.id, position, document)
            for position, document in enumerate(documents)
        ]
        try:
            self.record_repo.insert(record)
        except sqlite3.IntegrityError as exc:
            # A concurrent upload of the same record reached the unique index first.
            raise ValidationError(
                f"A record with identical archive fields already exists: {record.fingerprint}"
            ) from exc
        logger.info(
            "Archived record %s (%s) with %d attachment(s)",
            record.id,
            record.fingerprint,
            len(record.attachments),
        )
        return record

    @staticmethod
    def _validate(draft: RecordDraft, documents: list[UploadedDocument]) -> None:
        missing = [
            label
            for label, value in (
                ("husband_name", draft.husband_name),
                ("wife_name", draft.wife_name),
                ("nomor_akta", draft.nomor_akta),
            )
            if not value.strip()
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if len(documents) > MAX_ATTACHMENTS:
            raise ValidationError(
                f"At most {MAX_ATTACHMENTS} documents can be attached to a record, got {len(documents)}"
            )
        if draft.jumlah_lembar < 0:
            raise ValidationError("jumlah_lembar must not be negative")

    def _archive_document(self, record_id: str, position: int, document: UploadedDocument) -> RecordAttachment:
        if not document.data:
            raise AttachmentError(f"Document is empty: {document.filename}")
        digest_sha256 = compute_bytes_digest(document.data, "sha256")
        suffix = Path(document.filename).suffix.lower()
        archived_path = self.archive_store.store_bytes_immutable(document.data, digest_sha256, suffix)
        return RecordAttachment(
            id=new_uuid(),
            record_id=record_id,
            digest_sha256=digest_sha256,
            media_type=document.resolved_media_type(),
            original_filename=document.filename,
            archived_relpath=str(archived_path.relative_to(self.archive_store.base_dir)),
            size_bytes=len(document.data),
            position=position,
        )
