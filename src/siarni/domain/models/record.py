from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class RecordAttachment:
    id: str
    record_id: str
    digest_sha256: str
    media_type: str
    original_filename: str
    archived_relpath: str
    size_bytes: int
    position: int


@dataclass(slots=True)
class MarriageRecord:
    id: str
    husband_name: str
    wife_name: str
    marriage_date: str
    kecamatan: str
    extracted_text: str
    fingerprint: str
    created_at: str
    uploaded_by: str
    nomor_nb: str
    nomor_akta: str
    media_simpan: str
    jumlah_lembar: int
    tahun: str
    jangka_simpan: str
    tingkat_perkembangan: str
    nomor_bok: str
    lokasi_simpan: str
    attachments: list[RecordAttachment] = field(default_factory=list)
