from __future__ import annotations

import sqlite3
from pathlib import Path

from siarni.domain.models.record import MarriageRecord, RecordAttachment
from siarni.infrastructure.db.sqlite import get_connection

_RECORD_COLUMNS = (
    "id",
    "husband_name",
    "wife_name",
    "marriage_date",
    "kecamatan",
    "extracted_text",
    "fingerprint",
    "created_at",
    "uploaded_by",
    "nomor_nb",
    "nomor_akta",
    "media_simpan",
    "jumlah_lembar",
    "tahun",
    "jangka_simpan",
    "tingkat_perkembangan",
    "nomor_bok",
    "lokasi_simpan",
)

_SEARCH_COLUMNS = ("husband_name", "wife_name", "nomor_akta", "nomor_nb")


class RecordRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def insert(self, record: MarriageRecord) -> None:
        placeholders = ", ".join("?" for _ in _RECORD_COLUMNS)
        with get_connection(self.db_path) as conn:
            conn.execute(
                f"INSERT INTO marriage_records ({', '.join(_RECORD_COLUMNS)}) VALUES ({placeholders})",
                tuple(getattr(record, column) for column in _RECORD_COLUMNS),
            )
            for attachment in record.attachments:
                conn.execute(
                    """
                    INSERT INTO record_attachments (
                        id,
                        record_id,
                        digest_sha256,
                        media_type,
                        original_filename,
                        archived_relpath,
                        size_bytes,
                        position
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        attachment.id,
                        attachment.record_id,
                        attachment.digest_sha256,
                        attachment.media_type,
                        attachment.original_filename,
                        attachment.archived_relpath,
                        attachment.size_bytes,
                        attachment.position,
                    ),
                )
            conn.commit()

    def get_by_id(self, record_id: str) -> MarriageRecord | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM marriage_records WHERE id = ?",
                (record_id,),
            ).fetchone()
            return self._to_model(conn, row) if row else None

    def get_by_fingerprint(self, fingerprint: str) -> MarriageRecord | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM marriage_records WHERE fingerprint = ?",
                (fingerprint.strip().lower(),),
            ).fetchone()
            return self._to_model(conn, row) if row else None

    def list(
        self,
        limit: int = 100,
        *,
        kecamatan: str | None = None,
        search: str | None = None,
    ) -> list[MarriageRecord]:
        clauses: list[str] = []
        params: list[object] = []
        if kecamatan:
            clauses.append("kecamatan = ?")
            params.append(kecamatan)
        term = (search or "").strip().lower()
        if term:
            like = f"%{term}%"
            clauses.append("(" + " OR ".join(f"LOWER({c}) LIKE ?" for c in _SEARCH_COLUMNS) + ")")
            params.extend(like for _ in _SEARCH_COLUMNS)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)

        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM marriage_records
                {where}
                ORDER BY created_at DESC
                LIMIT ?
                """,
                params,
            ).fetchall()
            return [self._to_model(conn, row) for row in rows]

    def list_all(self, kecamatan: str | None = None) -> list[MarriageRecord]:
        return self.list(limit=-1, kecamatan=kecamatan)

    def list_ids(self, kecamatan: str | None = None) -> list[str]:
        with get_connection(self.db_path) as conn:
            if kecamatan:
                rows = conn.execute(
                    "SELECT id FROM marriage_records WHERE kecamatan = ? ORDER BY created_at DESC",
                    (kecamatan,),
                ).fetchall()
            else:
                rows = conn.execute("SELECT id FROM marriage_records ORDER BY created_at DESC").fetchall()
        return [row["id"] for row in rows]

    def count(self, kecamatan: str | None = None, created_since: str | None = None) -> int:
        clauses: list[str] = []
        params: list[object] = []
        if kecamatan:
            clauses.append("kecamatan = ?")
            params.append(kecamatan)
        if created_since:
            clauses.append("created_at >= ?")
            params.append(created_since)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with get_connection(self.db_path) as conn:
            row = conn.execute(f"SELECT COUNT(*) AS n FROM marriage_records {where}", params).fetchone()
        return int(row["n"])

    def count_by_kecamatan(self) -> dict[str, int]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT kecamatan, COUNT(*) AS n
                FROM marriage_records
                GROUP BY kecamatan
                ORDER BY kecamatan ASC
                """
            ).fetchall()
        return {row["kecamatan"]: int(row["n"]) for row in rows}

    def get_attachment(self, record_id: str, attachment_id: str) -> RecordAttachment | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM record_attachments WHERE record_id = ? AND id = ?",
                (record_id, attachment_id),
            ).fetchone()
        return self._to_attachment(row) if row else None

    def list_attachments(self, record_id: str | None = None) -> list[RecordAttachment]:
        with get_connection(self.db_path) as conn:
            return self._list_attachments(conn, record_id)

    def _list_attachments(self, conn: sqlite3.Connection, record_id: str | None) -> list[RecordAttachment]:
        if record_id is None:
            rows = conn.execute(
                "SELECT * FROM record_attachments ORDER BY record_id ASC, position ASC"
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM record_attachments WHERE record_id = ? ORDER BY position ASC",
                (record_id,),
            ).fetchall()
        return [self._to_attachment(row) for row in rows]

    def _to_model(self, conn: sqlite3.Connection, row) -> MarriageRecord:
        return MarriageRecord(
            id=row["id"],
            husband_name=row["husband_name"],
            wife_name=row["wife_name"],
            marriage_date=row["marriage_date"],
            kecamatan=row["kecamatan"],
            extracted_text=row["extracted_text"],
            fingerprint=row["fingerprint"],
            created_at=row["created_at"],
            uploaded_by=row["uploaded_by"],
            nomor_nb=row["nomor_nb"],
            nomor_akta=row["nomor_akta"],
            media_simpan=row["media_simpan"],
            jumlah_lembar=row["jumlah_lembar"],
            tahun=row["tahun"],
            jangka_simpan=row["jangka_simpan"],
            tingkat_perkembangan=row["tingkat_perkembangan"],
            nomor_bok=row["nomor_bok"],
            lokasi_simpan=row["lokasi_simpan"],
            attachments=self._list_attachments(conn, row["id"]),
        )

    @staticmethod
    def _to_attachment(row) -> RecordAttachment:
        return RecordAttachment(
            id=row["id"],
            record_id=row["record_id"],
            digest_sha256=row["digest_sha256"],
            media_type=row["media_type"],
            original_filename=row["original_filename"],
            archived_relpath=row["archived_relpath"],
            size_bytes=row["size_bytes"],
            position=row["position"],
        )
