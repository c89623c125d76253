import os
import stat
from pathlib import Path

from siarni.application.services.archive_service import ArchiveService, RecordDraft, UploadedDocument
from siarni.application.services.health_service import HealthService
from siarni.core.config import Settings
from siarni.infrastructure.archive.store import ArchiveStore
from siarni.infrastructure.db.repos.record_repo import RecordRepo
from siarni.infrastructure.db.sqlite import get_connection, initialize_schema


def _bootstrap(tmp_path: Path):
    db_path = tmp_path / "siarni.db"
    initialize_schema(db_path)
    archive_dir = tmp_path / "archive"
    repo = RecordRepo(db_path)
    record = ArchiveService(repo, ArchiveStore(archive_dir)).create_record(
        RecordDraft(husband_name="Ahmad", wife_name="Siti", nomor_akta="045/2024", kecamatan="Ajung"),
        [UploadedDocument(filename="scan.jpg", data=b"scan bytes")],
    )
    return db_path, archive_dir, record


def test_doctor_passes_for_basic_clean_state(tmp_path: Path) -> None:
    db_path, archive_dir, _ = _bootstrap(tmp_path)

    report = HealthService(db_path, archive_dir, Settings(gemini_api_key="key")).run_doctor()

    assert report.ok is True
    assert report.checks_run == 4
    assert report.db_runtime["journal_mode"] == "wal"
    assert report.db_runtime["foreign_keys"] is True
    assert report.services == {"ai_extraction": True}
    assert report.issues == []


def test_doctor_flags_tampered_record_and_altered_scan(tmp_path: Path) -> None:
    db_path, archive_dir, record = _bootstrap(tmp_path)
    with get_connection(db_path) as conn:
        conn.execute("UPDATE marriage_records SET husband_name = 'Palsu' WHERE id = ?", (record.id,))
        conn.commit()
    scan = archive_dir / record.attachments[0].archived_relpath
    os.chmod(scan, stat.S_IWUSR | stat.S_IRUSR)
    scan.write_bytes(b"altered")

    report = HealthService(db_path, archive_dir, Settings()).run_doctor()

    assert report.ok is False
    checks = {issue.check for issue in report.issues}
    assert checks == {"record_fingerprint", "attachment_integrity", "ai_config"}
    ai_issue = next(issue for issue in report.issues if issue.check == "ai_config")
    assert ai_issue.level == "warning"
