from pathlib import Path

import pytest

from siarni.application.services.archive_service import ArchiveService, RecordDraft
from siarni.application.services.verification_service import VerificationService
from siarni.core.errors import RecordNotFoundError
from siarni.domain.models.record import MarriageRecord
from siarni.infrastructure.archive.store import ArchiveStore
from siarni.infrastructure.db.repos.record_repo import RecordRepo
from siarni.infrastructure.db.sqlite import get_connection, initialize_schema


def _bootstrap(tmp_path: Path) -> tuple[ArchiveService, VerificationService, Path]:
    db_path = tmp_path / "siarni.db"
    initialize_schema(db_path)
    repo = RecordRepo(db_path)
    archive = ArchiveService(repo, ArchiveStore(tmp_path / "archive"))
    return archive, VerificationService(repo), db_path


def _create(archive: ArchiveService, husband: str = "Ahmad Sutrisno", akta: str = "045/2024") -> MarriageRecord:
    return archive.create_record(
        RecordDraft(
            husband_name=husband,
            wife_name="Siti Aminah",
            marriage_date="2024-05-01",
            nomor_akta=akta,
            kecamatan="Sumbersari",
        )
    )


def _tamper(db_path: Path, record_id: str, column: str, value: str) -> None:
    with get_connection(db_path) as conn:
        conn.execute(f"UPDATE marriage_records SET {column} = ? WHERE id = ?", (value, record_id))
        conn.commit()


def test_verify_record_pass_and_tampered(tmp_path: Path) -> None:
    archive, service, db_path = _bootstrap(tmp_path)
    record = _create(archive)

    assert service.verify_record(record.id).verified is True

    _tamper(db_path, record.id, "nomor_akta", "999/2024")
    check = service.verify_record(record.id)
    assert check.verified is False
    assert check.fingerprint == record.fingerprint


def test_verify_record_ignores_non_fingerprinted_changes(tmp_path: Path) -> None:
    archive, service, db_path = _bootstrap(tmp_path)
    record = _create(archive)

    _tamper(db_path, record.id, "uploaded_by", "someone else")
    _tamper(db_path, record.id, "created_at", "2030-01-01T00:00:00+00:00")

    assert service.verify_record(record.id).verified is True


def test_verify_record_missing_raises(tmp_path: Path) -> None:
    _, service, _ = _bootstrap(tmp_path)
    with pytest.raises(RecordNotFoundError):
        service.verify_record("missing")


def test_verify_by_fingerprint_statuses(tmp_path: Path) -> None:
    archive, service, db_path = _bootstrap(tmp_path)
    record = _create(archive)

    ok = service.verify_by_fingerprint(record.fingerprint.upper())
    assert ok.status == "SUCCESS"
    assert ok.ok is True
    assert ok.record is not None
    assert ok.record.id == record.id

    assert service.verify_by_fingerprint("0" * 64).status == "NOT_FOUND"
    assert service.verify_by_fingerprint("not-a-fingerprint").status == "NOT_FOUND"
    assert service.verify_by_fingerprint(None).status == "NOT_FOUND"

    _tamper(db_path, record.id, "wife_name", "Orang Lain")
    tampered = service.verify_by_fingerprint(record.fingerprint)
    assert tampered.status == "TAMPERED"
    assert tampered.record is None


def test_verify_all_reports_each_record_independently(tmp_path: Path) -> None:
    archive, service, db_path = _bootstrap(tmp_path)
    good = _create(archive)
    bad = _create(archive, husband="Budi Santoso", akta="046/2024")
    _tamper(db_path, bad.id, "extracted_text", "edited transcript")

    sweep = service.verify_all()

    assert sweep.total == 2
    assert sweep.verified == 1
    assert sweep.failed == 1
    outcome = {check.record_id: check.verified for check in sweep.checks}
    assert outcome == {good.id: True, bad.id: False}


def test_verify_all_continues_when_a_record_cannot_be_loaded(tmp_path: Path, monkeypatch) -> None:
    archive, service, _ = _bootstrap(tmp_path)
    first = _create(archive)
    second = _create(archive, husband="Budi Santoso", akta="046/2024")

    original_get = RecordRepo.get_by_id

    def flaky_get(self, record_id: str):
        if record_id == first.id:
            raise OSError("disk read failed")
        return original_get(self, record_id)

    monkeypatch.setattr(RecordRepo, "get_by_id", flaky_get)

    sweep = service.verify_all()

    outcome = {check.record_id: check.verified for check in sweep.checks}
    assert outcome == {first.id: False, second.id: True}
