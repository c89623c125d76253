from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from siarni.core.config import Settings
from siarni.core.integrity import verify_record_integrity
from siarni.infrastructure.archive.store import ArchiveStore
from siarni.infrastructure.db.repos.record_repo import RecordRepo
from siarni.infrastructure.db.sqlite import read_runtime_pragmas


@dataclass(slots=True)
class DoctorIssue:
    check: str
    level: str
    message: str


@dataclass(slots=True)
class DoctorReport:
    ok: bool
    checks_run: int
    issues: list[DoctorIssue]
    db_runtime: dict[str, object]
    services: dict[str, bool]


class HealthService:
    def __init__(self, db_path: Path, archive_dir: Path, settings: Settings) -> None:
        self.db_path = db_path
        self.archive_dir = archive_dir
        self.settings = settings

    def run_doctor(self) -> DoctorReport:
        issues: list[DoctorIssue] = []
        checks_run = 0

        record_repo = RecordRepo(self.db_path)
        archive = ArchiveStore(self.archive_dir)

        # Check 1: database runtime pragmas support concurrent access.
        checks_run += 1
        db_runtime = read_runtime_pragmas(self.db_path)
        journal_mode = db_runtime["journal_mode"]
        if journal_mode != "wal":
            issues.append(
                DoctorIssue(
                    check="db_runtime",
                    level="error",
                    message=f"SQLite journal_mode is '{journal_mode}', expected 'wal' for concurrent access.",
                )
            )
        if not db_runtime["foreign_keys"]:
            issues.append(
                DoctorIssue(check="db_runtime", level="error", message="SQLite foreign_keys pragma is disabled.")
            )

        # Check 2: every record still matches its fingerprint.
        checks_run += 1
        for record in record_repo.list_all():
            if not verify_record_integrity(record):
                issues.append(
                    DoctorIssue(
                        check="record_fingerprint",
                        level="error",
                        message=f"Record {record.id} does not match its fingerprint {record.fingerprint}",
                    )
                )

        # Check 3: archived scans exist and match their digests.
        checks_run += 1
        for attachment in record_repo.list_attachments():
            path = archive.base_dir / attachment.archived_relpath
            if not archive.verify_archived_integrity(path, attachment.digest_sha256):
                issues.append(
                    DoctorIssue(
                        check="attachment_integrity",
                        level="error",
                        message=(
                            f"Attachment {attachment.id} of record {attachment.record_id} "
                            f"is missing or altered: {attachment.archived_relpath}"
                        ),
                    )
                )

        # Check 4: external services are configured.
        checks_run += 1
        services = {"ai_extraction": self.settings.ai_enabled}
        if not self.settings.ai_enabled:
            issues.append(
                DoctorIssue(
                    check="ai_config",
                    level="warning",
                    message="GEMINI_API_KEY is not set; uploads need manual field entry.",
                )
            )

        return DoctorReport(
            ok=not any(issue.level == "error" for issue in issues),
            checks_run=checks_run,
            issues=issues,
            db_runtime=db_runtime,
            services=services,
        )
