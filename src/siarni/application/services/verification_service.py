from __future__ import annotations

import logging
import re

from siarni.core.errors import RecordNotFoundError
from siarni.core.integrity import verify_record_integrity
from siarni.domain.models.verification import (
    STATUS_NOT_FOUND,
    STATUS_SUCCESS,
    STATUS_TAMPERED,
    IntegritySweep,
    PublicVerification,
    RecordCheck,
)
from siarni.infrastructure.db.repos.record_repo import RecordRepo

logger = logging.getLogger(__name__)

_FINGERPRINT_RE = re.compile(r"^[0-9a-f]{64}$")


def normalize_fingerprint(value: str | None) -> str:
    return str(value or "").strip().lower()


class VerificationService:
    def __init__(self, record_repo: RecordRepo) -> None:
        self.record_repo = record_repo

    def verify_record(self, record_id: str) -> RecordCheck:
        record = self.record_repo.get_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(f"Record not found: {record_id}")

        verified = verify_record_integrity(record)
        if not verified:
            logger.warning("Integrity check failed for record %s", record.id)
        return RecordCheck(record_id=record.id, fingerprint=record.fingerprint, verified=verified)

    def verify_by_fingerprint(self, fingerprint: str | None) -> PublicVerification:
        """Resolve a scanned verification link to SUCCESS, NOT_FOUND or TAMPERED."""
        value = normalize_fingerprint(fingerprint)
        if not _FINGERPRINT_RE.match(value):
            return PublicVerification(status=STATUS_NOT_FOUND, fingerprint=value)

        try:
            record = self.record_repo.get_by_fingerprint(value)
        except Exception:
            logger.exception("Lookup failed for fingerprint %s", value)
            return PublicVerification(status=STATUS_NOT_FOUND, fingerprint=value)

        if record is None:
            return PublicVerification(status=STATUS_NOT_FOUND, fingerprint=value)
        if not verify_record_integrity(record):
            logger.warning("Public verification detected tampering for record %s", record.id)
            return PublicVerification(status=STATUS_TAMPERED, fingerprint=value)
        return PublicVerification(status=STATUS_SUCCESS, fingerprint=value, record=record)

    def verify_all(self, kecamatan: str | None = None) -> IntegritySweep:
        checks: list[RecordCheck] = []
        for record_id in self.record_repo.list_ids(kecamatan=kecamatan):
            try:
                record = self.record_repo.get_by_id(record_id)
            except Exception:
                logger.exception("Unable to load record %s for integrity sweep", record_id)
                record = None
            if record is None:
                checks.append(RecordCheck(record_id=record_id, fingerprint="", verified=False))
                continue
            checks.append(
                RecordCheck(
                    record_id=record.id,
                    fingerprint=record.fingerprint,
                    verified=verify_record_integrity(record),
                )
            )

        verified = sum(1 for check in checks if check.verified)
        return IntegritySweep(
            total=len(checks),
            verified=verified,
            failed=len(checks) - verified,
            checks=checks,
        )
