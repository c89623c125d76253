from __future__ import annotations

from dataclasses import dataclass, field

from siarni.domain.models.record import MarriageRecord

STATUS_SUCCESS = "SUCCESS"
STATUS_NOT_FOUND = "NOT_FOUND"
STATUS_TAMPERED = "TAMPERED"


@dataclass(slots=True)
class RecordCheck:
    record_id: str
    fingerprint: str
    verified: bool


@dataclass(slots=True)
class PublicVerification:
    status: str
    fingerprint: str
    record: MarriageRecord | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS


@dataclass(slots=True)
class IntegritySweep:
    total: int
    verified: int
    failed: int
    checks: list[RecordCheck] = field(default_factory=list)
