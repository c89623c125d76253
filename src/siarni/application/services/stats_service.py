from __future__ import annotations

from dataclasses import dataclass

from siarni.core.regions import KECAMATAN_JEMBER
from siarni.core.time import now_utc
from siarni.domain.models.record import MarriageRecord
from siarni.infrastructure.db.repos.record_repo import RecordRepo

RECENT_LIMIT = 5


@dataclass(slots=True)
class DashboardSummary:
    total_records: int
    records_this_month: int
    by_kecamatan: dict[str, int]
    recent_records: list[MarriageRecord]


class StatsService:
    def __init__(self, record_repo: RecordRepo) -> None:
        self.record_repo = record_repo

    def summary(self, kecamatan: str | None = None) -> DashboardSummary:
        month_start = now_utc().replace(day=1, hour=0, minute=0, second=0, microsecond=0).isoformat()
        counts = self.record_repo.count_by_kecamatan()

        if kecamatan:
            by_kecamatan = {kecamatan: counts.get(kecamatan, 0)}
        else:
            # Known districts with records first, then any other labels (e.g. "Umum").
            by_kecamatan = {name: counts[name] for name in KECAMATAN_JEMBER if counts.get(name)}
            by_kecamatan.update(
                {name: n for name, n in counts.items() if name not in KECAMATAN_JEMBER}
            )

        return DashboardSummary(
            total_records=self.record_repo.count(kecamatan=kecamatan),
            records_this_month=self.record_repo.count(kecamatan=kecamatan, created_since=month_start),
            by_kecamatan=by_kecamatan,
            recent_records=self.record_repo.list(limit=RECENT_LIMIT, kecamatan=kecamatan),
        )
