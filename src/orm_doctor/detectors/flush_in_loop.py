from dataclasses import dataclass
from datetime import UTC, datetime

from orm_doctor.config import AnalysisSettings, FlushInLoopSettings
from orm_doctor.detectors.base import origin_frame, origin_from
from orm_doctor.domain import Finding, FindingKind, QueryRecord, QueryTrace, Severity
from orm_doctor.findings import IssueFactory


@dataclass(frozen=True, slots=True)
class Synchronization:
    """One COMMIT that closed at least one write."""

    commit: QueryRecord
    first_write: QueryRecord
    operations: int


class FlushInLoopDetector:
    """Flags repeated write-then-commit sequences packed into a short time window."""

    name: str = "flush_in_loop"

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def synchronizations(self, trace: QueryTrace) -> list[Synchronization]:
        syncs: list[Synchronization] = []
        pending = 0
        first_write: QueryRecord | None = None
        for record in trace:
            statement = record.statement_type
            if record.is_write:
                pending += 1
                first_write = first_write or record
            elif statement == "COMMIT":
                if first_write is not None:
                    syncs.append(Synchronization(record, first_write, pending))
                pending, first_write = 0, None
            elif statement == "ROLLBACK":
                pending, first_write = 0, None
        return syncs

    def densest_window(
        self, syncs: list[Synchronization], config: FlushInLoopSettings
    ) -> list[Synchronization]:
        if any(sync.commit.started_at is None for sync in syncs):
            return syncs

        moments = [_as_utc(sync.commit.started_at) for sync in syncs]
        best_start, best_end = 0, 0
        start = 0
        for end in range(len(syncs)):
            while (moments[end] - moments[start]).total_seconds() * 1000 > config.time_window_ms:
                start += 1
            if end - start > best_end - best_start:
                best_start, best_end = start, end
        return syncs[best_start : best_end + 1]

    def detect(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        config = settings.flush_in_loop
        syncs = self.synchronizations(trace)
        if len(syncs) <= config.flush_count_threshold:
            return []

        window = self.densest_window(syncs, config)
        count = len(window)
        if count <= config.flush_count_threshold:
            return []

        operations = sum(sync.operations for sync in window)
        average = operations / count
        frame = origin_frame(window[0].first_write.backtrace)

        return [
            self._issues.create(
                FindingKind.FLUSH_IN_LOOP,
                {
                    "severity": Severity.CRITICAL,
                    "title": f"Flush in Loop: {count} flushes",
                    "description": (
                        f"Detected {count} flush() calls in a loop pattern "
                        f"(avg {average:.1f} operations per flush)."
                    ),
                    "origin": origin_from(frame, detail="flush"),
                    "queries": [sync.first_write.sql for sync in window[:5]],
                    "details": {
                        "flush_count": count,
                        "operations": operations,
                        "avg_operations": average,
                        "time_window_ms": config.time_window_ms,
                    },
                },
            )
        ]


def _as_utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=UTC)
