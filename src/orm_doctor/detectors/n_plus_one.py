import re
from typing import ClassVar

from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors.base import origin_frame, origin_from
from orm_doctor.domain import CallFrame, Finding, FindingKind, QueryRecord, QueryTrace, Severity
from orm_doctor.findings import IssueFactory
from orm_doctor.sql import fingerprint, table_of


class NPlusOneDetector:
    """Flags SELECT shapes repeated from one call site within a trace."""

    name: str = "n_plus_one"

    PROXY_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"\bWHERE\s+(?:\w+\.)?ID\s*=\s*\?(?:\s+LIMIT\s+\?)?\s*$"
    )
    COLLECTION_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"\bWHERE\s+(?:\w+\.)?\w+_ID\s*=\s*\?")
    LIMIT_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"\bLIMIT\b")

    _type_labels: ClassVar[dict[str, str]] = {
        "proxy": "lazy-loaded proxies",
        "collection": "lazy-loaded collections",
        "partial_collection": "partial collection loads",
        "unknown": "repeated queries",
    }
    _proxy_weight: ClassVar[float] = 1.3
    _critical_count: ClassVar[int] = 20
    _warning_count: ClassVar[int] = 10
    _critical_total_ms: ClassVar[float] = 1000.0
    _warning_total_ms: ClassVar[float] = 500.0
    _sample_size: ClassVar[int] = 5

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def detect(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        config = settings.n_plus_one
        groups: dict[tuple[str, tuple[str | None, ...]], list[QueryRecord]] = {}
        frames: dict[tuple[str, tuple[str | None, ...]], CallFrame | None] = {}

        for record in trace:
            if not record.is_select:
                continue
            frame = origin_frame(record.backtrace)
            # The loop body frame's line can move between iterations; file and symbol do not.
            site = (frame.file, frame.cls, frame.function) if frame else ()
            key = (fingerprint(record.sql), site)
            groups.setdefault(key, []).append(record)
            frames.setdefault(key, frame)

        findings: list[Finding] = []
        for key, records in groups.items():
            if len(records) < config.threshold:
                continue
            findings.append(self._finding(key[0], records, frames[key]))
        return findings

    def classify(self, shape: str) -> str:
        if self.PROXY_PATTERN.search(shape):
            return "proxy"
        if self.COLLECTION_PATTERN.search(shape):
            if self.LIMIT_PATTERN.search(shape):
                return "partial_collection"
            return "collection"
        return "unknown"

    def _severity(self, count: int, total_ms: float, group_type: str) -> Severity:
        weighted = count * (self._proxy_weight if group_type == "proxy" else 1.0)
        if weighted >= self._critical_count or total_ms > self._critical_total_ms:
            return Severity.CRITICAL
        if weighted >= self._warning_count or total_ms > self._warning_total_ms:
            return Severity.WARNING
        return Severity.INFO

    def _finding(self, shape: str, records: list[QueryRecord], frame: CallFrame | None) -> Finding:
        count = len(records)
        total_ms = sum(record.duration_ms for record in records)
        group_type = self.classify(shape)
        representative = records[0].sql
        origin = origin_from(frame, detail=shape)

        description = (
            f"Query executed {count} times (total {total_ms:.2f}ms) from {origin}: {shape}"
        )
        if frame is not None and frame.is_vendor:
            description += " The call originates in third-party code; the trigger is further up the stack."

        return self._issues.create(
            FindingKind.N_PLUS_ONE,
            {
                "severity": self._severity(count, total_ms, group_type),
                "title": f"N+1 Query Detected: {count} queries ({self._type_labels[group_type]})",
                "description": description,
                "origin": origin,
                "queries": [record.sql for record in records[: self._sample_size]],
                "details": {
                    "count": count,
                    "total_ms": total_ms,
                    "n_plus_one_type": group_type,
                    "shape": shape,
                    "representative_sql": representative,
                    "table": table_of(representative) or "unknown",
                },
            },
        )
