from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors.base import origin_frame, origin_from
from orm_doctor.domain import Finding, FindingKind, QueryTrace, Severity
from orm_doctor.findings import IssueFactory
from orm_doctor.sql import fingerprint


class SlowQueryDetector:
    name: str = "slow_query"

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def detect(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        config = settings.slow_query
        findings: list[Finding] = []
        for record in trace:
            if record.duration_ms <= config.threshold_ms:
                continue

            if record.duration_ms > config.critical_threshold_ms:
                severity = Severity.CRITICAL
            else:
                severity = Severity.WARNING

            findings.append(
                self._issues.create(
                    FindingKind.SLOW_QUERY,
                    {
                        "severity": severity,
                        "title": f"Slow Query: {record.duration_ms:.2f}ms",
                        "description": (
                            f"Query took {record.duration_ms:.2f}ms, above the "
                            f"{config.threshold_ms:.0f}ms threshold: {record.sql}"
                        ),
                        "origin": origin_from(origin_frame(record.backtrace), detail=fingerprint(record.sql)),
                        "queries": [record.sql],
                        "details": {
                            "duration_ms": record.duration_ms,
                            "threshold_ms": config.threshold_ms,
                            "sql": record.sql,
                        },
                    },
                )
            )
        return findings
