import logging

from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors.base import origin_frame, origin_from
from orm_doctor.domain import Finding, FindingKind, QueryRecord, QueryTrace, Severity
from orm_doctor.findings import IssueFactory
from orm_doctor.sql import fingerprint, table_of

logger = logging.getLogger(__name__)


class BulkOperationDetector:
    """Flags many near-identical UPDATE/DELETE statements against one table."""

    name: str = "bulk_operation"

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def detect(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        config = settings.bulk_operation
        groups: dict[tuple[str, str], list[QueryRecord]] = {}
        for record in trace:
            if record.statement_type not in ("UPDATE", "DELETE"):
                continue
            table = table_of(record.sql) or "unknown"
            groups.setdefault((record.statement_type, table), []).append(record)

        findings: list[Finding] = []
        for (operation, table), records in groups.items():
            count = len(records)
            if count < config.threshold:
                continue

            ratio = len({fingerprint(record.sql) for record in records}) / count
            if ratio > config.max_pattern_ratio:
                logger.debug(
                    "Skipping %d %s statements on %s: pattern ratio %.2f is too diverse",
                    count,
                    operation,
                    table,
                    ratio,
                )
                continue

            severity = Severity.CRITICAL if count >= config.threshold * 5 else Severity.WARNING
            findings.append(
                self._issues.create(
                    FindingKind.BULK_OPERATION,
                    {
                        "severity": severity,
                        "title": f"Inefficient Bulk Operations: {count} {operation} queries on {table}",
                        "description": (
                            f"{count} individual {operation} statements were executed against "
                            f"{table} where a single bulk statement would do."
                        ),
                        "origin": origin_from(origin_frame(records[0].backtrace), symbol=table, detail=operation),
                        "queries": [record.sql for record in records[:5]],
                        "details": {
                            "count": count,
                            "operation": operation,
                            "table": table,
                            "pattern_ratio": ratio,
                        },
                    },
                )
            )
        return findings
