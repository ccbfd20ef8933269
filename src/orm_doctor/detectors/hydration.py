from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors.base import origin_frame, origin_from
from orm_doctor.domain import Finding, FindingKind, QueryTrace, Severity
from orm_doctor.findings import IssueFactory
from orm_doctor.sql import fingerprint, limit_of


class HydrationDetector:
    """Flags SELECTs that hydrate too many rows.

    When the driver did not report a row count, the statement's LIMIT is used
    as the estimate; statements with neither are skipped.
    """

    name: str = "hydration"

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def detect(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        config = settings.hydration
        findings: list[Finding] = []
        for record in trace:
            if not record.is_select:
                continue

            rows = record.row_count if record.row_count is not None else limit_of(record.sql)
            if rows is None:
                continue

            if rows >= config.critical_threshold:
                severity = Severity.CRITICAL
            elif rows >= config.row_threshold:
                severity = Severity.WARNING
            else:
                continue

            findings.append(
                self._issues.create(
                    FindingKind.HYDRATION,
                    {
                        "severity": severity,
                        "title": f"Excessive Hydration: {rows} rows",
                        "description": (
                            f"Query hydrated {rows} rows (warning at {config.row_threshold}, "
                            f"critical at {config.critical_threshold}): {record.sql}"
                        ),
                        "origin": origin_from(origin_frame(record.backtrace), detail=fingerprint(record.sql)),
                        "queries": [record.sql],
                        "details": {
                            "row_count": rows,
                            "estimated": record.row_count is None,
                        },
                    },
                )
            )
        return findings
