import logging
from typing import ClassVar

from orm_doctor.config import AnalysisSettings, MissingIndexSettings
from orm_doctor.detectors.base import origin_frame, origin_from
from orm_doctor.detectors.platform import (
    PlanRow,
    PlatformIntrospector,
    is_supported_platform,
    normalize_platform,
    require_supported_platform,
)
from orm_doctor.domain import Finding, FindingKind, QueryRecord, QueryTrace, Severity
from orm_doctor.findings import IssueFactory
from orm_doctor.sql import fingerprint

logger = logging.getLogger(__name__)


class MissingIndexDetector:
    """Explains slow or repeated SELECTs and flags plans that scan without a usable index."""

    name: str = "missing_index"

    _exact_access_types: ClassVar[frozenset[str]] = frozenset({"CONST", "EQ_REF", "SYSTEM"})
    _index_access_types: ClassVar[frozenset[str]] = frozenset(
        {"REF", "RANGE", "INDEX", "INDEX SCAN", "BITMAP HEAP SCAN"}
    )

    def __init__(
        self,
        introspector: PlatformIntrospector | None = None,
        platform: str | None = None,
        issues: IssueFactory | None = None,
    ) -> None:
        self._platform = require_supported_platform(platform) if platform is not None else None
        self._introspector = introspector
        self._issues = issues or IssueFactory()

    def candidates(self, trace: QueryTrace, config: MissingIndexSettings) -> list[QueryRecord]:
        """Return one representative record per SELECT shape worth explaining."""
        by_shape: dict[str, list[QueryRecord]] = {}
        for record in trace:
            if record.is_select:
                by_shape.setdefault(fingerprint(record.sql), []).append(record)

        selected: list[QueryRecord] = []
        for records in by_shape.values():
            slow = [record for record in records if record.duration_ms >= config.slow_query_threshold_ms]
            if slow:
                selected.append(slow[0])
            elif len(records) >= config.min_occurrences:
                selected.append(records[0])
        return selected

    def suggests_index(self, row: PlanRow, config: MissingIndexSettings) -> bool:
        access = row.access_type.upper()
        if access in self._exact_access_types and row.key:
            return False
        if row.is_full_scan:
            return row.rows >= config.min_rows_scanned
        if access in self._index_access_types:
            return row.rows >= config.min_rows_scanned
        return False

    def detect(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        config = settings.missing_index
        candidates = self.candidates(trace, config)
        if not candidates:
            return []

        if self._introspector is None:
            logger.debug("No platform introspector configured; skipping missing index analysis")
            return []

        platform = self._platform or normalize_platform(self._introspector.platform_name())
        if not is_supported_platform(platform):
            logger.info("Missing index analysis is not supported on %s", platform)
            return [self._unsupported(platform)]

        findings: list[Finding] = []
        for record in candidates:
            try:
                plan = self._introspector.explain(record)
            except Exception as exc:
                logger.warning("EXPLAIN failed for %s: %s", fingerprint(record.sql), exc)
                continue

            for row in plan.rows:
                if self.suggests_index(row, config):
                    findings.append(self._finding(record, row, config))
        return findings

    def _unsupported(self, platform: str) -> Finding:
        return self._issues.create(
            FindingKind.UNSUPPORTED_PLATFORM,
            {
                "severity": Severity.INFO,
                "title": f"Unsupported Platform: {platform}",
                "description": f"Missing index analysis cannot inspect execution plans on {platform}.",
                "origin": origin_from(None, symbol=self.name, detail=platform),
                "details": {"platform": platform},
            },
        )

    def _finding(self, record: QueryRecord, row: PlanRow, config: MissingIndexSettings) -> Finding:
        table = row.table or "unknown"
        severity = Severity.CRITICAL if row.rows >= config.min_rows_scanned * 10 else Severity.WARNING
        shape = fingerprint(record.sql)
        return self._issues.create(
            FindingKind.MISSING_INDEX,
            {
                "severity": severity,
                "title": f"Missing Index on {table}",
                "description": (
                    f"The plan for {shape} examines {row.rows} rows of {table} "
                    f"using access type {row.access_type}."
                ),
                "origin": origin_from(origin_frame(record.backtrace), symbol=table, detail=shape),
                "queries": [record.sql],
                "details": {
                    "table": table,
                    "rows_scanned": row.rows,
                    "access_type": row.access_type,
                    "key": row.key,
                    "possible_keys": list(row.possible_keys),
                },
            },
        )
