import pytest

from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors import (
    ExecutionPlanSummary,
    MissingIndexDetector,
    PlanRow,
    PlatformIntrospector,
    require_supported_platform,
)
from orm_doctor.domain import FindingKind, QueryRecord, QueryTrace, Severity
from orm_doctor.errors import UnsupportedPlatformError


class FakeIntrospector:
    def __init__(self, plan: ExecutionPlanSummary, platform: str = "mysql", fail: bool = False) -> None:
        self._plan = plan
        self._platform = platform
        self._fail = fail
        self.explained: list[str] = []

    def platform_name(self) -> str:
        return self._platform

    def explain(self, query: QueryRecord) -> ExecutionPlanSummary:
        self.explained.append(query.sql)
        if self._fail:
            raise RuntimeError("connection lost")
        return self._plan


def plan(access_type: str, rows: int, key: str | None = None) -> ExecutionPlanSummary:
    return ExecutionPlanSummary(rows=(PlanRow(table="orders", access_type=access_type, key=key, rows=rows),))


SLOW_SELECT = QueryRecord(sql="SELECT * FROM orders WHERE status = 'new'", duration_ms=75.0)


def test_fake_introspector_implements_protocol() -> None:
    assert isinstance(FakeIntrospector(plan("ALL", 1)), PlatformIntrospector)


def test_full_scan_on_slow_query() -> None:
    introspector = FakeIntrospector(plan("ALL", 5000))
    detector = MissingIndexDetector(introspector)

    findings = detector.detect(QueryTrace.from_records([SLOW_SELECT]), AnalysisSettings())

    assert len(findings) == 1
    assert findings[0].kind == FindingKind.MISSING_INDEX
    assert findings[0].severity == Severity.WARNING
    assert findings[0].details is not None
    assert findings[0].details["rows_scanned"] == 5000
    assert "orders" in findings[0].suggestion.title


def test_huge_scan_is_critical() -> None:
    detector = MissingIndexDetector(FakeIntrospector(plan("Seq Scan", 20000), platform="postgresql"))
    findings = detector.detect(QueryTrace.from_records([SLOW_SELECT]), AnalysisSettings())
    assert findings[0].severity == Severity.CRITICAL


@pytest.mark.parametrize(
    "row, expected",
    [
        (PlanRow(table="orders", access_type="const", key="PRIMARY", rows=1), False),
        (PlanRow(table="orders", access_type="eq_ref", key="PRIMARY", rows=5000), False),
        (PlanRow(table="orders", access_type="ref", key="idx_status", rows=2000), True),
        (PlanRow(table="orders", access_type="range", key="idx_created", rows=10), False),
        (PlanRow(table="orders", access_type="ALL", rows=999), False),
        (PlanRow(table="orders", access_type="ALL", rows=1000), True),
    ],
)
def test_suggests_index(row: PlanRow, expected: bool) -> None:
    detector = MissingIndexDetector()
    assert detector.suggests_index(row, AnalysisSettings().missing_index) is expected


def test_fast_unique_queries_are_not_explained() -> None:
    introspector = FakeIntrospector(plan("ALL", 5000))
    trace = QueryTrace.from_records([QueryRecord(sql="SELECT * FROM orders WHERE id = 1", duration_ms=1.0)])

    assert MissingIndexDetector(introspector).detect(trace, AnalysisSettings()) == []
    assert introspector.explained == []


def test_repeated_shape_is_explained_once() -> None:
    introspector = FakeIntrospector(plan("ALL", 5000))
    trace = QueryTrace.from_records(
        [QueryRecord(sql=f"SELECT * FROM orders WHERE customer_id = {i}", duration_ms=1.0) for i in range(3)]
    )

    findings = MissingIndexDetector(introspector).detect(trace, AnalysisSettings())

    assert len(findings) == 1
    assert introspector.explained == ["SELECT * FROM orders WHERE customer_id = 0"]


def test_unsupported_platform_is_reported_not_raised() -> None:
    detector = MissingIndexDetector(FakeIntrospector(plan("ALL", 5000), platform="sqlite"))

    findings = detector.detect(QueryTrace.from_records([SLOW_SELECT]), AnalysisSettings())

    assert len(findings) == 1
    assert findings[0].kind == FindingKind.UNSUPPORTED_PLATFORM
    assert findings[0].severity == Severity.INFO
    assert "sqlite" in findings[0].suggestion.title


def test_missing_introspector_degrades_silently() -> None:
    assert MissingIndexDetector().detect(QueryTrace.from_records([SLOW_SELECT]), AnalysisSettings()) == []


def test_explain_failure_is_skipped() -> None:
    detector = MissingIndexDetector(FakeIntrospector(plan("ALL", 5000), fail=True))
    assert detector.detect(QueryTrace.from_records([SLOW_SELECT]), AnalysisSettings()) == []


def test_explicit_unsupported_platform_raises() -> None:
    with pytest.raises(UnsupportedPlatformError, match="oracle"):
        MissingIndexDetector(platform="oracle")


def test_platform_aliases() -> None:
    assert require_supported_platform("postgres") == "postgresql"
    assert require_supported_platform("MariaDB") == "mariadb"
