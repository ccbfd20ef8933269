import pytest

from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors import NPlusOneDetector, TraceDetector
from orm_doctor.domain import CallFrame, FindingKind, QueryRecord, QueryTrace, Severity

CONTROLLER = "/app/src/Controller/OrderController.php"
PROFILE_QUERY = "SELECT * FROM profile WHERE user_id = {}"
PROXY_QUERY = "SELECT t0.id AS id_1, t0.name AS name_2 FROM customer t0 WHERE t0.id = {}"
COLLECTION_QUERY = "SELECT t0.id AS id_1 FROM order_item t0 WHERE t0.order_id = {}"


def app_frame(line: int = 42, function: str = "index") -> CallFrame:
    return CallFrame(file=CONTROLLER, line=line, function=function, cls="OrderController")


def vendor_frame() -> CallFrame:
    return CallFrame(
        file="/app/vendor/doctrine/orm/src/Persisters/Entity/BasicEntityPersister.php",
        line=900,
        function="load",
        cls="BasicEntityPersister",
    )


def repeated(template: str, count: int, frame: CallFrame | None = None, duration_ms: float = 1.0) -> list[QueryRecord]:
    backtrace = (frame,) if frame else ()
    return [
        QueryRecord(sql=template.format(i + 1), duration_ms=duration_ms, backtrace=backtrace)
        for i in range(count)
    ]


class TestNPlusOneDetector:
    @pytest.fixture
    def detector(self) -> NPlusOneDetector:
        return NPlusOneDetector()

    @pytest.fixture
    def settings(self) -> AnalysisSettings:
        return AnalysisSettings()

    def test_implements_protocol(self, detector: NPlusOneDetector) -> None:
        assert isinstance(detector, TraceDetector)
        assert detector.name == "n_plus_one"

    def test_group_at_threshold_is_flagged(self, detector: NPlusOneDetector, settings: AnalysisSettings) -> None:
        trace = QueryTrace.from_records(repeated(PROFILE_QUERY, 3, app_frame()))

        findings = detector.detect(trace, settings)

        assert len(findings) == 1
        finding = findings[0]
        assert finding.kind == FindingKind.N_PLUS_ONE
        assert finding.details is not None
        assert finding.details["count"] == 3
        assert finding.details["representative_sql"] == "SELECT * FROM profile WHERE user_id = 1"
        assert finding.details["shape"] == "SELECT * FROM PROFILE WHERE USER_ID = ?"
        assert finding.origin.file == CONTROLLER
        assert finding.origin.line == 42

    def test_group_below_threshold_is_ignored(self, detector: NPlusOneDetector, settings: AnalysisSettings) -> None:
        trace = QueryTrace.from_records(repeated(PROFILE_QUERY, 2, app_frame()))
        assert detector.detect(trace, settings) == []

    def test_threshold_is_configurable(self, detector: NPlusOneDetector) -> None:
        settings = AnalysisSettings.from_mapping({"n_plus_one": {"threshold": 5}})
        trace = QueryTrace.from_records(repeated(PROFILE_QUERY, 4, app_frame()))
        assert detector.detect(trace, settings) == []

    def test_shapes_from_same_origin_reported_separately(
        self, detector: NPlusOneDetector, settings: AnalysisSettings
    ) -> None:
        records = []
        for i in range(3):
            records.append(QueryRecord(sql=PROFILE_QUERY.format(i), backtrace=(app_frame(),)))
            records.append(QueryRecord(sql=COLLECTION_QUERY.format(i), backtrace=(app_frame(),)))
        trace = QueryTrace.from_records(records)

        findings = detector.detect(trace, settings)

        assert [f.details["table"] for f in findings if f.details] == ["profile", "order_item"]
        assert findings[0].origin != findings[1].origin

    def test_same_shape_from_different_origins_not_merged(
        self, detector: NPlusOneDetector, settings: AnalysisSettings
    ) -> None:
        records = repeated(PROFILE_QUERY, 2, app_frame(function="index")) + repeated(
            PROFILE_QUERY, 2, app_frame(function="show")
        )
        trace = QueryTrace.from_records(records)
        assert detector.detect(trace, settings) == []

    def test_iteration_line_does_not_split_group(self, detector: NPlusOneDetector, settings: AnalysisSettings) -> None:
        records = [
            QueryRecord(sql=PROFILE_QUERY.format(i), backtrace=(app_frame(line=40 + i),)) for i in range(3)
        ]
        findings = detector.detect(QueryTrace.from_records(records), settings)
        assert len(findings) == 1
        assert findings[0].origin.line == 40

    def test_vendor_frames_are_skipped_for_origin(self, detector: NPlusOneDetector, settings: AnalysisSettings) -> None:
        records = [
            QueryRecord(sql=PROXY_QUERY.format(i), backtrace=(vendor_frame(), app_frame())) for i in range(3)
        ]
        findings = detector.detect(QueryTrace.from_records(records), settings)
        assert findings[0].origin.file == CONTROLLER
        assert findings[0].origin.symbol == "OrderController::index"

    def test_vendor_only_backtrace_is_noted(self, detector: NPlusOneDetector, settings: AnalysisSettings) -> None:
        trace = QueryTrace.from_records(repeated(PROXY_QUERY, 3, vendor_frame()))
        findings = detector.detect(trace, settings)
        assert "third-party" in findings[0].description

    def test_writes_are_ignored(self, detector: NPlusOneDetector, settings: AnalysisSettings) -> None:
        trace = QueryTrace.from_records(repeated("UPDATE profile SET seen = 1 WHERE id = {}", 5, app_frame()))
        assert detector.detect(trace, settings) == []

    def test_records_without_backtrace_group_by_shape(
        self, detector: NPlusOneDetector, settings: AnalysisSettings
    ) -> None:
        findings = detector.detect(QueryTrace.from_records(repeated(PROFILE_QUERY, 3)), settings)
        assert len(findings) == 1
        assert findings[0].origin.file is None

    @pytest.mark.parametrize(
        "template, expected",
        [
            (PROXY_QUERY, "proxy"),
            (COLLECTION_QUERY, "collection"),
            (COLLECTION_QUERY + " LIMIT 5", "partial_collection"),
            ("SELECT COUNT(*) FROM t", "unknown"),
        ],
    )
    def test_classify(self, detector: NPlusOneDetector, template: str, expected: str) -> None:
        from orm_doctor.sql import fingerprint

        assert detector.classify(fingerprint(template.format(1))) == expected

    @pytest.mark.parametrize(
        "template, count, duration_ms, expected",
        [
            (COLLECTION_QUERY, 3, 1.0, Severity.INFO),
            (COLLECTION_QUERY, 10, 1.0, Severity.WARNING),
            (COLLECTION_QUERY, 20, 1.0, Severity.CRITICAL),
            (PROXY_QUERY, 8, 1.0, Severity.WARNING),
            (COLLECTION_QUERY, 3, 200.0, Severity.WARNING),
            (COLLECTION_QUERY, 3, 400.0, Severity.CRITICAL),
        ],
    )
    def test_severity(
        self,
        detector: NPlusOneDetector,
        settings: AnalysisSettings,
        template: str,
        count: int,
        duration_ms: float,
        expected: Severity,
    ) -> None:
        trace = QueryTrace.from_records(repeated(template, count, app_frame(), duration_ms=duration_ms))
        assert detector.detect(trace, settings)[0].severity == expected

    def test_proxy_suggestion(self, detector: NPlusOneDetector, settings: AnalysisSettings) -> None:
        trace = QueryTrace.from_records(repeated(PROXY_QUERY, 3, app_frame()))
        finding = detector.detect(trace, settings)[0]
        assert "Eager load" in finding.suggestion.title
        assert finding.suggestion.code_example

    def test_detection_is_idempotent(self, detector: NPlusOneDetector, settings: AnalysisSettings) -> None:
        records = repeated(PROFILE_QUERY, 4, app_frame()) + repeated(COLLECTION_QUERY, 3, app_frame())
        trace = QueryTrace.from_records(records)
        assert detector.detect(trace, settings) == detector.detect(trace, settings)
