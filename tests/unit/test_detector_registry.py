import pytest

from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors import DetectorRegistry, SlowQueryDetector
from orm_doctor.domain import CallFrame, Finding, QueryRecord, QueryTrace


class MockDetector:
    name: str = "mock"

    def __init__(self) -> None:
        self.calls = 0

    def detect(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        self.calls += 1
        return []


def busy_trace() -> QueryTrace:
    frame = CallFrame(file="/app/src/Controller/ShopController.php", line=12, function="list", cls="ShopController")
    records = [
        QueryRecord(sql=f"SELECT * FROM profile WHERE user_id = {i}", duration_ms=60.0, row_count=1, backtrace=(frame,))
        for i in range(4)
    ]
    records.append(QueryRecord(sql="SELECT * FROM logs", duration_ms=5.0, row_count=5000))
    return QueryTrace.from_records(records)


class TestDetectorRegistry:
    def test_default_registry_order(self) -> None:
        names = [detector.name for detector in DetectorRegistry.default().detectors]
        assert names == ["n_plus_one", "slow_query", "hydration", "bulk_operation", "flush_in_loop", "missing_index"]

    def test_register(self) -> None:
        registry = DetectorRegistry()
        detector = MockDetector()
        registry.register(detector)
        assert registry.detectors == (detector,)

    def test_disabled_detector_is_skipped(self) -> None:
        registry = DetectorRegistry()
        registry.register(SlowQueryDetector())
        settings = AnalysisSettings.from_mapping({"slow_query": {"enabled": False}})

        assert registry.detect_all(busy_trace(), settings) == []

    def test_custom_detector_runs(self) -> None:
        registry = DetectorRegistry()
        detector = MockDetector()
        registry.register(detector)
        registry.detect_all(busy_trace(), AnalysisSettings())
        assert detector.calls == 1

    def test_full_detector_set_is_idempotent(self) -> None:
        registry = DetectorRegistry.default()
        trace = busy_trace()

        first = registry.detect_all(trace, AnalysisSettings())
        second = registry.detect_all(trace, AnalysisSettings())

        assert first == second
        assert [finding.kind for finding in first] == [
            "n_plus_one",
            "slow_query",
            "slow_query",
            "slow_query",
            "slow_query",
            "hydration",
        ]

    @pytest.mark.parametrize("name", ["n_plus_one", "hydration"])
    def test_each_detector_can_be_disabled(self, name: str) -> None:
        settings = AnalysisSettings.from_mapping({name: {"enabled": False}})
        kinds = {finding.kind for finding in DetectorRegistry.default().detect_all(busy_trace(), settings)}
        assert name not in kinds
