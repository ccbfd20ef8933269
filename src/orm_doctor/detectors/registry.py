import logging

from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors.base import TraceDetector
from orm_doctor.detectors.bulk_operation import BulkOperationDetector
from orm_doctor.detectors.flush_in_loop import FlushInLoopDetector
from orm_doctor.detectors.hydration import HydrationDetector
from orm_doctor.detectors.missing_index import MissingIndexDetector
from orm_doctor.detectors.n_plus_one import NPlusOneDetector
from orm_doctor.detectors.platform import PlatformIntrospector
from orm_doctor.detectors.slow_query import SlowQueryDetector
from orm_doctor.domain import Finding, QueryTrace
from orm_doctor.findings import IssueFactory

logger = logging.getLogger(__name__)


class DetectorRegistry:
    """Registry for managing and orchestrating trace detectors."""

    def __init__(self) -> None:
        self._detectors: list[TraceDetector] = []

    @classmethod
    def default(
        cls,
        introspector: PlatformIntrospector | None = None,
        issues: IssueFactory | None = None,
    ) -> "DetectorRegistry":
        """Registry holding every built-in detector, in reporting order."""
        issues = issues or IssueFactory()
        registry = cls()
        registry.register(NPlusOneDetector(issues))
        registry.register(SlowQueryDetector(issues))
        registry.register(HydrationDetector(issues))
        registry.register(BulkOperationDetector(issues))
        registry.register(FlushInLoopDetector(issues))
        registry.register(MissingIndexDetector(introspector, issues=issues))
        return registry

    def register(self, detector: TraceDetector) -> None:
        self._detectors.append(detector)

    @property
    def detectors(self) -> tuple[TraceDetector, ...]:
        return tuple(self._detectors)

    def detect_all(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        findings: list[Finding] = []
        for detector in self._detectors:
            if not settings.is_enabled(detector.name):
                logger.debug("Detector %s is disabled", detector.name)
                continue
            findings.extend(detector.detect(trace, settings))
        return findings
