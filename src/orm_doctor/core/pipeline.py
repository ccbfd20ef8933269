import logging
from collections.abc import Callable, Sequence

from orm_doctor.config import AnalysisSettings
from orm_doctor.detectors import DetectorRegistry
from orm_doctor.domain import AnalysisReport, Finding, QueryTrace
from orm_doctor.findings import deduplicate
from orm_doctor.input import TraceInput
from orm_doctor.inspections import AnalysisContext, EntityInspection
from orm_doctor.output import ReportOutput

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    def __init__(
        self,
        input_source: TraceInput,
        registry: DetectorRegistry,
        outputs: Sequence[ReportOutput],
        settings: AnalysisSettings | None = None,
        inspections: Sequence[EntityInspection] = (),
        context_factory: Callable[[], AnalysisContext] | None = None,
    ) -> None:
        self._input = input_source
        self._registry = registry
        self._outputs = tuple(outputs)
        self._settings = settings or AnalysisSettings()
        self._inspections = tuple(inspections)
        self._context_factory = context_factory or AnalysisContext.create

    def analyze(self, trace: QueryTrace) -> AnalysisReport:
        """Run every enabled detector and inspection over one unit of work."""
        findings: list[Finding] = self._registry.detect_all(trace, self._settings)

        if self._inspections:
            context = self._context_factory()
            try:
                for inspection in self._inspections:
                    if not self._settings.is_enabled(inspection.name):
                        logger.debug("Inspection %s is disabled", inspection.name)
                        continue
                    findings.extend(inspection.inspect(context, self._settings))
            finally:
                context.clear()

        return AnalysisReport(trace_id=trace.trace_id, findings=tuple(deduplicate(findings)))

    async def run(self) -> None:
        async for trace in self._input:
            report = self.analyze(trace)
            if report.findings:
                for output in self._outputs:
                    await output.send(report)
