from orm_doctor.domain import AnalysisReport


class ConsoleReportOutput:
    """Console output adapter for analysis reports."""

    def __init__(self, prefix: str = "[ORM]") -> None:
        self._prefix = prefix

    @property
    def name(self) -> str:
        return "console"

    async def send(self, report: AnalysisReport) -> None:
        finding_count = len(report.findings)
        print(f"{self._prefix} [{report.severity.name}] {report.trace_id} - {finding_count} finding(s)")

        for finding in report.findings:
            print(f"  - [{finding.severity.name}] {finding.kind.value}: {finding.title} ({finding.origin})")
