from typing import Protocol, runtime_checkable

from orm_doctor.domain import AnalysisReport


@runtime_checkable
class ReportOutput(Protocol):
    """Protocol for analysis report destinations."""

    @property
    def name(self) -> str:
        ...

    async def send(self, report: AnalysisReport) -> None:
        ...
