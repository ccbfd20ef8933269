from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from orm_doctor.config import AnalysisSettings
from orm_doctor.domain import CallFrame, Finding, Origin, QueryTrace


@runtime_checkable
class TraceDetector(Protocol):
    """Protocol for detectors that turn one frozen trace into findings."""

    @property
    def name(self) -> str:
        ...

    def detect(self, trace: QueryTrace, settings: AnalysisSettings) -> list[Finding]:
        ...


def origin_frame(backtrace: Sequence[CallFrame]) -> CallFrame | None:
    """Return the innermost application frame, or the innermost frame if all are vendor code."""
    for frame in backtrace:
        if not frame.is_vendor:
            return frame
    return backtrace[0] if backtrace else None


def origin_from(frame: CallFrame | None, symbol: str | None = None, detail: str | None = None) -> Origin:
    if frame is None:
        return Origin(symbol=symbol, detail=detail)
    return Origin(file=frame.file, line=frame.line, symbol=symbol or frame.symbol, detail=detail)
