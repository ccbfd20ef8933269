from pathlib import Path

from orm_doctor.domain import QueryRecord, QueryTrace
from orm_doctor.input.logfile.parser import PostgresLogLineParser


class LogFileInput:
    """Input adapter that turns a PostgreSQL duration log into one trace per backend process."""

    def __init__(
        self,
        file_path: str | Path,
        parser: PostgresLogLineParser | None = None,
    ) -> None:
        self._file_path = Path(file_path)
        self._parser = parser or PostgresLogLineParser()
        self._lines: list[str] | None = None
        self._traces: list[QueryTrace] | None = None
        self._index: int = 0

    @classmethod
    def from_lines(
        cls,
        lines: list[str],
        parser: PostgresLogLineParser | None = None,
    ) -> "LogFileInput":
        """Create adapter from pre-loaded lines (for testing)."""
        instance = cls(Path("/dev/null"), parser)
        instance._lines = list(lines)
        return instance

    def __aiter__(self) -> "LogFileInput":
        return self

    async def __anext__(self) -> QueryTrace:
        if self._traces is None:
            self._traces = self._build_traces()

        if self._index >= len(self._traces):
            raise StopAsyncIteration
        trace = self._traces[self._index]
        self._index += 1
        return trace

    def _build_traces(self) -> list[QueryTrace]:
        if self._lines is None:
            self._lines = self._read_file()

        traces: dict[int | None, QueryTrace] = {}
        for line in self._lines:
            parsed = self._parser.parse_line(line)
            if parsed is None:
                continue

            trace = traces.get(parsed.process_id)
            if trace is None:
                trace = QueryTrace(trace_id=f"pid-{parsed.process_id or 'unknown'}")
                traces[parsed.process_id] = trace
            trace.append(
                QueryRecord(
                    sql=parsed.statement,
                    started_at=parsed.timestamp,
                    duration_ms=parsed.duration_ms,
                )
            )

        for trace in traces.values():
            trace.freeze()
        return list(traces.values())

    def _read_file(self) -> list[str]:
        if not self._file_path.exists():
            raise FileNotFoundError(f"Log file not found: {self._file_path}")
        with open(self._file_path, encoding="utf-8") as file:
            return file.readlines()
