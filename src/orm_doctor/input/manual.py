from typing import Sequence

from orm_doctor.domain import QueryTrace


class ManualInput:
    """Manual input source for programmatically feeding traces."""

    def __init__(self, traces: Sequence[QueryTrace]) -> None:
        self._traces: tuple[QueryTrace, ...] = tuple(traces)
        self._index: int = 0

    def __aiter__(self) -> "ManualInput":
        return self

    async def __anext__(self) -> QueryTrace:
        if self._index >= len(self._traces):
            raise StopAsyncIteration
        trace = self._traces[self._index]
        self._index += 1
        if not trace.frozen:
            trace.freeze()
        return trace
