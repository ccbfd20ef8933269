import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from orm_doctor.domain import QueryRecord, QueryTrace


class JsonTraceInput:
    """Input adapter for profiler dumps: a JSON list of traces.

    Each trace is either a list of query dicts or an object with ``id`` and
    ``queries`` keys. Query dicts use the keys accepted by
    ``QueryRecord.from_dict``.
    """

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)
        self._payload: list[Any] | None = None
        self._index: int = 0

    @classmethod
    def from_payload(cls, payload: list[Any]) -> "JsonTraceInput":
        instance = cls(Path("/dev/null"))
        instance._payload = payload
        return instance

    def __aiter__(self) -> "JsonTraceInput":
        return self

    async def __anext__(self) -> QueryTrace:
        if self._payload is None:
            self._payload = self._load()

        if self._index >= len(self._payload):
            raise StopAsyncIteration
        entry = self._payload[self._index]
        self._index += 1

        if isinstance(entry, Mapping):
            queries, trace_id = entry.get("queries") or [], entry.get("id")
        else:
            queries, trace_id = entry, None
        return QueryTrace.from_records(
            (QueryRecord.from_dict(query) for query in queries),
            trace_id=str(trace_id) if trace_id is not None else None,
        )

    def _load(self) -> list[Any]:
        if not self._file_path.exists():
            raise FileNotFoundError(f"Trace file not found: {self._file_path}")
        with open(self._file_path, encoding="utf-8") as file:
            payload = json.load(file)
        return payload if isinstance(payload, list) else [payload]
