"""Core domain models for ORM trace analysis and findings."""

import re
import uuid
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import IntEnum, StrEnum
from typing import Any, ClassVar

from orm_doctor.errors import TraceFrozenError


class Severity(IntEnum):
    """Finding severity levels, ordered for comparison (higher value = higher severity)."""

    INFO = 1
    WARNING = 2
    CRITICAL = 3


class FindingKind(StrEnum):
    """Closed set of finding kinds the engine can emit."""

    N_PLUS_ONE = "n_plus_one"
    SLOW_QUERY = "slow_query"
    HYDRATION = "hydration"
    BULK_OPERATION = "bulk_operation"
    FLUSH_IN_LOOP = "flush_in_loop"
    MISSING_INDEX = "missing_index"
    UNSUPPORTED_PLATFORM = "unsupported_platform"
    COLLECTION_UNINITIALIZED = "collection_uninitialized"
    MISSING_ORPHAN_REMOVAL = "missing_orphan_removal"
    CASCADE_REMOVE_INDEPENDENT = "cascade_remove_independent"
    INSECURE_RANDOM = "insecure_random"


class Cardinality(StrEnum):
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Cardinality":
        """Map loose metadata values ("OneToMany", "one-to-many", ...) to a cardinality."""
        if isinstance(value, Cardinality):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        key = re.sub(r"(?<=[a-z])(?=[A-Z])", "_", value.strip()).replace("-", "_").lower()
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_to_many(self) -> bool:
        return self in (Cardinality.ONE_TO_MANY, Cardinality.MANY_TO_MANY)


@dataclass(frozen=True, slots=True)
class CallFrame:
    """One frame of a call-site fingerprint, innermost first."""

    file: str | None = None
    line: int | None = None
    function: str | None = None
    cls: str | None = None

    VENDOR_MARKER: ClassVar[str] = "/vendor/"

    @property
    def is_vendor(self) -> bool:
        return self.file is not None and self.VENDOR_MARKER in self.file.replace("\\", "/")

    @property
    def symbol(self) -> str | None:
        if self.function is None:
            return self.cls
        if self.cls:
            return f"{self.cls}::{self.function}"
        return self.function

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CallFrame":
        line = data.get("line")
        return cls(
            file=data.get("file"),
            line=int(line) if line is not None else None,
            function=data.get("function"),
            cls=data.get("class") or data.get("cls"),
        )


@dataclass(frozen=True, slots=True)
class QueryRecord:
    """One executed statement as captured by the ORM's query logger."""

    sql: str
    params: tuple[Any, ...] = ()
    started_at: datetime | None = None
    duration_ms: float = 0.0
    row_count: int | None = None
    backtrace: tuple[CallFrame, ...] = ()

    STATEMENT_TYPE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*(?:/\*.*?\*/\s*)*(\w+)", re.DOTALL
    )
    _STATEMENT_ALIASES: ClassVar[dict[str, str]] = {
        "START": "BEGIN",
        "SAVEPOINT": "BEGIN",
        "RELEASE": "COMMIT",
    }
    _KNOWN_STATEMENTS: ClassVar[frozenset[str]] = frozenset(
        {"SELECT", "INSERT", "UPDATE", "DELETE", "BEGIN", "COMMIT", "ROLLBACK"}
    )

    @property
    def statement_type(self) -> str:
        match = self.STATEMENT_TYPE_PATTERN.match(self.sql)
        if not match:
            return "OTHER"
        keyword = match.group(1).upper()
        keyword = self._STATEMENT_ALIASES.get(keyword, keyword)
        return keyword if keyword in self._KNOWN_STATEMENTS else "OTHER"

    @property
    def is_select(self) -> bool:
        return self.statement_type == "SELECT"

    @property
    def is_write(self) -> bool:
        return self.statement_type in ("INSERT", "UPDATE", "DELETE")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QueryRecord":
        """Build a record from a profiler-style mapping.

        Legacy loggers report ``executionMS`` in seconds; values strictly
        between 0 and 1 are therefore converted to milliseconds.
        """
        if "duration_ms" in data:
            duration = float(data["duration_ms"] or 0.0)
        else:
            duration = float(data.get("executionMS") or 0.0)
            if 0 < duration < 1:
                duration *= 1000

        row_count = data.get("row_count", data.get("rowCount"))
        params = data.get("params") or ()
        if isinstance(params, Mapping):
            params = tuple(params.values())

        return cls(
            sql=str(data.get("sql", "")),
            params=tuple(params),
            started_at=_parse_timestamp(data.get("timestamp", data.get("started_at"))),
            duration_ms=duration,
            row_count=int(row_count) if row_count is not None else None,
            backtrace=tuple(CallFrame.from_dict(frame) for frame in data.get("backtrace") or ()),
        )


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value, tz=UTC)
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    # Offset-less timestamps are taken as UTC so records stay comparable.
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


class QueryTrace:
    """Ordered, append-only sequence of query records for one unit of work."""

    def __init__(self, trace_id: str | None = None) -> None:
        self.trace_id = trace_id or uuid.uuid4().hex
        self._records: list[QueryRecord] = []
        self._frozen = False

    @classmethod
    def from_records(cls, records: Iterable[QueryRecord], trace_id: str | None = None) -> "QueryTrace":
        trace = cls(trace_id)
        for record in records:
            trace.append(record)
        trace.freeze()
        return trace

    def append(self, record: QueryRecord) -> None:
        if self._frozen:
            raise TraceFrozenError(f"Trace {self.trace_id} is frozen")
        self._records.append(record)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def records(self) -> tuple[QueryRecord, ...]:
        return tuple(self._records)

    def __iter__(self) -> Iterator[QueryRecord]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)


@dataclass(frozen=True, slots=True)
class JoinColumn:
    name: str
    nullable: bool = True
    unique: bool = False


@dataclass(frozen=True, slots=True)
class AssociationDescriptor:
    """Declarative mapping attributes of one association, as loaded from metadata."""

    field_name: str
    cardinality: Cardinality
    target_type: str
    declaring_type: str
    cascade: frozenset[str] = frozenset()
    orphan_removal: bool = False
    owning_side: bool = True
    join_columns: tuple[JoinColumn, ...] = ()
    mapped_by: str | None = None
    inversed_by: str | None = None

    @property
    def cascades_remove(self) -> bool:
        cascade = {operation.lower() for operation in self.cascade or ()}
        return "remove" in cascade or "all" in cascade


@dataclass(frozen=True, slots=True)
class EntityDescriptor:
    """A mapped type: its table, associations and uniqueness constraints."""

    name: str
    table: str | None = None
    associations: tuple[AssociationDescriptor, ...] = ()
    unique_constraints: tuple[tuple[str, ...], ...] = ()
    unique_indexes: tuple[tuple[str, ...], ...] = ()

    def association(self, field_name: str) -> AssociationDescriptor | None:
        for association in self.associations:
            if association.field_name == field_name:
                return association
        return None


@dataclass(frozen=True, slots=True)
class Origin:
    """Where a finding comes from: file+line, or an association/type symbol."""

    file: str | None = None
    line: int | None = None
    symbol: str | None = None
    detail: str | None = None

    def __str__(self) -> str:
        parts = []
        if self.file:
            parts.append(f"{self.file}:{self.line}" if self.line is not None else self.file)
        if self.symbol:
            parts.append(self.symbol)
        if self.detail:
            parts.append(self.detail)
        return " ".join(parts) or "<unknown>"


@dataclass(frozen=True, slots=True)
class Suggestion:
    title: str
    description: str
    code_example: str = ""


@dataclass(frozen=True, slots=True)
class Finding:
    """A single detected anti-pattern."""

    kind: FindingKind
    severity: Severity
    title: str
    description: str
    origin: Origin
    suggestion: Suggestion
    details: dict[str, Any] | None = None
    queries: tuple[str, ...] = ()

    @property
    def identity(self) -> tuple[FindingKind, Origin]:
        return (self.kind, self.origin)


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """Ordered findings produced for one analyzed unit of work."""

    trace_id: str
    findings: tuple[Finding, ...] = field(default_factory=tuple)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def severity(self) -> Severity:
        """Return the highest severity among all findings."""
        if not self.findings:
            return Severity.INFO
        return max(finding.severity for finding in self.findings)
