"""Narrow EXPLAIN capability consumed by the missing-index detector.

Dialect adapters live outside the engine; they implement
``PlatformIntrospector`` and translate their native plans into an
``ExecutionPlanSummary``.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from orm_doctor.domain import QueryRecord
from orm_doctor.errors import UnsupportedPlatformError

SUPPORTED_PLATFORMS = frozenset({"mysql", "mariadb", "postgresql"})

_PLATFORM_ALIASES = {
    "postgres": "postgresql",
    "pgsql": "postgresql",
    "pdo_pgsql": "postgresql",
    "pdo_mysql": "mysql",
    "mysqli": "mysql",
}


@dataclass(frozen=True, slots=True)
class PlanRow:
    """One table access of an execution plan."""

    table: str | None
    access_type: str
    key: str | None = None
    rows: int = 0
    possible_keys: tuple[str, ...] = ()
    extra: str | None = None

    @property
    def is_full_scan(self) -> bool:
        return self.access_type.upper() in ("ALL", "SEQ SCAN")


@dataclass(frozen=True, slots=True)
class ExecutionPlanSummary:
    rows: tuple[PlanRow, ...] = ()


@runtime_checkable
class PlatformIntrospector(Protocol):
    def platform_name(self) -> str:
        ...

    def explain(self, query: QueryRecord) -> ExecutionPlanSummary:
        ...


def normalize_platform(name: str) -> str:
    key = name.strip().lower()
    return _PLATFORM_ALIASES.get(key, key)


def is_supported_platform(name: str) -> bool:
    return normalize_platform(name) in SUPPORTED_PLATFORMS


def require_supported_platform(name: str) -> str:
    """Return the canonical platform name, raising if analysis cannot run on it."""
    platform = normalize_platform(name)
    if platform not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatformError(name)
    return platform
