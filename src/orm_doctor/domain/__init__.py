"""Domain models for ORM trace analysis and findings."""

from orm_doctor.domain.models import (
    AnalysisReport,
    AssociationDescriptor,
    CallFrame,
    Cardinality,
    EntityDescriptor,
    Finding,
    FindingKind,
    JoinColumn,
    Origin,
    QueryRecord,
    QueryTrace,
    Severity,
    Suggestion,
)

__all__ = [
    "AnalysisReport",
    "AssociationDescriptor",
    "CallFrame",
    "Cardinality",
    "EntityDescriptor",
    "Finding",
    "FindingKind",
    "JoinColumn",
    "Origin",
    "QueryRecord",
    "QueryTrace",
    "Severity",
    "Suggestion",
]
