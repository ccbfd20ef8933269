"""Canonical finding construction.

Every ``FindingKind`` maps to exactly one constructor; legacy human-readable
names are resolved to a kind before dispatch and never extend the kind set.
"""

from collections.abc import Callable, Mapping
from typing import Any

from orm_doctor.domain import Finding, FindingKind, Origin, Severity, Suggestion
from orm_doctor.findings.kinds import resolve_kind
from orm_doctor.findings.suggestions import SuggestionFactory

IssueConstructor = Callable[[FindingKind, Mapping[str, Any], Suggestion], Finding]


def _severity(value: Any, default: Severity) -> Severity:
    if value is None:
        return default
    if isinstance(value, Severity):
        return value
    if isinstance(value, int):
        return Severity(value)
    return Severity[str(value).upper()]


def _build(
    kind: FindingKind,
    attributes: Mapping[str, Any],
    suggestion: Suggestion,
    default_title: str,
    default_severity: Severity,
) -> Finding:
    origin = attributes.get("origin")
    if not isinstance(origin, Origin):
        origin = Origin(**origin) if isinstance(origin, Mapping) else Origin()

    return Finding(
        kind=kind,
        severity=_severity(attributes.get("severity"), default_severity),
        title=attributes.get("title") or default_title,
        description=attributes.get("description") or default_title,
        origin=origin,
        suggestion=suggestion,
        details=dict(attributes.get("details") or {}) or None,
        queries=tuple(attributes.get("queries") or ()),
    )


def _performance_issue(title: str, severity: Severity = Severity.WARNING) -> IssueConstructor:
    def construct(kind: FindingKind, attributes: Mapping[str, Any], suggestion: Suggestion) -> Finding:
        return _build(kind, attributes, suggestion, title, severity)

    return construct


def _integrity_issue(title: str) -> IssueConstructor:
    def construct(kind: FindingKind, attributes: Mapping[str, Any], suggestion: Suggestion) -> Finding:
        # Integrity findings never carry query samples.
        return _build(kind, {**attributes, "queries": ()}, suggestion, title, Severity.WARNING)

    return construct


def _security_issue(title: str) -> IssueConstructor:
    def construct(kind: FindingKind, attributes: Mapping[str, Any], suggestion: Suggestion) -> Finding:
        severity = max(_severity(attributes.get("severity"), Severity.CRITICAL), Severity.WARNING)
        return _build(kind, {**attributes, "severity": severity}, suggestion, title, Severity.CRITICAL)

    return construct


_CONSTRUCTORS: dict[FindingKind, IssueConstructor] = {
    FindingKind.N_PLUS_ONE: _performance_issue("N+1 Query"),
    FindingKind.SLOW_QUERY: _performance_issue("Slow Query"),
    FindingKind.HYDRATION: _performance_issue("Excessive Hydration"),
    FindingKind.BULK_OPERATION: _performance_issue("Inefficient Bulk Operations"),
    FindingKind.FLUSH_IN_LOOP: _performance_issue("Flush in Loop", Severity.CRITICAL),
    FindingKind.MISSING_INDEX: _performance_issue("Missing Index"),
    FindingKind.UNSUPPORTED_PLATFORM: _performance_issue("Unsupported Platform", Severity.INFO),
    FindingKind.COLLECTION_UNINITIALIZED: _integrity_issue("Uninitialized Collection"),
    FindingKind.MISSING_ORPHAN_REMOVAL: _integrity_issue("Missing Orphan Removal"),
    FindingKind.CASCADE_REMOVE_INDEPENDENT: _integrity_issue("Cascade Remove on Independent Entity"),
    FindingKind.INSECURE_RANDOM: _security_issue("Insecure Random"),
}

_missing_constructors = set(FindingKind) - _CONSTRUCTORS.keys()
if _missing_constructors:
    raise RuntimeError(f"No issue constructor for: {sorted(_missing_constructors)}")


class IssueFactory:
    """Builds findings from a kind (or legacy alias) and loose attributes."""

    def __init__(self, suggestions: SuggestionFactory | None = None) -> None:
        self._suggestions = suggestions or SuggestionFactory()

    def create(self, kind: str | FindingKind, attributes: Mapping[str, Any] | None = None) -> Finding:
        resolved = resolve_kind(kind)
        attributes = attributes or {}
        suggestion_attributes = {**(attributes.get("details") or {}), **attributes}
        suggestion = self._suggestions.create(resolved, suggestion_attributes)
        return _CONSTRUCTORS[resolved](resolved, attributes, suggestion)

    @staticmethod
    def kinds() -> tuple[FindingKind, ...]:
        return tuple(_CONSTRUCTORS)
