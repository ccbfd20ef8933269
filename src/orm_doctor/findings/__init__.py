from orm_doctor.findings.dedup import deduplicate
from orm_doctor.findings.issues import IssueFactory
from orm_doctor.findings.kinds import LEGACY_ALIASES, resolve_kind
from orm_doctor.findings.suggestions import SuggestionFactory, SuggestionTemplate

__all__ = [
    "IssueFactory",
    "LEGACY_ALIASES",
    "SuggestionFactory",
    "SuggestionTemplate",
    "deduplicate",
    "resolve_kind",
]
