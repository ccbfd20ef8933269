from orm_doctor.domain import FindingKind
from orm_doctor.errors import UnknownFindingKindError

# Human-readable names older integrations still send instead of canonical kinds.
LEGACY_ALIASES: dict[str, FindingKind] = {
    "N+1 Query": FindingKind.N_PLUS_ONE,
    "Slow Query": FindingKind.SLOW_QUERY,
    "Excessive Hydration": FindingKind.HYDRATION,
    "Inefficient Bulk Operations": FindingKind.BULK_OPERATION,
    "Performance Anti-Pattern": FindingKind.FLUSH_IN_LOOP,
    "Missing Index": FindingKind.MISSING_INDEX,
    "Unsupported Platform": FindingKind.UNSUPPORTED_PLATFORM,
    "Uninitialized Collection": FindingKind.COLLECTION_UNINITIALIZED,
    "Missing Orphan Removal": FindingKind.MISSING_ORPHAN_REMOVAL,
    "Cascade Remove on Independent Entity": FindingKind.CASCADE_REMOVE_INDEPENDENT,
    "Insecure Random": FindingKind.INSECURE_RANDOM,
}


def resolve_kind(kind: str | FindingKind) -> FindingKind:
    """Resolve a canonical kind or legacy alias, raising for anything else."""
    if isinstance(kind, FindingKind):
        return kind
    if isinstance(kind, str):
        if kind in LEGACY_ALIASES:
            return LEGACY_ALIASES[kind]
        try:
            return FindingKind(kind.strip().lower())
        except ValueError:
            pass
    raise UnknownFindingKindError(kind, [member.value for member in FindingKind])
