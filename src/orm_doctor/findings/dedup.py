from collections.abc import Iterable

from orm_doctor.domain import Finding


def deduplicate(findings: Iterable[Finding]) -> list[Finding]:
    """Drop findings whose (kind, origin) was already seen, keeping the first."""
    seen: set[tuple] = set()
    unique: list[Finding] = []
    for finding in findings:
        if finding.identity in seen:
            continue
        seen.add(finding.identity)
        unique.append(finding)
    return unique
