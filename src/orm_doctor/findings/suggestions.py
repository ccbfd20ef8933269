"""Remediation suggestions, generated per finding kind.

Templates are rendered with ``str.format_map`` against the finding's
attributes. Suggestions are advisory: when an attribute a template needs is
missing, a generic placeholder is returned instead of failing.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from orm_doctor.domain import FindingKind, Suggestion
from orm_doctor.findings.kinds import resolve_kind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SuggestionTemplate:
    title: str
    description: str
    code_example: str = ""

    def render(self, attributes: Mapping[str, Any]) -> Suggestion:
        return Suggestion(
            title=self.title.format_map(attributes),
            description=self.description.format_map(attributes),
            code_example=self.code_example.format_map(attributes),
        )


_N_PLUS_ONE_VARIANTS: dict[str, SuggestionTemplate] = {
    "proxy": SuggestionTemplate(
        title="Eager load the {table} association",
        description=(
            "{count} proxies of {table} were initialized one by one. Fetch-join the "
            "association in the originating query or enable batch fetching."
        ),
        code_example=(
            "$qb->select('o', 'c')\n"
            "   ->from(Order::class, 'o')\n"
            "   ->leftJoin('o.customer', 'c');"
        ),
    ),
    "collection": SuggestionTemplate(
        title="Fetch-join the {table} collection",
        description=(
            "{count} collections were loaded from {table} inside a loop. Load them "
            "together with their owners using a fetch join."
        ),
        code_example=(
            "$qb->select('o', 'i')\n"
            "   ->from(Order::class, 'o')\n"
            "   ->leftJoin('o.items', 'i');"
        ),
    ),
    "partial_collection": SuggestionTemplate(
        title="Mark the {table} collection EXTRA_LAZY",
        description=(
            "{count} partial loads (slice/count) hit {table}. An EXTRA_LAZY collection "
            "answers count() and slice() without hydrating every element."
        ),
        code_example="#[ORM\\OneToMany(targetEntity: Item::class, mappedBy: 'order', fetch: 'EXTRA_LAZY')]",
    ),
}

_TEMPLATES: dict[FindingKind, SuggestionTemplate] = {
    FindingKind.N_PLUS_ONE: SuggestionTemplate(
        title="Batch the repeated {table} queries",
        description=(
            "The same query ran {count} times from one call site. Load the data in a "
            "single query before iterating."
        ),
        code_example="$repository->findBy(['id' => $ids]);",
    ),
    FindingKind.SLOW_QUERY: SuggestionTemplate(
        title="Optimize slow query",
        description=(
            "The query took {duration_ms:.1f}ms (threshold {threshold_ms:.0f}ms). Check its "
            "execution plan, add missing indexes or reduce the selected columns."
        ),
        code_example="EXPLAIN {sql}",
    ),
    FindingKind.HYDRATION: SuggestionTemplate(
        title="Paginate or stream the result",
        description=(
            "{row_count} rows were hydrated into entities. Paginate, select scalar "
            "columns only, or iterate with toIterable() and clear the manager in batches."
        ),
        code_example=(
            "foreach ($query->toIterable() as $i => $row) {{\n"
            "    // process\n"
            "    if ($i % 100 === 0) {{ $em->clear(); }}\n"
            "}}"
        ),
    ),
    FindingKind.BULK_OPERATION: SuggestionTemplate(
        title="Use a single bulk {operation}",
        description=(
            "{count} {operation} statements hit {table} one row at a time. A DQL bulk "
            "statement does the same work in one round trip."
        ),
        code_example=(
            "$em->createQuery('{operation} App\\Entity\\Item i WHERE i.id IN (:ids)')\n"
            "   ->setParameter('ids', $ids)\n"
            "   ->execute();"
        ),
    ),
    FindingKind.FLUSH_IN_LOOP: SuggestionTemplate(
        title="Flush once after the loop",
        description=(
            "Detected {flush_count} flush() calls in a loop pattern (avg "
            "{avg_operations:.1f} operations per flush). Move flush() outside the loop "
            "or flush in batches."
        ),
        code_example=(
            "foreach ($items as $i => $item) {{\n"
            "    $em->persist($item);\n"
            "    if (($i % 20) === 0) {{ $em->flush(); }}\n"
            "}}\n"
            "$em->flush();"
        ),
    ),
    FindingKind.MISSING_INDEX: SuggestionTemplate(
        title="Add an index on {table}",
        description=(
            "The plan scans {rows_scanned} rows of {table} with access type "
            "{access_type}. An index on the filtered columns avoids the scan."
        ),
        code_example="CREATE INDEX idx_{table}_lookup ON {table} (...);",
    ),
    FindingKind.UNSUPPORTED_PLATFORM: SuggestionTemplate(
        title="Index analysis unavailable on {platform}",
        description=(
            "Execution plans cannot be inspected on {platform}. Missing-index analysis "
            "supports mysql, mariadb and postgresql."
        ),
    ),
    FindingKind.COLLECTION_UNINITIALIZED: SuggestionTemplate(
        title="Initialize {entity}::${field} in the constructor",
        description=(
            "The {field} collection of {entity} is never initialized by constructor "
            "code. Accessing it on a new entity fails before it is persisted."
        ),
        code_example=(
            "public function __construct()\n"
            "{{\n"
            "    $this->{field} = new ArrayCollection();\n"
            "}}"
        ),
    ),
    FindingKind.MISSING_ORPHAN_REMOVAL: SuggestionTemplate(
        title="Enable orphanRemoval on {entity}::${field}",
        description=(
            "{target} looks owned by {entity} (cascade remove and naming), but children "
            "removed from the collection stay in the database."
        ),
        code_example=(
            "#[ORM\\OneToMany(targetEntity: {target}::class, mappedBy: '...', "
            "cascade: ['persist', 'remove'], orphanRemoval: true)]"
        ),
    ),
    FindingKind.CASCADE_REMOVE_INDEPENDENT: SuggestionTemplate(
        title="Remove cascade remove from {entity}::${field}",
        description=(
            "{target} exists independently of {entity}. Deleting {entity} would delete "
            "{target} rows that other records still reference."
        ),
        code_example="#[ORM\\ManyToOne(targetEntity: {target}::class, cascade: ['persist'])]",
    ),
    FindingKind.INSECURE_RANDOM: SuggestionTemplate(
        title="Replace {function} with a CSPRNG",
        description=(
            "{function} is predictable and must not generate security tokens. "
            "Use random_bytes() or random_int()."
        ),
        code_example="$token = bin2hex(random_bytes(32));",
    ),
}


class SuggestionFactory:
    """Stateless suggestion generator keyed by finding kind."""

    def create(self, kind: str | FindingKind, attributes: Mapping[str, Any] | None = None) -> Suggestion:
        resolved = resolve_kind(kind)
        attributes = attributes or {}
        template = _TEMPLATES[resolved]
        if resolved is FindingKind.N_PLUS_ONE:
            template = _N_PLUS_ONE_VARIANTS.get(attributes.get("n_plus_one_type", ""), template)

        try:
            return template.render(attributes)
        except (KeyError, IndexError, ValueError, TypeError) as exc:
            logger.debug("Falling back to placeholder suggestion for %s: %r", resolved, exc)
            return self.placeholder(resolved)

    @staticmethod
    def placeholder(kind: FindingKind) -> Suggestion:
        label = kind.value.replace("_", " ")
        return Suggestion(
            title=f"Review {label}",
            description=f"Review this {label} finding and adjust the mapping or query accordingly.",
        )


_missing_templates = set(FindingKind) - _TEMPLATES.keys()
if _missing_templates:
    raise RuntimeError(f"No suggestion template for: {sorted(_missing_templates)}")
