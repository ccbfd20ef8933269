from typing import ClassVar

from orm_doctor.config import AnalysisSettings
from orm_doctor.domain import AssociationDescriptor, Cardinality, EntityDescriptor, Finding, FindingKind, Origin, Severity
from orm_doctor.findings import IssueFactory
from orm_doctor.inspections.base import AnalysisContext
from orm_doctor.inspections.orphan_removal import find_entity
from orm_doctor.matcher.declarations import short_name


class CascadeRemoveInspection:
    """Flags cascade remove towards entities that live independently of the owner."""

    name: str = "cascade_remove"

    INDEPENDENT_PATTERNS: ClassVar[tuple[str, ...]] = (
        "User",
        "Customer",
        "Account",
        "Member",
        "Client",
        "Company",
        "Organization",
        "Team",
        "Department",
        "Product",
        "Category",
        "Brand",
        "Tag",
        "Author",
        "Editor",
        "Publisher",
        "Country",
        "City",
        "Region",
    )

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def is_independent(self, target_type: str, reference_counts: dict[str, int]) -> bool:
        target = short_name(target_type)
        if any(pattern in target for pattern in self.INDEPENDENT_PATTERNS):
            return True
        return reference_counts.get(target, 0) > 1

    def is_dependent(self, context: AnalysisContext, target_type: str) -> bool:
        """A target whose many-to-one parent owns its lifecycle is a composed part, not a shared entity."""
        target = find_entity(context, target_type)
        if target is None:
            return False
        return any(
            self._is_composition(context, target, association)
            for association in target.associations
            if association.cardinality is Cardinality.MANY_TO_ONE
        )

    def _is_composition(
        self, context: AnalysisContext, entity: EntityDescriptor, association: AssociationDescriptor
    ) -> bool:
        unique_groups = entity.unique_constraints + entity.unique_indexes
        for column in association.join_columns:
            if not column.nullable and any(column.name in group for group in unique_groups):
                return True

        parent = find_entity(context, association.target_type)
        if parent is None:
            return False
        inverse = parent.association(association.inversed_by) if association.inversed_by else None
        if inverse is None:
            inverse = next(
                (
                    candidate
                    for candidate in parent.associations
                    if candidate.mapped_by == association.field_name
                    and short_name(candidate.target_type) == short_name(entity.name)
                ),
                None,
            )
        return inverse is not None and inverse.orphan_removal

    def flags_target(self, context: AnalysisContext, target_type: str, reference_counts: dict[str, int]) -> bool:
        if self.is_dependent(context, target_type):
            return False
        return self.is_independent(target_type, reference_counts)

    def inspect(self, context: AnalysisContext, settings: AnalysisSettings) -> list[Finding]:
        if context.metadata is None:
            return []

        classifier = context.classifier
        reference_counts = context.metadata.reference_counts()
        findings: list[Finding] = []
        for entity in context.metadata.entities():
            for association in entity.associations:
                if not association.cascades_remove:
                    continue

                # One-to-one with cascade remove always classifies as composition.
                cardinality = association.cardinality
                if cardinality is Cardinality.MANY_TO_ONE:
                    if classifier.classify_many_to_one_as_one_to_one(entity, association):
                        continue
                    findings.append(self._finding(entity, association, Severity.CRITICAL))
                elif cardinality is Cardinality.ONE_TO_MANY:
                    if classifier.classify_one_to_many(entity.name, association):
                        continue
                    if self.flags_target(context, association.target_type, reference_counts):
                        findings.append(self._finding(entity, association, Severity.WARNING))
                elif cardinality is Cardinality.MANY_TO_MANY:
                    if self.flags_target(context, association.target_type, reference_counts):
                        findings.append(self._finding(entity, association, Severity.WARNING))
        return findings

    def _finding(self, entity: EntityDescriptor, association: AssociationDescriptor, severity: Severity) -> Finding:
        entity_name = short_name(entity.name)
        target = short_name(association.target_type)
        return self._issues.create(
            FindingKind.CASCADE_REMOVE_INDEPENDENT,
            {
                "severity": severity,
                "title": f"Cascade remove on {association.cardinality.value} {entity_name}::${association.field_name}",
                "description": (
                    f"Removing a {entity_name} also removes the associated {target}, which other "
                    f"records may still reference."
                ),
                "origin": Origin(symbol=f"{entity.name}::{association.field_name}"),
                "details": {
                    "entity": entity_name,
                    "field": association.field_name,
                    "target": target,
                    "cardinality": association.cardinality.value,
                },
            },
        )
