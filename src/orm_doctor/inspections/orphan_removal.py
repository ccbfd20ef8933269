from orm_doctor.config import AnalysisSettings
from orm_doctor.domain import (
    AssociationDescriptor,
    Cardinality,
    EntityDescriptor,
    Finding,
    FindingKind,
    Origin,
    Severity,
)
from orm_doctor.findings import IssueFactory
from orm_doctor.inspections.base import AnalysisContext
from orm_doctor.matcher.declarations import short_name


def find_entity(context: AnalysisContext, type_name: str) -> EntityDescriptor | None:
    """Look a target type up by full name, falling back to its simple name."""
    if context.metadata is None:
        return None
    entity = context.metadata.describe(type_name)
    if entity is not None:
        return entity
    wanted = short_name(type_name)
    for candidate in context.metadata.entities():
        if short_name(candidate.name) == wanted:
            return candidate
    return None


def is_vendor_type(context: AnalysisContext, type_name: str) -> bool:
    declaration = context.sources.get(type_name)
    return bool(declaration and declaration.file and "/vendor/" in declaration.file.replace("\\", "/"))


class MissingOrphanRemovalInspection:
    """Flags composition one-to-many associations that lack orphan removal."""

    name: str = "missing_orphan_removal"

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def inspect(self, context: AnalysisContext, settings: AnalysisSettings) -> list[Finding]:
        if context.metadata is None:
            return []

        findings: list[Finding] = []
        for entity in context.metadata.entities():
            for association in entity.associations:
                if association.cardinality is not Cardinality.ONE_TO_MANY or association.orphan_removal:
                    continue
                if not context.classifier.classify_one_to_many(entity.name, association):
                    continue
                findings.append(self._finding(context, entity, association))
        return findings

    def _foreign_key_required(self, context: AnalysisContext, association: AssociationDescriptor) -> bool:
        child = find_entity(context, association.target_type)
        if child is None or association.mapped_by is None:
            return False
        back_reference = child.association(association.mapped_by)
        if back_reference is None:
            return False
        return any(not column.nullable for column in back_reference.join_columns)

    def _finding(
        self, context: AnalysisContext, entity: EntityDescriptor, association: AssociationDescriptor
    ) -> Finding:
        required = self._foreign_key_required(context, association)
        if is_vendor_type(context, entity.name):
            severity = Severity.WARNING if required else Severity.INFO
        else:
            severity = Severity.CRITICAL if required else Severity.WARNING

        entity_name = short_name(entity.name)
        target = short_name(association.target_type)
        declaration = context.sources.get(entity.name)
        return self._issues.create(
            FindingKind.MISSING_ORPHAN_REMOVAL,
            {
                "severity": severity,
                "title": f"Missing orphanRemoval on {entity_name}::${association.field_name}",
                "description": (
                    f"{entity_name}::{association.field_name} cascades remove to {target}, which "
                    f"looks like a part of {entity_name}, but orphanRemoval is disabled. "
                    + (
                        "Removing an item from the collection will fail on the NOT NULL foreign key."
                        if required
                        else "Removed items stay in the database with a NULL foreign key."
                    )
                ),
                "origin": Origin(
                    file=declaration.file if declaration else None,
                    line=declaration.line if declaration else None,
                    symbol=f"{entity.name}::{association.field_name}",
                ),
                "details": {
                    "entity": entity_name,
                    "field": association.field_name,
                    "target": target,
                    "foreign_key_required": required,
                },
            },
        )
