import logging

from orm_doctor.config import AnalysisSettings
from orm_doctor.domain import AssociationDescriptor, EntityDescriptor, Finding, FindingKind, Origin, Severity
from orm_doctor.findings import IssueFactory
from orm_doctor.inspections.base import AnalysisContext
from orm_doctor.matcher import CodeUnit, TypeDeclaration
from orm_doctor.matcher.declarations import short_name
from orm_doctor.matcher.delegation import CONSTRUCTOR

logger = logging.getLogger(__name__)


class CollectionInitializationInspection:
    """Checks that every to-many collection is initialized by constructor code."""

    name: str = "collection_initialization"

    def __init__(self, issues: IssueFactory | None = None) -> None:
        self._issues = issues or IssueFactory()

    def inspect(self, context: AnalysisContext, settings: AnalysisSettings) -> list[Finding]:
        if context.metadata is None:
            return []

        findings: list[Finding] = []
        for entity in context.metadata.entities():
            collections = [a for a in entity.associations if a.cardinality.is_to_many]
            if not collections:
                continue

            declaration = context.sources.get(entity.name)
            if declaration is None:
                logger.debug("No source for %s; skipping collection initialization check", entity.name)
                continue

            constructor = context.resolver.resolve_method(entity.name, CONSTRUCTOR)
            for association in collections:
                if constructor is None:
                    findings.append(self._finding(entity, association, declaration, None))
                elif not context.resolver.is_field_initialized(entity.name, association.field_name):
                    findings.append(self._finding(entity, association, declaration, constructor))
        return findings

    def _finding(
        self,
        entity: EntityDescriptor,
        association: AssociationDescriptor,
        declaration: TypeDeclaration,
        constructor: CodeUnit | None,
    ) -> Finding:
        entity_name = short_name(entity.name)
        if constructor is None:
            description = (
                f"{entity_name} has no constructor, so the {association.field_name} collection "
                f"is never initialized."
            )
        else:
            description = (
                f"The constructor of {entity_name} never initializes the "
                f"{association.field_name} collection."
            )

        return self._issues.create(
            FindingKind.COLLECTION_UNINITIALIZED,
            {
                "severity": Severity.CRITICAL,
                "title": f"Uninitialized Collection: {entity_name}::${association.field_name}",
                "description": description,
                "origin": Origin(
                    file=declaration.file,
                    line=constructor.start_line if constructor else declaration.line,
                    symbol=f"{entity.name}::{association.field_name}",
                ),
                "details": {
                    "entity": entity_name,
                    "field": association.field_name,
                    "has_constructor": constructor is not None,
                },
            },
        )
