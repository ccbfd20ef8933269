import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from orm_doctor.domain import AssociationDescriptor, Cardinality, EntityDescriptor, JoinColumn

logger = logging.getLogger(__name__)


@runtime_checkable
class MappingMetadataProvider(Protocol):
    """Read-only source of mapped entity descriptors."""

    def entity_names(self) -> Sequence[str]:
        ...

    def describe(self, entity_name: str) -> EntityDescriptor | None:
        ...


class InMemoryMetadataProvider:
    """Metadata provider backed by already-loaded descriptors."""

    def __init__(self, entities: Iterable[EntityDescriptor]) -> None:
        self._entities: dict[str, EntityDescriptor] = {entity.name: entity for entity in entities}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> "InMemoryMetadataProvider":
        """Build descriptors from ORM-style metadata dicts keyed by entity name."""
        return cls(_entity_from_mapping(name, mapping) for name, mapping in data.items())

    def entity_names(self) -> Sequence[str]:
        return tuple(self._entities)

    def describe(self, entity_name: str) -> EntityDescriptor | None:
        return self._entities.get(entity_name)


def _entity_from_mapping(name: str, data: Mapping[str, Any]) -> EntityDescriptor:
    associations = data.get("associations") or {}
    return EntityDescriptor(
        name=name,
        table=data.get("table"),
        associations=tuple(
            _association_from_mapping(name, field_name, mapping) for field_name, mapping in associations.items()
        ),
        unique_constraints=tuple(tuple(columns) for columns in data.get("unique_constraints") or ()),
        unique_indexes=tuple(tuple(columns) for columns in data.get("unique_indexes") or ()),
    )


def _association_from_mapping(owner: str, field_name: str, data: Mapping[str, Any]) -> AssociationDescriptor:
    join_columns = tuple(
        JoinColumn(
            name=column["name"],
            nullable=column.get("nullable", True),
            unique=column.get("unique", False),
        )
        for column in data.get("join_columns", data.get("joinColumns")) or ()
    )
    return AssociationDescriptor(
        field_name=field_name,
        cardinality=Cardinality.parse(data.get("type")),
        target_type=data.get("target_entity", data.get("targetEntity", "")),
        declaring_type=owner,
        cascade=frozenset(data.get("cascade") or ()),
        orphan_removal=bool(data.get("orphan_removal", data.get("orphanRemoval", False))),
        owning_side=bool(data.get("owning_side", data.get("isOwningSide", True))),
        join_columns=join_columns,
        mapped_by=data.get("mapped_by", data.get("mappedBy")),
        inversed_by=data.get("inversed_by", data.get("inversedBy")),
    )


class MetadataCache:
    """Per-run memo of entity descriptors pulled from a provider."""

    def __init__(self, provider: MappingMetadataProvider) -> None:
        self._provider = provider
        self._descriptors: dict[str, EntityDescriptor | None] = {}
        self._names: tuple[str, ...] | None = None

    def entity_names(self) -> tuple[str, ...]:
        if self._names is None:
            self._names = tuple(self._provider.entity_names())
        return self._names

    def describe(self, entity_name: str) -> EntityDescriptor | None:
        if entity_name not in self._descriptors:
            descriptor = self._provider.describe(entity_name)
            if descriptor is None:
                logger.debug("No mapping metadata for %s", entity_name)
            self._descriptors[entity_name] = descriptor
        return self._descriptors[entity_name]

    def entities(self) -> tuple[EntityDescriptor, ...]:
        descriptors = (self.describe(name) for name in self.entity_names())
        return tuple(descriptor for descriptor in descriptors if descriptor is not None)

    def reference_counts(self) -> dict[str, int]:
        """How many associations across all entities target each type (by simple name)."""
        counts: dict[str, int] = {}
        for entity in self.entities():
            for association in entity.associations:
                target = association.target_type.rsplit("\\", 1)[-1]
                counts[target] = counts.get(target, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self._descriptors)

    def clear(self) -> None:
        self._descriptors.clear()
        self._names = None
