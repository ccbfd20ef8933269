from orm_doctor.mapping.classifier import RelationshipClassifier
from orm_doctor.mapping.metadata import (
    InMemoryMetadataProvider,
    MappingMetadataProvider,
    MetadataCache,
)

__all__ = [
    "InMemoryMetadataProvider",
    "MappingMetadataProvider",
    "MetadataCache",
    "RelationshipClassifier",
]
