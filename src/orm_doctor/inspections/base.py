from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from orm_doctor.config import AnalysisSettings
from orm_doctor.domain import Finding
from orm_doctor.mapping import MappingMetadataProvider, MetadataCache, RelationshipClassifier
from orm_doctor.matcher import InitializationResolver, PatternMatcher, SourceIndex


@dataclass(frozen=True, slots=True)
class AnalysisContext:
    """Caches and indexes owned by a single analysis run.

    Nothing here is shared between runs; build a new context (or call
    ``clear``) before analyzing an unrelated unit of work.
    """

    matcher: PatternMatcher
    sources: SourceIndex
    resolver: InitializationResolver
    classifier: RelationshipClassifier
    metadata: MetadataCache | None = None

    @classmethod
    def create(
        cls,
        metadata: MappingMetadataProvider | None = None,
        source_files: Iterable[str | Path] = (),
        sources: Mapping[str, str] | None = None,
        language: str = "php",
    ) -> "AnalysisContext":
        matcher = PatternMatcher(language)
        index = SourceIndex(matcher)
        for path in source_files:
            index.add_file(path)
        for file, source in (sources or {}).items():
            index.add_source(source, file=file)

        return cls(
            matcher=matcher,
            sources=index,
            resolver=InitializationResolver(index),
            classifier=RelationshipClassifier(),
            metadata=MetadataCache(metadata) if metadata is not None else None,
        )

    def clear(self) -> None:
        self.matcher.clear_cache()
        if self.metadata is not None:
            self.metadata.clear()


@runtime_checkable
class EntityInspection(Protocol):
    """Protocol for inspections over mapping metadata and entity source code."""

    @property
    def name(self) -> str:
        ...

    def inspect(self, context: AnalysisContext, settings: AnalysisSettings) -> list[Finding]:
        ...
