"""Parsed code units and the per-run parse cache."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CodeUnit:
    """One analyzable routine (or whole file) plus its stable cache key."""

    key: str
    source: str
    start_line: int = 1
    file: str | None = None


@dataclass(frozen=True, slots=True)
class ParsedUnit:
    """A parsed code unit. ``root`` is a tree-sitter node; it is ``None`` when unanalyzable."""

    unit: CodeUnit
    source: bytes
    root: Any
    line_offset: int
    error: str | None = None

    @property
    def analyzable(self) -> bool:
        return self.root is not None

    def text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def line_of(self, node: Any) -> int:
        return node.start_point[0] + self.line_offset


@dataclass(frozen=True, slots=True)
class CacheStats:
    entries: int
    hits: int
    misses: int


class ParseCache:
    """Parsed units keyed by unit identity. Owned by one analysis run."""

    def __init__(self) -> None:
        self._entries: dict[str, ParsedUnit] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> ParsedUnit | None:
        parsed = self._entries.get(key)
        if parsed is None:
            self._misses += 1
        else:
            self._hits += 1
        return parsed

    def put(self, parsed: ParsedUnit) -> None:
        self._entries[parsed.unit.key] = parsed

    @property
    def entries(self) -> Mapping[str, ParsedUnit]:
        return dict(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(entries=len(self._entries), hits=self._hits, misses=self._misses)

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

