import logging

from tree_sitter_language_pack import get_parser

from orm_doctor.matcher import queries
from orm_doctor.matcher.parser import CacheStats, CodeUnit, ParseCache, ParsedUnit
from orm_doctor.matcher.queries import CallPredicate, CallSequence, ShapePredicate

logger = logging.getLogger(__name__)

_PHP_OPEN_TAG = "<?php\n"


class PatternMatcher:
    """Parses PHP code units once and answers structural queries over them.

    Method bodies are parsed as standalone statements: sources without an
    opening ``<?php`` tag get one prepended and line numbers are shifted back.
    A unit whose tree contains syntax errors is cached as unanalyzable and
    every query over it reports no matches.
    """

    def __init__(self, language: str = "php", cache: ParseCache | None = None) -> None:
        self._parser = get_parser(language)
        self._cache = cache if cache is not None else ParseCache()

    @property
    def cache(self) -> ParseCache:
        return self._cache

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def clear_cache(self) -> None:
        self._cache.clear()

    def parse(self, unit: CodeUnit) -> ParsedUnit:
        cached = self._cache.get(unit.key)
        if cached is not None:
            return cached

        parsed = self._parse(unit)
        self._cache.put(parsed)
        return parsed

    def _parse(self, unit: CodeUnit) -> ParsedUnit:
        if unit.source.lstrip().startswith("<?"):
            text, line_offset = unit.source, unit.start_line
        else:
            text, line_offset = _PHP_OPEN_TAG + unit.source, unit.start_line - 1

        source = text.encode("utf-8")
        tree = self._parser.parse(source)
        if tree.root_node.has_error:
            logger.warning("Code unit %s is unanalyzable: syntax error", unit.key)
            return ParsedUnit(unit, source, None, line_offset, error="syntax error")
        return ParsedUnit(unit, source, tree.root_node, line_offset)

    def has_field_assignment(
        self, parsed: ParsedUnit, field: str, predicate: ShapePredicate = queries.is_collection
    ) -> bool:
        return queries.has_field_assignment(parsed, field, predicate)

    def has_call(self, parsed: ParsedUnit, name_pattern: str) -> bool:
        return queries.has_call(parsed, name_pattern)

    def find_calls_matching(self, parsed: ParsedUnit, predicate: CallPredicate) -> CallSequence:
        return queries.find_calls_matching(parsed, predicate)
