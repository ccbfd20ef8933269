"""Reachability over the composition graph of classes and traits.

Method resolution follows PHP's order (own methods, then trait aliases and
trait methods, then the parent class) but is implemented as a bounded graph
traversal: revisiting a (type, method) pair or exceeding the depth limit
stops that branch instead of recursing forever on accidental cycles.
"""

import logging
from collections import deque
from collections.abc import Iterator

from orm_doctor.matcher.declarations import SourceIndex, TypeDeclaration, short_name
from orm_doctor.matcher.parser import CodeUnit
from orm_doctor.matcher.queries import CallSite, ShapePredicate, is_collection

logger = logging.getLogger(__name__)

CONSTRUCTOR = "__construct"
_SELF_RECEIVERS = frozenset({"$this", "self", "static"})


def _is_delegation(site: CallSite) -> bool:
    return site.receiver in _SELF_RECEIVERS or site.receiver == "parent"


class InitializationResolver:
    def __init__(self, index: SourceIndex, max_depth: int = 32) -> None:
        self._index = index
        self._max_depth = max_depth

    def resolve_method(self, type_name: str, method: str) -> CodeUnit | None:
        return self._resolve(short_name(type_name), method, set(), 0)

    def _resolve(self, type_name: str, method: str, visited: set[tuple[str, str]], depth: int) -> CodeUnit | None:
        if depth > self._max_depth:
            logger.warning("Gave up resolving %s::%s: delegation deeper than %d", type_name, method, self._max_depth)
            return None
        if (type_name, method) in visited:
            return None
        visited.add((type_name, method))

        declaration = self._index.get(type_name)
        if declaration is None:
            return None
        if method in declaration.methods:
            return declaration.methods[method]

        for use in declaration.traits:
            original = use.original_of(method)
            if original is not None:
                found = self._resolve(use.trait, original, visited, depth + 1)
                if found is not None:
                    return found
        for use in declaration.traits:
            found = self._resolve(use.trait, method, visited, depth + 1)
            if found is not None:
                return found

        if declaration.parent:
            return self._resolve(declaration.parent, method, visited, depth + 1)
        return None

    def has_constructor(self, type_name: str) -> bool:
        return self.resolve_method(type_name, CONSTRUCTOR) is not None

    def reachable_units(self, type_name: str, entry: str = CONSTRUCTOR) -> Iterator[CodeUnit]:
        """Yield every method body reachable from ``entry`` on ``type_name``, entry first."""
        start = self.resolve_method(type_name, entry)
        if start is None:
            return

        matcher = self._index.matcher
        queue: deque[tuple[CodeUnit, str]] = deque([(start, self._class_context(start, type_name))])
        seen: set[str] = set()
        while queue:
            unit, context = queue.popleft()
            if unit.key in seen:
                continue
            seen.add(unit.key)
            yield unit

            parsed = matcher.parse(unit)
            for site in matcher.find_calls_matching(parsed, _is_delegation):
                if site.receiver == "parent":
                    parent = self._parent_of(context)
                    target = self.resolve_method(parent, site.callee_name) if parent else None
                else:
                    # $this/self/static dispatch on the concrete type, even inside trait code.
                    target = self.resolve_method(type_name, site.callee_name)

                if target is not None and target.key not in seen:
                    queue.append((target, self._class_context(target, context)))

    def is_field_initialized(
        self, type_name: str, field: str, predicate: ShapePredicate = is_collection
    ) -> bool:
        matcher = self._index.matcher
        return any(
            matcher.has_field_assignment(matcher.parse(unit), field, predicate)
            for unit in self.reachable_units(type_name)
        )

    def _class_context(self, unit: CodeUnit, fallback: str) -> str:
        """The class whose parent ``parent::`` refers to while ``unit`` runs."""
        declaring: TypeDeclaration | None = self._index.declaring_type(unit)
        if declaring is None or declaring.is_trait:
            return fallback
        return declaring.name

    def _parent_of(self, type_name: str) -> str | None:
        declaration = self._index.get(type_name)
        return declaration.parent if declaration else None
