"""Index of class and trait declarations found in PHP sources.

Each method body becomes its own ``CodeUnit`` keyed
``<file>@<digest>#Type::method`` so the matcher can parse and cache it
independently; the source digest keeps a type redeclared elsewhere from
hitting a stale parse tree. Types are indexed by their short
(namespace-free) name.
"""

import hashlib
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from orm_doctor.matcher.matcher import PatternMatcher
from orm_doctor.matcher.parser import CodeUnit, ParsedUnit
from orm_doctor.matcher.queries import walk

logger = logging.getLogger(__name__)

_DECLARATION_NODE_TYPES = frozenset({"class_declaration", "trait_declaration"})


def short_name(name: str) -> str:
    return name.rsplit("\\", 1)[-1]


@dataclass(frozen=True, slots=True)
class TraitUse:
    """A ``use Trait { original as alias; }`` clause for one trait."""

    trait: str
    aliases: tuple[tuple[str, str], ...] = ()

    def original_of(self, alias: str) -> str | None:
        for name, original in self.aliases:
            if name == alias:
                return original
        return None


@dataclass(frozen=True, slots=True)
class TypeDeclaration:
    name: str
    kind: str
    file: str | None = None
    line: int = 1
    parent: str | None = None
    traits: tuple[TraitUse, ...] = ()
    methods: Mapping[str, CodeUnit] = field(default_factory=dict)

    @property
    def is_trait(self) -> bool:
        return self.kind == "trait"


class SourceIndex:
    """Composition graph of classes and traits, built from source files."""

    def __init__(self, matcher: PatternMatcher) -> None:
        self._matcher = matcher
        self._types: dict[str, TypeDeclaration] = {}
        self._declaring: dict[str, str] = {}

    @property
    def matcher(self) -> PatternMatcher:
        return self._matcher

    @property
    def types(self) -> tuple[TypeDeclaration, ...]:
        return tuple(self._types.values())

    def get(self, name: str) -> TypeDeclaration | None:
        return self._types.get(short_name(name))

    def declaring_type(self, unit: CodeUnit) -> TypeDeclaration | None:
        name = self._declaring.get(unit.key)
        return self._types.get(name) if name else None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and short_name(name) in self._types

    def add_file(self, path: str | Path) -> list[TypeDeclaration]:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {path}")
        return self.add_source(path.read_text(encoding="utf-8"), file=str(path))

    def add_source(self, source: str, file: str | None = None) -> list[TypeDeclaration]:
        digest = hashlib.sha1(source.encode("utf-8")).hexdigest()[:12]
        origin = f"{file}@{digest}" if file else digest
        parsed = self._matcher.parse(CodeUnit(key=f"file:{origin}", source=source, file=file))
        if not parsed.analyzable:
            return []

        declarations = [self._declaration(node, parsed) for node in self._declaration_nodes(parsed)]
        for declaration in declarations:
            if declaration.name in self._types:
                logger.debug("Type %s declared again in %s; keeping the latest", declaration.name, file)
            self._types[declaration.name] = declaration
            for unit in declaration.methods.values():
                self._declaring[unit.key] = declaration.name
        return declarations

    @staticmethod
    def _declaration_nodes(parsed: ParsedUnit) -> Iterator[Any]:
        return (node for node in walk(parsed.root) if node.type in _DECLARATION_NODE_TYPES)

    def _declaration(self, node: Any, parsed: ParsedUnit) -> TypeDeclaration:
        name = parsed.text(node.child_by_field_name("name"))
        parent = None
        for child in node.children:
            if child.type == "base_clause":
                for base in child.named_children:
                    if base.type in ("name", "qualified_name"):
                        parent = short_name(parsed.text(base))
                        break

        traits: list[TraitUse] = []
        methods: dict[str, CodeUnit] = {}
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            if member.type == "use_declaration":
                traits.extend(self._trait_uses(member, parsed))
            elif member.type == "method_declaration":
                unit = self._method_unit(name, member, parsed)
                if unit is not None:
                    methods[unit.key.rsplit("::", 1)[1]] = unit

        return TypeDeclaration(
            name=name,
            kind="trait" if node.type == "trait_declaration" else "class",
            file=parsed.unit.file,
            line=parsed.line_of(node),
            parent=parent,
            traits=tuple(traits),
            methods=methods,
        )

    @staticmethod
    def _method_unit(type_name: str, node: Any, parsed: ParsedUnit) -> CodeUnit | None:
        name = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        if name is None or body is None:
            # Abstract and interface methods have no body to analyze.
            return None
        return CodeUnit(
            key=f"{parsed.unit.key.removeprefix('file:')}#{type_name}::{parsed.text(name)}",
            source=parsed.text(body),
            start_line=parsed.line_of(body),
            file=parsed.unit.file,
        )

    @staticmethod
    def _trait_uses(node: Any, parsed: ParsedUnit) -> list[TraitUse]:
        names = [
            short_name(parsed.text(child))
            for child in node.named_children
            if child.type in ("name", "qualified_name")
        ]

        qualified: dict[str, list[tuple[str, str]]] = {}
        unqualified: list[tuple[str, str]] = []
        for clause in (c for child in node.named_children if child.type == "use_list" for c in child.named_children):
            if clause.type != "use_as_clause":
                continue
            parts = [child for child in clause.named_children if child.type != "visibility_modifier"]
            if len(parts) < 2:
                # `method as protected;` only changes visibility.
                continue
            source, alias = parts[0], parsed.text(parts[-1])
            if source.type == "class_constant_access_expression":
                trait_node, method_node = source.named_children[0], source.named_children[-1]
                qualified.setdefault(short_name(parsed.text(trait_node)), []).append(
                    (alias, parsed.text(method_node))
                )
            else:
                unqualified.append((alias, parsed.text(source)))

        return [TraitUse(trait, tuple(qualified.get(trait, [])) + tuple(unqualified)) for trait in names]
