"""Structural queries over parsed PHP units.

Traversal only visits executable nodes: comments and string literals
(including heredoc/nowdoc bodies) are skipped wholesale, so a pattern that
appears only inside them is never reported.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from orm_doctor.matcher.parser import ParsedUnit

_SKIPPED_NODE_TYPES = frozenset(
    {"comment", "string", "encapsed_string", "heredoc", "nowdoc", "shell_command_expression"}
)
_ASSIGNMENT_NODE_TYPES = frozenset({"assignment_expression", "augmented_assignment_expression"})
_MEMBER_ACCESS_NODE_TYPES = frozenset({"member_access_expression", "nullsafe_member_access_expression"})
_METHOD_CALL_NODE_TYPES = frozenset({"member_call_expression", "nullsafe_member_call_expression"})
_CALL_NODE_TYPES = _METHOD_CALL_NODE_TYPES | {"scoped_call_expression", "function_call_expression"}
_LITERAL_NODE_TYPES = frozenset(
    {"integer", "float", "string", "encapsed_string", "boolean", "null", "heredoc", "nowdoc"}
)

COLLECTION_CLASSES = frozenset({"ArrayCollection", "Collection"})


@dataclass(frozen=True, slots=True)
class ValueShape:
    """Coarse description of an expression: what kind it is and its salient name."""

    kind: str
    name: str | None = None
    element_count: int | None = None

    @property
    def short_name(self) -> str | None:
        if self.name is None:
            return None
        return self.name.rsplit("\\", 1)[-1]


@dataclass(frozen=True, slots=True)
class CallSite:
    callee_name: str
    line: int
    argument_shapes: tuple[ValueShape, ...] = ()
    receiver: str | None = None
    kind: str = "function"


ShapePredicate = Callable[[ValueShape], bool]
CallPredicate = Callable[[CallSite], bool]


def is_collection(shape: ValueShape) -> bool:
    """True for ``new ArrayCollection()``, ``new Collection()`` (any namespace) or ``[]``."""
    if shape.kind == "new":
        return shape.short_name in COLLECTION_CLASSES
    return shape.kind == "array" and shape.element_count == 0


@dataclass(frozen=True, slots=True)
class NamePattern:
    """Call-name pattern with at most one ``*`` wildcard, anchored and case-sensitive."""

    pattern: str
    prefix: str
    suffix: str
    wildcard: bool

    @classmethod
    def compile(cls, pattern: str) -> "NamePattern":
        wildcards = pattern.count("*")
        if wildcards > 1:
            raise ValueError(f"Name pattern {pattern!r} may contain a single wildcard")
        if wildcards == 0:
            return cls(pattern, pattern, "", False)
        prefix, suffix = pattern.split("*")
        return cls(pattern, prefix, suffix, True)

    def matches(self, name: str) -> bool:
        if not self.wildcard:
            return name == self.pattern
        return (
            len(name) >= len(self.prefix) + len(self.suffix)
            and name.startswith(self.prefix)
            and name.endswith(self.suffix)
        )


def walk(node: Any) -> Iterator[Any]:
    """Pre-order walk of executable named nodes."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in _SKIPPED_NODE_TYPES:
            continue
        yield current
        stack.extend(reversed(current.named_children))


def shape_of(node: Any, parsed: ParsedUnit) -> ValueShape:
    while node.type == "parenthesized_expression" and node.named_children:
        node = node.named_children[0]

    if node.type == "object_creation_expression":
        for child in node.named_children:
            if child.type in ("name", "qualified_name"):
                return ValueShape("new", parsed.text(child).lstrip("\\"))
        return ValueShape("new")
    if node.type == "array_creation_expression":
        elements = [child for child in node.named_children if child.type == "array_element_initializer"]
        return ValueShape("array", element_count=len(elements))
    if node.type in _CALL_NODE_TYPES:
        site = call_site_of(node, parsed)
        return ValueShape("call", site.callee_name if site else None)
    if node.type in _LITERAL_NODE_TYPES:
        return ValueShape("literal")
    if node.type == "variable_name":
        return ValueShape("variable", parsed.text(node))
    return ValueShape("expression")


def _argument_shapes(node: Any, parsed: ParsedUnit) -> tuple[ValueShape, ...]:
    arguments = node.child_by_field_name("arguments")
    if arguments is None:
        return ()
    shapes = []
    for argument in arguments.named_children:
        if argument.type != "argument" or not argument.named_children:
            continue
        # Named arguments carry the parameter name first; the value is last.
        shapes.append(shape_of(argument.named_children[-1], parsed))
    return tuple(shapes)


def call_site_of(node: Any, parsed: ParsedUnit) -> CallSite | None:
    """Describe a call node, or return None when its target cannot be named statically."""
    if node.type in _METHOD_CALL_NODE_TYPES:
        name = node.child_by_field_name("name")
        receiver = node.child_by_field_name("object")
        kind = "method"
    elif node.type == "scoped_call_expression":
        name = node.child_by_field_name("name")
        receiver = node.child_by_field_name("scope")
        kind = "static"
    elif node.type == "function_call_expression":
        name = node.child_by_field_name("function")
        receiver = None
        kind = "function"
    else:
        return None

    if name is None or name.type not in ("name", "qualified_name"):
        return None

    return CallSite(
        callee_name=parsed.text(name).lstrip("\\"),
        line=parsed.line_of(node),
        argument_shapes=_argument_shapes(node, parsed),
        receiver=parsed.text(receiver) if receiver is not None else None,
        kind=kind,
    )


def _assigned_field(left: Any, parsed: ParsedUnit) -> str | None:
    if left.type not in _MEMBER_ACCESS_NODE_TYPES:
        return None
    target = left.child_by_field_name("object")
    name = left.child_by_field_name("name")
    if target is None or name is None or name.type != "name":
        return None
    if target.type != "variable_name" or parsed.text(target) != "$this":
        return None
    return parsed.text(name)


def has_field_assignment(parsed: ParsedUnit, field: str, predicate: ShapePredicate = is_collection) -> bool:
    """True if ``$this->field`` is assigned a value accepted by ``predicate``."""
    if not parsed.analyzable:
        return False
    for node in walk(parsed.root):
        if node.type not in _ASSIGNMENT_NODE_TYPES:
            continue
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None or _assigned_field(left, parsed) != field:
            continue
        if predicate(shape_of(right, parsed)):
            return True
    return False


class CallSequence:
    """Lazy, restartable sequence of call sites accepted by a predicate."""

    def __init__(self, parsed: ParsedUnit, predicate: CallPredicate) -> None:
        self._parsed = parsed
        self._predicate = predicate

    def __iter__(self) -> Iterator[CallSite]:
        if not self._parsed.analyzable:
            return
        for node in walk(self._parsed.root):
            if node.type not in _CALL_NODE_TYPES:
                continue
            site = call_site_of(node, self._parsed)
            if site is not None and self._predicate(site):
                yield site


def find_calls_matching(parsed: ParsedUnit, predicate: CallPredicate) -> CallSequence:
    return CallSequence(parsed, predicate)


def has_call(parsed: ParsedUnit, name_pattern: str) -> bool:
    pattern = NamePattern.compile(name_pattern)
    return any(True for _ in find_calls_matching(parsed, lambda site: pattern.matches(site.callee_name)))
