"""Composition vs aggregation heuristics over association metadata.

Each classification is an ordered list of independent signals evaluated
with short-circuit OR. When no signal fires, or the descriptor does not have
the cardinality the classification is about, the answer is "not composition".
"""

from collections.abc import Callable
from typing import ClassVar

from orm_doctor.domain import AssociationDescriptor, Cardinality, EntityDescriptor

Signal = tuple[str, Callable[[AssociationDescriptor], bool]]


def _simple_name(type_name: str) -> str:
    return type_name.rsplit("\\", 1)[-1]


def _has_orphan_removal(association: AssociationDescriptor) -> bool:
    return association.orphan_removal


def _cascades_remove(association: AssociationDescriptor) -> bool:
    return association.cascades_remove


class RelationshipClassifier:
    PART_SUFFIXES: ClassVar[tuple[str, ...]] = (
        "Item",
        "Line",
        "Entry",
        "Detail",
        "Part",
        "Component",
        "Element",
        "Record",
        "Row",
        "Member",
        "Piece",
    )

    def classify_one_to_one(self, association: AssociationDescriptor) -> bool:
        if association.cardinality is not Cardinality.ONE_TO_ONE:
            return False
        signals: tuple[Signal, ...] = (
            ("orphan_removal", _has_orphan_removal),
            ("cascade_remove", _cascades_remove),
        )
        return self.first_signal(signals, association) is not None

    def classify_one_to_many(self, owner_name: str, association: AssociationDescriptor) -> bool:
        if association.cardinality is not Cardinality.ONE_TO_MANY:
            return False
        signals: tuple[Signal, ...] = (
            ("orphan_removal", _has_orphan_removal),
            (
                "cascade_remove_part_name",
                lambda a: a.cascades_remove and self.suggests_part_of(owner_name, a.target_type),
            ),
        )
        return self.first_signal(signals, association) is not None

    def classify_many_to_one_as_one_to_one(
        self, owner: EntityDescriptor, association: AssociationDescriptor
    ) -> bool:
        """True when the association's foreign key is unique on the owning table."""
        if association.cardinality is not Cardinality.MANY_TO_ONE:
            return False
        columns = frozenset(column.name for column in association.join_columns)
        if not columns:
            return False

        def covered_by(constraints: tuple[tuple[str, ...], ...]) -> bool:
            return any(constraint and set(constraint) <= columns for constraint in constraints)

        signals: tuple[Signal, ...] = (
            ("unique_join_column", lambda a: len(a.join_columns) == 1 and a.join_columns[0].unique),
            ("unique_constraint", lambda a: covered_by(owner.unique_constraints)),
            ("unique_index", lambda a: covered_by(owner.unique_indexes)),
        )
        return self.first_signal(signals, association) is not None

    def suggests_part_of(self, owner_name: str, target_type: str) -> bool:
        """Whether the target's simple name reads as a part of the owner (``OrderItem`` of ``Order``)."""
        owner = _simple_name(owner_name)
        target = _simple_name(target_type)
        if any(target.endswith(suffix) for suffix in self.PART_SUFFIXES):
            return True
        if owner and target != owner:
            return target.startswith(owner) or target.endswith(owner)
        return False

    @staticmethod
    def first_signal(signals: tuple[Signal, ...], association: AssociationDescriptor) -> str | None:
        """Name of the first signal that fires, in declaration order."""
        for name, signal in signals:
            if signal(association):
                return name
        return None
