import pytest

from orm_doctor.domain import AssociationDescriptor, Cardinality, EntityDescriptor, JoinColumn
from orm_doctor.mapping import RelationshipClassifier


def association(
    cardinality: Cardinality,
    target: str,
    cascade: tuple[str, ...] = (),
    orphan_removal: bool = False,
    join_columns: tuple[JoinColumn, ...] = (),
    owner: str = "App\\Entity\\Order",
) -> AssociationDescriptor:
    return AssociationDescriptor(
        field_name="related",
        cardinality=cardinality,
        target_type=target,
        declaring_type=owner,
        cascade=frozenset(cascade),
        orphan_removal=orphan_removal,
        join_columns=join_columns,
    )


@pytest.fixture
def classifier() -> RelationshipClassifier:
    return RelationshipClassifier()


class TestOneToMany:
    def test_part_named_child_with_cascade_remove(self, classifier: RelationshipClassifier) -> None:
        items = association(Cardinality.ONE_TO_MANY, "App\\Entity\\OrderItem", cascade=("persist", "remove"))
        assert classifier.classify_one_to_many("App\\Entity\\Order", items)

    def test_independent_target_is_not_composition(self, classifier: RelationshipClassifier) -> None:
        customers = association(Cardinality.ONE_TO_MANY, "App\\Entity\\Customer", cascade=("remove",))
        assert not classifier.classify_one_to_many("App\\Entity\\Order", customers)

    def test_orphan_removal_alone_is_enough(self, classifier: RelationshipClassifier) -> None:
        customers = association(Cardinality.ONE_TO_MANY, "App\\Entity\\Customer", orphan_removal=True)
        assert classifier.classify_one_to_many("Order", customers)

    def test_part_name_without_cascade_is_not_enough(self, classifier: RelationshipClassifier) -> None:
        items = association(Cardinality.ONE_TO_MANY, "OrderItem")
        assert not classifier.classify_one_to_many("Order", items)

    def test_cascade_all_counts_as_remove(self, classifier: RelationshipClassifier) -> None:
        lines = association(Cardinality.ONE_TO_MANY, "InvoiceLine", cascade=("ALL",))
        assert classifier.classify_one_to_many("Invoice", lines)

    def test_wrong_cardinality(self, classifier: RelationshipClassifier) -> None:
        items = association(Cardinality.MANY_TO_MANY, "OrderItem", orphan_removal=True)
        assert not classifier.classify_one_to_many("Order", items)


class TestOneToOne:
    def test_orphan_removal(self, classifier: RelationshipClassifier) -> None:
        assert classifier.classify_one_to_one(association(Cardinality.ONE_TO_ONE, "Address", orphan_removal=True))

    def test_cascade_remove(self, classifier: RelationshipClassifier) -> None:
        assert classifier.classify_one_to_one(association(Cardinality.ONE_TO_ONE, "Address", cascade=("remove",)))

    def test_plain_reference(self, classifier: RelationshipClassifier) -> None:
        assert not classifier.classify_one_to_one(association(Cardinality.ONE_TO_ONE, "Address"))

    def test_unknown_cardinality(self, classifier: RelationshipClassifier) -> None:
        unknown = association(Cardinality.parse("ManyToSome"), "Address", orphan_removal=True)
        assert unknown.cardinality is Cardinality.UNKNOWN
        assert not classifier.classify_one_to_one(unknown)


class TestManyToOneAsOneToOne:
    def test_unique_join_column(self, classifier: RelationshipClassifier) -> None:
        owner = EntityDescriptor(name="Profile")
        user = association(Cardinality.MANY_TO_ONE, "User", join_columns=(JoinColumn("user_id", unique=True),))
        assert classifier.classify_many_to_one_as_one_to_one(owner, user)

    def test_unique_constraint_on_foreign_key(self, classifier: RelationshipClassifier) -> None:
        owner = EntityDescriptor(name="Profile", unique_constraints=(("user_id",),))
        user = association(Cardinality.MANY_TO_ONE, "User", join_columns=(JoinColumn("user_id"),))
        assert classifier.classify_many_to_one_as_one_to_one(owner, user)

    def test_unique_index_on_foreign_key(self, classifier: RelationshipClassifier) -> None:
        owner = EntityDescriptor(name="Profile", unique_indexes=(("tenant_id", "user_id"),))
        user = association(
            Cardinality.MANY_TO_ONE,
            "User",
            join_columns=(JoinColumn("tenant_id"), JoinColumn("user_id")),
        )
        assert classifier.classify_many_to_one_as_one_to_one(owner, user)

    def test_constraint_spanning_other_columns(self, classifier: RelationshipClassifier) -> None:
        owner = EntityDescriptor(name="OrderItem", unique_constraints=(("order_id", "sku"),))
        order = association(Cardinality.MANY_TO_ONE, "Order", join_columns=(JoinColumn("order_id"),))
        assert not classifier.classify_many_to_one_as_one_to_one(owner, order)

    def test_no_constraint(self, classifier: RelationshipClassifier) -> None:
        owner = EntityDescriptor(name="OrderItem")
        order = association(Cardinality.MANY_TO_ONE, "Order", join_columns=(JoinColumn("order_id"),))
        assert not classifier.classify_many_to_one_as_one_to_one(owner, order)

    def test_no_join_columns(self, classifier: RelationshipClassifier) -> None:
        owner = EntityDescriptor(name="OrderItem", unique_constraints=(("order_id",),))
        assert not classifier.classify_many_to_one_as_one_to_one(owner, association(Cardinality.MANY_TO_ONE, "Order"))


@pytest.mark.parametrize(
    "owner, target, expected",
    [
        ("Order", "OrderItem", True),
        ("Invoice", "App\\Entity\\InvoiceLine", True),
        ("Order", "Customer", False),
        ("Order", "Order", False),
        ("Product", "ShippingProduct", True),
        ("Cart", "Coupon", False),
    ],
)
def test_suggests_part_of(owner: str, target: str, expected: bool) -> None:
    assert RelationshipClassifier().suggests_part_of(owner, target) is expected


def test_first_signal_respects_order() -> None:
    signals = (("never", lambda a: False), ("first", lambda a: True), ("second", lambda a: True))
    assert RelationshipClassifier.first_signal(signals, association(Cardinality.ONE_TO_ONE, "X")) == "first"
