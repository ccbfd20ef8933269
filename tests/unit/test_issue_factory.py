import pytest

from orm_doctor.domain import FindingKind, Origin, Severity
from orm_doctor.errors import UnknownFindingKindError
from orm_doctor.findings import LEGACY_ALIASES, IssueFactory, SuggestionFactory, deduplicate, resolve_kind


class TestResolveKind:
    def test_canonical_values(self) -> None:
        assert resolve_kind("n_plus_one") is FindingKind.N_PLUS_ONE
        assert resolve_kind(" Slow_Query ") is FindingKind.SLOW_QUERY
        assert resolve_kind(FindingKind.HYDRATION) is FindingKind.HYDRATION

    @pytest.mark.parametrize("alias, kind", sorted(LEGACY_ALIASES.items()))
    def test_legacy_aliases(self, alias: str, kind: FindingKind) -> None:
        assert resolve_kind(alias) is kind

    def test_unknown_kind_names_the_kind_and_the_valid_set(self) -> None:
        with pytest.raises(UnknownFindingKindError) as excinfo:
            resolve_kind("lazy_loading")

        message = str(excinfo.value)
        assert '"lazy_loading"' in message
        assert "n_plus_one" in message
        assert "insecure_random" in message

    def test_aliases_never_extend_the_kind_set(self) -> None:
        assert set(LEGACY_ALIASES.values()) <= set(FindingKind)


class TestIssueFactory:
    def test_every_kind_has_a_constructor(self) -> None:
        assert set(IssueFactory.kinds()) == set(FindingKind)

    @pytest.mark.parametrize("kind", list(FindingKind))
    def test_every_kind_builds_without_attributes(self, kind: FindingKind) -> None:
        finding = IssueFactory().create(kind)
        assert finding.kind is kind
        assert finding.title
        assert finding.suggestion.title

    def test_unknown_kind_raises(self) -> None:
        with pytest.raises(UnknownFindingKindError, match="memory_leak"):
            IssueFactory().create("memory_leak", {"title": "x"})

    def test_legacy_alias_creates_canonical_finding(self) -> None:
        finding = IssueFactory().create(
            "Slow Query",
            {
                "severity": "critical",
                "title": "Slow Query: 1500.00ms",
                "details": {"duration_ms": 1500.0, "threshold_ms": 50.0, "sql": "SELECT 1"},
            },
        )

        assert finding.kind is FindingKind.SLOW_QUERY
        assert finding.severity is Severity.CRITICAL
        assert "1500" in finding.suggestion.description

    def test_missing_template_attribute_falls_back_to_placeholder(self) -> None:
        finding = IssueFactory().create(FindingKind.MISSING_INDEX, {"title": "Missing Index"})
        assert finding.suggestion == SuggestionFactory.placeholder(FindingKind.MISSING_INDEX)
        assert finding.suggestion.title == "Review missing index"

    def test_integrity_findings_carry_no_queries(self) -> None:
        finding = IssueFactory().create(
            FindingKind.COLLECTION_UNINITIALIZED,
            {"queries": ["SELECT 1"], "details": {"entity": "Order", "field": "items"}},
        )
        assert finding.queries == ()
        assert finding.suggestion.title == "Initialize Order::$items in the constructor"

    def test_security_findings_are_at_least_warning(self) -> None:
        finding = IssueFactory().create(FindingKind.INSECURE_RANDOM, {"severity": Severity.INFO})
        assert finding.severity is Severity.WARNING

    def test_origin_from_mapping(self) -> None:
        finding = IssueFactory().create(
            FindingKind.SLOW_QUERY, {"origin": {"file": "src/Repo.php", "line": 40}}
        )
        assert finding.origin == Origin(file="src/Repo.php", line=40)
        assert str(finding.origin) == "src/Repo.php:40"

    def test_n_plus_one_variant_template(self) -> None:
        finding = IssueFactory().create(
            FindingKind.N_PLUS_ONE,
            {"details": {"n_plus_one_type": "proxy", "table": "customer", "count": 12}},
        )
        assert finding.suggestion.title == "Eager load the customer association"


class TestDeduplicate:
    def test_keeps_first_per_kind_and_origin(self) -> None:
        factory = IssueFactory()
        origin = Origin(symbol="Order::items")
        first = factory.create(FindingKind.MISSING_ORPHAN_REMOVAL, {"origin": origin, "title": "first"})
        duplicate = factory.create(FindingKind.MISSING_ORPHAN_REMOVAL, {"origin": origin, "title": "second"})
        other_kind = factory.create(FindingKind.CASCADE_REMOVE_INDEPENDENT, {"origin": origin})

        assert deduplicate([first, duplicate, other_kind]) == [first, other_kind]

    def test_empty(self) -> None:
        assert deduplicate([]) == []
