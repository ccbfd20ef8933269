import pytest

from orm_doctor.sql import fingerprint, limit_of, table_of


class TestFingerprint:
    def test_numbers_and_strings_are_stripped(self) -> None:
        assert fingerprint("SELECT * FROM profile WHERE user_id = 42") == "SELECT * FROM PROFILE WHERE USER_ID = ?"
        assert fingerprint("SELECT * FROM users WHERE name = 'O''Brien'") == "SELECT * FROM USERS WHERE NAME = ?"

    def test_same_shape_for_different_literals(self) -> None:
        assert fingerprint("SELECT * FROM profile WHERE user_id = 1") == fingerprint(
            "select *   from profile\nwhere user_id = 2"
        )

    def test_in_lists_collapse(self) -> None:
        assert fingerprint("SELECT * FROM t WHERE id IN (1, 2, 3)") == "SELECT * FROM T WHERE ID IN (?)"
        assert fingerprint("SELECT * FROM t WHERE id IN (?, ?)") == "SELECT * FROM T WHERE ID IN (?)"

    def test_placeholders_are_normalized(self) -> None:
        assert fingerprint("SELECT * FROM t WHERE id = :id") == fingerprint("SELECT * FROM t WHERE id = $1")

    def test_identifiers_with_digits_survive(self) -> None:
        assert fingerprint("SELECT t0.id FROM users t0 WHERE t0.id = 5") == "SELECT T0.ID FROM USERS T0 WHERE T0.ID = ?"

    def test_casts_are_not_placeholders(self) -> None:
        assert fingerprint("SELECT '1'::text") == "SELECT ?::TEXT"


@pytest.mark.parametrize(
    "sql, expected",
    [
        ("UPDATE orders SET status = 1 WHERE id = 2", "orders"),
        ("DELETE FROM order_items WHERE id = 2", "order_items"),
        ("INSERT INTO `logs` (a) VALUES (1)", "logs"),
        ("SELECT * FROM users u WHERE u.id = 1", "users"),
        ("SELECT 1", None),
    ],
)
def test_table_of(sql: str, expected: str | None) -> None:
    assert table_of(sql) == expected


def test_limit_of() -> None:
    assert limit_of("SELECT * FROM t LIMIT 500") == 500
    assert limit_of("SELECT * FROM t") is None


@pytest.mark.parametrize(
    "sql, expected",
    [
        ("SELECT * FROM t LIMIT 10, 100", 100),
        ("SELECT * FROM t LIMIT 10 , 100", 100),
        ("SELECT * FROM t LIMIT 100 OFFSET 10", 100),
    ],
)
def test_limit_of_with_offset(sql: str, expected: int) -> None:
    assert limit_of(sql) == expected
