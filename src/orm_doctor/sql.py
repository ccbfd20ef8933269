"""Statement fingerprinting helpers.

A fingerprint is the statement text with literal values stripped, used to
group repeated executions of the same query shape.
"""

import re
from functools import lru_cache

_STRING_LITERAL = re.compile(r"'(?:[^'\\]|\\.|'')*'|\"(?:[^\"\\]|\\.)*\"")
_IN_LIST = re.compile(r"\bIN\s*\(\s*[^()]*\)", re.IGNORECASE)
_NUMBER = re.compile(r"(?<![\w.])-?\d+(?:\.\d+)?(?![\w.])")
_PLACEHOLDER = re.compile(r"(?<!:):[A-Za-z_]\w*|\$\d+|\?")
_WHITESPACE = re.compile(r"\s+")

_TABLE_PATTERNS = (
    re.compile(r"^\s*UPDATE\s+[`\"]?([\w.]+)", re.IGNORECASE),
    re.compile(r"^\s*DELETE\s+FROM\s+[`\"]?([\w.]+)", re.IGNORECASE),
    re.compile(r"^\s*INSERT\s+INTO\s+[`\"]?([\w.]+)", re.IGNORECASE),
    re.compile(r"\bFROM\s+[`\"]?([\w.]+)", re.IGNORECASE),
)
_LIMIT = re.compile(r"\bLIMIT\s+(?:\d+\s*,\s*)?(\d+)", re.IGNORECASE)


@lru_cache(maxsize=2048)
def fingerprint(sql: str) -> str:
    """Return the literal-free, whitespace-collapsed, uppercased shape of ``sql``."""
    shape = _STRING_LITERAL.sub("?", sql)
    shape = _IN_LIST.sub("IN (?)", shape)
    shape = _PLACEHOLDER.sub("?", shape)
    shape = _NUMBER.sub("?", shape)
    shape = _WHITESPACE.sub(" ", shape).strip()
    return shape.upper()


def table_of(sql: str) -> str | None:
    for pattern in _TABLE_PATTERNS:
        match = pattern.search(sql)
        if match:
            return match.group(1).strip("`\"")
    return None


def limit_of(sql: str) -> int | None:
    match = _LIMIT.search(sql)
    return int(match.group(1)) if match else None
