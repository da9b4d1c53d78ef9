"""
Type normalisation for schema comparison.

Catalogs report column types in their own spelling (`VARCHAR(16777216)`,
`NUMBER(38,0)`, `TIMESTAMP_NTZ(9)`, Spark's `INT`), while desired columns are
declared with portable names. `normalize_type` maps both sides onto the same
tag so the comparator can test equality.
"""

from __future__ import annotations

import re

_INTEGRAL_TYPES = frozenset({"INT", "BIGINT", "SMALLINT", "TINYINT", "LONG", "SHORT", "BYTE"})

_CONSTRAINT_KEYWORD = re.compile(
    r"\b(?:NOT\s+NULL|NULL|PRIMARY\s+KEY|UNIQUE|DEFAULT|COMMENT|REFERENCES|CONSTRAINT|GENERATED)\b",
    re.IGNORECASE,
)


def normalize_type(raw_type: str) -> str:
    """
    Return the canonical tag for a column type.

    Rules, first match wins (input upper-cased):
    - VARCHAR* or TEXT -> STRING
    - NUMBER* -> INTEGER (precision and scale ignored)
    - TIMESTAMP* -> TIMESTAMP
    - Spark integral names (INT, BIGINT, ...) -> INTEGER
    - anything else unchanged
    """
    upper = raw_type.upper()
    if upper.startswith("VARCHAR") or upper == "TEXT":
        return "STRING"
    if upper.startswith("NUMBER"):
        return "INTEGER"
    if upper.startswith("TIMESTAMP"):
        return "TIMESTAMP"
    if upper in _INTEGRAL_TYPES:
        return "INTEGER"
    return upper


def split_column_type(raw_type: str) -> tuple[str, str]:
    """
    Split a DDL column fragment into (base type, constraints).

    >>> split_column_type("STRING NOT NULL PRIMARY KEY")
    ('STRING', 'NOT NULL PRIMARY KEY')
    """
    text = raw_type.strip()
    for match in _CONSTRAINT_KEYWORD.finditer(text):
        if _nesting_depth(text[: match.start()]) == 0:
            return text[: match.start()].strip(), text[match.start() :].strip()
    return text, ""


def _nesting_depth(prefix: str) -> int:
    """Number of `<` and `(` still open at the end of `prefix`."""
    depth = 0
    for character in prefix:
        if character in "<(":
            depth += 1
        elif character in ">)":
            depth = max(depth - 1, 0)
    return depth


def base_type(raw_type: str) -> str:
    """Return the type part of a DDL column fragment, without constraints."""
    return split_column_type(raw_type)[0]
