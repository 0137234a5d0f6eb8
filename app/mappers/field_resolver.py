"""
app/mappers/field_resolver.py

Logical-metric to CSV-column resolution for drifting export schemas.

The same metric is labelled differently across export vintages
(``"Views"`` vs ``"3-second video views"``), so every row access in the
pipeline goes through this module instead of indexing the row directly.

Resolution order
----------------
1. exact key match, candidates tried in order
2. case-insensitive substring match: for each candidate, the first row key
   containing it wins
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from app.parsing.scalars import to_float

Row = Mapping[str, Any]


def find_field(row: Row, candidates: Sequence[str]) -> str | None:
    """
    Return the row key matched by *candidates*, or None when nothing matches.
    """

    for candidate in candidates:
        if candidate in row:
            return candidate

    keys = list(row.keys())
    for candidate in candidates:
        needle = candidate.lower()
        for key in keys:
            if needle in key.lower():
                return key
    return None


def resolve(
    row: Row,
    candidates: Sequence[str],
    default: float = 0,
    *,
    coerce: Callable[[Any, Any], Any] = to_float,
) -> Any:
    """
    Resolve a numeric metric from *row* and coerce it.

    ``coerce`` is called as ``coerce(value, default)``; use ``to_int`` for
    count metrics that must sum exactly.
    """

    key = find_field(row, candidates)
    if key is None:
        return default
    return coerce(row[key], default)


def resolve_text(row: Row, candidates: Sequence[str], default: str = "") -> str:
    """
    Resolve a label column (campaign name, title, country) from *row*.
    """

    key = find_field(row, candidates)
    if key is None:
        return default
    value = row[key]
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default
