"""
Wonder Journal Backend — Partial Insert / Update Helpers
==========================================================

What:  Turns a sparse API payload into a column → value mapping that can be
       passed to SQLAlchemy's `insert(...).values(...)` or
       `update(...).values(...)`.
How:   API field names (camelCase) are translated to column names with an
       optional `js_to_sql` mapping; values are bound as parameters by
       SQLAlchemy, never interpolated into SQL text.

Example:
    >>> sql_for_partial_update({"firstName": "Aliya", "age": 32},
    ...                        {"firstName": "first_name"})
    {'first_name': 'Aliya', 'age': 32}
"""

from typing import Any, Dict, Mapping, Optional

from wonder_journal.exceptions import BadRequestError


def _to_columns(
    data: Mapping[str, Any],
    js_to_sql: Optional[Mapping[str, str]],
) -> Dict[str, Any]:
    js_to_sql = js_to_sql or {}
    return {js_to_sql.get(key, key): value for key, value in data.items()}


def sql_for_partial_update(
    data: Mapping[str, Any],
    js_to_sql: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Build the SET part of a partial update.

    Every key present in `data` is updated, including keys whose value is
    None (an explicit null clears the column).

    Raises:
        BadRequestError: `data` is empty.
    """
    if not data:
        raise BadRequestError("No data")
    return _to_columns(data, js_to_sql)


def sql_for_partial_insert(
    data: Mapping[str, Any],
    js_to_sql: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Build the column list of a partial insert.

    Keys whose value is None are left out so the column's database default
    applies (a moment without `date` gets today's date).

    Raises:
        BadRequestError: nothing is left to insert.
    """
    provided = {key: value for key, value in data.items() if value is not None}
    if not provided:
        raise BadRequestError("No data")
    return _to_columns(provided, js_to_sql)
